"""Flask CLI commands for Daybook."""

from __future__ import annotations

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("daybook-init-db")
    def daybook_init_db() -> None:
        """Create any missing database tables."""

        from .extensions import get_engine
        from .infra.database import init_database

        init_database(get_engine())
        click.echo(f"Database ready: {app.config['DAYBOOK_CONFIG'].DATABASE_URL}")


@click.command()
def main() -> None:
    """Create any missing tables for the database configured in the environment."""

    from .infra.database import bootstrap_database
    from .config import BaseConfig

    config = BaseConfig()
    bootstrap_database(config)
    click.echo(f"Database ready: {config.DATABASE_URL}")
