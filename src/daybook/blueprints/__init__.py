"""JSON API blueprints mounted under ``/api``."""
