"""WSGI entry point, e.g. ``gunicorn wsgi:app``."""

import os

from daybook import create_app

app = create_app(os.getenv("DAYBOOK_CONFIG", "production"))

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
