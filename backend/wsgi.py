# backend/wsgi.py
# Entry point for `flask --app wsgi ...` and WSGI servers.
from estatebooks import create_app

app = create_app()
