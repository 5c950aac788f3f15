# Overview: Flask extension instances for database and migrations, plus the entity store accessor.

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

ENTITY_STORE_KEY = "estatebooks.entity_store"


def get_entity_store():
    """
    Return the EntityStore bound to the current app, building it on first use.

    The backend is chosen by STORAGE_BACKEND so tests and demos can swap the
    SQL store for the in-memory one without touching the services.
    """
    store = current_app.extensions.get(ENTITY_STORE_KEY)
    if store is None:
        from .storage import build_entity_store
        store = build_entity_store(current_app.config.get("STORAGE_BACKEND", "sql"))
        current_app.extensions[ENTITY_STORE_KEY] = store
    return store
