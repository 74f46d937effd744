"""Adapters – Cerbos HTTP client, SQLAlchemy legacy store, FastAPI glue."""
