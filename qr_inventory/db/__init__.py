"""Database Declarations — the SQLAlchemy Base shared by every ORM model.

Design Decisions:
    - Engines and sessions live in infrastructure/database.py; this package
      only holds metadata so alembic can import it without a connection
"""
