"""Database Base — SQLAlchemy declarative base shared by all ORM models."""
