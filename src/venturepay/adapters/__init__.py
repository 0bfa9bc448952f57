"""Adapters binding domain ports to PayMongo, SQLAlchemy and SMTP."""
