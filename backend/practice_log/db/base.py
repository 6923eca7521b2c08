"""Declarative base shared by all backend ORM models."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
