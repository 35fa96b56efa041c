"""
Base Database Models

Declarative base shared by all database models.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
