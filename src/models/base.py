"""Declarative base shared by all database models."""

from sqlalchemy import ForeignKey
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def deferred_fk(target: str, **kwargs) -> ForeignKey:
    """Foreign key checked when the transaction commits rather than per row.

    A flush does not order inserts between models without a relationship, so
    a profile may reach the store before the user row it points at.
    """
    return ForeignKey(target, deferrable=True, initially="DEFERRED", **kwargs)
