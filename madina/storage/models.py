"""
SQLAlchemy ORM Models for the mastery store

A single table holds every namespace: documents are JSON text keyed by
(namespace, key).
"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class KeyValueEntry(Base):
    """
    One persisted document (mastery record, collocation mastery, or log).
    """
    __tablename__ = 'mastery_store'

    # Primary key: composite of namespace and key
    namespace = Column(String(50), primary_key=True, nullable=False)
    key = Column(String(255), primary_key=True, nullable=False)

    # Enveloped JSON document
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<KeyValueEntry({self.namespace}, {self.key})>"
