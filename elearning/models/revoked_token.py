"""Revoked token model definitions."""

from sqlalchemy import Column, DateTime, String
from elearning.database import Base


class RevokedToken(Base):
    """A bearer token that was logged out before it expired."""
    __tablename__ = "revoked_tokens"

    token = Column(String, primary_key=True)
    expires_at = Column(DateTime, index=True)  # naive UTC
