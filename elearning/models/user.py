"""User model definitions."""

from sqlalchemy import JSON, Column, Integer, String, Text

from elearning.auth.permissions import Role
from elearning.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.USER.value)  # user/admin
    profile_photo = Column(String)
    phone_number = Column(String)
    courses = Column(JSON, nullable=False, default=list)
    knowledge = Column(Text)
