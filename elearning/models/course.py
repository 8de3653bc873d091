"""Course model definitions."""

from sqlalchemy import Column, Float, Integer, String, Text
from sqlalchemy.orm import relationship
from elearning.database import Base


class Course(Base):
    """Represents a catalog course."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    instructor = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    image = Column(String)

    lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.id",
    )
