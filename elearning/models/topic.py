"""Topic model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from elearning.database import Base


class Topic(Base):
    """Represents a topic inside a lesson."""
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    image = Column(String)

    lesson = relationship("Lesson", back_populates="topic_items")
