"""Lesson model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from elearning.database import Base


class Lesson(Base):
    """Represents a lesson inside a course.

    The lesson's topic references are the topics whose ``lesson_id`` points
    at it, so creating a topic never rewrites the lesson row.
    """
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    content = Column(Text)

    course = relationship("Course", back_populates="lessons")
    topic_items = relationship(
        "Topic",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="Topic.id",
    )

    @property
    def topics(self) -> list[int]:
        return [topic.id for topic in self.topic_items]
