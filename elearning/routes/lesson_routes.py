import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationInfo, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from elearning.auth.dependencies import get_current_user, require_admin
from elearning.database import get_db
from elearning.models.course import Course
from elearning.models.lesson import Lesson
from elearning.models.topic import Topic
from elearning.models.user import User
from elearning.routes.common import ApiModel, MessageResponse, get_or_404, raise_persistence_error
from elearning.routes.topic_routes import TopicResponse

router = APIRouter(tags=['lessons'])
logger = logging.getLogger(__name__)

LESSON_NOT_FOUND = 'Lesson not found'


def _require_text(value: str | None, field_name: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} must not be blank.')
    return normalized


class CreateLessonRequest(ApiModel):
    title: str
    description: str
    course_id: int
    content: str | None = None

    @field_validator('title', 'description')
    @classmethod
    def validate_text(cls, value: str, info: ValidationInfo) -> str:
        return _require_text(value, info.field_name.capitalize())


class UpdateLessonRequest(ApiModel):
    title: str | None = None
    description: str | None = None
    course_id: int | None = None
    content: str | None = None

    @field_validator('title', 'description')
    @classmethod
    def validate_text(cls, value: str | None, info: ValidationInfo) -> str | None:
        return _require_text(value, info.field_name.capitalize())


class LessonResponse(ApiModel):
    id: int
    title: str
    description: str
    course_id: int
    topics: list[int] = []
    content: str | None = None


def ensure_course_exists(db: Session, course_id: int) -> Course:
    return get_or_404(db, Course, course_id, 'Course not found')


@router.post('/lessons', response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
def create_lesson(
    data: CreateLessonRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ensure_course_exists(db, data.course_id)

    lesson = Lesson(
        title=data.title,
        description=data.description,
        course_id=data.course_id,
        content=data.content,
    )
    try:
        db.add(lesson)
        db.commit()
        db.refresh(lesson)
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    logger.info('Lesson %s created in course %s', lesson.id, lesson.course_id)
    return lesson


@router.get('/lessons', response_model=list[LessonResponse])
def list_lessons(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return db.query(Lesson).order_by(Lesson.id).all()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)


@router.get('/lessons/course/{course_id}', response_model=list[LessonResponse])
def list_lessons_for_course(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        lessons = db.query(Lesson).filter(Lesson.course_id == course_id).order_by(Lesson.id).all()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    if not lessons:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='No lessons found for this course')
    return lessons


@router.get('/lessons/{lesson_id}', response_model=LessonResponse)
def get_lesson(
    lesson_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)


@router.get('/lessons/{lesson_id}/topics', response_model=list[TopicResponse])
def list_lesson_topics(
    lesson_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)
    try:
        return db.query(Topic).filter(Topic.lesson_id == lesson_id).order_by(Topic.id).all()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)


@router.put('/lessons/{lesson_id}', response_model=LessonResponse)
def update_lesson(
    lesson_id: int,
    data: UpdateLessonRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    lesson = get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)

    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if 'course_id' in updates and updates['course_id'] != lesson.course_id:
        ensure_course_exists(db, updates['course_id'])

    for field_name, value in updates.items():
        setattr(lesson, field_name, value)

    try:
        db.commit()
        db.refresh(lesson)
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    return lesson


@router.delete('/lessons/{lesson_id}', response_model=MessageResponse)
def delete_lesson(
    lesson_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    lesson = get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)
    try:
        removed_topics = len(lesson.topic_items)
        db.delete(lesson)
        db.commit()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    logger.info('Lesson %s deleted with %d topics', lesson_id, removed_topics)
    return {'message': 'Lesson deleted successfully'}
