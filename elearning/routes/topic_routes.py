import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from elearning.auth.dependencies import get_current_user, require_admin
from elearning.database import get_db
from elearning.models.lesson import Lesson
from elearning.models.topic import Topic
from elearning.models.user import User
from elearning.routes.common import ApiModel, MessageResponse, get_or_404, raise_persistence_error
from elearning.storage import discard_image, save_image

router = APIRouter(tags=['topics'])
logger = logging.getLogger(__name__)

TOPIC_NOT_FOUND = 'Topic not found'
LESSON_NOT_FOUND = 'Lesson not found'


class TopicResponse(ApiModel):
    id: int
    title: str
    description: str
    lesson_id: int
    image: str | None = None


@router.post('/admin/topics', response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(
    title: str = Form(...),
    description: str = Form(...),
    lesson_id: int = Form(..., alias='lessonId'),
    image: UploadFile | None = File(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    # The owning lesson is resolved first so a bad lessonId writes nothing.
    lesson = get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)

    image_path = save_image(image)
    topic = Topic(title=title, description=description, lesson_id=lesson.id, image=image_path)
    try:
        db.add(topic)
        db.commit()
        db.refresh(topic)
    except SQLAlchemyError as exc:
        discard_image(image_path)
        raise_persistence_error(db, exc)

    logger.info('Topic %s created in lesson %s', topic.id, lesson.id)
    return topic


@router.get('/topics', response_model=list[TopicResponse])
def list_topics(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return db.query(Topic).order_by(Topic.id).all()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)


@router.get('/topics/{topic_id}', response_model=TopicResponse)
def get_topic(
    topic_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_or_404(db, Topic, topic_id, TOPIC_NOT_FOUND)


@router.put('/admin/topics/{topic_id}', response_model=TopicResponse)
def update_topic(
    topic_id: int,
    title: str | None = Form(None),
    description: str | None = Form(None),
    lesson_id: int | None = Form(None, alias='lessonId'),
    image: UploadFile | None = File(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    topic = get_or_404(db, Topic, topic_id, TOPIC_NOT_FOUND)

    if lesson_id is not None and lesson_id != topic.lesson_id:
        topic.lesson = get_or_404(db, Lesson, lesson_id, LESSON_NOT_FOUND)

    if title is not None:
        topic.title = title
    if description is not None:
        topic.description = description

    image_path = save_image(image)
    if image_path:
        topic.image = image_path

    try:
        db.commit()
        db.refresh(topic)
    except SQLAlchemyError as exc:
        discard_image(image_path)
        raise_persistence_error(db, exc)

    return topic


@router.delete('/admin/topics/{topic_id}', response_model=MessageResponse)
def delete_topic(
    topic_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    topic = get_or_404(db, Topic, topic_id, TOPIC_NOT_FOUND)
    try:
        db.delete(topic)
        db.commit()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    logger.info('Topic %s deleted', topic_id)
    return {'message': 'Topic deleted successfully'}
