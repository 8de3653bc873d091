import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from elearning.auth.dependencies import get_current_user, require_admin
from elearning.auth.permissions import Role, is_role_allowed
from elearning.database import get_db
from elearning.models.course import Course
from elearning.models.user import User
from elearning.routes.common import ApiModel, MessageResponse, get_or_404, raise_persistence_error
from elearning.storage import discard_image, save_image

router = APIRouter(tags=['courses'])
logger = logging.getLogger(__name__)

COURSE_NOT_FOUND = 'Course not found'


class CourseSummaryResponse(ApiModel):
    id: int
    title: str
    description: str


class CourseResponse(CourseSummaryResponse):
    instructor: str
    price: float
    image: str | None = None


def serialize_courses_for(user: User, courses: list[Course]) -> list[CourseSummaryResponse]:
    if is_role_allowed(user.role, (Role.ADMIN,)):
        return [CourseResponse.model_validate(course) for course in courses]
    return [CourseSummaryResponse.model_validate(course) for course in courses]


@router.post('/admin/courses', response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    title: str = Form(...),
    description: str = Form(...),
    instructor: str = Form(...),
    price: float = Form(..., ge=0, allow_inf_nan=False),
    image: UploadFile | None = File(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    image_path = save_image(image)
    course = Course(
        title=title,
        description=description,
        instructor=instructor,
        price=price,
        image=image_path,
    )
    try:
        db.add(course)
        db.commit()
        db.refresh(course)
    except SQLAlchemyError as exc:
        discard_image(image_path)
        raise_persistence_error(db, exc)

    logger.info('Course %s created by admin %s', course.id, admin.id)
    return course


@router.get('/courses', response_model=list[CourseResponse | CourseSummaryResponse])
def list_courses(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        courses = db.query(Course).order_by(Course.id).all()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)
    return serialize_courses_for(current_user, courses)


@router.get('/courses/{course_id}', response_model=CourseResponse)
def get_course(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_or_404(db, Course, course_id, COURSE_NOT_FOUND)


@router.put('/admin/courses/{course_id}', response_model=CourseResponse)
def update_course(
    course_id: int,
    title: str | None = Form(None),
    description: str | None = Form(None),
    instructor: str | None = Form(None),
    price: float | None = Form(None, ge=0, allow_inf_nan=False),
    image: UploadFile | None = File(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)

    updates = {'title': title, 'description': description, 'instructor': instructor, 'price': price}
    for field_name, value in updates.items():
        if value is not None:
            setattr(course, field_name, value)

    image_path = save_image(image)
    if image_path:
        course.image = image_path

    try:
        db.commit()
        db.refresh(course)
    except SQLAlchemyError as exc:
        discard_image(image_path)
        raise_persistence_error(db, exc)

    return course


@router.delete('/admin/courses/{course_id}', response_model=MessageResponse)
def delete_course(
    course_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    course = get_or_404(db, Course, course_id, COURSE_NOT_FOUND)
    try:
        lesson_count = len(course.lessons)
        db.delete(course)
        db.commit()
    except SQLAlchemyError as exc:
        raise_persistence_error(db, exc)

    logger.info('Course %s deleted with %d lessons', course_id, lesson_count)
    return {'message': 'Course deleted successfully'}
