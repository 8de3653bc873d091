import logging
import os

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from elearning.auth.dependencies import token_blacklist
from elearning.core.config import settings, validate_runtime_config
from elearning.database import Base, engine
from elearning.models import course, lesson, revoked_token, topic, user  # noqa: F401
from elearning.routes import course_routes, lesson_routes, topic_routes, user_routes

app = FastAPI(title='E-learning API', debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    validate_runtime_config(settings)
    os.makedirs(settings.upload_dir, exist_ok=True)
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        raise

    purged = token_blacklist.purge_expired()
    if purged:
        logger.info('Purged %d expired blacklist entries', purged)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': jsonable_encoder(exc.errors())},
    )


@app.get('/')
def root():
    return {'status': 'E-learning API Running'}


app.include_router(user_routes.router, prefix='/api')
app.include_router(course_routes.router, prefix='/api')
app.include_router(lesson_routes.router, prefix='/api')
app.include_router(topic_routes.router, prefix='/api')

app.mount('/uploads', StaticFiles(directory=settings.upload_dir, check_dir=False), name='uploads')


def run() -> None:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == '__main__':
    run()
