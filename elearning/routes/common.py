import logging
from typing import NoReturn, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class ApiModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str


def get_or_404(db: Session, model: type[ModelT], entity_id: int, detail: str) -> ModelT:
    entity = db.get(model, entity_id)
    if entity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return entity


def raise_persistence_error(
    db: Session,
    exc: SQLAlchemyError,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> NoReturn:
    db.rollback()
    logger.exception("Database operation failed.")
    detail = str(getattr(exc, "orig", None) or exc)
    raise HTTPException(status_code=status_code, detail=detail) from exc
