from collections.abc import Iterator

from fastapi import HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from fitandflex.core.database import SessionLocal
from fitandflex.schemas.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PageParams


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_page_params(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    sort: str = Query("id", description="Field to sort by"),
    direction: str = Query("asc", description="Sort direction, asc or desc"),
) -> PageParams:
    try:
        return PageParams(page=page, size=size, sort=sort, direction=direction)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(error["msg"] for error in exc.errors()),
        ) from exc
