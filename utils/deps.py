import logging
from contextlib import contextmanager
from uuid import UUID

import jwt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session, selectinload

from db import get_db
from models.models_user import User
from models.schemas_user import CurrentUser
from admissions.logic.policy import Policy
from utils.auth_utils import token_subject
from utils.errors import AdmissionsError

logger = logging.getLogger("auth")


@contextmanager
def http_errors():
    """Re-raise service-layer errors as HTTPException with the matching status code."""
    try:
        yield
    except AdmissionsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


def load_current_user(db: Session, user_id: UUID) -> CurrentUser | None:
    user = (
        db.query(User)
        .options(selectinload(User.student), selectinload(User.department_administrator))
        .filter(User.id == user_id)
        .first()
    )
    if not user:
        return None
    return CurrentUser(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
        student_id=user.student.id if user.student else None,
        department_id=user.department_administrator.department_id if user.department_administrator else None,
    )


# separate session from the route's own get_db dependency
def auth_user(
    authorization: str | None = Header(default=None),
    db_session=Depends(get_db, use_cache=False),
) -> CurrentUser:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        user_id = token_subject(token)
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.error(f"Token decode failed: {e}")
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")
    db: Session
    with db_session as db:
        current = load_current_user(db, user_id)
    if not current:
        logger.error(f"User not found for id: {user_id}")
        raise HTTPException(status_code=401, detail=f"User not found for id: {user_id}")
    return current


def current_policy(current: CurrentUser = Depends(auth_user)) -> Policy:
    return Policy.for_user(current)
