"""User sign-up and login endpoints."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas import ErrorResponse, LoginRequest, UserCreate, UserResponse
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    """Register a new user."""
    return UserService.create_user(db, body.name, body.email, body.password)


@router.post(
    "/login",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Verify an email/password pair.

    Session issuance is left to the frontend's auth layer; this only
    confirms the credentials and returns the user.
    """
    return UserService.authenticate(db, body.email, body.password)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Get a user profile."""
    return UserService.get_user(db, user_id)
