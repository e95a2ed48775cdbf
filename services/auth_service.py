"""
Authentication Service

PIN login and the monthly visit log written on every successful login.
"""

import logging
from typing import Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.utils.dates import format_wall_clock, month_bucket, utcnow
from core.database import storage_errors
from core.exceptions import AuthError, ValidationError, MSG_INVALID_PIN, MSG_PIN_REQUIRED
from models.user import User, UserVisit

logger = logging.getLogger(__name__)


class AuthService:
    """Service for PIN login and visit statistics"""

    def __init__(self, db: Session):
        self.db = db

    def login(self, pin: Optional[Union[int, str]]) -> User:
        """
        Authenticate a member by PIN and log the visit.

        A failure to write the visit log is logged and ignored; the login
        still succeeds.

        Raises:
            ValidationError: If no PIN was sent
            AuthError: If no user has this PIN
            StorageError: If the user lookup fails
        """
        pin = str(pin).strip() if pin is not None else ""
        if not pin:
            raise ValidationError(MSG_PIN_REQUIRED)

        with storage_errors(self.db, "look up user by PIN"):
            user = self.db.query(User).filter(User.pin == pin).first()
        if user is None:
            logger.warning("Login attempt with unknown PIN")
            raise AuthError(MSG_INVALID_PIN)

        self.log_visit(user.id)
        return user

    def log_visit(self, user_id: int) -> None:
        visited_at = utcnow()
        try:
            self.db.add(UserVisit(user_id=user_id, visit_date_time=visited_at, month=month_bucket(visited_at)))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to log visit for user {user_id}: {e}")

    def visit_summary(self, user_id: int) -> dict:
        """
        Last visit and visit count for the current month.

        Returns:
            dict: {"last_visit": "YYYY-MM-DD HH:MM:SS" or None, "monthly_count": int}
        """
        month = month_bucket(utcnow())
        with storage_errors(self.db, "load user visits"):
            last_visit, monthly_count = (
                self.db.query(func.max(UserVisit.visit_date_time), func.count(UserVisit.id))
                .filter(UserVisit.user_id == user_id, UserVisit.month == month)
                .one()
            )
        return {"last_visit": format_wall_clock(last_visit), "monthly_count": monthly_count or 0}
