from sqlalchemy import Column, Integer, String, DateTime

from core.database import Base


class User(Base):
    """
    Member account.

    Provisioned outside this service; the API only reads it. A designation of
    "Admin" marks privileged users that never appear in rosters or reports.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    pin = Column(String(16), unique=True, nullable=False, index=True)
    username = Column(String(255), nullable=False)
    designation = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', designation='{self.designation}')>"


class UserVisit(Base):
    """Append-only login log, bucketed by month for visit counts."""
    __tablename__ = "user_visits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)  # Reference to User.id (no FK)
    visit_date_time = Column(DateTime, nullable=False)
    month = Column(String(7), nullable=False, index=True)  # YYYY-MM
