from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.core.permissions import AdminRole
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

MAX_LOGIN_ATTEMPTS = 5
LOCK_DURATION = timedelta(hours=2)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class Admin(Base):
    __tablename__ = "admins"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(AdminRole), default=AdminRole.ADMIN, nullable=False, index=True)
    permissions = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(DateTime(timezone=True))
    login_attempts = Column(Integer, default=0, nullable=False)
    lock_until = Column(DateTime(timezone=True))

    first_name = Column(String(100))
    last_name = Column(String(100))
    email = Column(String(255))
    phone = Column(String(20))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    activity = relationship("AdminActivity", back_populates="admin", cascade="all, delete-orphan")

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.lock_until is not None and _as_utc(self.lock_until) > now

    def register_failed_login(self, now: Optional[datetime] = None) -> None:
        """Count a failed attempt; the fifth in a row locks the account for two hours."""
        now = now or datetime.now(timezone.utc)
        if self.lock_until is not None and _as_utc(self.lock_until) < now:
            self.lock_until = None
            self.login_attempts = 1
            return

        self.login_attempts = (self.login_attempts or 0) + 1
        if self.login_attempts >= MAX_LOGIN_ATTEMPTS and not self.is_locked(now):
            self.lock_until = now + LOCK_DURATION

    def register_successful_login(self, now: Optional[datetime] = None) -> None:
        self.login_attempts = 0
        self.lock_until = None
        self.last_login = now or datetime.now(timezone.utc)


class AdminActivity(Base):
    __tablename__ = "admin_activity"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admin_id = Column(UUID(as_uuid=True), ForeignKey("admins.id"), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    target = Column(String(100))
    ip_address = Column(String(64))
    user_agent = Column(String(500))
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    admin = relationship("Admin", back_populates="activity")
