from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func

from fitlead.db.session import Base


class AuthSession(Base):
    """Server-side login session; email and role are copied at login time."""

    __tablename__ = "auth_sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
