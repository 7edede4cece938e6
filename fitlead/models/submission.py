from sqlalchemy import Column, Integer, String, Text, DateTime, func

from fitlead.db.session import Base

STATUS_NEW = "new"


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=False)
    email = Column(String(255), nullable=True)
    goal = Column(Text, nullable=False)
    message = Column(Text, nullable=True)
    trainer = Column(String(255), nullable=True)
    plan = Column(String(255), nullable=True)
    intent = Column(String(255), nullable=True)
    # Free-form; the back office uses values like "new", "contacted", "closed"
    status = Column(String(50), nullable=False, default=STATUS_NEW, server_default=STATUS_NEW)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
