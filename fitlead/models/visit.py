from sqlalchemy import Column, Integer, String, Text, DateTime, func

from fitlead.db.session import Base


class Visit(Base):
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True)
    ip = Column(String(255), nullable=True, index=True)
    path = Column(String(2048), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
