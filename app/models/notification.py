from sqlalchemy import Column, Integer, Boolean, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.datetime_utils import utcnow

class UserNotification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_checked", "user_id", "is_checked"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    message = Column(Text, nullable=False)
    is_checked = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="notifications")
