from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from homecare.db.base_class import Base

class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor = Column(String(100))  # dsp id, "office", ...
    action = Column(String(50))  # CREATE, UPDATE, DELETE, SAVE_DRAFT, SUBMIT
    entity_type = Column(String(50))  # POC, DAILY_LOG, SERVICE
    entity_id = Column(String(36), nullable=True)
    details = Column(Text, nullable=True)  # JSON or plain text
    created_at = Column(DateTime(timezone=True), server_default=func.now())
