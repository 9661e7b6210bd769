from sqlalchemy import Column, String, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from homecare.db.base_class import Base
from homecare.db.models.poc import new_id

COMPLETION_STATUSES = ("INDEPENDENT", "VERBAL_PROMPT", "PHYSICAL_ASSIST", "REFUSED")


class PocDailyTaskLog(Base):
    __tablename__ = "poc_daily_task_logs"
    __table_args__ = (
        UniqueConstraint("daily_log_id", "poc_duty_id", name="uq_poc_daily_task_log_duty"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    daily_log_id = Column(String(36), ForeignKey("poc_daily_logs.id"), nullable=False, index=True)
    poc_duty_id = Column(String(36), ForeignKey("poc_duties.id"), nullable=False)
    completion_status = Column(String(20), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    note = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    log = relationship("PocDailyLog", back_populates="task_entries")
    duty = relationship("PocDuty")
