import uuid

from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from homecare.db.base_class import Base


def new_id():
    return str(uuid.uuid4())


class Poc(Base):
    __tablename__ = "pocs"

    id = Column(String(36), primary_key=True, default=new_id)
    individual_id = Column(String(64), nullable=False, index=True)
    poc_number = Column(String(50), nullable=False)
    start_date = Column(Date, nullable=False)
    stop_date = Column(Date, nullable=True)
    shift = Column(String(20), default="All")
    note = Column(Text)
    created_by = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    duties = relationship(
        "PocDuty",
        back_populates="poc",
        cascade="all, delete-orphan",
        order_by="PocDuty.sort_order",
    )


class PocDuty(Base):
    __tablename__ = "poc_duties"

    id = Column(String(36), primary_key=True, default=new_id)
    poc_id = Column(String(36), ForeignKey("pocs.id"), nullable=False, index=True)
    category = Column(String(100))
    task_no = Column(Integer)
    duty = Column(Text, nullable=False)
    minutes = Column(Integer)
    as_needed = Column(Boolean, default=False)
    times_week_min = Column(Integer)
    times_week_max = Column(Integer)
    # list of weekday tokens, {weekday: bool} map or delimited string
    days_of_week = Column(JSON(none_as_null=True), nullable=True)
    instruction = Column(Text)
    sort_order = Column(Integer, default=0)

    poc = relationship("Poc", back_populates="duties")
