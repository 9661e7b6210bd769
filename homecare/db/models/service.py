from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.sql import func
from homecare.db.base_class import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    service_code = Column(String(50), unique=True, nullable=False, index=True)
    service_name = Column(String(255), nullable=False)
    billing_code = Column(String(50))
    category = Column(String(100), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="Active")
    billable = Column(Boolean, default=True)
    notes = Column(Text)  # free notes plus an optional "[CONFIG] {...}" line
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
