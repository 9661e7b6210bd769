"""Service request bodies"""

from typing import Optional

from pydantic import BaseModel


class RateConfigIn(BaseModel):
    levelType: str
    serviceType: str = ""
    level: str = ""
    format: Optional[str] = None
    rate: Optional[float] = None
    ratePerMile: Optional[float] = None


class ServiceCreate(BaseModel):
    serviceCode: Optional[str] = None
    serviceName: Optional[str] = None
    billingCode: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    billable: bool = False
    notes: Optional[str] = None
    config: Optional[RateConfigIn] = None


class ServiceUpdate(BaseModel):
    billingCode: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    billable: Optional[bool] = None
    notes: Optional[str] = None
    config: Optional[RateConfigIn] = None
