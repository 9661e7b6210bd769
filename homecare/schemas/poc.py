"""POC request bodies"""

from typing import Any, List, Optional

from pydantic import BaseModel


class DutyIn(BaseModel):
    category: Optional[str] = None
    taskNo: Optional[int] = None
    duty: Optional[str] = None
    minutes: Optional[int] = None
    asNeeded: bool = False
    timesWeekMin: Optional[int] = None
    timesWeekMax: Optional[int] = None
    daysOfWeek: Any = None
    instruction: Optional[str] = None
    sortOrder: Optional[int] = None


class PocCreate(BaseModel):
    individualId: Optional[str] = None
    pocNumber: Optional[str] = None
    startDate: Optional[str] = None
    stopDate: Optional[str] = None
    shift: Optional[str] = None
    note: Optional[str] = None
    createdBy: Optional[str] = None
    duties: List[DutyIn] = []


class PocUpdate(BaseModel):
    startDate: Optional[str] = None
    stopDate: Optional[str] = None
    shift: Optional[str] = None
    note: Optional[str] = None
    duties: List[DutyIn] = []
