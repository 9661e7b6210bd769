"""Daily log request bodies"""

from typing import List, Optional

from pydantic import BaseModel


class DailyLogCreate(BaseModel):
    pocId: Optional[str] = None
    individualId: Optional[str] = None
    date: Optional[str] = None
    dspId: Optional[str] = None
    createdBy: Optional[str] = None


class TaskPatch(BaseModel):
    pocDutyId: Optional[str] = None
    id: Optional[str] = None  # older clients send the duty id here
    status: Optional[str] = None
    note: Optional[str] = None
    timestamp: Optional[str] = None


class DailyLogPatch(BaseModel):
    status: Optional[str] = None
    tasks: List[TaskPatch] = []


class IncomingTask(BaseModel):
    pocDutyId: Optional[str] = None
    completionStatus: Optional[str] = None
    note: Optional[str] = None


class DailyEntry(BaseModel):
    action: Optional[str] = None
    individualId: Optional[str] = None
    date: Optional[str] = None
    dspId: Optional[str] = None
    tasks: List[IncomingTask] = []
