from typing import List

from pydantic import BaseModel, Field

from leave_portal.schemas.view import EmployeeViewState, ManagerViewState, Toast


class InputChange(BaseModel):
    """PATCH /employee/sessions/{id}/form 요청 바디"""
    field: str = Field(..., pattern="^(leaveType|startDate|endDate|reason)$")
    value: str = ""


class RowActionIn(BaseModel):
    requestId: str = Field(..., min_length=1)
    action: str = Field(..., pattern="^(approve|reject)$")


class EmployeeSessionOut(BaseModel):
    sessionId: str
    state: EmployeeViewState
    toasts: List[Toast]


class ManagerSessionOut(BaseModel):
    sessionId: str
    state: ManagerViewState
    toasts: List[Toast]
