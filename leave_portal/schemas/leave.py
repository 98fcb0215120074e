from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveRequest(BaseModel):
    """
    Leave Service가 돌려주는 휴가 신청 한 건.
    approvedBy는 결재가 끝나기 전까지 빈 문자열.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    employeeId: str
    leaveType: str
    startDate: date
    endDate: date
    reason: str = ""
    status: LeaveStatus = LeaveStatus.PENDING
    approvedBy: str = ""


class PendingQueueEntry(LeaveRequest):
    """매니저 화면 전용: Pending 건 + 신청자 이름."""
    employeeName: str = ""


class LeaveBalance(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employeeId: str
    pendingLeaves: int
    totalAllocatedLeaves: int


class LeaveCreate(BaseModel):
    """POST /leaves 요청 바디"""
    leaveType: str
    startDate: date
    endDate: date
    reason: str = ""
    employeeId: str


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus


class LeaveDecisionMessage(BaseModel):
    """RabbitMQ로 내보내는 결재 완료 이벤트."""
    requestId: str
    status: LeaveStatus
    decidedAt: datetime
