from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from leave_portal.schemas.leave import LeaveRequest, PendingQueueEntry


class Toast(BaseModel):
    title: str
    message: str
    variant: Literal["success", "error", "info"]


class Option(BaseModel):
    label: str
    value: str


class RowAction(BaseModel):
    label: str
    name: str


class Column(BaseModel):
    label: str
    fieldName: Optional[str] = None
    type: str = "text"
    rowActions: List[RowAction] = Field(default_factory=list)


class LeaveForm(BaseModel):
    """입력 중인 신청서. 날짜는 화면 입력 그대로 문자열(YYYY-MM-DD)로 보관."""
    leaveType: str = ""
    startDate: str = ""
    endDate: str = ""
    reason: str = ""


class EmployeeViewState(BaseModel):
    form: LeaveForm
    reasonRequired: bool
    pendingLeaves: int
    totalLeaves: int
    today: date
    leaveStatusData: List[LeaveRequest]
    leaveHistoryData: List[LeaveRequest]
    loading: bool
    submitting: bool


class ManagerViewState(BaseModel):
    leaveRequests: List[PendingQueueEntry]
    loading: bool
    deciding: List[str]


class EmployeeOptions(BaseModel):
    leaveTypeOptions: List[Option]
    leaveStatusColumns: List[Column]
    leaveHistoryColumns: List[Column]


class ManagerOptions(BaseModel):
    columns: List[Column]


LEAVE_TYPE_OPTIONS = [
    Option(label="Sick", value="Sick"),
    Option(label="Personal", value="Personal"),
    Option(label="Vacation", value="Vacation"),
]

LEAVE_STATUS_COLUMNS = [
    Column(label="Leave ID", fieldName="name"),
    Column(label="Status", fieldName="status"),
    Column(label="Leave Type", fieldName="leaveType"),
]

LEAVE_HISTORY_COLUMNS = [
    Column(label="Request ID", fieldName="name"),
    Column(label="Start Date", fieldName="startDate", type="date"),
    Column(label="End Date", fieldName="endDate", type="date"),
    Column(label="Reason", fieldName="reason"),
    Column(label="Status", fieldName="status"),
    Column(label="Approved By", fieldName="approvedBy"),
]

PENDING_COLUMNS = [
    Column(label="Request ID", fieldName="name"),
    Column(label="Employee", fieldName="employeeName"),
    Column(label="Leave Type", fieldName="leaveType"),
    Column(label="Start Date", fieldName="startDate", type="date"),
    Column(label="End Date", fieldName="endDate", type="date"),
    Column(label="Reason", fieldName="reason"),
    Column(
        label="Actions",
        type="action",
        rowActions=[
            RowAction(label="Approve", name="approve"),
            RowAction(label="Reject", name="reject"),
        ],
    ),
]
