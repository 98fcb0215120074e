from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from leave_portal.core.config import settings
from leave_portal.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    LeaveValidationError,
    NotFoundError,
)
from leave_portal.schemas.leave import (
    LeaveBalance,
    LeaveRequest,
    LeaveStatus,
    PendingQueueEntry,
)


@dataclass
class EmployeeRecord:
    id: str
    name: str
    is_manager: bool = False


@dataclass
class LeaveStore:
    """
    In-Memory Leave Service 저장소.
    여러 사용자 핸들(InMemoryLeaveService)이 같은 store를 공유한다.
    """
    employees: Dict[str, EmployeeRecord] = field(default_factory=dict)
    requests: Dict[str, LeaveRequest] = field(default_factory=dict)
    balances: Dict[str, LeaveBalance] = field(default_factory=dict)
    _seq: int = 0

    def add_employee(self, employee_id: str, name: str, is_manager: bool = False) -> EmployeeRecord:
        record = EmployeeRecord(id=employee_id, name=name, is_manager=is_manager)
        self.employees[employee_id] = record
        return record

    def set_balance(self, employee_id: str, pending_leaves: int, total_leaves: int) -> LeaveBalance:
        balance = LeaveBalance(
            employeeId=employee_id,
            pendingLeaves=pending_leaves,
            totalAllocatedLeaves=total_leaves,
        )
        self.balances[employee_id] = balance
        return balance

    def next_request_id(self) -> str:
        self._seq += 1
        return f"LR-{self._seq:04d}"


class InMemoryLeaveService:
    """
    LeaveService 구현 (개발/테스트용).
    상태 전이(Pending -> Approved/Rejected)와 기본 잔여 연차 생성만 흉내 내고,
    연차 차감 같은 계산은 하지 않는다.
    """

    def __init__(self, store: LeaveStore, user_id: str) -> None:
        self.store = store
        self.user_id = user_id

    def for_user(self, user_id: str) -> "InMemoryLeaveService":
        return InMemoryLeaveService(self.store, user_id)

    def _current_employee(self) -> EmployeeRecord:
        employee = self.store.employees.get(self.user_id)
        if employee is None:
            raise AuthorizationError(f"Unknown user {self.user_id}")
        return employee

    def _require_manager(self) -> EmployeeRecord:
        employee = self._current_employee()
        if not employee.is_manager:
            raise AuthorizationError("You are not authorized to perform this function")
        return employee

    def _own_requests(self) -> List[LeaveRequest]:
        return [r for r in self.store.requests.values() if r.employeeId == self.user_id]

    async def create_leave_request(
        self,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        employee_id: str,
    ) -> str:
        self._current_employee()
        if employee_id != self.user_id:
            raise AuthorizationError("Cannot submit a leave request for another employee")
        if not leave_type or start_date is None or end_date is None:
            raise LeaveValidationError("Leave type, start date and end date are required")
        if end_date < start_date:
            raise LeaveValidationError("End date must not be before start date")

        request_id = self.store.next_request_id()
        self.store.requests[request_id] = LeaveRequest(
            id=request_id,
            name=request_id,
            employeeId=employee_id,
            leaveType=leave_type,
            startDate=start_date,
            endDate=end_date,
            reason=reason or "",
            status=LeaveStatus.PENDING,
        )
        return request_id

    async def get_leave_status(self) -> List[LeaveRequest]:
        # 최근 신청 순
        return [r.model_copy() for r in reversed(self._own_requests())]

    async def get_leave_history(self) -> List[LeaveRequest]:
        return sorted((r.model_copy() for r in self._own_requests()), key=lambda r: r.startDate)

    async def get_leave_balance(self) -> Optional[LeaveBalance]:
        balance = self.store.balances.get(self.user_id)
        return balance.model_copy() if balance else None

    async def create_default_leave_balance(self) -> LeaveBalance:
        # 이미 있으면 그대로 반환 (idempotent)
        balance = self.store.balances.get(self.user_id)
        if balance is None:
            balance = self.store.set_balance(
                self.user_id,
                settings.DEFAULT_PENDING_LEAVES,
                settings.DEFAULT_TOTAL_LEAVES,
            )
        return balance.model_copy()

    async def get_current_user_id(self) -> str:
        return self._current_employee().id

    async def get_pending_leave_requests(self) -> List[PendingQueueEntry]:
        self._require_manager()
        entries = []
        for r in self.store.requests.values():
            if r.status != LeaveStatus.PENDING:
                continue
            requester = self.store.employees.get(r.employeeId)
            entries.append(
                PendingQueueEntry(
                    **r.model_dump(),
                    employeeName=requester.name if requester else "",
                )
            )
        return entries

    async def update_leave_request(self, request_id: str, new_status: LeaveStatus) -> None:
        manager = self._require_manager()
        request = self.store.requests.get(request_id)
        if request is None:
            raise NotFoundError("Leave request not found")
        if request.status != LeaveStatus.PENDING or new_status == LeaveStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot change status from {request.status.value} to {LeaveStatus(new_status).value}"
            )

        self.store.requests[request_id] = request.model_copy(
            update={"status": LeaveStatus(new_status), "approvedBy": manager.name}
        )


# 전역 인스턴스 (LEAVE_SERVICE_BACKEND=memory 일 때 API가 사용)
leave_store = LeaveStore()
