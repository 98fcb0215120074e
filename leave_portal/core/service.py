from datetime import date
from typing import List, Optional, Protocol

from leave_portal.schemas.leave import (
    LeaveBalance,
    LeaveRequest,
    LeaveStatus,
    PendingQueueEntry,
)


class LeaveService(Protocol):
    """
    외부 Leave Service 계약.
    화면(view)들은 이 인터페이스만 알고, 실제 구현(HTTP / in-memory)은 주입받는다.
    """

    async def create_leave_request(
        self,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        employee_id: str,
    ) -> str:
        """Raises LeaveValidationError / AuthorizationError."""
        ...

    async def get_leave_status(self) -> List[LeaveRequest]:
        ...

    async def get_leave_history(self) -> List[LeaveRequest]:
        ...

    async def get_leave_balance(self) -> Optional[LeaveBalance]:
        ...

    async def create_default_leave_balance(self) -> LeaveBalance:
        """Idempotent: an existing balance is returned untouched."""
        ...

    async def get_current_user_id(self) -> str:
        ...

    async def get_pending_leave_requests(self) -> List[PendingQueueEntry]:
        ...

    async def update_leave_request(self, request_id: str, new_status: LeaveStatus) -> None:
        """Raises NotFoundError / InvalidTransitionError / AuthorizationError."""
        ...
