from datetime import date

import pytest

from leave_portal.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    LeaveValidationError,
    NotFoundError,
)
from leave_portal.core.memory import InMemoryLeaveService
from leave_portal.schemas.leave import LeaveStatus
from tests.conftest import EMPLOYEE_ID, MANAGER_ID


@pytest.fixture
def employee(store) -> InMemoryLeaveService:
    return InMemoryLeaveService(store, EMPLOYEE_ID)


@pytest.fixture
def manager(employee) -> InMemoryLeaveService:
    return employee.for_user(MANAGER_ID)


async def _submit(service: InMemoryLeaveService, reason: str = "Family trip") -> str:
    return await service.create_leave_request(
        "Vacation", date(2024, 1, 10), date(2024, 1, 15), reason, service.user_id
    )


class TestBalance:
    async def test_balance_absent_until_default_created(self, employee):
        assert await employee.get_leave_balance() is None

        balance = await employee.create_default_leave_balance()

        assert balance.pendingLeaves == 2
        assert balance.totalAllocatedLeaves == 24
        assert await employee.get_leave_balance() == balance

    async def test_default_creation_keeps_existing_counters(self, store, employee):
        store.set_balance(EMPLOYEE_ID, 1, 24)

        balance = await employee.create_default_leave_balance()

        assert (balance.pendingLeaves, balance.totalAllocatedLeaves) == (1, 24)
        stored = await employee.get_leave_balance()
        assert (stored.pendingLeaves, stored.totalAllocatedLeaves) == (1, 24)


class TestCreateLeaveRequest:
    async def test_created_request_is_pending(self, employee):
        request_id = await _submit(employee)

        history = await employee.get_leave_history()
        assert [r.id for r in history] == [request_id]
        assert history[0].status == LeaveStatus.PENDING
        assert history[0].approvedBy == ""

    async def test_cannot_submit_for_someone_else(self, employee):
        with pytest.raises(AuthorizationError):
            await employee.create_leave_request(
                "Sick", date(2024, 2, 1), date(2024, 2, 1), "", MANAGER_ID
            )

    async def test_end_before_start_rejected(self, employee):
        with pytest.raises(LeaveValidationError):
            await employee.create_leave_request(
                "Sick", date(2024, 2, 2), date(2024, 2, 1), "", EMPLOYEE_ID
            )

    async def test_unknown_user_rejected(self, store):
        stranger = InMemoryLeaveService(store, "ghost")
        with pytest.raises(AuthorizationError):
            await stranger.get_current_user_id()

    async def test_status_lists_only_own_requests(self, employee, manager):
        mine = await _submit(employee)
        await _submit(manager)

        assert [r.id for r in await employee.get_leave_status()] == [mine]


class TestDecisions:
    async def test_pending_entries_carry_requester_name(self, employee, manager):
        request_id = await _submit(employee)

        pending = await manager.get_pending_leave_requests()

        assert [(p.id, p.employeeName) for p in pending] == [(request_id, "Alice Kim")]

    async def test_only_managers_see_pending_queue(self, employee):
        with pytest.raises(AuthorizationError):
            await employee.get_pending_leave_requests()

    async def test_approve_records_approver(self, employee, manager):
        request_id = await _submit(employee)

        await manager.update_leave_request(request_id, LeaveStatus.APPROVED)

        [decided] = await employee.get_leave_history()
        assert decided.status == LeaveStatus.APPROVED
        assert decided.approvedBy == "Bob Lee"
        assert await manager.get_pending_leave_requests() == []

    async def test_decided_request_cannot_change_again(self, employee, manager):
        request_id = await _submit(employee)
        await manager.update_leave_request(request_id, LeaveStatus.REJECTED)

        with pytest.raises(InvalidTransitionError):
            await manager.update_leave_request(request_id, LeaveStatus.APPROVED)

    async def test_back_to_pending_is_invalid(self, employee, manager):
        request_id = await _submit(employee)

        with pytest.raises(InvalidTransitionError):
            await manager.update_leave_request(request_id, LeaveStatus.PENDING)

    async def test_unknown_request(self, manager):
        with pytest.raises(NotFoundError):
            await manager.update_leave_request("LR-9999", LeaveStatus.APPROVED)
