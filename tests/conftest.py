"""Pytest 설정 파일

테스트 픽스처와 공통 설정
"""

import asyncio
from typing import Callable, Dict, List

import pytest

from leave_portal.core.memory import InMemoryLeaveService, LeaveStore

EMPLOYEE_ID = "emp-1"
MANAGER_ID = "mgr-1"


class RecordingLeaveService:
    """
    LeaveService 래퍼: 호출 순서를 기록하고, 실패 주입 / 응답 지연(gate)을 지원.
    late: 결과는 바로 읽어 두고 event가 set될 때까지 전달만 늦춘다 (한 번만 적용).
    """

    def __init__(self, inner) -> None:
        self.inner = inner
        self.calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.late: Dict[str, asyncio.Event] = {}

    def __getattr__(self, name):
        target = getattr(self.inner, name)

        async def _call(*args, **kwargs):
            self.calls.append(name)
            gate = self.gates.get(name)
            if gate is not None:
                await gate.wait()
            if name in self.failures:
                raise self.failures[name]
            result = await target(*args, **kwargs)
            delivery = self.late.pop(name, None)
            if delivery is not None:
                await delivery.wait()
            return result

        return _call


class RecordingPublisher:
    def __init__(self) -> None:
        self.published = []

    async def publish(self, request_id, new_status) -> None:
        self.published.append((request_id, new_status))


async def wait_for(predicate: Callable[[], bool], attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def store() -> LeaveStore:
    store = LeaveStore()
    store.add_employee(EMPLOYEE_ID, "Alice Kim")
    store.add_employee(MANAGER_ID, "Bob Lee", is_manager=True)
    return store


@pytest.fixture
def employee_service(store) -> RecordingLeaveService:
    return RecordingLeaveService(InMemoryLeaveService(store, EMPLOYEE_ID))


@pytest.fixture
def manager_service(store) -> RecordingLeaveService:
    return RecordingLeaveService(InMemoryLeaveService(store, MANAGER_ID))


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
