import logging
from typing import List, Optional, Protocol, Set

from leave_portal.core.errors import error_message
from leave_portal.core.service import LeaveService
from leave_portal.schemas.leave import LeaveStatus, PendingQueueEntry
from leave_portal.schemas.view import ManagerViewState
from leave_portal.views.base import BaseView, ToastSink

logger = logging.getLogger(__name__)

ROW_ACTIONS = {
    "approve": LeaveStatus.APPROVED,
    "reject": LeaveStatus.REJECTED,
}


class DecisionPublisher(Protocol):
    async def publish(self, request_id: str, new_status: LeaveStatus) -> None:
        ...


class ManagerApprovalView(BaseView):
    """
    매니저 결재 화면. 행(row) 단위 approve / reject 버튼으로 바로 처리한다.
    결재가 성공하면 반드시 Pending 목록을 다시 읽는다.
    """

    def __init__(
        self,
        service: LeaveService,
        toast_sink: Optional[ToastSink] = None,
        publisher: Optional[DecisionPublisher] = None,
    ) -> None:
        super().__init__(service, toast_sink)
        self.publisher = publisher
        self.leave_requests: List[PendingQueueEntry] = []
        self.loading = False
        # 처리 중인 requestId (중복 클릭 방지)
        self.deciding: Set[str] = set()

    async def on_connect(self) -> None:
        await self.load_pending_requests()

    def snapshot(self) -> ManagerViewState:
        return ManagerViewState(
            leaveRequests=list(self.leave_requests),
            loading=self.loading,
            deciding=sorted(self.deciding),
        )

    def reset_in_flight(self) -> None:
        self.loading = False
        self.deciding.clear()

    async def load_pending_requests(self) -> None:
        """
        Pending 목록 다시 읽기.
        겹쳐서 호출되면 마지막에 시작한 호출의 결과만 반영한다.
        (먼저 읽은 목록이 늦게 도착해 이미 결재된 항목을 되살리지 않도록)
        """
        ticket = self._begin_load()
        self.loading = True
        await self.render()

        try:
            entries = await self.service.get_pending_leave_requests()
        except Exception as exc:
            if not self._is_latest_load(ticket):
                return
            self.loading = False
            await self.show_toast("Error", error_message(exc), "error")
            await self.render()
            return

        if not self._is_latest_load(ticket):
            logger.info("Discarding stale pending requests response")
            return

        self.leave_requests = entries
        self.loading = False
        logger.info("Loaded %d pending leave requests", len(entries))
        if not entries:
            await self.show_toast("Info", "No pending leave requests.", "info")
        await self.render()

    async def _publish_decision(self, request_id: str, new_status: LeaveStatus) -> None:
        if self.publisher is None:
            return
        try:
            await self.publisher.publish(request_id, new_status)
        except Exception:
            # 결재 자체는 이미 성공했으므로 화면 흐름은 계속 진행
            logger.exception("Failed to publish leave decision for %s", request_id)

    async def handle_row_action(self, action: str, request_id: str) -> bool:
        new_status = ROW_ACTIONS.get(action)
        if new_status is None:
            await self.show_toast("Error", f"Unknown action '{action}'.", "error")
            return False
        if request_id in self.deciding:
            logger.warning("Decision ignored: request %s already being processed", request_id)
            return False

        token = self._token()
        self.deciding.add(request_id)
        try:
            await self.render()
            await self.service.update_leave_request(request_id, new_status)
        except Exception as exc:
            self.deciding.discard(request_id)
            if not self._is_current(token):
                return False
            await self.show_toast("Error", error_message(exc), "error")
            await self.render()
            return False
        finally:
            self.deciding.discard(request_id)

        logger.info("Leave request %s -> %s", request_id, new_status.value)
        await self._publish_decision(request_id, new_status)
        if not self._is_current(token):
            return True

        await self.show_toast(
            "Success",
            f"Leave request {new_status.value.lower()} successfully.",
            "success",
        )
        await self.load_pending_requests()
        return True
