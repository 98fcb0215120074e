import asyncio
import logging
from datetime import date
from typing import List, Optional, Tuple

from leave_portal.core.config import settings
from leave_portal.core.errors import FormValidationError, error_message
from leave_portal.core.service import LeaveService
from leave_portal.schemas.leave import LeaveBalance, LeaveRequest
from leave_portal.schemas.view import EmployeeViewState, LeaveForm
from leave_portal.views.base import BaseView, ToastSink

logger = logging.getLogger(__name__)

FORM_FIELDS = ("leaveType", "startDate", "endDate", "reason")

REQUIRED_FIELDS_MESSAGE = "Please fill all required fields (Leave Type, Start Date, End Date)."
REASON_REQUIRED_MESSAGE = "Please provide a reason: you have no pending leaves left."


def _parse_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise FormValidationError(f"{label} must be a valid date (YYYY-MM-DD).") from exc


class EmployeeLeaveView(BaseView):
    """
    직원 휴가 신청 화면.

    흐름:
    1) 화면 진입 시 잔여 연차 / 신청 현황 / 이력 로딩
    2) 입력값 변경 시 reasonRequired 재계산
    3) 제출 -> 필수값 검증 -> 신청 생성 -> 폼 초기화 -> 다시 로딩
    """

    def __init__(
        self,
        service: LeaveService,
        toast_sink: Optional[ToastSink] = None,
        default_pending_leaves: Optional[int] = None,
        default_total_leaves: Optional[int] = None,
        today: Optional[date] = None,
    ) -> None:
        super().__init__(service, toast_sink)
        self.default_pending_leaves = (
            settings.DEFAULT_PENDING_LEAVES if default_pending_leaves is None else default_pending_leaves
        )
        self.default_total_leaves = (
            settings.DEFAULT_TOTAL_LEAVES if default_total_leaves is None else default_total_leaves
        )

        self.form = LeaveForm()
        self.pending_leaves = self.default_pending_leaves
        self.total_leaves = self.default_total_leaves
        # 첫 로딩 전까지는 사유 선택 입력
        self.reason_required = False
        self.leave_status_data: List[LeaveRequest] = []
        self.leave_history_data: List[LeaveRequest] = []
        self.today = today or date.today()
        self.loading = False
        self.submitting = False

    async def on_connect(self) -> None:
        await self.load_leave_data()

    def reset_in_flight(self) -> None:
        self.loading = False
        self.submitting = False

    def snapshot(self) -> EmployeeViewState:
        return EmployeeViewState(
            form=self.form.model_copy(),
            reasonRequired=self.reason_required,
            pendingLeaves=self.pending_leaves,
            totalLeaves=self.total_leaves,
            today=self.today,
            leaveStatusData=list(self.leave_status_data),
            leaveHistoryData=list(self.leave_history_data),
            loading=self.loading,
            submitting=self.submitting,
        )

    def _recompute_reason_required(self) -> None:
        self.reason_required = self.pending_leaves == 0

    async def _resolve_balance(self) -> LeaveBalance:
        balance = await self.service.get_leave_balance()
        if balance is None:
            logger.info("No leave balance found, creating default")
            balance = await self.service.create_default_leave_balance()
        return balance

    async def load_leave_data(self) -> None:
        """
        잔여 연차, 신청 현황, 이력을 동시에 읽는다.
        각각 실패해도 나머지는 반영하고, 실패한 항목만 기본값/이전값 유지.
        로딩이 겹치면 마지막에 시작한 로딩의 결과만 반영한다.
        """
        ticket = self._begin_load()
        self.loading = True
        await self.render()

        results = await asyncio.gather(
            self._resolve_balance(),
            self.service.get_leave_status(),
            self.service.get_leave_history(),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        if not self._is_latest_load(ticket):
            logger.info("Discarding stale leave data response")
            return

        balance, status_data, history_data = results
        errors: List[Exception] = []

        if isinstance(balance, Exception):
            errors.append(balance)
            self.pending_leaves = self.default_pending_leaves
            self.total_leaves = self.default_total_leaves
        else:
            self.pending_leaves = balance.pendingLeaves
            self.total_leaves = balance.totalAllocatedLeaves
        self._recompute_reason_required()

        if isinstance(status_data, Exception):
            errors.append(status_data)
        else:
            self.leave_status_data = status_data

        if isinstance(history_data, Exception):
            errors.append(history_data)
        else:
            self.leave_history_data = history_data

        self.loading = False
        logger.info(
            "Leave data loaded: pending=%s, total=%s, status=%d, history=%d, errors=%d",
            self.pending_leaves,
            self.total_leaves,
            len(self.leave_status_data),
            len(self.leave_history_data),
            len(errors),
        )

        if errors:
            await self.show_toast(
                "Error",
                f"Failed to load leave data: {error_message(errors[0])}",
                "error",
            )
        await self.render()

    async def handle_input_change(self, field: str, value: str) -> None:
        if field not in FORM_FIELDS:
            logger.warning("Ignoring input change for unknown field %s", field)
            return

        self.form = self.form.model_copy(update={field: value if value is not None else ""})
        self._recompute_reason_required()
        logger.debug("Input change: field=%s, value=%s", field, value)
        await self.render()

    def _validate_form(self) -> Tuple[date, date]:
        form = self.form
        if not form.leaveType or not form.startDate or not form.endDate:
            raise FormValidationError(REQUIRED_FIELDS_MESSAGE)
        if self.reason_required and not form.reason.strip():
            raise FormValidationError(REASON_REQUIRED_MESSAGE)

        start_date = _parse_date(form.startDate, "Start Date")
        end_date = _parse_date(form.endDate, "End Date")
        if end_date < start_date:
            raise FormValidationError("End Date cannot be before Start Date.")
        return start_date, end_date

    def reset_form(self) -> None:
        self.form = LeaveForm()
        self._recompute_reason_required()

    async def handle_submit(self) -> bool:
        """
        신청 제출. 성공하면 True.
        검증 실패나 서비스 오류 시 폼은 그대로 둔다.
        """
        if self.submitting:
            logger.warning("Submit ignored: previous submission still in flight")
            return False

        try:
            start_date, end_date = self._validate_form()
        except FormValidationError as exc:
            await self.show_toast("Error", str(exc), "error")
            return False

        token = self._token()
        self.submitting = True
        form = self.form
        try:
            await self.render()
            user_id = await self.service.get_current_user_id()
            leave_id = await self.service.create_leave_request(
                form.leaveType,
                start_date,
                end_date,
                form.reason or "",
                user_id,
            )
        except Exception as exc:
            self.submitting = False
            if not self._is_current(token):
                return False
            await self.show_toast(
                "Error",
                f"Failed to submit leave request: {error_message(exc)}",
                "error",
            )
            await self.render()
            return False
        finally:
            self.submitting = False

        logger.info("Leave request created with ID: %s", leave_id)
        if not self._is_current(token):
            return True

        await self.show_toast("Success", "Leave request submitted successfully.", "success")
        self.reset_form()
        await self.load_leave_data()
        return True
