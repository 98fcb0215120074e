import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from fastapi import status

from leave_portal.core.config import settings
from leave_portal.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    LeaveValidationError,
    NotFoundError,
    ServiceError,
)
from leave_portal.schemas.leave import (
    LeaveBalance,
    LeaveCreate,
    LeaveRequest,
    LeaveStatus,
    LeaveStatusUpdate,
    PendingQueueEntry,
)

logger = logging.getLogger(__name__)

_ERRORS_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: LeaveValidationError,
    status.HTTP_422_UNPROCESSABLE_ENTITY: LeaveValidationError,
    status.HTTP_401_UNAUTHORIZED: AuthorizationError,
    status.HTTP_403_FORBIDDEN: AuthorizationError,
    status.HTTP_404_NOT_FOUND: NotFoundError,
    status.HTTP_409_CONFLICT: InvalidTransitionError,
}


def _extract_message(resp: httpx.Response) -> Optional[str]:
    """
    FastAPI 스타일 {"detail": ...} 또는 {"message": ...} 바디에서 메시지 추출.
    """
    try:
        body = resp.json()
    except ValueError:
        return resp.text or None

    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return str(detail)
    return None


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.status_code < 400:
        return
    error_cls = _ERRORS_BY_STATUS.get(resp.status_code, ServiceError)
    raise error_cls(_extract_message(resp), status_code=resp.status_code)


class HttpLeaveService:
    """
    Leave Service REST API를 호출하는 LeaveService 구현.
    호출마다 httpx.AsyncClient를 새로 연다.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        headers: Dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.LEAVE_SERVICE_BASE_URL
        self.timeout = timeout if timeout is not None else settings.LEAVE_SERVICE_TIMEOUT
        self.headers: Dict[str, str] = dict(headers or {})
        token = token or settings.LEAVE_SERVICE_TOKEN
        if token and "Authorization" not in self.headers:
            self.headers["Authorization"] = f"Bearer {token}"
        # 테스트에서 httpx.MockTransport 주입용
        self._transport = transport

    async def _request(
        self,
        method: str,
        url: str,
        json: Any = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self.headers,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.request(method, url, json=json)
            except httpx.HTTPError as exc:
                logger.warning("Leave Service %s %s failed: %s", method, url, exc)
                raise ServiceError(f"Leave Service unreachable: {exc}") from exc

        logger.debug("Leave Service %s %s -> %s", method, url, resp.status_code)
        _raise_for_status(resp)
        return resp

    async def create_leave_request(
        self,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        employee_id: str,
    ) -> str:
        payload = LeaveCreate(
            leaveType=leave_type,
            startDate=start_date,
            endDate=end_date,
            reason=reason,
            employeeId=employee_id,
        )
        resp = await self._request("POST", "/leaves", json=payload.model_dump(mode="json"))
        # Response: {"requestId": "..."}
        try:
            body = resp.json()
        except ValueError:
            body = None
        request_id = body.get("requestId") if isinstance(body, dict) else None
        if request_id is None:
            # 서버에는 이미 생성됨. 실패로 처리하면 중복 신청을 유도하므로 성공으로 본다
            logger.warning("Leave Service created a leave request without returning requestId")
            return ""
        return str(request_id)

    async def get_leave_status(self) -> List[LeaveRequest]:
        resp = await self._request("GET", "/leaves/status")
        return [LeaveRequest.model_validate(r) for r in resp.json()]

    async def get_leave_history(self) -> List[LeaveRequest]:
        resp = await self._request("GET", "/leaves/history")
        return [LeaveRequest.model_validate(r) for r in resp.json()]

    async def get_leave_balance(self) -> Optional[LeaveBalance]:
        try:
            resp = await self._request("GET", "/leaves/balance")
        except NotFoundError:
            # 아직 잔여 연차 레코드가 없는 사용자
            return None

        if resp.status_code == status.HTTP_204_NO_CONTENT or not resp.content:
            return None
        body = resp.json()
        if body is None:
            return None
        return LeaveBalance.model_validate(body)

    async def create_default_leave_balance(self) -> LeaveBalance:
        resp = await self._request("POST", "/leaves/balance/default")
        return LeaveBalance.model_validate(resp.json())

    async def get_current_user_id(self) -> str:
        resp = await self._request("GET", "/users/me")
        return str(resp.json()["id"])

    async def get_pending_leave_requests(self) -> List[PendingQueueEntry]:
        resp = await self._request("GET", "/leaves/pending")
        return [PendingQueueEntry.model_validate(r) for r in resp.json()]

    async def update_leave_request(self, request_id: str, new_status: LeaveStatus) -> None:
        payload = LeaveStatusUpdate(status=new_status)
        await self._request(
            "PATCH",
            f"/leaves/{request_id}",
            json=payload.model_dump(mode="json"),
        )
