from typing import Optional, Type

from fastapi import Header, HTTPException, status

from leave_portal.core.config import settings
from leave_portal.core.http_client import HttpLeaveService
from leave_portal.core.memory import InMemoryLeaveService, leave_store
from leave_portal.core.service import LeaveService
from leave_portal.core.sessions import V, sessions


def session_view(session_id: str, kind: Type[V]) -> V:
    view = sessions.find(session_id, kind)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return view


def close_session_view(session_id: str, kind: Type[V]) -> None:
    session_view(session_id, kind)
    sessions.remove(session_id)


async def get_leave_service(
    authorization: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> LeaveService:
    """
    FastAPI 의존성 주입용.
    - http: 들어온 Authorization 헤더를 Leave Service로 그대로 전달
    - memory: X-User-Id로 사용자를 식별 (개발용)
    """
    if settings.LEAVE_SERVICE_BACKEND == "memory":
        if not x_user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="X-User-Id header is required",
            )
        if x_user_id not in leave_store.employees:
            leave_store.add_employee(
                x_user_id,
                x_user_name or x_user_id,
                is_manager=x_user_role == "manager",
            )
        return InMemoryLeaveService(leave_store, x_user_id)

    headers = {"Authorization": authorization} if authorization else None
    return HttpLeaveService(headers=headers)
