from fastapi import APIRouter, Depends, status

from leave_portal.api.deps import close_session_view, get_leave_service, session_view
from leave_portal.core.service import LeaveService
from leave_portal.core.sessions import sessions
from leave_portal.schemas.session import EmployeeSessionOut, InputChange
from leave_portal.schemas.view import (
    LEAVE_HISTORY_COLUMNS,
    LEAVE_STATUS_COLUMNS,
    LEAVE_TYPE_OPTIONS,
    EmployeeOptions,
)
from leave_portal.views.employee import EmployeeLeaveView

router = APIRouter(
    prefix="/employee",
    tags=["employee"],
)


def _session_out(session_id: str, view: EmployeeLeaveView, toast_offset: int) -> EmployeeSessionOut:
    return EmployeeSessionOut(
        sessionId=session_id,
        state=view.snapshot(),
        toasts=view.toasts[toast_offset:],
    )


@router.get(
    "/options",
    response_model=EmployeeOptions,
)
async def get_options():
    return EmployeeOptions(
        leaveTypeOptions=LEAVE_TYPE_OPTIONS,
        leaveStatusColumns=LEAVE_STATUS_COLUMNS,
        leaveHistoryColumns=LEAVE_HISTORY_COLUMNS,
    )


@router.post(
    "/sessions",
    response_model=EmployeeSessionOut,
    status_code=status.HTTP_201_CREATED,
)
async def open_session(
    service: LeaveService = Depends(get_leave_service),
):
    """
    직원 화면 열기: 세션 생성 후 초기 로딩까지 끝낸 상태를 반환.
    """
    session_id = sessions.new_session_id()
    view = EmployeeLeaveView(service, toast_sink=sessions.toast_sink(session_id))
    view.add_render_listener(sessions.render_listener(session_id))
    sessions.add(session_id, view)

    await view.connect()
    return _session_out(session_id, view, 0)


@router.get(
    "/sessions/{session_id}",
    response_model=EmployeeSessionOut,
)
async def get_session(session_id: str):
    view = session_view(session_id, EmployeeLeaveView)
    return _session_out(session_id, view, len(view.toasts))


@router.patch(
    "/sessions/{session_id}/form",
    response_model=EmployeeSessionOut,
)
async def change_input(session_id: str, payload: InputChange):
    view = session_view(session_id, EmployeeLeaveView)
    offset = len(view.toasts)
    await view.handle_input_change(payload.field, payload.value)
    return _session_out(session_id, view, offset)


@router.post(
    "/sessions/{session_id}/submit",
    response_model=EmployeeSessionOut,
)
async def submit(session_id: str):
    view = session_view(session_id, EmployeeLeaveView)
    offset = len(view.toasts)
    await view.handle_submit()
    return _session_out(session_id, view, offset)


@router.post(
    "/sessions/{session_id}/refresh",
    response_model=EmployeeSessionOut,
)
async def refresh(session_id: str):
    view = session_view(session_id, EmployeeLeaveView)
    offset = len(view.toasts)
    await view.load_leave_data()
    return _session_out(session_id, view, offset)


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def close_session(session_id: str):
    close_session_view(session_id, EmployeeLeaveView)
    # 204 No Content
