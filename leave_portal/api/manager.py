from fastapi import APIRouter, Depends, Request, status

from leave_portal.api.deps import close_session_view, get_leave_service, session_view
from leave_portal.core.service import LeaveService
from leave_portal.core.sessions import sessions
from leave_portal.schemas.session import ManagerSessionOut, RowActionIn
from leave_portal.schemas.view import PENDING_COLUMNS, ManagerOptions
from leave_portal.views.manager import ManagerApprovalView

router = APIRouter(
    prefix="/manager",
    tags=["manager"],
)


def _session_out(session_id: str, view: ManagerApprovalView, toast_offset: int) -> ManagerSessionOut:
    return ManagerSessionOut(
        sessionId=session_id,
        state=view.snapshot(),
        toasts=view.toasts[toast_offset:],
    )


@router.get(
    "/options",
    response_model=ManagerOptions,
)
async def get_options():
    return ManagerOptions(columns=PENDING_COLUMNS)


@router.post(
    "/sessions",
    response_model=ManagerSessionOut,
    status_code=status.HTTP_201_CREATED,
)
async def open_session(
    request: Request,
    service: LeaveService = Depends(get_leave_service),
):
    session_id = sessions.new_session_id()
    view = ManagerApprovalView(
        service,
        toast_sink=sessions.toast_sink(session_id),
        publisher=getattr(request.app.state, "decision_publisher", None),
    )
    view.add_render_listener(sessions.render_listener(session_id))
    sessions.add(session_id, view)

    await view.connect()
    return _session_out(session_id, view, 0)


@router.get(
    "/sessions/{session_id}",
    response_model=ManagerSessionOut,
)
async def get_session(session_id: str):
    view = session_view(session_id, ManagerApprovalView)
    return _session_out(session_id, view, len(view.toasts))


@router.post(
    "/sessions/{session_id}/actions",
    response_model=ManagerSessionOut,
)
async def row_action(session_id: str, payload: RowActionIn):
    """
    결재자가 행 단위로 approve / reject 처리.
    성공하면 view가 Pending 목록을 다시 읽은 상태로 응답한다.
    """
    view = session_view(session_id, ManagerApprovalView)
    offset = len(view.toasts)
    await view.handle_row_action(payload.action, payload.requestId)
    return _session_out(session_id, view, offset)


@router.post(
    "/sessions/{session_id}/refresh",
    response_model=ManagerSessionOut,
)
async def refresh(session_id: str):
    view = session_view(session_id, ManagerApprovalView)
    offset = len(view.toasts)
    await view.load_pending_requests()
    return _session_out(session_id, view, offset)


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def close_session(session_id: str):
    close_session_view(session_id, ManagerApprovalView)
