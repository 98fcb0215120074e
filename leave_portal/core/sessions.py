import logging
import time
import uuid
from typing import Callable, Dict, List, Optional, Set, Type, TypeVar

from fastapi import WebSocket
from pydantic import BaseModel

from leave_portal.core.config import settings
from leave_portal.schemas.view import Toast
from leave_portal.views.base import BaseView, RenderListener, ToastSink

logger = logging.getLogger(__name__)

# 발급된 적 없는 sessionId로 WebSocket 연결 시 close code
WS_CLOSE_UNKNOWN_SESSION = 4404

V = TypeVar("V", bound=BaseView)


class SessionRegistry:
    """
    화면 세션 관리.

    - sessionId -> 화면(view) 인스턴스. 세션끼리 공유하는 상태는 없다.
    - 세션을 보고 있는 WebSocket들에게 toast / state를 push.
    - 소켓 없이 idle_timeout 이상 사용되지 않은 세션은 정리한다.
    """

    def __init__(
        self,
        idle_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.idle_timeout = settings.SESSION_IDLE_TIMEOUT if idle_timeout is None else idle_timeout
        self._clock = clock
        self._views: Dict[str, BaseView] = {}
        self._sockets: Dict[str, Set[WebSocket]] = {}
        self._last_seen: Dict[str, float] = {}

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._views

    def __len__(self) -> int:
        return len(self._views)

    def _touch(self, session_id: str) -> None:
        self._last_seen[session_id] = self._clock()

    def add(self, session_id: str, view: BaseView) -> None:
        self.expire_idle()
        self._views[session_id] = view
        self._touch(session_id)

    def find(self, session_id: str, kind: Type[V]) -> Optional[V]:
        view = self._views.get(session_id)
        if not isinstance(view, kind):
            return None
        self._touch(session_id)
        return view

    def remove(self, session_id: str) -> Optional[BaseView]:
        view = self._views.pop(session_id, None)
        self._sockets.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if view is not None:
            view.disconnect()
        return view

    def expire_idle(self) -> List[str]:
        if not self.idle_timeout or self.idle_timeout <= 0:
            return []
        now = self._clock()
        expired = [
            session_id
            for session_id, seen in self._last_seen.items()
            if not self._sockets.get(session_id) and now - seen > self.idle_timeout
        ]
        for session_id in expired:
            logger.info("Session %s idle for over %ss, closing", session_id, self.idle_timeout)
            self.remove(session_id)
        return expired

    async def attach(self, session_id: str, websocket: WebSocket) -> bool:
        if session_id not in self._views:
            logger.warning("WebSocket rejected: unknown session %s", session_id)
            await websocket.close(code=WS_CLOSE_UNKNOWN_SESSION)
            return False
        await websocket.accept()
        self._sockets.setdefault(session_id, set()).add(websocket)
        self._touch(session_id)
        return True

    def detach(self, session_id: str, websocket: WebSocket) -> None:
        conns = self._sockets.get(session_id)
        if not conns:
            return
        conns.discard(websocket)
        if not conns:
            self._sockets.pop(session_id, None)
            # 마지막 소켓이 끊긴 시점부터 idle 계산
            if session_id in self._views:
                self._touch(session_id)

    def socket_count(self, session_id: str) -> int:
        return len(self._sockets.get(session_id, ()))

    async def send_toast(self, session_id: str, toast: Toast) -> None:
        await self._send(session_id, {"type": "toast", **toast.model_dump()})

    async def send_state(self, session_id: str, state: BaseModel) -> None:
        await self._send(session_id, {"type": "state", "state": state.model_dump(mode="json")})

    async def _send(self, session_id: str, message: dict) -> None:
        for ws in list(self._sockets.get(session_id, ())):
            try:
                await ws.send_json(message)
            except Exception as exc:
                logger.warning("Dropping socket of session %s: %s", session_id, exc)
                self.detach(session_id, ws)

    def toast_sink(self, session_id: str) -> ToastSink:
        async def _sink(toast: Toast) -> None:
            await self.send_toast(session_id, toast)

        return _sink

    def render_listener(self, session_id: str) -> RenderListener:
        async def _listener(state: BaseModel) -> None:
            await self.send_state(session_id, state)

        return _listener


# 전역 인스턴스 (REST와 WebSocket이 함께 사용)
sessions = SessionRegistry()
