import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import BaseModel

from leave_portal.core.service import LeaveService
from leave_portal.schemas.view import Toast

logger = logging.getLogger(__name__)

ToastSink = Callable[[Toast], Awaitable[None]]
RenderListener = Callable[[BaseModel], Awaitable[None]]


class BaseView:
    """
    화면 하나의 공통 상태 관리.

    - connect(): 화면이 열릴 때 초기 로딩 (connected callback)
    - disconnect(): 화면을 떠남. 이후 도착하는 응답은 상태를 바꾸지 않는다.
    - 상태가 바뀔 때마다 render()가 snapshot을 listener들에게 넘긴다.
    - 목록 로딩이 겹치면 가장 나중에 시작한 로딩 결과만 반영한다.
    """

    def __init__(self, service: LeaveService, toast_sink: Optional[ToastSink] = None) -> None:
        self.service = service
        self.toasts: List[Toast] = []
        self._toast_sink = toast_sink
        self._render_listeners: List[RenderListener] = []
        self._connected = True
        # 화면을 떠날 때마다 증가. 요청 시작 시점 값과 다르면 stale 응답
        self._generation = 0
        # 로딩을 시작할 때마다 증가
        self._load_seq = 0

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        self._generation += 1
        self.reset_in_flight()
        await self.on_connect()

    def disconnect(self) -> None:
        self._connected = False
        self._generation += 1
        logger.info("%s disconnected", type(self).__name__)

    async def on_connect(self) -> None:
        """Initial load, overridden by each screen."""

    def reset_in_flight(self) -> None:
        """Clear loading / submitting style flags left by chains that went stale."""

    def _token(self) -> int:
        return self._generation

    def _is_current(self, token: int) -> bool:
        return self._connected and token == self._generation

    def _begin_load(self) -> Tuple[int, int]:
        self._load_seq += 1
        return self._generation, self._load_seq

    def _is_latest_load(self, ticket: Tuple[int, int]) -> bool:
        token, seq = ticket
        return self._is_current(token) and seq == self._load_seq

    def add_render_listener(self, listener: RenderListener) -> None:
        self._render_listeners.append(listener)

    def snapshot(self) -> BaseModel:
        raise NotImplementedError

    async def render(self) -> None:
        if not self._render_listeners:
            return
        state = self.snapshot()
        for listener in list(self._render_listeners):
            try:
                await listener(state)
            except Exception:
                # push 실패가 화면 동작을 막으면 안 됨
                logger.exception("%s render listener failed", type(self).__name__)

    async def show_toast(self, title: str, message: str, variant: str) -> Toast:
        toast = Toast(title=title, message=message, variant=variant)
        self.toasts.append(toast)
        if variant == "error":
            logger.warning("%s toast: %s", type(self).__name__, message)
        else:
            logger.info("%s toast: %s", type(self).__name__, message)
        if self._toast_sink is not None:
            try:
                await self._toast_sink(toast)
            except Exception:
                logger.exception("%s toast sink failed", type(self).__name__)
        return toast
