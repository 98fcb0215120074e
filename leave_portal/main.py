import logging

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.websockets import WebSocketDisconnect

from leave_portal.api.employee import router as employee_router
from leave_portal.api.manager import router as manager_router
from leave_portal.core.config import settings
from leave_portal.core.rabbitmq import close_rabbitmq, init_rabbitmq
from leave_portal.core.sessions import sessions

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_TITLE,
    version="0.1.0",
    description="Employee leave request and manager approval screens (REST + WebSocket)",
)

app.include_router(employee_router)
app.include_router(manager_router)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "service": "leave-portal",
        "backend": settings.LEAVE_SERVICE_BACKEND,
    }


@app.get("/")
async def root():
    return {
        "message": "Leave Portal is running",
        "docs": "/docs",
    }


@app.websocket("/ws/{session_id}")
async def websocket_endpoint(websocket: WebSocket, session_id: str):
    """
    화면 세션에 붙는 WebSocket.
    서버 -> 클라이언트로 toast / state 메시지만 push 한다.
    발급되지 않은 sessionId면 4404로 닫는다.
    """
    if not await sessions.attach(session_id, websocket):
        return
    try:
        while True:
            # 클라이언트에서 오는 메시지는 무시(keep-alive 용)
            await websocket.receive_text()
    except WebSocketDisconnect:
        sessions.detach(session_id, websocket)


@app.on_event("startup")
async def on_startup():
    logger.info("Starting Leave Portal with %s Leave Service backend", settings.LEAVE_SERVICE_BACKEND)
    await init_rabbitmq(app)


@app.on_event("shutdown")
async def on_shutdown():
    await close_rabbitmq(app)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
