from typing import Literal

from pydantic_settings import BaseSettings  # pydantic-settings에서 BaseSettings를 임포트


class Settings(BaseSettings):
    PROJECT_TITLE: str = "Leave Portal"

    # Leave Service 연결 설정
    LEAVE_SERVICE_BACKEND: Literal["http", "memory"] = "http"
    LEAVE_SERVICE_BASE_URL: str = "http://leave-service:8000"
    LEAVE_SERVICE_TIMEOUT: float = 5.0
    LEAVE_SERVICE_TOKEN: str | None = None

    # 잔여 연차를 못 읽었을 때 화면에 보여줄 기본값
    DEFAULT_PENDING_LEAVES: int = 2
    DEFAULT_TOTAL_LEAVES: int = 24

    # 비어 있으면 결재 이벤트 publish 안 함
    RABBITMQ_URL: str | None = None

    # WebSocket 없이 이 시간(초) 이상 쓰이지 않은 화면 세션은 정리 (0이면 정리 안 함)
    SESSION_IDLE_TIMEOUT: float = 1800.0

    # uvicorn 실행 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"  # .env 파일을 통해 환경 변수 관리


# settings 객체를 생성하여 FastAPI에서 사용
settings = Settings()
