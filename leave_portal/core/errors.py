class LeavePortalError(Exception):
    """Base class for every error raised by the leave portal."""


class FormValidationError(LeavePortalError):
    """
    Client-side validation failure, detected before any network call.
    """


class ServiceError(LeavePortalError):
    """
    Leave Service call failed (transport error or a service-reported failure).
    message는 서비스가 준 사람이 읽을 수 있는 메시지가 있을 때만 채운다.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message or "")
        self.message = message
        self.status_code = status_code


class LeaveValidationError(ServiceError):
    """The Leave Service rejected the payload."""


class AuthorizationError(ServiceError):
    pass


class NotFoundError(ServiceError):
    pass


class InvalidTransitionError(ServiceError):
    """Status change other than Pending -> Approved / Rejected."""


def error_message(exc: Exception, fallback: str = "Unknown error occurred") -> str:
    """
    Toast에 보여줄 메시지 추출. 서비스 메시지가 없으면 fallback.
    """
    if isinstance(exc, ServiceError):
        return exc.message or fallback
    return str(exc) or fallback
