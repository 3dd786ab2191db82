from typing import Optional


class BridgeError(Exception):
    """Base class for failures raised while running a tool."""

    kind = "Bridge"
    prefix = "Bridge error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.prefix}: {self.detail}"


class NetworkError(BridgeError):
    """The request could not be sent, timed out, or its body could not be decoded."""

    kind = "Network"
    prefix = "Network error"


class ApiError(BridgeError):
    """The backend answered, but not with something we can use."""

    kind = "Api"
    prefix = "Backend API error"

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.status_code = status_code
