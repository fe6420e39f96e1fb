class ConfigurationError(Exception):
    def __init__(self, message: str = "Missing ELEVENLABS_API_KEY"):
        self.message = message
        super().__init__(message)


class UpstreamError(Exception):
    def __init__(self, status_code: int, details: object = None):
        self.message = "Upstream error"
        self.status_code = status_code
        self.details = details
        super().__init__(f"Upstream error (status={status_code})")


class RateLimitError(UpstreamError):
    def __init__(self, details: object = None):
        super().__init__(429, details)


class TransportError(Exception):
    def __init__(self, details: str):
        self.message = "Request failed"
        self.details = details
        super().__init__(details)


class ConsoleRequestError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
