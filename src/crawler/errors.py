# src/crawler/errors.py
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Stable, machine-distinguishable failure kinds of a scan."""
    INVALID_URL = "invalid_url"
    UNREACHABLE_HOST = "unreachable_host"
    TIMEOUT = "timeout"
    BLOCKED = "blocked"
    NOT_HTML = "not_html"
    HTTP_ERROR = "http_error"
    TLS_ERROR = "tls_error"
    INTERNAL = "internal"


DEFAULT_MESSAGES = {
    ErrorKind.INVALID_URL: "Invalid URL format. Please enter a valid website URL.",
    ErrorKind.UNREACHABLE_HOST: "Website not found. Please check the URL and try again.",
    ErrorKind.TIMEOUT: "The website took too long to respond. Please try again.",
    ErrorKind.BLOCKED: "This website blocks automated scanning due to security restrictions.",
    ErrorKind.NOT_HTML: "The URL does not point to an HTML page.",
    ErrorKind.HTTP_ERROR: "The website responded with an error status.",
    ErrorKind.TLS_ERROR: "Unable to establish a secure connection to the website.",
    ErrorKind.INTERNAL: "An unexpected error occurred. Please try again.",
}


class ScanError(Exception):
    """
    Raised by the fetcher and the scan orchestrator.
    Carries an ErrorKind plus a human-readable message.
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None, url: Optional[str] = None):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        self.url = url
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        """Every kind except invalid_url can succeed on a later attempt."""
        return self.kind != ErrorKind.INVALID_URL

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind.value, "retryable": self.retryable}

    def __repr__(self) -> str:
        return f"<ScanError kind={self.kind.value} url={self.url!r}>"
