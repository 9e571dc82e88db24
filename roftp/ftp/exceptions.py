"""FTP-specific exceptions for roftp.

Custom exception hierarchy for FTP sessions and transfers. Every error keeps
the underlying cause in ``original_error`` and collects the context added
while it propagates, so callers can tell the root cause from the wrapping.
"""

from typing import List, Optional


class FTPError(Exception):
    """Base exception for all roftp errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.context: List[str] = []

    def add_context(self, context: str) -> "FTPError":
        """
        Prepend context describing what the caller was attempting.

        Args:
            context: Short description of the enclosing operation

        Returns:
            The same exception, so it can be re-raised directly
        """
        self.context.insert(0, context)
        return self

    def __str__(self) -> str:
        parts = list(self.context)
        if self.original_error:
            parts.append(f"{self.message}: {self.original_error}")
        else:
            parts.append(self.message)
        return ": ".join(parts)


class FTPNotConnectedError(FTPError):
    """Operation attempted without a live, authenticated FTP session."""

    def __init__(self, operation: str = "Operation"):
        self.operation = operation
        message = f"{operation} requires an active FTP connection"
        super().__init__(message)


class FTPConnectionError(FTPError):
    """Failed to establish the FTP transport connection."""

    def __init__(self, host: str, port, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class FTPAuthenticationError(FTPError):
    """FTP authentication (login) was rejected."""

    def __init__(self, username: str, original_error: Exception = None):
        self.username = username
        message = f"Authentication failed for user '{username}'"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPError):
    """FTP operation timed out."""

    def __init__(
        self,
        operation: str = "Operation",
        timeout: Optional[float] = None,
        original_error: Exception = None
    ):
        self.operation = operation
        self.timeout = timeout
        if timeout is None:
            message = f"{operation} timed out"
        else:
            message = f"{operation} timed out after {timeout} seconds"
        super().__init__(message, original_error)


class FTPPathError(FTPError):
    """FTP path operation failed (list, etc.)."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = path
        self.operation = operation
        message = f"Failed to {operation} path '{path}'"
        super().__init__(message, original_error)


class FTPNavigationError(FTPPathError):
    """Changing or querying the remote working directory failed."""

    def __init__(
        self,
        path: str,
        operation: str = "change directory",
        original_error: Exception = None
    ):
        super().__init__(path, operation, original_error)


class FTPTransferError(FTPError):
    """Upload or download failed on the server side or mid-stream."""

    def __init__(
        self,
        source: str,
        destination: str,
        reason: str = "transfer",
        original_error: Exception = None
    ):
        self.source = source
        self.destination = destination
        self.reason = reason
        message = f"Failed to {reason} '{source}' to '{destination}'"
        super().__init__(message, original_error)


class LocalIOError(FTPError):
    """Local file open, read or write failed."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = str(path)
        self.operation = operation
        message = f"Unable to {operation} local file '{self.path}'"
        super().__init__(message, original_error)
