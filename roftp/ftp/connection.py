"""FTP session management for roftp.

Provides SessionState enum, SessionOptions dataclass, and the FTPSession
class that owns exactly one authenticated ftplib connection.
"""

import logging
import socket
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from ftplib import FTP, Error as FTPLibError, error_perm
from typing import Optional

from roftp.ftp.exceptions import (
    FTPError,
    FTPConnectionError,
    FTPAuthenticationError,
    FTPNotConnectedError,
    FTPTimeoutError,
)
from roftp.utils.logging import get_logger
from roftp.utils.validators import validate_host, validate_port, validate_timeout

logger = get_logger("session")


class SessionState(Enum):
    """FTP session state."""
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass(frozen=True)
class SessionOptions:
    """Connection and login parameters for one FTP session."""
    host: str
    port: str
    username: str
    password: str = field(repr=False)
    verbose: bool
    timeout: Optional[float] = 30.0

    def __post_init__(self):
        """Validate options after initialization."""
        is_valid, error = validate_host(self.host)
        if not is_valid:
            raise ValueError(error)
        is_valid, error = validate_port(self.port)
        if not is_valid:
            raise ValueError(error)
        is_valid, error = validate_timeout(self.timeout)
        if not is_valid:
            raise ValueError(error)

    @property
    def port_number(self) -> int:
        """Port parsed as an integer."""
        return int(str(self.port).strip())

    @property
    def address(self) -> str:
        """host:port string for diagnostics."""
        return f"{self.host}:{self.port}"


class FTPSession:
    """
    Owns one FTP connection through its whole lifecycle.

    UNINITIALIZED -> (connect) -> AUTHENTICATED -> (quit) -> CLOSED.
    A failed connect leaves the session UNINITIALIZED. The connection is
    only released by quit() or by leaving a ``with`` block; there is no
    finalizer.
    """

    def __init__(self):
        """Initialize an unconnected session."""
        self._ftp: Optional[FTP] = None
        self._options: Optional[SessionOptions] = None
        self._state = SessionState.UNINITIALIZED
        self._connected_at: Optional[datetime] = None
        self._last_activity: Optional[datetime] = None
        self._error_message: Optional[str] = None

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True if the session holds a live, authenticated connection."""
        return self._state == SessionState.AUTHENTICATED and self._ftp is not None

    @property
    def options(self) -> Optional[SessionOptions]:
        """Options used for the last connect attempt."""
        return self._options

    @property
    def timeout(self) -> Optional[float]:
        """Socket timeout in effect for this session."""
        return self._options.timeout if self._options else None

    @property
    def connected_at(self) -> Optional[datetime]:
        """Timestamp when the session was authenticated."""
        return self._connected_at

    @property
    def last_activity(self) -> Optional[datetime]:
        """Timestamp of last successful operation."""
        return self._last_activity

    @property
    def error_message(self) -> Optional[str]:
        """Message of the last failed connect attempt."""
        return self._error_message

    @property
    def ftp(self) -> FTP:
        """
        Get the underlying FTP object.

        Raises:
            FTPNotConnectedError: If not connected
        """
        return self.require_connection("FTP access")

    def require_connection(self, operation: str) -> FTP:
        """
        Return the live FTP handle or fail before any network I/O.

        Args:
            operation: Name of the attempted operation, used in the error

        Raises:
            FTPNotConnectedError: If the session is not authenticated
        """
        if not self.is_connected:
            raise FTPNotConnectedError(operation)
        return self._ftp

    def touch(self) -> None:
        """Update last activity timestamp."""
        self._last_activity = datetime.now()

    def _progress(self, message: str, *args) -> None:
        """Log a connect stage; verbose sessions log it at INFO."""
        verbose = self._options is not None and self._options.verbose
        logger.log(logging.INFO if verbose else logging.DEBUG, message, *args)

    def connect(self, options: SessionOptions) -> None:
        """
        Open the transport connection and log in.

        Args:
            options: Connection and login parameters

        Raises:
            FTPError: If the session is not UNINITIALIZED
            FTPConnectionError: If the transport cannot be established
            FTPAuthenticationError: If the server rejects the login
            FTPTimeoutError: If connect or login times out
        """
        if self._state != SessionState.UNINITIALIZED:
            raise FTPError(f"Cannot connect a session in state '{self._state.value}'")

        self._options = options
        self._state = SessionState.CONNECTING
        self._error_message = None

        self._progress("Attempting ftp connection...")
        self._progress("FTP options: %r", options)

        ftp = FTP()
        try:
            try:
                ftp.connect(
                    host=options.host,
                    port=options.port_number,
                    timeout=options.timeout
                )
            except socket.timeout as e:
                raise FTPTimeoutError("Connection", options.timeout, e)
            except OSError as e:
                raise FTPConnectionError(options.host, options.port, e)

            self._progress("FTP basic connection established to %s. We still need to login", options.address)
            self._progress("Attempting to login as '%s'...", options.username)

            try:
                ftp.login(user=options.username, passwd=options.password)
            except error_perm as e:
                raise FTPAuthenticationError(options.username, e)
            except socket.timeout as e:
                raise FTPTimeoutError("Login", options.timeout, e)

        except FTPError as e:
            self._abort_connect(ftp, e)
            raise
        except Exception as e:
            self._abort_connect(ftp, e)
            raise FTPConnectionError(options.host, options.port, e)

        self._ftp = ftp
        self._state = SessionState.AUTHENTICATED
        self._connected_at = datetime.now()
        self._last_activity = self._connected_at
        self._progress("Logged in to %s as '%s'", options.address, options.username)

    def _abort_connect(self, ftp: FTP, error: Exception) -> None:
        """Release a half-open connection and reset to UNINITIALIZED."""
        try:
            ftp.close()
        except OSError as close_error:
            logger.debug(f"Error closing failed connection: {close_error}")
        self._ftp = None
        self._state = SessionState.UNINITIALIZED
        self._error_message = str(error)
        logger.warning(f"FTP connection failed: {error}")

    def abandon(self, reason: str) -> None:
        """
        Close the connection without QUIT when the control channel is out of sync.

        Used after a stalled data transfer whose final reply never arrived.
        The session ends CLOSED and later operations raise
        FTPNotConnectedError instead of reading a stale reply.

        Args:
            reason: Why the session was abandoned, kept in error_message
        """
        if self._ftp is not None:
            try:
                self._ftp.close()
            except OSError as e:
                logger.debug(f"Error closing abandoned connection: {e}")
        self._ftp = None
        self._state = SessionState.CLOSED
        self._connected_at = None
        self._error_message = reason
        logger.warning(f"FTP session abandoned: {reason}")

    def quit(self) -> None:
        """
        Send QUIT and close the connection.

        Raises:
            FTPNotConnectedError: If the session was never connected or is
                already closed
        """
        if not self.is_connected:
            raise FTPNotConnectedError("Quit")

        ftp = self._ftp
        try:
            ftp.quit()
        except (OSError, FTPLibError) as e:
            logger.warning(f"QUIT not acknowledged, closing socket: {e}")
            ftp.close()
        finally:
            self._ftp = None
            self._state = SessionState.CLOSED
            self._connected_at = None

        self._progress("FTP session closed")

    def __enter__(self) -> "FTPSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.is_connected:
            self.quit()


def connect(options: SessionOptions) -> FTPSession:
    """
    Create a session and authenticate it.

    Args:
        options: Connection and login parameters

    Returns:
        An AUTHENTICATED FTPSession

    Raises:
        FTPConnectionError: If the transport cannot be established
        FTPAuthenticationError: If the server rejects the login
        FTPTimeoutError: If connect or login times out
    """
    session = FTPSession()
    session.connect(options)
    return session
