"""Remote working directory navigation for roftp."""

import socket
from ftplib import Error as FTPLibError

from roftp.ftp.connection import FTPSession
from roftp.ftp.exceptions import FTPNavigationError, FTPTimeoutError
from roftp.utils.logging import get_logger

logger = get_logger("navigator")


class Navigator:
    """Changes the server-side current directory of a session."""

    def __init__(self, session: FTPSession):
        """
        Initialize the navigator.

        Args:
            session: FTP session whose working directory is managed
        """
        self._session = session

    def change_directory(self, path: str) -> str:
        """
        Change to ``path`` and return the server's canonical current path.

        The server may normalize or silently accept odd paths, so the
        result comes from a PWD issued after the CWD, not from ``path``.

        Args:
            path: Requested remote directory

        Returns:
            Current directory as reported by the server

        Raises:
            FTPNotConnectedError: If not connected
            FTPNavigationError: If CWD or PWD fails
            FTPTimeoutError: If the server does not answer in time
        """
        ftp = self._session.require_connection("Change directory")

        try:
            ftp.cwd(path)
        except socket.timeout as e:
            raise FTPTimeoutError("Change directory", self._session.timeout, e)
        except (FTPLibError, OSError) as e:
            raise FTPNavigationError(path, "change directory", e)

        try:
            current = ftp.pwd()
        except socket.timeout as e:
            raise FTPTimeoutError("Current directory query", self._session.timeout, e)
        except (FTPLibError, OSError) as e:
            raise FTPNavigationError(path, "query current directory after changing to", e)

        self._session.touch()
        logger.debug(f"Current path: {current}")
        return current

    def current_directory(self) -> str:
        """
        Query the server's current directory without changing it.

        Raises:
            FTPNotConnectedError: If not connected
            FTPNavigationError: If PWD fails
            FTPTimeoutError: If the server does not answer in time
        """
        ftp = self._session.require_connection("Current directory query")

        try:
            current = ftp.pwd()
        except socket.timeout as e:
            raise FTPTimeoutError("Current directory query", self._session.timeout, e)
        except (FTPLibError, OSError) as e:
            raise FTPNavigationError("", "query current directory", e)

        self._session.touch()
        return current
