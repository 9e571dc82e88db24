"""Single-file transfers for roftp.

Handles uploading one local file and downloading one remote file, either
into memory or onto the local disk.
"""

import os
import posixpath
import socket
from dataclasses import dataclass
from ftplib import Error as FTPLibError
from pathlib import Path, PureWindowsPath
from typing import BinaryIO, Callable, Optional, Union

from roftp.ftp.connection import FTPSession
from roftp.ftp.exceptions import FTPTransferError, FTPTimeoutError, LocalIOError
from roftp.utils.logging import get_logger

logger = get_logger("transfer")

# Destination label for downloads held in memory
MEMORY_DESTINATION = "<memory>"

PathLike = Union[str, Path]


@dataclass
class TransferProgress:
    """Progress information for a single transfer."""
    remote_path: str
    file_name: str
    bytes_done: int
    bytes_total: int

    @property
    def percent(self) -> float:
        """Transfer progress as percentage (0-100), 0 when size is unknown."""
        if self.bytes_total == 0:
            return 0.0
        return (self.bytes_done / self.bytes_total) * 100.0


# Type alias for progress callback
ProgressCallback = Callable[[TransferProgress], None]


def is_plain_file_name(name: str) -> bool:
    """
    Check that a remote name can be used as a local file name as-is.

    Names come from server listings, so anything that could point outside
    the target directory is refused: empty names, ``.``/``..``, path
    separators of either flavour, and drive prefixes.
    """
    if name in ("", ".", ".."):
        return False
    if "/" in name or "\\" in name:
        return False
    return not PureWindowsPath(name).drive


class _LocalReader:
    """Wraps an upload source so local read failures raise LocalIOError."""

    def __init__(self, fp: BinaryIO, path: Path):
        self._fp = fp
        self._path = path

    @property
    def closed(self) -> bool:
        return self._fp.closed

    def read(self, size: int = -1) -> bytes:
        try:
            return self._fp.read(size)
        except OSError as e:
            raise LocalIOError(self._path, "read", e)


class FileTransferer:
    """Uploads and downloads single files over a session."""

    # Block size for FTP transfers (8KB)
    BLOCK_SIZE = 8192

    def __init__(self, session: FTPSession):
        """
        Initialize the transferer.

        Args:
            session: Active FTP session
        """
        self._session = session

    def upload(
        self,
        local_path: PathLike,
        remote_dir: str,
        remote_name: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> int:
        """
        Upload a local file into a remote directory.

        Args:
            local_path: Local file to send
            remote_dir: Remote directory (without file name)
            remote_name: Remote file name (default: local file's name)
            on_progress: Optional callback for progress updates

        Returns:
            Number of bytes transferred

        Raises:
            FTPNotConnectedError: If not connected
            LocalIOError: If the local file cannot be opened or read
            FTPTransferError: If the server rejects or breaks the upload
            FTPTimeoutError: If the transfer times out
        """
        ftp = self._session.require_connection("Upload")

        local_path = Path(local_path)
        remote_path = posixpath.join(remote_dir, remote_name or local_path.name)

        try:
            fp = open(local_path, "rb")
        except OSError as e:
            raise LocalIOError(local_path, "open for upload", e)

        bytes_sent = 0

        with fp:
            file_size = os.fstat(fp.fileno()).st_size

            def callback(block: bytes) -> None:
                nonlocal bytes_sent
                bytes_sent += len(block)
                if on_progress:
                    on_progress(TransferProgress(
                        remote_path=remote_path,
                        file_name=local_path.name,
                        bytes_done=bytes_sent,
                        bytes_total=file_size
                    ))

            logger.info(f"Uploading: {local_path} -> {remote_path}")
            try:
                ftp.storbinary(
                    f"STOR {remote_path}",
                    _LocalReader(fp, local_path),
                    blocksize=self.BLOCK_SIZE,
                    callback=callback
                )
            except LocalIOError:
                # storbinary closed the data connection; the server still answers
                self._drain_response(ftp)
                raise
            except socket.timeout as e:
                raise FTPTimeoutError("Upload", self._session.timeout, e)
            except (FTPLibError, OSError) as e:
                raise FTPTransferError(str(local_path), remote_path, "upload", e)

        self._session.touch()
        logger.info(f"Upload of {local_path} to {remote_path} completed ({bytes_sent} bytes)")
        return bytes_sent

    def download_to_buffer(
        self,
        remote_path: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> bytes:
        """
        Download a remote file into memory.

        The data connection is closed on every exit path. If the stream or
        the final reply times out, the control channel can no longer be
        trusted and the session is abandoned (state CLOSED).

        Args:
            remote_path: Full remote path of the file
            on_progress: Optional callback for progress updates

        Returns:
            File contents

        Raises:
            FTPNotConnectedError: If not connected
            FTPTransferError: If the retrieve cannot start or the stream breaks
            FTPTimeoutError: If the transfer times out
        """
        ftp = self._session.require_connection("Download")
        timeout = self._session.timeout

        logger.debug(f"Downloading {remote_path} to buffer")
        try:
            ftp.voidcmd("TYPE I")
            conn, size = ftp.ntransfercmd(f"RETR {remote_path}")
        except socket.timeout as e:
            raise FTPTimeoutError("Download", timeout, e)
        except (FTPLibError, OSError) as e:
            raise FTPTransferError(remote_path, MEMORY_DESTINATION, "retrieve", e)

        file_name = posixpath.basename(remote_path)
        total = size or 0
        chunks = []
        received = 0

        try:
            try:
                while True:
                    block = conn.recv(self.BLOCK_SIZE)
                    if not block:
                        break
                    chunks.append(block)
                    received += len(block)
                    if on_progress:
                        on_progress(TransferProgress(
                            remote_path=remote_path,
                            file_name=file_name,
                            bytes_done=received,
                            bytes_total=total
                        ))
            finally:
                conn.close()
        except socket.timeout as e:
            self._session.abandon(f"Data stream of {remote_path} stalled")
            raise FTPTimeoutError("Download read", timeout, e)
        except OSError as e:
            self._drain_response(ftp)
            raise FTPTransferError(remote_path, MEMORY_DESTINATION, "read", e)

        try:
            ftp.voidresp()
        except socket.timeout as e:
            self._session.abandon(f"No reply after retrieving {remote_path}")
            raise FTPTimeoutError("Download", timeout, e)
        except (FTPLibError, OSError) as e:
            raise FTPTransferError(remote_path, MEMORY_DESTINATION, "complete retrieve of", e)

        self._session.touch()
        logger.debug(f"{received} bytes read from {remote_path}")
        return b"".join(chunks)

    def _drain_response(self, ftp) -> None:
        """Consume the reply that follows an aborted data stream."""
        try:
            ftp.voidresp()
        except socket.timeout:
            self._session.abandon("No reply after aborted transfer")
        except (FTPLibError, OSError) as e:
            logger.debug(f"Reply after aborted transfer: {e}")

    def download(
        self,
        remote_dir: str,
        dest_name: str,
        local_dir: Optional[PathLike] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> Path:
        """
        Download ``remote_dir/dest_name`` to a local file of the same name.

        Args:
            remote_dir: Remote directory holding the file
            dest_name: File name, used both remotely and locally; must be a
                plain name without path components
            local_dir: Local target directory (default: current directory)
            on_progress: Optional callback for progress updates

        Returns:
            Path of the written local file

        Raises:
            FTPNotConnectedError: If not connected
            FTPTransferError: If the download fails
            FTPTimeoutError: If the transfer times out
            LocalIOError: If the name is not a plain file name or the local
                file cannot be written
        """
        self._session.require_connection("Download")

        target = Path(local_dir or ".") / dest_name
        if not is_plain_file_name(dest_name):
            raise LocalIOError(
                target, "write",
                ValueError(f"'{dest_name}' is not a plain file name")
            )

        data = self.download_to_buffer(posixpath.join(remote_dir, dest_name), on_progress)

        try:
            target.write_bytes(data)
        except OSError as e:
            raise LocalIOError(target, "write", e)

        logger.info(f"Downloaded {dest_name} ({len(data)} bytes) to {target}")
        return target
