"""Bulk download of a remote directory for roftp.

Downloads the plain files of one remote directory, continuing past
individual failures and reporting aggregate counts.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from roftp.ftp.connection import FTPSession
from roftp.ftp.exceptions import FTPError
from roftp.ftp.lister import DirectoryLister, EntryKind
from roftp.ftp.transfer import FileTransferer, PathLike
from roftp.utils.logging import get_logger

logger = get_logger("batch")

# Synthetic entries some servers include in listings
SYNTHETIC_NAMES = (".", "..")


@dataclass
class BatchResult:
    """Outcome of one download_all call."""
    success_count: int = 0
    fail_count: int = 0
    downloaded: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of download attempts made."""
        return self.success_count + self.fail_count

    def __iter__(self):
        # Allows ``successes, fails = downloader.download_all(...)``
        return iter((self.success_count, self.fail_count))


# Called after every attempt with the file name and the error, if any
FileCompleteCallback = Callable[[str, Optional[FTPError]], None]


class BatchDownloader:
    """Downloads all files of a remote directory."""

    def __init__(
        self,
        session: FTPSession,
        lister: Optional[DirectoryLister] = None,
        transferer: Optional[FileTransferer] = None
    ):
        """
        Initialize the batch downloader.

        Args:
            session: Active FTP session
            lister: Lister to use (default: one bound to session)
            transferer: Transferer to use (default: one bound to session)
        """
        self._session = session
        self._lister = lister or DirectoryLister(session)
        self._transferer = transferer or FileTransferer(session)
        self._cancelled = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        """True if current operation was cancelled."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop the running batch before its next download."""
        self._cancelled.set()

    def reset_cancel(self) -> None:
        """Reset cancellation flag for new operation."""
        self._cancelled.clear()

    def download_all(
        self,
        remote_dir: str,
        limit: Optional[int] = None,
        local_dir: Optional[PathLike] = None,
        on_file_complete: Optional[FileCompleteCallback] = None
    ) -> BatchResult:
        """
        Download the files of ``remote_dir`` in listing order.

        Directories, other entry kinds and the ``.``/``..`` entries are
        skipped and not counted. A failed file is counted and logged and
        the batch moves on. ``limit`` caps successful downloads: before
        each attempt the batch stops if ``success_count + 1`` would exceed
        it. Failed attempts do not count toward the limit. If a failure
        leaves the session closed (a stalled transfer), the batch stops
        and returns the counts so far.

        Args:
            remote_dir: Remote directory to download from
            limit: Maximum number of successful downloads, None or 0 for all
            local_dir: Local target directory (default: current directory)
            on_file_complete: Optional callback after each attempt

        Returns:
            BatchResult with success and failure counts

        Raises:
            ValueError: If limit is negative
            FTPNotConnectedError: If not connected
            FTPError: If the directory listing cannot be obtained
        """
        if limit is not None and limit < 0:
            raise ValueError(f"Limit must not be negative, got {limit}")

        self._session.require_connection("Download all")
        self.reset_cancel()

        try:
            entries = self._lister.list_files(remote_dir)
        except FTPError as e:
            e.add_context("Could not obtain dir entries")
            raise

        limit = limit or 0
        logger.info(f"The download limit is {limit}")
        result = BatchResult()

        for entry in entries:
            if limit and result.success_count + 1 > limit:
                break
            if self._cancelled.is_set():
                logger.info("Batch download cancelled")
                break
            if entry.kind != EntryKind.FILE or entry.name in SYNTHETIC_NAMES:
                continue

            logger.info(f"Downloading {entry.name}")
            try:
                self._transferer.download(remote_dir, entry.name, local_dir)
            except FTPError as e:
                result.fail_count += 1
                result.failures.append((entry.name, str(e)))
                logger.warning(f"Download of {entry.name} failed: {e}")
                if on_file_complete:
                    on_file_complete(entry.name, e)
                if not self._session.is_connected:
                    logger.error(f"Session lost while downloading {entry.name}, stopping batch")
                    break
                continue

            result.success_count += 1
            result.downloaded.append(entry.name)
            if on_file_complete:
                on_file_complete(entry.name, None)

        logger.info(
            f"Batch download of {remote_dir} finished: "
            f"{result.success_count} succeeded, {result.fail_count} failed"
        )
        return result
