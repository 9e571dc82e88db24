"""FTP operations module for roftp.

This module handles all FTP-related functionality:
- FTPSession: Connection lifecycle with state tracking
- Navigator: Remote working directory changes
- DirectoryLister: Directory listing with entry classification
- FileTransferer: Single-file upload and download
- BatchDownloader: Directory download tolerant of per-file failures
- Exceptions: FTP-specific error types
"""

from roftp.ftp.batch import BatchDownloader, BatchResult
from roftp.ftp.connection import FTPSession, SessionOptions, SessionState, connect
from roftp.ftp.lister import DirectoryLister, EntryKind, FileEntry
from roftp.ftp.navigator import Navigator
from roftp.ftp.transfer import FileTransferer, TransferProgress

__all__ = [
    "BatchDownloader",
    "BatchResult",
    "DirectoryLister",
    "EntryKind",
    "FileEntry",
    "FileTransferer",
    "FTPSession",
    "Navigator",
    "SessionOptions",
    "SessionState",
    "TransferProgress",
    "connect",
]
