"""Remote directory listing for roftp.

Enumerates the entries of a remote directory and classifies each one as a
file, a directory, or something else.
"""

import re
import socket
from dataclasses import dataclass
from enum import Enum
from ftplib import Error as FTPLibError, error_perm
from typing import Dict, List, Optional

from roftp.ftp.connection import FTPSession
from roftp.ftp.exceptions import FTPError, FTPPathError, FTPTimeoutError
from roftp.ftp.navigator import Navigator
from roftp.utils.logging import get_logger

logger = get_logger("lister")


# Unix-style LIST line, group column optional:
# drwxr-xr-x  2 owner group  4096 Jan  1 12:00 name
UNIX_LIST_PATTERN = re.compile(
    r'^(?P<perms>[-ldcbps][-rwxsStT]{9}\S*)\s+\d+\s+\S+\s+(?:\S+\s+)?'
    r'(?P<size>\d+)\s+'
    r'(?P<date>\w{3}\s+\d{1,2}\s+(?:\d{1,2}:\d{2}|\d{4}))\s+'
    r'(?P<name>.+)$'
)

# DOS/IIS-style LIST line:
# 01-01-24  12:00PM       <DIR>          name
# 01-01-24  12:00PM                1024 name
DOS_LIST_PATTERN = re.compile(
    r'^(?P<date>\d{2}-\d{2}-\d{2,4})\s+'
    r'(?P<time>\d{1,2}:\d{2}(?:[AaPp][Mm])?)\s+'
    r'(?:(?P<dir><DIR>)|(?P<size>\d+))\s+'
    r'(?P<name>.+)$'
)


class EntryKind(Enum):
    """Kind of a remote directory entry."""
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass
class FileEntry:
    """One entry of a remote directory listing."""
    name: str
    size: int
    kind: EntryKind

    @property
    def is_file(self) -> bool:
        """True for regular files."""
        return self.kind == EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        """True for directories."""
        return self.kind == EntryKind.DIRECTORY


def _parse_size(value: Optional[str]) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def classify_mlsd_type(type_fact: Optional[str]) -> EntryKind:
    """
    Map an MLSD ``type`` fact to an EntryKind.

    Args:
        type_fact: Value of the type fact, may be missing

    Returns:
        FILE, DIRECTORY, or OTHER for anything unrecognized
    """
    value = (type_fact or "").lower()
    if value == "file":
        return EntryKind.FILE
    if value in ("dir", "cdir", "pdir"):
        return EntryKind.DIRECTORY
    return EntryKind.OTHER


def entry_from_facts(name: str, facts: Dict[str, str]) -> FileEntry:
    """Build a FileEntry from an MLSD name and its facts."""
    size = facts.get("size", facts.get("sizd"))
    return FileEntry(
        name=name,
        size=_parse_size(size),
        kind=classify_mlsd_type(facts.get("type")),
    )


def parse_list_line(line: str) -> Optional[FileEntry]:
    """
    Parse one line of LIST output.

    Lines that match neither the Unix nor the DOS layout still produce an
    entry, classified OTHER, so one odd line never aborts a listing.

    Args:
        line: Raw LIST line

    Returns:
        FileEntry, or None for blank lines and ``total`` headers
    """
    stripped = line.strip()
    if not stripped or re.match(r'^total\s+\d+$', stripped):
        return None

    match = UNIX_LIST_PATTERN.match(stripped)
    if match:
        type_char = match.group("perms")[0]
        name = match.group("name")
        if type_char == "-":
            kind = EntryKind.FILE
        elif type_char == "d":
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.OTHER
            if type_char == "l" and " -> " in name:
                name = name.split(" -> ", 1)[0]
        return FileEntry(name=name, size=_parse_size(match.group("size")), kind=kind)

    match = DOS_LIST_PATTERN.match(stripped)
    if match:
        if match.group("dir"):
            return FileEntry(name=match.group("name"), size=0, kind=EntryKind.DIRECTORY)
        return FileEntry(
            name=match.group("name"),
            size=_parse_size(match.group("size")),
            kind=EntryKind.FILE,
        )

    logger.debug(f"Unrecognized LIST line: {stripped!r}")
    return FileEntry(name=stripped, size=0, kind=EntryKind.OTHER)


class DirectoryLister:
    """Lists remote directories of a session."""

    def __init__(self, session: FTPSession, navigator: Optional[Navigator] = None):
        """
        Initialize the lister.

        Args:
            session: Active FTP session
            navigator: Navigator to use (default: one bound to session)
        """
        self._session = session
        self._navigator = navigator or Navigator(session)

    @property
    def navigator(self) -> Navigator:
        return self._navigator

    def list_files(self, path: str) -> List[FileEntry]:
        """
        Change to ``path`` and list its entries in server order.

        Args:
            path: Remote directory to list

        Returns:
            List of FileEntry objects

        Raises:
            FTPNotConnectedError: If not connected
            FTPNavigationError: If the directory cannot be entered
            FTPPathError: If the listing itself fails
            FTPTimeoutError: If the server does not answer in time
        """
        self._session.require_connection("List files")

        try:
            current = self._navigator.change_directory(path)
        except FTPError as e:
            e.add_context("Unable to change current dir")
            raise

        entries = self._list_current(current)
        logger.info(f"{len(entries)} item(s) found at {current}")
        return entries

    def _list_current(self, current: str) -> List[FileEntry]:
        """
        List the current directory, preferring MLSD over LIST.

        Args:
            current: Current directory, used for error reporting

        Returns:
            List of FileEntry objects
        """
        ftp = self._session.require_connection("List files")

        try:
            try:
                entries = [entry_from_facts(name, facts) for name, facts in ftp.mlsd()]
            except error_perm as e:
                # Server without MLSD support
                logger.debug(f"MLSD rejected ({e}), falling back to LIST")
                lines: List[str] = []
                ftp.dir(lines.append)
                entries = [
                    entry for entry in (parse_list_line(line) for line in lines)
                    if entry is not None
                ]
        except socket.timeout as e:
            raise FTPTimeoutError("Listing", self._session.timeout, e)
        except (FTPLibError, OSError) as e:
            raise FTPPathError(current, "list", e)

        self._session.touch()
        return entries
