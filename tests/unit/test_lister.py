"""Unit tests for DirectoryLister.

Tests MLSD listing, the LIST fallback parser, and entry classification.
"""

import pytest
from ftplib import error_perm, error_temp

from roftp.ftp.lister import (
    DirectoryLister,
    EntryKind,
    FileEntry,
    classify_mlsd_type,
    entry_from_facts,
    parse_list_line,
)
from roftp.ftp.exceptions import (
    FTPNavigationError,
    FTPNotConnectedError,
    FTPPathError,
)


class TestEntryKindEnum:
    """Tests for EntryKind enum."""

    def test_enum_values(self):
        """Test enum has expected values."""
        assert EntryKind.FILE.value == "file"
        assert EntryKind.DIRECTORY.value == "directory"
        assert EntryKind.OTHER.value == "other"


class TestClassification:
    """Tests for MLSD fact classification."""

    @pytest.mark.parametrize("type_fact,expected", [
        ("file", EntryKind.FILE),
        ("FILE", EntryKind.FILE),
        ("dir", EntryKind.DIRECTORY),
        ("cdir", EntryKind.DIRECTORY),
        ("pdir", EntryKind.DIRECTORY),
        ("OS.unix=symlink", EntryKind.OTHER),
        ("", EntryKind.OTHER),
        (None, EntryKind.OTHER),
    ])
    def test_classify_mlsd_type(self, type_fact, expected):
        """Test type facts map to entry kinds."""
        assert classify_mlsd_type(type_fact) == expected

    def test_entry_from_facts_size(self):
        """Test size comes from the size fact."""
        entry = entry_from_facts("a.txt", {"type": "file", "size": "10"})
        assert entry == FileEntry(name="a.txt", size=10, kind=EntryKind.FILE)

    def test_entry_from_facts_sizd(self):
        """Test directories may report sizd instead of size."""
        entry = entry_from_facts("sub", {"type": "dir", "sizd": "4096"})
        assert entry.size == 4096
        assert entry.is_directory is True

    def test_entry_from_facts_bad_size(self):
        """Test an unparseable size does not fail the entry."""
        entry = entry_from_facts("odd.bin", {"type": "file", "size": "n/a"})
        assert entry.size == 0
        assert entry.is_file is True


class TestParseListLine:
    """Tests for LIST output parsing."""

    def test_unix_file(self):
        entry = parse_list_line("-rw-r--r--  1 owner group  1024 Jan  1 12:00 file.txt")
        assert entry == FileEntry(name="file.txt", size=1024, kind=EntryKind.FILE)

    def test_unix_directory(self):
        entry = parse_list_line("drwxr-xr-x  2 root root 4096 Jan  1  2024 GameDir1")
        assert entry == FileEntry(name="GameDir1", size=4096, kind=EntryKind.DIRECTORY)

    def test_unix_name_with_spaces(self):
        entry = parse_list_line("-rw-r--r--  1 owner group  20 Mar 14 09:30 annual report.pdf")
        assert entry.name == "annual report.pdf"

    def test_unix_without_group_column(self):
        entry = parse_list_line("-rw-r--r--  1 owner  512 Jan  1 12:00 nogroup.txt")
        assert entry == FileEntry(name="nogroup.txt", size=512, kind=EntryKind.FILE)

    def test_unix_symlink(self):
        entry = parse_list_line("lrwxrwxrwx  1 root root 7 Jan  1 12:00 latest -> v1.2.3")
        assert entry == FileEntry(name="latest", size=7, kind=EntryKind.OTHER)

    def test_dos_directory(self):
        entry = parse_list_line("01-01-24  12:00PM       <DIR>          Archive")
        assert entry == FileEntry(name="Archive", size=0, kind=EntryKind.DIRECTORY)

    def test_dos_file(self):
        entry = parse_list_line("01-01-2024  09:15AM             2048 data.bin")
        assert entry == FileEntry(name="data.bin", size=2048, kind=EntryKind.FILE)

    def test_unrecognized_line_is_other(self):
        entry = parse_list_line("something the parser cannot read")
        assert entry.kind == EntryKind.OTHER
        assert entry.name == "something the parser cannot read"

    @pytest.mark.parametrize("line", ["", "   ", "total 12"])
    def test_ignored_lines(self, line):
        assert parse_list_line(line) is None


class TestDirectoryLister:
    """Tests for DirectoryLister.list_files."""

    def test_list_files_mlsd(self, session, mock_ftp):
        """Test listing keeps server order and classifies entries."""
        mock_ftp.pwd.return_value = "/pub"
        mock_ftp.mlsd.return_value = iter([
            ("a.txt", {"type": "file", "size": "10"}),
            ("sub", {"type": "dir"}),
            ("latest", {"type": "OS.unix=slink:/pub/a.txt"}),
            ("b.txt", {"type": "file", "size": "20"}),
        ])

        entries = DirectoryLister(session).list_files("/pub")

        assert entries == [
            FileEntry(name="a.txt", size=10, kind=EntryKind.FILE),
            FileEntry(name="sub", size=0, kind=EntryKind.DIRECTORY),
            FileEntry(name="latest", size=0, kind=EntryKind.OTHER),
            FileEntry(name="b.txt", size=20, kind=EntryKind.FILE),
        ]
        mock_ftp.cwd.assert_called_once_with("/pub")
        mock_ftp.dir.assert_not_called()

    def test_falls_back_to_list_when_mlsd_rejected(self, session, mock_ftp):
        """Test LIST fallback when the server does not support MLSD."""
        mock_ftp.pwd.return_value = "/pub"
        mock_ftp.mlsd.side_effect = error_perm("500 Unknown command")

        def dir_side_effect(callback):
            lines = [
                "total 3",
                "-rw-r--r--  1 root root 10 Jan  1 12:00 a.txt",
                "drwxr-xr-x  2 root root 4096 Jan  1 12:00 sub",
                "-rw-r--r--  1 root root 20 Jan  1 12:00 b.txt",
            ]
            for line in lines:
                callback(line)

        mock_ftp.dir.side_effect = dir_side_effect

        entries = DirectoryLister(session).list_files("/pub")

        assert [(e.name, e.kind) for e in entries] == [
            ("a.txt", EntryKind.FILE),
            ("sub", EntryKind.DIRECTORY),
            ("b.txt", EntryKind.FILE),
        ]
        mock_ftp.dir.assert_called_once()

    def test_empty_directory(self, session, mock_ftp):
        """Test an empty directory lists as empty."""
        mock_ftp.pwd.return_value = "/empty"
        mock_ftp.mlsd.return_value = iter([])

        assert DirectoryLister(session).list_files("/empty") == []

    def test_navigation_failure_propagates_with_context(self, session, mock_ftp):
        """Test CWD failure keeps its type and gains context."""
        mock_ftp.cwd.side_effect = error_perm("550 No such directory")

        with pytest.raises(FTPNavigationError) as exc_info:
            DirectoryLister(session).list_files("/missing")

        error = exc_info.value
        assert error.path == "/missing"
        assert error.context == ["Unable to change current dir"]
        assert str(error).startswith("Unable to change current dir: ")
        assert isinstance(error.original_error, error_perm)
        mock_ftp.mlsd.assert_not_called()

    def test_listing_failure(self, session, mock_ftp):
        """Test a failed listing raises FTPPathError for the current dir."""
        mock_ftp.pwd.return_value = "/pub"
        mock_ftp.mlsd.side_effect = error_temp("425 Can't open data connection")

        with pytest.raises(FTPPathError) as exc_info:
            DirectoryLister(session).list_files("/pub")

        assert not isinstance(exc_info.value, FTPNavigationError)
        assert exc_info.value.path == "/pub"
        assert exc_info.value.operation == "list"

    def test_not_connected(self, closed_session, mock_ftp):
        """Test listing fails fast without a connection."""
        with pytest.raises(FTPNotConnectedError):
            DirectoryLister(closed_session).list_files("/pub")

        assert mock_ftp.method_calls == []
