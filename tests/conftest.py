"""Pytest configuration and shared fixtures for roftp tests."""

import pytest
from pathlib import Path
from unittest.mock import MagicMock, patch

from roftp.ftp.connection import FTPSession, SessionOptions


# Test constants
TEST_FTP_HOST = "192.168.1.100"
TEST_FTP_PORT = "2121"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


@pytest.fixture
def session_options() -> SessionOptions:
    """Provide valid session options for tests."""
    return SessionOptions(
        host=TEST_FTP_HOST,
        port=TEST_FTP_PORT,
        username=TEST_FTP_USER,
        password=TEST_FTP_PASS,
        verbose=False,
    )


@pytest.fixture
def mock_ftp():
    """Patch ftplib.FTP inside the session module and yield the instance."""
    with patch("roftp.ftp.connection.FTP") as mock_ftp_class:
        ftp = MagicMock()
        mock_ftp_class.return_value = ftp
        yield ftp


@pytest.fixture
def session(mock_ftp, session_options) -> FTPSession:
    """Provide an authenticated session backed by the mocked FTP object."""
    ftp_session = FTPSession()
    ftp_session.connect(session_options)
    mock_ftp.reset_mock()
    return ftp_session


@pytest.fixture
def closed_session(mock_ftp, session_options) -> FTPSession:
    """Provide a session that was connected and then quit."""
    ftp_session = FTPSession()
    ftp_session.connect(session_options)
    ftp_session.quit()
    mock_ftp.reset_mock()
    return ftp_session


@pytest.fixture
def sample_upload_file(tmp_path: Path) -> Path:
    """Create a small local file to upload."""
    upload_file = tmp_path / "report.csv"
    upload_file.write_bytes(b"id,value\n1,10\n2,20\n")
    return upload_file
