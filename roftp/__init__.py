"""roftp - a small FTP client facade.

Subpackages:
- ftp: Session, navigation, listing, transfers and batch download
- utils: Logging with PII redaction and input validators
"""

__version__ = "0.3.0"
