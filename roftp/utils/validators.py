"""Input validators for roftp.

Provides validation functions for session inputs like hosts, ports
and timeouts.
"""

from typing import Optional, Tuple


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host.

    Only emptiness and embedded whitespace are checked here. Anything
    else (IPv6 literals, underscores, trailing dots) is left to the
    resolver, and unresolvable hosts surface when connecting.

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    if any(ch.isspace() for ch in host.strip()):
        return False, f"Invalid host: {host!r} contains whitespace"

    return True, None

def validate_port(port) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number given as int or string.

    Args:
        port: Port number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(port, bool):
        return False, "Port must be a number"

    if not isinstance(port, int):
        try:
            port = int(str(port).strip())
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if port < 1 or port > 65535:
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def validate_timeout(timeout: Optional[float]) -> Tuple[bool, Optional[str]]:
    """
    Validate a socket timeout in seconds. None means no timeout.

    Args:
        timeout: Timeout in seconds, or None

    Returns:
        Tuple of (is_valid, error_message)
    """
    if timeout is None:
        return True, None

    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        return False, "Timeout must be a number"

    if timeout <= 0:
        return False, f"Timeout must be positive, got {timeout}"

    return True, None
