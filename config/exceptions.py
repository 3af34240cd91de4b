"""Custom exception hierarchy for ARP Scan.

Provides specific exceptions for different error categories, so the
entry point can tell a fatal setup problem from an isolated file problem.
"""

from typing import Optional


class ArpScanError(Exception):
    """Base exception for all ARP Scan errors.

    All custom exceptions in this application should inherit from this class.
    This allows catching all application-specific errors with a single except clause.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class SetupError(ArpScanError):
    """Errors detected before any frame is sent.

    Raised when there are issues with:
    - Finding the interface that carries the local address
    - A local address that is not IPv4
    - Invalid explicit range syntax
    - Invalid flag combinations

    Examples:
        >>> raise SetupError("Invalid IP range", {"range": "10.0.0.0/33"})
    """

    pass


class ChannelError(ArpScanError):
    """Link-layer channel errors.

    Raised when the raw frame channel cannot be opened on the interface
    or a frame cannot be transmitted.

    Examples:
        >>> raise ChannelError("Failed to create channel", {"interface": "eth0"})
    """

    pass


class FrameDecodeError(ArpScanError):
    """Inbound frame could not be parsed.

    Only raised by the strict frame parser; the public decoder catches it
    and reports the frame as "not a discovery event".
    """

    pass


class InventoryFileError(ArpScanError):
    """Label inventory file errors.

    Raised when there are issues with:
    - Reading the label file (other than it being absent)
    - Writing auto-populated entries back to it

    Examples:
        >>> raise InventoryFileError("Failed to update labels.txt", {"path": "labels.txt"})
    """

    pass


class HostsFileError(ArpScanError):
    """Hostname-mapping file errors.

    Raised when the hosts file is missing outside preview mode, or when it
    cannot be read or rewritten. Only the reconciliation step is aborted.
    """

    pass
