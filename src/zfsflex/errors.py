from typing import List, Optional


class DriverError(Exception):
    """Base class for every failure reported through the result record.

    Each subclass carries the process exit code the driver terminates with.
    """

    exit_code = -4

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(DriverError):
    """Malformed JSON payload or size string."""

    exit_code = -1


class UsageError(DriverError):
    """Missing positional arguments or unknown command."""

    exit_code = -2


class ConflictError(DriverError):
    """Existing state contradicts the request."""

    exit_code = -3


class DeviceMismatchError(ConflictError):
    exit_code = -6


class BackendError(DriverError):
    """The ZFS backend failed for a reason other than a missing dataset."""


class HostIOError(DriverError):
    """Local filesystem access failed (mount table, mount point creation)."""


class ValidationError(DriverError):
    """Missing or contradictory request fields."""

    exit_code = -5


class CommandError(DriverError):
    """An external mount/umount invocation failed."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.output = output
