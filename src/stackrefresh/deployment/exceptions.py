"""stackrefresh exception hierarchy.

All exceptions inherit from StackRefreshError. Only EnumerationError is
fatal to a run; CommandExecutionError is handled per container.
"""


class StackRefreshError(Exception):
    """Base exception for all stackrefresh errors.

    Attributes:
        message: Human-readable error description
        technical_details: Additional debugging information
    """

    def __init__(self, message: str, technical_details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.technical_details = technical_details or {}


class EnumerationError(StackRefreshError):
    """Listing running containers failed.

    Raised when the enumeration tool is missing or exits non-zero. Without a
    target list the run cannot proceed.
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        technical_details: dict | None = None,
    ) -> None:
        details = technical_details or {}
        if command:
            details["command"] = " ".join(command)
        super().__init__(message, details)
        self.command = command or []


class CommandExecutionError(StackRefreshError):
    """A command could not be launched inside a container.

    Raised when the attach tool itself cannot be started. A command that
    runs and exits non-zero is reported through its CommandResult instead.
    """

    def __init__(
        self,
        message: str,
        environment: str,
        command: list[str] | None = None,
        technical_details: dict | None = None,
    ) -> None:
        details = technical_details or {}
        details["environment"] = environment
        if command:
            details["command"] = " ".join(command)
        super().__init__(message, details)
        self.environment = environment
        self.command = command or []
