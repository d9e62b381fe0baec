"""Exceptions raised by the auto-merger components."""


class MergeBotError(Exception):
    """Base exception for all auto-merger errors."""


class EndOfList(MergeBotError):
    """Raised by a paged sequence once every item has been returned."""

    def __init__(self) -> None:
        super().__init__("end of list")


class MissingCheckError(MergeBotError):
    """A required check has not reported a conclusion yet."""

    def __init__(self, checks: list[str]) -> None:
        self.checks = checks
        if checks:
            detail = ", ".join(checks)
        else:
            detail = "no required checks configured"
        super().__init__(f"check missing: {detail}")


class FailedCheckError(MergeBotError):
    """A required check concluded with a failure."""

    def __init__(self, checks: list[str]) -> None:
        self.checks = checks
        super().__init__(f"check failed: {', '.join(checks)}")


class TransportError(MergeBotError):
    """Raised when a call to the GitHub API fails.

    Parameters
    ----------
    message : str
        Description of the failure.
    command : list[str] or None, optional
        The command that was executed, if any.
    stderr : str, optional
        Error output captured from the command.

    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str = "",
    ) -> None:
        self.message = message
        self.command = command
        self.stderr = stderr
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class PreconditionError(MergeBotError):
    """A pull request is not in a state that allows merging."""


class MergeError(MergeBotError):
    """The platform answered the merge request but did not merge."""

    def __init__(self, number: int, message: str) -> None:
        self.number = number
        self.message = message
        super().__init__(f"unable to merge #{number} via squash method: {message}")
