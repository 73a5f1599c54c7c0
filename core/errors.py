"""Exception types raised by stegtool.

Tool outcomes (skipped, timeout, warning, error) are result statuses, not
exceptions; see core.models.ToolStatus.
"""


class StegtoolError(Exception):
    """Base class for stegtool failures."""


class ValidationError(StegtoolError):
    """Input file is missing, unreadable, empty, oversized or policy-rejected."""

    def __init__(self, path, reason):
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class WorkspaceError(StegtoolError):
    """Output directory or file could not be created."""


class InvocationError(StegtoolError):
    """A tool invocation was described with missing parameters."""


class AnalysisAborted(StegtoolError):
    """The operator chose to quit after an interrupt."""


class RestartRequested(StegtoolError):
    """The operator chose to restart after an interrupt."""
