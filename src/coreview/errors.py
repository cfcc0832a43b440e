"""Run-level failures. Addressing problems in the narration never raise."""


class CoreviewError(Exception):
    """Base class for errors that end a review run."""


class DiffSourceError(CoreviewError):
    """The diff text could not be obtained (git or GitHub)."""


class DiffTooLargeError(CoreviewError):
    """The diff has more lines than the configured ceiling."""

    def __init__(self, line_count: int, limit: int):
        super().__init__(f"Diff too large ({line_count} lines, max {limit}).")
        self.line_count = line_count
        self.limit = limit


class NarrationError(CoreviewError):
    """The narration engine failed mid-run."""


class ProviderNotFoundError(CoreviewError):
    """No narration provider is registered under the requested name."""
