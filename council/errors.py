"""Exception types surfaced by the council pipeline."""


class CouncilError(Exception):
    """Base class for pipeline failures reported to the caller."""


class InputValidationError(CouncilError, ValueError):
    """Raised before any model call when the request cannot be run."""


class ChairmanError(CouncilError):
    """Raised when the chairman cannot produce the final answer."""

    def __init__(self, model: str, message: str) -> None:
        self.model = model
        super().__init__(f"Chairman {model} failed: {message}")


class TitleError(CouncilError):
    """Raised when title generation fails. Never fatal to a run."""
