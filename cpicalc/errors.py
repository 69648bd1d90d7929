"""Error taxonomy for CPI retrieval and rate computation."""

from __future__ import annotations


class CPIError(RuntimeError):
    """Base class for failures surfaced to the user as text."""


class ValidationError(CPIError):
    """Raised when the selected months are missing or out of order."""


class HttpError(CPIError):
    """Raised when a statistics API answers with a non-2xx status."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"HTTP error! Status: {status}")


class DataUnavailable(CPIError):
    """The provider returned an empty body: the month is not published yet."""

    def __init__(self) -> None:
        super().__init__(
            "CPI data not available for the selected month. "
            "It may be too far in the future."
        )


class ObservationNotFound(CPIError):
    def __init__(self) -> None:
        super().__init__("CPI data not found for the specified month.")


class NoDataFound(CPIError):
    def __init__(self) -> None:
        super().__init__("No CPI data found for the specified period.")


class NoVersionFound(CPIError):
    def __init__(self) -> None:
        super().__init__("No versions found")


class InvalidIndexError(CPIError):
    """Raised when a start index cannot anchor a percentage change."""
