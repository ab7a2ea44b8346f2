"""Error types raised by the SmartDiet engine."""


class SmartDietError(Exception):
    """Base error carrying a machine-readable kind and a readable detail."""

    kind = "error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, str]:
        """Return the error as a structured payload."""
        return {"kind": self.kind, "detail": self.detail}


class InvalidInputError(SmartDietError):
    """Raised for blank descriptions or non-positive body metrics."""

    kind = "invalid_input"


class AnalysisFailedError(SmartDietError):
    """Raised when a meal analysis request cannot produce a valid result."""

    kind = "analysis_failed"


class PersistenceUnavailableError(SmartDietError):
    """Raised when the storage backend does not acknowledge a write."""

    kind = "persistence_unavailable"
