class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTimeFormat(ValidationError):
    """Raised by strict parsing when a time is not HH:MM."""


class ClosedJustification(DomainError):
    """Raised when a justification is submitted after a final decision."""


class SessionNeutralizedError(DomainError):
    """Raised when absences are captured for a session that did not take place."""

    def __init__(self, reason: str):
        super().__init__(f"Session neutralized: {reason}")
        self.reason = reason
