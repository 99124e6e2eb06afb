class InvalidProblemError(ValueError):
    """Raised when a problem cannot be converted to standard form."""


class VerificationError(RuntimeError):
    """Raised when an optimal tableau fails re-validation against the original constraints."""

    def __init__(self, violations):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "verification failed")
