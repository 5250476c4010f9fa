"""
Pairing Domain Exceptions

Services raise these instead of HTTPException so they stay usable outside
a request. app.main maps each class to its HTTP status code.
"""


class PairingError(Exception):
    """Base exception for all pairing workflow errors."""

    status_code = 500
    code = "PAIRING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"detail": self.message, "code": self.code}


class PairingInputError(PairingError):
    """Malformed request, missing manual pairs, or not enough eligible players. Not retryable."""

    status_code = 400
    code = "PAIRING_INPUT_INVALID"


class PairingNotFound(PairingError):
    """Unknown match or pairing record."""

    status_code = 404
    code = "PAIRING_NOT_FOUND"


class InvalidPairingState(PairingError):
    """Transition not legal from the record's current status."""

    status_code = 400
    code = "PAIRING_INVALID_STATE"


class PairingConflict(PairingError):
    """Stored status changed underneath the caller. Safe to retry after re-reading."""

    status_code = 409
    code = "PAIRING_CONFLICT"


class PairingStorageError(PairingError):
    """Transient database failure; the transaction was rolled back."""

    status_code = 503
    code = "PAIRING_STORAGE_UNAVAILABLE"
