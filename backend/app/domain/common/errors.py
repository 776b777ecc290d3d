"""Domain error types.

Every error carries the HTTP status and a stable error code so the API layer
can map it to a response without inspecting the type.
"""


class DomainError(Exception):
    """Base domain error."""

    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str = ""):
        self.message = message or self.code.replace("_", " ")
        super().__init__(self.message)


class InvalidInputError(DomainError):
    """Malformed or missing request fields."""

    status_code = 400
    code = "invalid_input"


class RegistrationGateError(DomainError):
    """Pre-shared registration check failed."""

    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class MissingCredentialsError(DomainError):
    """One or more security headers are absent."""

    status_code = 401
    code = "missing_credentials"


class StaleRequestError(DomainError):
    """Request timestamp is outside the accepted window."""

    status_code = 401
    code = "stale_request"


class BadSignatureError(DomainError):
    """HMAC signature does not match the request."""

    status_code = 401
    code = "bad_signature"


class InvalidDeviceError(DomainError):
    """Device credential is unknown."""

    status_code = 403
    code = "invalid_device"


class DeviceDisabledError(DomainError):
    """Device exists but is not active."""

    status_code = 403
    code = "device_disabled"


class ReplayDetectedError(DomainError):
    """Nonce was already used by an earlier request."""

    status_code = 409
    code = "replay_detected"


class NotFoundError(DomainError):
    """Resource not found."""

    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, identifier: str = ""):
        self.resource = resource
        self.identifier = identifier
        if identifier:
            super().__init__(f"{resource} with id {identifier} not found")
        else:
            super().__init__(f"{resource} not found")


class StorageFailureError(DomainError):
    """Persistent store failed for a reason other than a uniqueness violation."""

    status_code = 500
    code = "storage_failure"

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message)
