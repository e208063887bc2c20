class TrackerError(Exception):
    """Base for errors that are reported to the client as-is."""

    status_code = 400
    reason = "bad_request"

    def __init__(self, message: str, reason: str = None):
        self.message = message
        if reason is not None:
            self.reason = reason
        super().__init__(message)


class Unauthorized(TrackerError):
    status_code = 401
    reason = "unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidCredentials(TrackerError):
    # Same message whether the user is missing or the password is wrong.
    status_code = 401
    reason = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid credentials")


class Forbidden(TrackerError):
    status_code = 403
    reason = "forbidden"

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class DuplicateUsername(TrackerError):
    reason = "duplicate_username"

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists")


class ProtectedAccount(TrackerError):
    reason = "protected_account"

    def __init__(self, message: str = "Cannot delete primary admin"):
        super().__init__(message)


class InvalidCurrentPassword(TrackerError):
    reason = "invalid_current_password"

    def __init__(self):
        super().__init__("Invalid current password")


class NotFound(TrackerError):
    status_code = 404
    reason = "not_found"


class InvalidRecordState(TrackerError):
    status_code = 409

    def __init__(self, record_id: int, reason: str):
        self.record_id = record_id
        messages = {
            "record_not_trashed": f"Record {record_id} must be in trash before it can be purged",
            "record_trashed": f"Record {record_id} is in trash; restore it before editing",
        }
        super().__init__(messages.get(reason, f"Record {record_id} is in the wrong state"), reason)
