# fitplan/errors.py


class StoreError(Exception):
    """Raised by the row store when a backend call fails."""


class ServiceError(Exception):
    """
    Error surfaced to the client as-is.

    `message` is the human text shown in the notification, `status` the
    HTTP status and `extra` any payload the page needs to recover
    (e.g. the reloaded board after a failed move).
    """

    def __init__(self, message, status=400, error=None, extra=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.error = error
        self.extra = extra or {}

    def to_dict(self):
        payload = {"message": self.message}
        if self.error:
            payload["error"] = self.error
        payload.update(self.extra)
        return payload


class NotFound(ServiceError):
    def __init__(self, what):
        super().__init__(f"{what} not found", status=404)


class ValidationError(ServiceError):
    def __init__(self, message):
        super().__init__(message, status=400)
