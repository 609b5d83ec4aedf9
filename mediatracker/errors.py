"""Error kinds raised by the service layer.

Routers never build error responses for these themselves; the handlers
registered in ``main.py`` translate each kind to its status code.
"""


class MediaTrackerError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MediaTrackerError):
    status_code = 400


class NotFoundError(MediaTrackerError):
    status_code = 404


class StorageError(MediaTrackerError):
    status_code = 500
