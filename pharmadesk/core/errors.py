class PharmacyError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(PharmacyError):
    status_code = 404


class ValidationError(PharmacyError):
    status_code = 400


class UpstreamStorageError(PharmacyError):
    """The database rejected a read or write; detail stays generic."""

    status_code = 500


__all__ = ["NotFoundError", "PharmacyError", "UpstreamStorageError", "ValidationError"]
