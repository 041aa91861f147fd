"""Application exception hierarchy.

Every error the API layer is expected to render derives from AppException and
carries its HTTP status. Scoring-delegate failures are not part of it: the
comment scorer absorbs them and falls back to its heuristic.
"""


class AppException(Exception):
    def __init__(self, status_code: int, detail: str, error_type: str = "about:blank"):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.error_type = error_type


class InvalidRequestError(AppException):
    """Malformed input rejected before any storage access."""

    def __init__(self, detail: str):
        super().__init__(400, detail, error_type="invalid_request")


class NotFoundError(AppException):
    def __init__(self, resource: str, resource_id: object):
        super().__init__(404, f"{resource} {resource_id} not found", error_type="not_found")
        self.resource = resource
        self.resource_id = resource_id


class StorageError(AppException):
    """Connection, transaction or constraint failure in the relational store."""

    def __init__(self, detail: str = "Storage operation failed"):
        super().__init__(503, detail, error_type="storage_failure")


class ExternalServiceError(AppException):
    def __init__(self, service: str, detail: str):
        super().__init__(502, f"{service}: {detail}", error_type="external_service_failure")
        self.service = service
