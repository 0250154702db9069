"""Errors raised by catalog services.

Routes translate these into HTTP responses; each carries a ``kind`` that is
echoed back to the client alongside the human-readable message.
"""


class CatalogError(Exception):
    """Base class for lookup-pipeline failures."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind}


class MissingParameterError(CatalogError):
    """Neither an ISBN nor a free-text query was supplied."""

    kind = "missing_parameter"
    status_code = 400


class BookNotFoundError(CatalogError):
    """The catalog returned zero results for a valid ISBN."""

    kind = "not_found"
    status_code = 404


class UpstreamError(CatalogError):
    """Transport failure, non-2xx response or malformed payload from a collaborator."""

    kind = "upstream_error"
    status_code = 500


class DecodeError(UpstreamError):
    """The barcode engine failed on a frame."""
