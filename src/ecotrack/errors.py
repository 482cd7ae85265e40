"""Domain exceptions raised by the service layer.

Routers never catch these; the global handlers in
``ecotrack.middleware.error_handler`` translate them to HTTP responses.
"""

from __future__ import annotations


class EcoTrackError(Exception):
    """Base class for service-layer errors."""

    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(EcoTrackError):
    """A referenced row does not exist (or no longer satisfies its precondition)."""

    status_code = 404


class ConflictError(EcoTrackError):
    """The request collides with existing state (duplicate, already owned, ...)."""

    status_code = 400


class StorageError(EcoTrackError):
    """Any store failure that is not otherwise classified."""

    status_code = 500


class SchemaDriftError(EcoTrackError):
    """An expected column is missing from the live schema.

    Only raised inside ``ecotrack.db.schema`` and always recovered there.
    """
