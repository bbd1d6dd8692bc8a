from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected domain failures.

    Services raise these internally and turn them into `{success: false, error}` results at the
    operation boundary. The message is shown to the caller verbatim.
    """


class EntityNotFoundError(ServiceError):
    def __init__(self, entity: str) -> None:
        super().__init__(f"{entity} Not Found")
        self.entity = entity


class ForbiddenError(ServiceError):
    """The actor may not see, or may not change, the target entity."""


class ConflictError(ServiceError):
    """The request clashes with existing state (duplicate email, order already taken)."""
