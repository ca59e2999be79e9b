"""Shared exceptions for service layer operations."""


class ResourceNotFoundError(Exception):
    """Raised when a board, column, or card id does not exist."""

    def __init__(self, resource: str, resource_id: int) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found")


class ResourceForbiddenError(Exception):
    """
    Raised when a resource exists but belongs to a different user.

    Resource ids are sequential and not treated as secret, so foreign
    resources are reported as forbidden rather than hidden behind a 404.
    """

    def __init__(self, resource: str, resource_id: int) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__("Unauthorized")
