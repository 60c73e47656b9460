"""Domain exception types for pricing, versioning and the sales funnel."""


class PackageError(Exception):
    """Base class for all travel-package errors."""

    pass


class ValidationFailure(PackageError):
    """A required input is missing or empty.

    Raised before any write so that no partial state change happens.
    """

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        self.message = message or f"{field} is required"
        super().__init__(self.message)


class DuplicateClientError(PackageError):
    """A sales client with the same natural key already exists."""

    def __init__(self, client_id: object) -> None:
        self.client_id = client_id
        super().__init__(f"sales client already exists: {client_id}")


class AtomicityError(PackageError):
    """An atomic multi-record write could not be completed.

    Covers version-number races and fulfillment creation failures. Nothing
    was written; the caller may retry.
    """

    pass


class NotFoundError(PackageError):
    """A referenced client, version or checklist item does not exist."""

    pass


class InvalidTransitionError(PackageError):
    """The requested funnel transition is not allowed from the current status."""

    pass
