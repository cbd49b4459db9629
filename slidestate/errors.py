"""Errors raised while turning a saved document into an AppState."""


class MigrationError(ValueError):
    """A document did not have the shape its migration path expects."""


class DocumentError(MigrationError):
    """The saved file parsed, but is not a JSON object."""
