"""
Domain exceptions - Infrastructure failures surfaced to callers.

Expected outcomes are reported through ResultStatus. These exceptions
cover conditions the repository layer cannot translate into a status:
connection loss, timeouts and constraint violations. The original
driver error is always attached as __cause__.
"""


class RepositoryError(Exception):
    """Persistence failed for an infrastructure reason."""

    pass


class DuplicateRecordError(RepositoryError):
    """A unique constraint (username, email or token) was violated."""

    pass
