# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Service error taxonomy shared by all domains.

Routes map these to HTTP responses:
- NotFoundError -> 404
- ConflictError -> 409
- ForbiddenError -> 403 with the error's stable ``code`` as detail
- InvalidInputError -> 400
- UpstreamUnavailableError never reaches a route; it is logged and
  swallowed where it is raised.
"""


class ServiceError(Exception):
    """Base exception for service errors."""

    pass


class NotFoundError(ServiceError):
    """Raised when an identity, question or session lookup finds nothing."""

    pass


class ConflictError(ServiceError):
    """Raised on a store-level write conflict that survived one retry."""

    pass


class InvalidInputError(ServiceError):
    """Raised for malformed input such as an empty topic or message."""

    pass


class UpstreamUnavailableError(ServiceError):
    """Raised when an external collaborator cannot be reached."""

    pass


class ForbiddenError(ServiceError):
    """Raised when a request is refused by policy.

    Attributes:
        code: Stable, caller-visible reason.
    """

    code = "forbidden"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class BannedError(ForbiddenError):
    """Raised when the identity or address is banned."""

    code = "banned"


class SessionClosedError(ForbiddenError):
    """Raised when a message is posted to an ended chat session.

    Terminal: retrying will never succeed.
    """

    code = "session closed"


class AdminRequiredError(ForbiddenError):
    """Raised when a non-admin identity calls an admin operation."""

    code = "admin access required"
