"""Exceptions raised by provisioning workflows."""

from __future__ import annotations

from packages.serverhub_shared.errors import ErrorCategory, ServerHubError, codes


class ProvisioningError(ServerHubError):
    """A provisioning step failed; the message is shown to the caller."""

    code = codes.PROVISIONING_FAILED
    category = ErrorCategory.DEPENDENCY


class ResourceConflictError(ServerHubError):
    """The requested resource already exists."""

    code = codes.ALREADY_EXISTS
    category = ErrorCategory.CONFLICT


class ResourceNotFoundError(ServerHubError):
    """The referenced resource record does not exist."""

    code = codes.RESOURCE_NOT_FOUND
    category = ErrorCategory.NOT_FOUND
