"""Exceptions raised by the Audit Trail Recorder."""

from __future__ import annotations

from packages.serverhub_shared.errors import ErrorCategory, ServerHubError, codes


class OperationStateError(ServerHubError):
    """An operation id was started twice or finalized while not pending."""

    code = codes.OPERATION_STATE
    category = ErrorCategory.CONFLICT

    def __init__(self, message: str, *, operation_id: str) -> None:
        super().__init__(message)
        self.operation_id = operation_id
