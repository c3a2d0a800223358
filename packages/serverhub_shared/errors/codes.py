"""Shared error code constants.

These constants are stable machine-readable identifiers recorded in audit
metadata and structured logs. Component-specific codes live here too so the
audit trail can be queried by code without importing component modules.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"

# Not found
NOT_FOUND = "NOT_FOUND"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

# Conflict
CONFLICT = "CONFLICT"
ALREADY_EXISTS = "ALREADY_EXISTS"

# Policy / authorization
POLICY_VIOLATION = "POLICY_VIOLATION"
PERMISSION_DENIED = "PERMISSION_DENIED"

# Dependency / external system
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_TIMEOUT = "DEPENDENCY_TIMEOUT"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"

# Command execution gateway
COMMAND_SPAWN_FAILED = "COMMAND_SPAWN_FAILED"
COMMAND_NOT_ALLOWED = "COMMAND_NOT_ALLOWED"
IDENTITY_SWITCH_REJECTED = "IDENTITY_SWITCH_REJECTED"

# Saga orchestration
UNKNOWN_TRANSACTION = "UNKNOWN_TRANSACTION"
TRANSACTION_STATE = "TRANSACTION_STATE"
SNAPSHOT_FAILED = "SNAPSHOT_FAILED"

# Audit bookkeeping
OPERATION_STATE = "OPERATION_STATE"

# Provisioning workflows
PROVISIONING_FAILED = "PROVISIONING_FAILED"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
