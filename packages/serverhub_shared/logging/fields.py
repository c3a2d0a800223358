"""Canonical logging field names for cross-component consistency.

These constants define a stable key set for structured logs and context
propagation. Keeping names centralized prevents drift between the gateway,
the saga engine, the audit recorder and the workflows that compose them.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Correlation fields.
TRANSACTION_ID = "transaction_id"
OPERATION_ID = "operation_id"
ACTOR_ID = "actor_id"

# Command execution fields.
PROGRAM = "program"
RUN_AS = "run_as"
EXIT_CODE = "exit_code"
DURATION_MS = "duration_ms"
SUCCESS = "success"

# Audit fields.
AUDIT_ID = "audit_id"
OPERATION_TYPE = "operation_type"
RESOURCE_TYPE = "resource_type"
RESOURCE_NAME = "resource_name"
SEVERITY = "severity"

# Saga lifecycle events.
SAGA_STARTED_EVENT = "saga_started"
SAGA_COMMITTED_EVENT = "saga_committed"
SAGA_ROLLED_BACK_EVENT = "saga_rolled_back"
SAGA_COMPENSATION_FAILED_EVENT = "saga_compensation_failed"
AUDIT_WRITE_FAILED_EVENT = "audit_write_failed"
AUDIT_RECORD_EVENT = "audit_record"
COMMAND_EXECUTED_EVENT = "command_executed"
ERRORS = "errors"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
