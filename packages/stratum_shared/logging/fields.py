"""Canonical logging field names for cross-layer consistency.

Keeping names centralized prevents drift between the orchestrator, the SQL
substrate and any presentation adapter that ships logs elsewhere.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Record operation fields.
DESCRIPTOR = "descriptor"
OPERATION = "operation"
RECORD_KEY = "record_key"
BATCH_SIZE = "batch_size"
READ_VERSION = "read_version"
STORED_VERSION = "stored_version"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
ERROR_CATEGORY = "error_category"
ERROR_CODE = "error_code"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
