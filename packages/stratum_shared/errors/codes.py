"""Shared error code constants.

These constants are entity-agnostic and intended for stable machine-readable
handling across services. Entity-specific codes should extend this set in local
service modules rather than modifying shared constants for one record type.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

# Not found
NOT_FOUND = "NOT_FOUND"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

# Conflict
CONFLICT = "CONFLICT"
ALREADY_EXISTS = "ALREADY_EXISTS"
CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"

# Dependency resolution
RESOLUTION_FAILURE = "RESOLUTION_FAILURE"
DEPENDENCY_NOT_FOUND = "DEPENDENCY_NOT_FOUND"
TYPE_MISMATCH = "TYPE_MISMATCH"

# Dependency / external system
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_TIMEOUT = "DEPENDENCY_TIMEOUT"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"
PROJECTION_FAILURE = "PROJECTION_FAILURE"
ASSEMBLY_FAILURE = "ASSEMBLY_FAILURE"
