"""User-facing message builders keyed by entity descriptor."""

from __future__ import annotations


def entity_not_found(descriptor: str) -> str:
    """Message for a lookup by key that found nothing."""
    return f"{descriptor} entity was not found"


def entity_already_exists(descriptor: str) -> str:
    """Message for a create colliding with an existing row."""
    return f"{descriptor} entity already exists"


def identifier_must_be_null(descriptor: str) -> str:
    return f"the identifier of the {descriptor} entity must be null"


def identifier_must_not_be_null(descriptor: str) -> str:
    return f"the identifier of the {descriptor} entity must not be null"


def version_must_not_be_null(descriptor: str) -> str:
    return f"the version of the {descriptor} entity must not be null"


def duplicate_identifier(descriptor: str, key: object) -> str:
    return f"the identifier {key} of the {descriptor} entity appears more than once"


def version_conflict(
    descriptor: str, key: object, read_version: int, stored_version: int
) -> str:
    """Message for an optimistic-lock rejection."""
    return (
        f"{descriptor} entity {key} was modified concurrently: "
        f"read version {read_version}, stored version {stored_version}"
    )


def entity_not_written(descriptor: str) -> str:
    return f"the {descriptor} entity could not be written"
