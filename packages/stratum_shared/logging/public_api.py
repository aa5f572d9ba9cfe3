"""Invocation logging for public service API methods.

One decorator wraps every public orchestrator method so invocation and
completion events share a stable structured shape: component, API name,
referenced keys, duration, and the normalized error category on failure.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Mapping

from packages.stratum_shared.errors import exception_to_error

from . import fields
from .context import log_context


@dataclass(frozen=True)
class InvocationContext:
    """Structured metadata describing one public API invocation."""

    component_id: str
    api_name: str
    references: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CompletionContext:
    """Structured metadata describing one completed public API invocation."""

    invocation: InvocationContext
    success: bool
    duration_ms: float
    errors: list[str] = field(default_factory=list)
    error_category: str | None = None
    error_code: str | None = None


class PublicApiLoggingConcern:
    """Emit invocation and completion log records for decorated methods."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        """Emit standardized structured invocation-start log."""
        payload = _invocation_log_context(context)
        payload[fields.EVENT] = fields.PUBLIC_API_INVOCATION_EVENT
        with log_context(payload):
            self._logger.info("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        """Emit standardized structured completion log."""
        payload = _invocation_log_context(context.invocation)
        payload.update(
            {
                fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
                fields.SUCCESS: context.success,
                fields.DURATION_MS: context.duration_ms,
                fields.ERRORS: context.errors,
                fields.ERROR_CATEGORY: context.error_category,
                fields.ERROR_CODE: context.error_code,
            }
        )
        with log_context(payload):
            if context.success:
                self._logger.info("Public API completion")
            else:
                self._logger.warning("Public API completion")


def public_api_logged(
    *,
    logger: Any,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public API method with invocation/completion logging.

    ``id_fields`` names parameters whose values are attached to both events as
    references; positional and keyword arguments are both honored. Exceptions
    are logged with their normalized category and always re-raised.
    """
    concern = PublicApiLoggingConcern(logger=logger)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = InvocationContext(
                component_id=component_id,
                api_name=method_name,
                references=_references(signature, args, kwargs, id_fields),
            )
            concern.on_invocation(invocation)

            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                detail = exception_to_error(exc)
                concern.on_completion(
                    CompletionContext(
                        invocation=invocation,
                        success=False,
                        duration_ms=_elapsed_ms(started),
                        errors=[f"{type(exc).__name__}: {exc}"],
                        error_category=detail.category.value,
                        error_code=detail.code,
                    )
                )
                raise

            concern.on_completion(
                CompletionContext(
                    invocation=invocation,
                    success=True,
                    duration_ms=_elapsed_ms(started),
                )
            )
            return result

        return wrapper

    return decorator


def _references(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
    id_fields: tuple[str, ...],
) -> dict[str, str]:
    """Extract non-empty referenced argument values by parameter name."""
    if not id_fields:
        return {}
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return {}
    return {
        name: str(bound.arguments[name])
        for name in id_fields
        if bound.arguments.get(name) not in (None, "")
    }


def _invocation_log_context(context: InvocationContext) -> dict[str, object]:
    """Build base structured log fields for one invocation."""
    payload: dict[str, object] = {
        fields.COMPONENT_ID: context.component_id,
        fields.API_NAME: context.api_name,
    }
    payload.update(context.references)
    return payload


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000.0, 3)
