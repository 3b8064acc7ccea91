"""
Failure policy for dashboard operations.

Public dashboard operations degrade to a usable default instead of raising:
the failure is logged (WARNING, or ERROR with traceback for critical
operations) and a fallback is returned.

    @dashboard_operation("read roles sheet", component="listings", fallback_factory=list)
    def list_open_roles(self): ...

    safe_execute(forms.batch_update, form_id, requests, operation_name="enable email collection")

    with log_on_exception(logger, "config store read"):
        collection.find_one(...)
"""

import logging
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Iterator, Optional, TypeVar

T = TypeVar("T")


def _log_failure(logger: logging.Logger, label: str, error: Exception, critical: bool) -> None:
    logger.log(
        logging.ERROR if critical else logging.WARNING,
        f"{label} ✗ Failed: {error}",
        exc_info=True if critical else None,
    )


def dashboard_operation(
    operation_name: str,
    component: str = "dashboard",
    critical: bool = False,
    log_success: bool = False,
    fallback_value: Any = None,
    fallback_factory: Optional[Callable[[], Any]] = None,
):
    """
    Decorate an operation so it logs failures and returns a fallback.

    Args:
        operation_name: What the operation does, for the log line
        component: Dashboard component tag ("listings", "form", ...)
        critical: ERROR with traceback instead of WARNING
        log_success: Also log successful completion at INFO
        fallback_value: Returned on failure
        fallback_factory: Builds the fallback on failure (for lists, dicts, dataclasses)
    """
    label = f"[{component}] [{operation_name}]"

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        logger = logging.getLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_failure(logger, label, e, critical)
                return fallback_factory() if fallback_factory is not None else fallback_value
            if log_success:
                logger.info(f"{label} ✓ Completed successfully")
            return result

        return wrapper

    return decorator


@contextmanager
def log_on_exception(
    logger: logging.Logger,
    operation: str,
    level: int = logging.WARNING,
    include_traceback: bool = False,
) -> Iterator[None]:
    """Log an exception raised inside the block, then let it propagate."""
    try:
        yield
    except Exception as e:
        logger.log(level, f"[{operation}] Failed: {e}", exc_info=include_traceback)
        raise


def safe_execute(
    func: Callable[..., T],
    *args,
    operation_name: str = "operation",
    logger: Optional[logging.Logger] = None,
    fallback: T = None,
    critical: bool = False,
    **kwargs,
) -> T:
    """One-off call with the dashboard_operation policy: result, or fallback on error."""
    try:
        return func(*args, **kwargs)
    except Exception as e:
        _log_failure(logger or logging.getLogger(__name__), f"[{operation_name}]", e, critical)
        return fallback
