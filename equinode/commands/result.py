"""
Result utilities for consistent per-node outcome shapes.

Every planned node ends up as exactly one result dictionary so the create
command can summarise a run without re-inspecting the filesystem or runtime.
"""

from typing import Any, Optional

from equinode.commands.errors import EquinodeError

STATUS_CREATED = "created"
STATUS_PREVIEWED = "previewed"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


def ok(node: str, status: str = STATUS_CREATED, **extras: Any) -> dict[str, Any]:
    """Standard success result shape for a node."""
    result: dict[str, Any] = {"success": True, "node": node, "status": status}
    if extras:
        result.update(extras)
    return result


def fail(
    node: str,
    message: str,
    *,
    status: str = STATUS_FAILED,
    error: Optional[Exception] = None,
    **extras: Any,
) -> dict[str, Any]:
    """Standard failure result shape for a node.

    For EquinodeError subclasses the error type, code and details are
    included at the top level for convenience.
    """
    result: dict[str, Any] = {
        "success": False,
        "node": node,
        "status": status,
        "error": message,
    }
    if error is not None:
        result.update(format_error(error))
    if extras:
        result.update(extras)
    return result


def format_error(error: Exception) -> dict[str, Any]:
    """Flatten an exception into error_type/error_code/error_details keys."""
    formatted: dict[str, Any] = {"error_type": type(error).__name__}
    if isinstance(error, EquinodeError):
        if error.code:
            formatted["error_code"] = error.code
        if error.details:
            formatted["error_details"] = error.details
    return formatted
