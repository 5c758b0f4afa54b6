"""Mapping of lifecycle command outcomes to RFC 7807 HTTP errors."""

from fastapi import HTTPException, Request

from bluecarbon.application.services.lifecycle_controller import (
    CommandOutcome,
    CommandResult,
)

_PROBLEMS: dict[CommandOutcome, tuple[int, str, str]] = {
    CommandOutcome.NOT_FOUND: (404, "not-found", "Not Found"),
    CommandOutcome.FORBIDDEN: (403, "forbidden", "Forbidden"),
    CommandOutcome.INVALID_TRANSITION: (
        409,
        "invalid-transition",
        "Invalid Status Transition",
    ),
    CommandOutcome.CONFLICT: (409, "conflict", "Conflict"),
}


def problem(
    request: Request, status: int, slug: str, title: str, detail: str
) -> HTTPException:
    """Build an HTTPException with an RFC 7807 body."""
    return HTTPException(
        status_code=status,
        detail={
            "type": f"urn:bluecarbon:registry:{slug}",
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
        },
    )


def raise_for_result(result: CommandResult, request: Request) -> None:
    """Raise the HTTP error matching a non-applied command result."""
    if result.applied:
        return
    status, slug, title = _PROBLEMS[result.outcome]
    raise problem(request, status, slug, title, result.detail or title)
