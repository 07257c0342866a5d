"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from advisory_api.core.config import settings

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
_UUID_LEN = 36


def describe_path(path: str) -> tuple[str, str | None, str | None]:
    """Split an API path into ``(entity_type, entity_id, verb)``.

    ``/api/v1/advisory-documents/<uuid>/push`` → ``("advisory-document", "<uuid>", "push")``
    """
    parts = [p for p in path.strip("/").split("/") if p]
    for i, part in enumerate(parts):
        if len(part) == _UUID_LEN and i > 0:
            verb = parts[i + 1] if i + 1 < len(parts) else None
            return parts[i - 1].rstrip("s"), part, verb
    return (parts[-1].rstrip("s") if parts else "unknown"), None, None


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    The audit row is written in a background task after the response is
    produced, and audit failures are logged, never raised to the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            asyncio.create_task(self._record(request, response.status_code, duration_ms))

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        try:
            from advisory_api.db.base import async_session_factory
            from advisory_api.domain.audit import AuditTrail

            entity_type, entity_id, verb = describe_path(request.url.path)
            action = f"{request.method}:{status_code}"
            if verb:
                action = f"{verb}:{action}"

            async with async_session_factory() as session:
                session.add(
                    AuditTrail(
                        client_id=settings.default_client_id,
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=action,
                        entity_type=entity_type,
                        entity_id=entity_id,
                        description=f"{request.method} {request.url.path} → {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception as exc:  # pragma: no cover
            logger.warning("Audit record for %s %s failed: %s", request.method, request.url.path, exc)
