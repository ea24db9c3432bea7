from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse

from packages.mis_core.errors import MISBaseError
from packages.mis_core.request_id import get_request_id

logger = logging.getLogger("MIS.error_handler")


async def mis_exception_handler(request: Request, exc: MISBaseError) -> JSONResponse:
    """Turn an MISBaseError into the standard error response."""

    # 5xx errors carry the traceback in the log
    if exc.status_code >= 500:
        logger.exception(f"Unhandled MISBaseError: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"MISBaseError ({exc.code}): {exc.message}")

    content = {
        "error": {
            "code": exc.code,
            "message": exc.message,
            "detail": exc.details,
        },
        "request_id": get_request_id(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
    )
