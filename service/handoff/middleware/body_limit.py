import json
from typing import Any

from fastapi import HTTPException, Request

from handoff.config import get_settings


async def read_json_body(request: Request) -> Any:
    """
    Read and decode a JSON request body no larger than max_body_bytes.

    Raises:
        HTTPException 413: body over the limit
        HTTPException 400: body is not valid JSON
    """
    limit = get_settings().max_body_bytes

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail="Payload too large")

    body = b""
    async for chunk in request.stream():
        body += chunk
        if len(body) > limit:
            raise HTTPException(status_code=413, detail="Payload too large")

    if not body:
        return {}

    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON")
