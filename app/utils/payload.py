import logging
from typing import Any, Dict

from fastapi import Request
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect

logger = logging.getLogger(__name__)


async def request_fields(request: Request) -> Dict[str, Any]:
    """
    Collect POST fields from either a JSON object body or form data.
    Anything unreadable yields an empty dict so callers fall through to their defaults.
    """
    content_type = request.headers.get("content-type", "").lower()
    if "application/json" in content_type:
        try:
            data = await request.json()
        except ValueError:
            # JSONDecodeError, UnicodeDecodeError and the integer digit limit all land here
            logger.debug("Ignoring malformed JSON body on %s", request.url.path)
            return {}
        return data if isinstance(data, dict) else {}
    try:
        form = await request.form()
    except (HTTPException, MultiPartException, ClientDisconnect):
        logger.debug("Ignoring unreadable form body on %s", request.url.path)
        return {}
    return {key: value for key, value in form.items() if isinstance(value, str)}
