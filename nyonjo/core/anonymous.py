"""Anonymous visitor identity used to scope likes and reactions without login."""
import base64
import random
import string
import time
from typing import Optional

from fastapi import Header, Request

ANONYMOUS_PREFIX = "anon_"
_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_anonymous_id() -> str:
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=7))
    return f"{ANONYMOUS_PREFIX}{timestamp}_{suffix}"


def is_anonymous_id_valid(anonymous_id: Optional[str]) -> bool:
    return bool(anonymous_id) and anonymous_id.startswith(ANONYMOUS_PREFIX) and len(anonymous_id) > 10


def fingerprint(request: Request) -> str:
    """Stable id for clients that never sent one: forwarded IP plus user agent."""
    ip = request.headers.get("x-forwarded-for") or (request.client.host if request.client else "anonymous")
    user_agent = request.headers.get("user-agent", "")
    return base64.b64encode(f"{ip}-{user_agent[:50]}".encode("utf-8")).decode("ascii")


def get_anonymous_id(request: Request, x_anonymous_id: Optional[str] = Header(None)) -> str:
    if is_anonymous_id_valid(x_anonymous_id):
        return x_anonymous_id
    return fingerprint(request)
