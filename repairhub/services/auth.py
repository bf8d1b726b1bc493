"""
Auth Service Client — account creation against the Repair Hub API.

Every outcome comes back as a typed result (``SignupSuccess`` or
``SignupError``); transport failures are mapped to ``SignupError`` instead of
being raised to the caller.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from repairhub.schemas import SignupRequest, SignupResponse

logger = logging.getLogger(__name__)

SIGNUP_ENDPOINT = "/api/auth/signup"


@dataclass(frozen=True)
class SignupSuccess:
    token: str | None = None
    user: dict[str, Any] | None = None


@dataclass(frozen=True)
class SignupError:
    message: str | None = None
    status_code: int | None = None


SignupOutcome = SignupSuccess | SignupError


def _error_message(resp: httpx.Response) -> str:
    """Pull a human-readable message out of an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return f"Signup failed (HTTP {resp.status_code})"


class AuthService:
    """Thin client over an injected ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def signup(self, request: SignupRequest) -> SignupOutcome:
        data = request.form_fields()
        files = None
        image = request.image
        if image is not None and not isinstance(image, Path):
            data["image_ref"] = str(image)

        logger.info("Signup request: email=%s role=%s region=%s", request.email, request.role, request.region)
        try:
            if isinstance(image, Path):
                content = await asyncio.to_thread(image.read_bytes)
                files = {"image": (image.name, content, "application/octet-stream")}
            resp = await self._http.post(SIGNUP_ENDPOINT, data=data, files=files)
        except OSError as e:
            logger.error("Signup image could not be read: %s", e)
            return SignupError(f"Could not read image: {e}")
        except httpx.HTTPError as e:
            logger.error("Signup transport error: %s", e)
            return SignupError(str(e) or "Network error")

        if resp.status_code not in (200, 201):
            message = _error_message(resp)
            logger.warning("Signup rejected: status=%s message=%s", resp.status_code, message)
            return SignupError(message, status_code=resp.status_code)

        try:
            body = SignupResponse.model_validate(resp.json() if resp.content else {})
        except (ValueError, ValidationError) as e:
            logger.error("Signup response could not be parsed: %s", e)
            return SignupError("Unexpected response from server", status_code=resp.status_code)

        return SignupSuccess(token=body.token, user=body.user)
