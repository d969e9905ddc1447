"""
REST Helper
===========

Shared POST helper for the adapters that talk to provider REST APIs with
httpx (Anthropic, Gemini). Every failure becomes an LLMAPIError:

    transport error      -> LLMAPIError (no status)
    timeout              -> LLMAPIError(408)
    HTTP status >= 400   -> LLMAPIError(status)
    body is not JSON     -> LLMAPIError(status)
"""

from typing import Any

import httpx

from agentcore.errors import LLMAPIError
from agentcore.utils.logger import Logger

logger = Logger("HTTP")


async def post_json(
    url: str,
    payload: dict[str, Any],
    provider: str,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float = 60.0
) -> dict[str, Any]:
    """
    POST a JSON payload and return the decoded JSON response.

    Args:
        url: Endpoint URL
        payload: Request body
        provider: Provider name for logs and error messages
        headers: Extra request headers
        params: Query string parameters
        client: Shared client; a short-lived one is opened when omitted
        timeout: Transport timeout in seconds

    Raises:
        LLMAPIError: On any transport, HTTP or decoding failure
    """
    try:
        if client is not None:
            response = await client.post(url, json=payload, headers=headers, params=params, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=payload, headers=headers, params=params)
    except httpx.TimeoutException as e:
        raise LLMAPIError(f"{provider} request timed out", status_code=408, timeout=True) from e
    except httpx.HTTPError as e:
        raise LLMAPIError(f"{provider} request failed: {e}") from e

    if response.status_code >= 400:
        logger.error(f"{provider} API error: {response.status_code} - {response.text[:500]}")
        raise LLMAPIError(
            f"{provider} API returned {response.status_code}: {_error_message(response)}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise LLMAPIError(
            f"{provider} returned a non-JSON response",
            status_code=response.status_code,
        ) from e
    if not isinstance(data, dict):
        raise LLMAPIError(f"{provider} returned unexpected JSON", status_code=response.status_code)
    return data


def _error_message(response: httpx.Response) -> str:
    """Pull `error.message` out of a provider error body when there is one."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.reason_phrase
