"""RetryingRequestClient — one JSON POST, retried with exponential backoff."""
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from image_ask.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_REQUEST_TIMEOUT,
    ERR_INVALID_JSON,
    JSON_CONTENT_TYPE,
    MSG_REQUEST_FAILED,
    MSG_RETRYING,
)
from image_ask.errors import ResponseShapeError
from image_ask.retry import Fail, RequestAttemptState, Succeed, Wait, decide

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def _parse_json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ResponseShapeError(ERR_INVALID_JSON) from exc
    match body:
        case dict():
            return body
        case _:
            raise ResponseShapeError(ERR_INVALID_JSON)


class RetryingRequestClient:
    """Sends a JSON body to an endpoint, retrying transient failures.

    Attempts run strictly one after another. Pass `http_client` to share a
    connection pool (or a mock transport); otherwise a client is opened per
    `send` call. `sleep` is injectable so backoff can be observed in tests.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._timeout = timeout
        self._http_client = http_client
        self._sleep = sleep

    async def send(
        self,
        endpoint: str,
        body: dict[str, Any],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        attempt = RequestAttemptState.first(max_attempts, base_delay_ms)
        match self._http_client:
            case None:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    return await self._run(client, attempt, endpoint, body, headers)
            case client:
                return await self._run(client, attempt, endpoint, body, headers)

    async def _run(
        self,
        client: httpx.AsyncClient,
        attempt: RequestAttemptState,
        endpoint: str,
        body: dict[str, Any],
        headers: Optional[dict[str, str]],
    ) -> dict[str, Any]:
        request_headers = {"Content-Type": JSON_CONTENT_TYPE, **(headers or {})}
        while True:
            try:
                response = await client.post(endpoint, json=body, headers=request_headers)
                outcome: int | Exception = response.status_code
            except httpx.RequestError as exc:
                response = None
                outcome = exc

            match decide(attempt, outcome):
                case Succeed():
                    return _parse_json(response)
                case Fail(error=error):
                    logger.error(MSG_REQUEST_FAILED, attempt.number, attempt.max_attempts, error)
                    raise error
                case Wait(delay_ms=delay_ms):
                    logger.warning(
                        MSG_RETRYING, attempt.number, attempt.max_attempts, outcome, delay_ms
                    )
                    await self._sleep(delay_ms / 1000)
                    attempt = attempt.next()
