"""
Base REST client with common functionality.

This module provides the foundation for the Shopify and Maya Mobile REST
clients: session management, explicit timeouts, call logging, error mapping
and retries for read-only requests.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

import aiohttp
from aiohttp import ClientTimeout

from esim_bridge.core.config import Settings
from esim_bridge.core.logging_config import log_api_call
from esim_bridge.utils.error_handler import ExternalAPIException

logger = logging.getLogger(__name__)


@dataclass
class APIResponse:
    """Decoded response of a successful call."""

    status: int
    data: Any
    next_url: Optional[str] = None


class BaseRESTClient:
    """
    Base client for JSON REST APIs.

    Only requests issued with ``retry=True`` are retried. Callers must
    reserve that for side-effect-free reads.
    """

    service_name = "external"
    exception_class: Type[ExternalAPIException] = ExternalAPIException

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the client.

        Args:
            settings: Application settings
            session: Pre-built session (shared or test double); created on initialize() otherwise
        """
        self.settings = settings
        self.session = session
        self._owns_session = session is None
        self.max_retries = settings.READ_MAX_RETRIES
        self._retry_base_delay = 1.0

    def _default_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    async def initialize(self):
        """Create the HTTP session if none was injected."""
        if self.session is not None:
            return

        timeout = ClientTimeout(
            total=self.settings.HTTP_TIMEOUT_SECONDS,
            connect=self.settings.HTTP_CONNECT_TIMEOUT_SECONDS,
        )
        self.session = aiohttp.ClientSession(timeout=timeout, headers=self._default_headers())
        self._owns_session = True
        logger.info(f"Initialized {self.service_name} REST client")

    async def close(self):
        """Close the HTTP session if this client created it."""
        if self.session is not None and self._owns_session:
            await self.session.close()
            logger.info(f"{self.service_name} REST client closed")
        self.session = None

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        retry: bool = False,
        timeout: Optional[ClientTimeout] = None,
    ) -> APIResponse:
        """
        Execute a request and decode its JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query string parameters
            json_body: JSON payload
            retry: Retry on network errors, timeouts, 429 and 5xx (reads only)
            timeout: Per-request timeout overriding the session default

        Returns:
            APIResponse: Status, decoded body and the rel="next" link if any

        Raises:
            ExternalAPIException: Client-specific subclass on failure
        """
        if self.session is None:
            raise self.exception_class("Client not initialized. Call initialize() first.", endpoint=url)

        attempts = self.max_retries + 1 if retry else 1
        last_exception: Optional[ExternalAPIException] = None

        request_kwargs: Dict[str, Any] = {}
        if params is not None:
            request_kwargs["params"] = params
        if json_body is not None:
            request_kwargs["json"] = json_body
        if timeout is not None:
            request_kwargs["timeout"] = timeout

        for attempt in range(attempts):
            start_time = time.monotonic()
            try:
                async with self.session.request(method, url, **request_kwargs) as response:
                    try:
                        body = await self._read_body(response)
                    except UnicodeDecodeError as e:
                        raise self.exception_class(
                            f"Undecodable response body from {method} {url}: {e}",
                            api_response_code=response.status,
                            endpoint=url,
                            is_retryable=False,
                        ) from e
                    log_api_call(method, url, response.status, time.monotonic() - start_time, service=self.service_name)

                    if 200 <= response.status < 300:
                        return APIResponse(
                            status=response.status,
                            data=body,
                            next_url=self._next_link(response),
                        )

                    error = self.exception_class(
                        f"HTTP {response.status} from {method} {url}",
                        api_response_code=response.status,
                        endpoint=url,
                        response_body=body,
                    )
                    if retry and (response.status == 429 or response.status >= 500) and attempt < attempts - 1:
                        last_exception = error
                        delay = self._retry_delay(attempt, response.headers.get("Retry-After"))
                        logger.warning(f"{self.service_name} returned {response.status}, retrying in {delay}s")
                        await asyncio.sleep(delay)
                        continue
                    raise error

            except asyncio.TimeoutError as e:
                last_exception = self._timeout_exception(method, url, e)
            except aiohttp.ClientError as e:
                last_exception = self.exception_class(f"Network error on {method} {url}: {e}", endpoint=url)

            if not retry or attempt >= attempts - 1:
                break

            delay = self._retry_delay(attempt)
            logger.warning(f"{last_exception.message}, retrying in {delay}s (attempt {attempt + 1})")
            await asyncio.sleep(delay)

        raise last_exception or self.exception_class(f"{method} {url} failed after retries", endpoint=url)

    def _timeout_exception(self, method: str, url: str, error: Exception) -> ExternalAPIException:
        return self.exception_class(f"Timeout on {method} {url}", endpoint=url)

    def _retry_delay(self, attempt: int, retry_after: Optional[str] = None) -> float:
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass
        # Exponential backoff, max 10s
        return min(self._retry_base_delay * (2**attempt), 10.0)

    @staticmethod
    async def _read_body(response) -> Any:
        text = await response.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    @staticmethod
    def _next_link(response) -> Optional[str]:
        next_link = response.links.get("next") if response.links else None
        if not next_link:
            return None
        url = next_link.get("url")
        return str(url) if url else None

    def __repr__(self):
        return f"{self.__class__.__name__}(service='{self.service_name}', initialized={self.session is not None})"
