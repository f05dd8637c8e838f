"""
Base Provider Adapter - Abstract interface for all token data providers.

All adapters MUST:
- Make exactly one outbound call per fetch()
- Never raise for expected failures (return FetchResult with an error)
- Hold no mutable state between calls
- Leave retries and caching to the caller
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import aiohttp

from token_risk.adapters.exceptions import (
    MalformedResponseError,
    NotFoundError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitError,
    UnauthorizedError,
)
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    FetchResult,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


class BaseProviderAdapter(ABC):
    """
    Abstract base class for all provider adapters.

    Each adapter must:
    1. Implement fetch_raw() - Get the raw payload from the provider
    2. Implement metadata() - Return adapter metadata

    fetch() wraps fetch_raw() with the per-call timeout and converts every
    expected failure into a ProviderError carried by the FetchResult.
    Cancellation is not swallowed so a caller deadline can abandon the call.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._session = session
        self._base_url = base_url

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this adapter."""
        pass

    @property
    @abstractmethod
    def source(self) -> SourceName:
        """Data source this adapter serves."""
        pass

    @abstractmethod
    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> Any:
        """
        Fetch the raw payload from the provider API.

        Args:
            identifier: Address, symbol, slug or search query
            options: Pagination and credential overrides

        Returns:
            Provider-specific payload with the response envelope removed

        Raises:
            ProviderError: On any expected failure
        """
        pass

    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        pass

    @property
    def identifier_kind(self) -> IdentifierKind:
        return self.metadata().identifier_kind

    @property
    def timeout(self) -> float:
        return self._timeout

    def is_configured(self) -> bool:
        """Whether the adapter has the credentials it needs."""
        return not self.metadata().requires_api_key or bool(self._api_key)

    def _resolve_api_key(self, options: FetchOptions) -> Optional[str]:
        return options.api_key or self._api_key

    async def fetch(
        self,
        identifier: str,
        options: Optional[FetchOptions] = None,
    ) -> FetchResult:
        """
        Fetch a raw payload (main entry point).

        Returns:
            FetchResult holding either the payload or a ProviderError
        """
        options = options or FetchOptions()
        start_time = time.monotonic()

        try:
            options.validate()
            if self.metadata().requires_api_key and not self._resolve_api_key(options):
                raise UnauthorizedError(
                    message="API key not configured",
                    adapter_name=self.name,
                )
            payload = await asyncio.wait_for(
                self.fetch_raw(identifier, options),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error: ProviderError = ProviderUnavailableError(
                message=f"Timed out after {self._timeout:.1f}s",
                adapter_name=self.name,
            )
        except ProviderError as e:
            error = e
        except Exception as e:
            error = ProviderUnavailableError(
                message=f"Unexpected error: {e}",
                adapter_name=self.name,
                original_error=e,
            )
        else:
            latency_ms = (time.monotonic() - start_time) * 1000
            logger.debug(f"[{self.name}] Fetched {identifier} in {latency_ms:.1f}ms")
            return FetchResult.success(self.source, self.name, payload, latency_ms)

        latency_ms = (time.monotonic() - start_time) * 1000
        logger.warning(f"[{self.name}] Fetch failed for {identifier}: {error}")
        return FetchResult.failure(self.source, self.name, error, latency_ms)

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "TokenRiskEngine/1.0",
        }

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Yield the injected session, or a session owned by this call."""
        if self._session is not None and not self._session.closed:
            yield self._session
            return

        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self._timeout),
            headers=self._get_default_headers(),
        ) as session:
            yield session

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Make HTTP request and map failures onto ProviderError kinds."""
        async with self._session_scope() as session:
            try:
                async with session.request(
                    method,
                    url,
                    params=params,
                    headers=headers,
                    json=json_body,
                ) as response:
                    if response.status == 429:
                        raise RateLimitError(
                            message="Rate limit exceeded",
                            adapter_name=self.name,
                            status_code=429,
                            retry_after_seconds=self._parse_retry_after(response.headers),
                        )

                    if response.status in (401, 403):
                        raise UnauthorizedError(
                            message=f"HTTP {response.status}",
                            adapter_name=self.name,
                            status_code=response.status,
                        )

                    if response.status == 404:
                        raise NotFoundError(
                            message="Resource not found",
                            adapter_name=self.name,
                            status_code=404,
                        )

                    if response.status >= 400:
                        body = await response.text()
                        raise ProviderUnavailableError(
                            message=f"HTTP {response.status}",
                            adapter_name=self.name,
                            status_code=response.status,
                            context={"response_body": body[:500], "request_url": url},
                        )

                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        raise MalformedResponseError(
                            message="Response is not valid JSON",
                            adapter_name=self.name,
                            status_code=response.status,
                            original_error=e,
                        )

            except aiohttp.ClientError as e:
                raise ProviderUnavailableError(
                    message=f"Connection error: {e}",
                    adapter_name=self.name,
                    original_error=e,
                    context={"request_url": url},
                )

    @staticmethod
    def _parse_retry_after(headers: Any) -> Optional[int]:
        retry_after = headers.get("Retry-After")
        if not retry_after:
            return None
        try:
            return int(retry_after)
        except ValueError:
            return None

    def _expect_dict(self, value: Any, what: str) -> dict[str, Any]:
        """Require a JSON object, else MalformedResponseError."""
        if not isinstance(value, dict):
            raise MalformedResponseError(
                message=f"Expected object for {what}, got {type(value).__name__}",
                adapter_name=self.name,
                response_body=str(value),
            )
        return value

    def _expect_list(self, value: Any, what: str) -> list[Any]:
        """Require a JSON array, else MalformedResponseError."""
        if not isinstance(value, list):
            raise MalformedResponseError(
                message=f"Expected array for {what}, got {type(value).__name__}",
                adapter_name=self.name,
                response_body=str(value),
            )
        return value

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, source={self.source.value})>"
