"""
Santiment Weighted Sentiment Adapter.

GraphQL API, weighted_sentiment_total over the last 7 days at daily
interval. Many new tokens have no Santiment slug; those return NotFound.
The API key is optional; without one the free tier is queried.
"""

import logging
from typing import Any, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.exceptions import MalformedResponseError, NotFoundError
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


QUERY_TEMPLATE = """
{
  getMetric(metric: "weighted_sentiment_total") {
    timeseriesData(
      slug: "%s"
      from: "utc_now-7d"
      to: "utc_now"
      interval: "1d"
    ) {
      datetime
      value
    }
  }
}
"""


class SantimentAdapter(BaseProviderAdapter):
    """Weighted sentiment reader keyed by project slug."""

    DEFAULT_BASE_URL = "https://api.santiment.net/graphql"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = BaseProviderAdapter.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(api_key, timeout, session, base_url or self.DEFAULT_BASE_URL)

    @property
    def name(self) -> str:
        return "santiment"

    @property
    def source(self) -> SourceName:
        return SourceName.WEIGHTED_SENTIMENT

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Santiment",
            source=self.source,
            identifier_kind=IdentifierKind.SLUG,
            requires_api_key=False,
            base_url=self._base_url,
            documentation_url="https://academy.santiment.net/sanapi/",
            tags=["social", "sentiment", "graphql"],
        )

    def _headers(self, options: FetchOptions) -> Optional[dict[str, str]]:
        api_key = self._resolve_api_key(options)
        return {"Authorization": f"Apikey {api_key}"} if api_key else None

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> list[dict[str, Any]]:
        # Slugs are lowercase alphanumerics and dashes; strip anything else
        slug = "".join(c for c in identifier.lower() if c.isalnum() or c == "-")

        response = self._expect_dict(
            await self._make_request(
                "POST",
                self._base_url,
                json_body={"query": QUERY_TEMPLATE % slug},
                headers=self._headers(options),
            ),
            "Santiment response",
        )

        if response.get("errors"):
            errors = response["errors"]
            message = errors[0].get("message", str(errors)) if isinstance(errors, list) and errors else str(errors)
            if "not found" in message.lower() or "does not exist" in message.lower():
                raise NotFoundError(message=message, adapter_name=self.name)
            raise MalformedResponseError(
                message=f"Santiment error: {message}",
                adapter_name=self.name,
                response_body=str(response),
            )

        try:
            series = response["data"]["getMetric"]["timeseriesData"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                message="Santiment response missing timeseriesData",
                adapter_name=self.name,
                response_body=str(response),
                original_error=e,
            )

        series = self._expect_list(series or [], "timeseriesData")
        if not series:
            raise NotFoundError(
                message=f"No sentiment series for {slug}",
                adapter_name=self.name,
            )
        return series
