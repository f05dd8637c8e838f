"""
Twitter/X Recent Search Adapter.

Uses the official API v2 recent-search endpoint with an app bearer token.
Returns the sampled posts; duplicate detection and keyword tone happen in
normalization.
"""

import logging
from typing import Any, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


class TwitterSearchAdapter(BaseProviderAdapter):
    """Recent post reader: list of {text, timestamp}."""

    DEFAULT_BASE_URL = "https://api.twitter.com/2"
    DEFAULT_LIMIT = 50

    # API v2 bounds for max_results
    MIN_RESULTS = 10
    MAX_RESULTS = 100

    def __init__(
        self,
        bearer_token: Optional[str] = None,
        timeout: float = BaseProviderAdapter.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(bearer_token, timeout, session, base_url or self.DEFAULT_BASE_URL)

    @property
    def name(self) -> str:
        return "twitter"

    @property
    def source(self) -> SourceName:
        return SourceName.SOCIAL_POSTS

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Twitter/X API v2",
            source=self.source,
            identifier_kind=IdentifierKind.SEARCH_QUERY,
            requires_api_key=True,
            base_url=self._base_url,
            documentation_url="https://developer.twitter.com/en/docs/twitter-api/tweets/search",
            default_limit=self.DEFAULT_LIMIT,
            tags=["social", "twitter", "posts"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> list[dict[str, Any]]:
        limit = options.limit or self.DEFAULT_LIMIT
        max_results = max(self.MIN_RESULTS, min(self.MAX_RESULTS, limit))

        response = self._expect_dict(
            await self._make_request(
                "GET",
                f"{self._base_url}/tweets/search/recent",
                params={
                    "query": identifier,
                    "max_results": max_results,
                    "tweet.fields": "created_at",
                },
                headers={"Authorization": f"Bearer {self._resolve_api_key(options)}"},
            ),
            "Twitter response",
        )

        # "data" is omitted entirely when the search has no results
        tweets = self._expect_list(response.get("data") or [], "tweets")
        return [
            {
                "text": tweet.get("text", ""),
                "timestamp": tweet.get("created_at"),
            }
            for tweet in tweets[:limit]
            if isinstance(tweet, dict)
        ]
