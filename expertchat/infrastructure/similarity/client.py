# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Word-similarity lookup used to widen expert search.

The resolver asks an HTTP "means like" service for terms related to a topic
(for example "volcanoes" -> "volcanology", "volcano", ...). The lookup is an
optimisation for routing, never a requirement: any failure yields an empty
set so that question submission is never blocked.

Example:
    >>> resolver = SimilarityResolver(settings.similarity)
    >>> await resolver.resolve("Volcanoes")
    {'volcano', 'volcanology', 'lava', ...}
    >>> await resolver.aclose()
"""

import asyncio
import logging
from typing import Any

import httpx

from expertchat.core.config.settings import SimilaritySettings
from expertchat.domains.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


def normalize_term(term: str) -> str:
    """Lowercase a term and collapse internal whitespace.

    Args:
        term: Raw term.

    Returns:
        Normalized term, empty if the input was blank.
    """
    return " ".join(term.lower().split())


class SimilarityResolver:
    """Resolve a topic to a set of semantically related terms.

    Attributes:
        _settings: Endpoint, timeout and result-size configuration.
        _client: HTTP client; owned (and closed) by the resolver unless
            one was passed in.
    """

    def __init__(
        self,
        settings: SimilaritySettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            settings: Similarity service settings.
            client: Optional preconfigured HTTP client.
        """
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout)

    async def resolve(self, topic: str) -> set[str]:
        """Return related terms for a topic.

        Never raises for upstream problems; timeouts, transport errors,
        error statuses and malformed payloads all produce an empty set.

        Args:
            topic: Free-text topic.

        Returns:
            Deduplicated, normalized related terms (may be empty).
        """
        normalized = normalize_term(topic)
        if not normalized or not self._settings.enabled:
            return set()

        try:
            payload = await asyncio.wait_for(
                self._fetch(normalized),
                timeout=self._settings.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Similarity lookup timed out for topic %r", normalized)
            return set()
        except UpstreamUnavailableError as e:
            logger.warning("Similarity lookup failed for topic %r: %s", normalized, e)
            return set()

        terms = self._parse(payload)
        logger.debug("Resolved %d related terms for %r", len(terms), normalized)
        return terms

    async def _fetch(self, topic: str) -> Any:
        """Perform the single outbound lookup.

        Raises:
            UpstreamUnavailableError: On transport errors, non-2xx
                responses, or a body that is not JSON.
        """
        try:
            response = await self._client.get(
                self._settings.endpoint,
                params={"ml": topic, "max": self._settings.max_results},
                timeout=self._settings.timeout,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise UpstreamUnavailableError(f"Invalid JSON from similarity service: {e}") from e

    @staticmethod
    def _parse(payload: Any) -> set[str]:
        """Extract normalized words from a ``[{"word": ...}, ...]`` payload."""
        if not isinstance(payload, list):
            return set()

        terms: set[str] = set()
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            word = entry.get("word")
            if isinstance(word, str):
                term = normalize_term(word)
                if term:
                    terms.add(term)
        return terms

    async def aclose(self) -> None:
        """Close the HTTP client if the resolver created it."""
        if self._owns_client:
            await self._client.aclose()
