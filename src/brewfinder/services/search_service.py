# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Brewery lookups against Open Brewery DB.

Outbound calls go through an ordered list of fetch strategies; the first one
that returns a JSON array wins. When every strategy fails the static sample
set is served instead, so callers never see a network error.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx
import requests

from brewfinder import config
from brewfinder.core.breweries import SAMPLE_BREWERIES, BreweryRecord, SearchQuery
from brewfinder.logger import get_logger

log = get_logger("services.search")

DEFAULT_PER_PAGE = 20

FetchStrategy = Callable[[str, Dict[str, Any]], List[Any]]


class FetchError(RuntimeError):
    """A single fetch strategy could not produce a usable response."""


def _json_array(payload: Any) -> List[Any]:
    if not isinstance(payload, list):
        raise FetchError("Response is not a JSON array")
    return payload


def httpx_strategy(
    connect_timeout: float = config.API_CONNECT_TIMEOUT,
    read_timeout: float = config.API_READ_TIMEOUT,
    user_agent: str = config.API_USER_AGENT,
) -> FetchStrategy:
    timeout = httpx.Timeout(read_timeout, connect=connect_timeout)

    def _fetch(url: str, params: Dict[str, Any]) -> List[Any]:
        try:
            resp = httpx.get(
                url,
                params=params,
                timeout=timeout,
                follow_redirects=True,
                headers={"User-Agent": user_agent, "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise FetchError(f"httpx: {e}") from e
        if resp.status_code != 200:
            raise FetchError(f"httpx: HTTP {resp.status_code}")
        try:
            return _json_array(resp.json())
        except ValueError as e:
            raise FetchError(f"httpx: invalid JSON ({e})") from e

    _fetch.__name__ = "httpx"
    return _fetch


def requests_strategy(
    timeout: float = config.API_CONNECT_TIMEOUT,
    user_agent: str = config.API_USER_AGENT,
) -> FetchStrategy:
    def _fetch(url: str, params: Dict[str, Any]) -> List[Any]:
        try:
            resp = requests.get(url, params=params, timeout=timeout, headers={"User-Agent": user_agent})
        except requests.RequestException as e:
            raise FetchError(f"requests: {e}") from e
        if resp.status_code != 200:
            raise FetchError(f"requests: HTTP {resp.status_code}")
        try:
            return _json_array(resp.json())
        except ValueError as e:
            raise FetchError(f"requests: invalid JSON ({e})") from e

    _fetch.__name__ = "requests"
    return _fetch


def default_strategies() -> List[FetchStrategy]:
    return [httpx_strategy(), requests_strategy()]


def first_success(strategies: Sequence[FetchStrategy], url: str, params: Dict[str, Any]) -> Optional[List[Any]]:
    """Run strategies in order; return the first result, or None if all failed."""
    for strategy in strategies:
        try:
            return strategy(url, params)
        except FetchError as e:
            log.warning("Brewery fetch via %s failed: %s", getattr(strategy, "__name__", "strategy"), e)
    return None


def sample_breweries() -> List[BreweryRecord]:
    return list(SAMPLE_BREWERIES)


class BrewerySearchClient:
    def __init__(self, base_url: str = config.API_BASE, strategies: Optional[Sequence[FetchStrategy]] = None):
        self.base_url = base_url
        self.strategies: List[FetchStrategy] = list(strategies) if strategies is not None else default_strategies()

    def _fetch_records(self, params: Optional[Dict[str, Any]]) -> Optional[List[BreweryRecord]]:
        query = {"per_page": DEFAULT_PER_PAGE, **(params or {})}
        raw = first_success(self.strategies, self.base_url, query)
        if raw is None:
            return None
        out: List[BreweryRecord] = []
        for item in raw:
            rec = BreweryRecord.from_api(item)
            if rec is not None:
                out.append(rec)
        return out

    def fetch(self, params: Optional[Dict[str, Any]] = None) -> List[BreweryRecord]:
        records = self._fetch_records(params)
        if records is None:
            log.warning("Brewery directory unavailable; serving sample data")
            return sample_breweries()
        return records

    def search_query(self, query: SearchQuery) -> List[BreweryRecord]:
        """Validated search; raises InvalidSearch before any outbound call.

        An outage or an empty answer both fall back to filtering the sample
        set locally, so the sample list is never returned unfiltered here.
        """
        query.validate()
        result = self._fetch_records(query.to_params())
        if not result:
            result = [b for b in sample_breweries() if query.matches(b)]
        return result

    def search(self, name: str = "", city: str = "", state: str = "", type: str = "") -> List[BreweryRecord]:
        return self.search_query(SearchQuery.from_form(name=name, city=city, state=state, type=type))

    def random_sample(self, limit: int = 8) -> List[BreweryRecord]:
        breweries = self.fetch({"per_page": limit, "sort": "random"})
        if not breweries:
            breweries = sample_breweries()
        return breweries[:limit]
