# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Brewery types, the brewery record and the search query.

Keeping the type catalogue here lets the search client, the request handler
and the templates share one source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

MAX_SEARCH_LENGTH = 50

# --- Brewery types (key -> label + description) ---
BREWERY_TYPES: Dict[str, Dict[str, str]] = {
    "micro": {
        "label": "Micro Brewery",
        "description": "Small, independent breweries producing limited quantities of beer.",
    },
    "nano": {
        "label": "Nano Brewery",
        "description": "Very small breweries, often experimental with tiny batch sizes.",
    },
    "regional": {
        "label": "Regional Brewery",
        "description": "Larger breweries distributing beer across multiple regions.",
    },
    "brewpub": {
        "label": "Brewpub",
        "description": "Restaurant-brewery combinations selling beer on premises.",
    },
    "large": {
        "label": "Large Brewery",
        "description": "Major breweries with significant production capacity.",
    },
    "planning": {
        "label": "Planning",
        "description": "Breweries in the planning or construction phase.",
    },
    "bar": {
        "label": "Bar",
        "description": "Establishments focused on serving rather than brewing.",
    },
    "contract": {
        "label": "Contract",
        "description": "Companies that hire other breweries to produce their beer.",
    },
    "proprietor": {
        "label": "Proprietor",
        "description": "Breweries operating under specific ownership models.",
    },
}

UNKNOWN = "Unknown"


def type_label(key: Optional[str]) -> str:
    k = (key or "").strip().lower()
    meta = BREWERY_TYPES.get(k)
    if meta:
        return meta["label"]
    return key or UNKNOWN


def _opt(raw: Dict[str, Any], key: str) -> Optional[str]:
    v = raw.get(key)
    if v is None:
        return None
    s = str(v).strip()
    return s or None


@dataclass(frozen=True)
class BreweryRecord:
    id: str
    name: Optional[str] = None
    brewery_type: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    website_url: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> Optional["BreweryRecord"]:
        """Build from an Open Brewery DB object; entries without an id are dropped."""
        if not isinstance(raw, dict):
            return None
        bid = _opt(raw, "id")
        if not bid:
            return None
        return cls(
            id=bid,
            name=_opt(raw, "name"),
            brewery_type=_opt(raw, "brewery_type"),
            street=_opt(raw, "street") or _opt(raw, "address_1"),
            city=_opt(raw, "city"),
            state=_opt(raw, "state") or _opt(raw, "state_province"),
            country=_opt(raw, "country"),
            website_url=_opt(raw, "website_url"),
            phone=_opt(raw, "phone"),
        )

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed Brewery"

    @property
    def display_type(self) -> str:
        return type_label(self.brewery_type) if self.brewery_type else UNKNOWN

    @property
    def display_location(self) -> str:
        return f"{self.city or UNKNOWN}, {self.state or UNKNOWN}"


SAMPLE_BREWERIES: List[BreweryRecord] = [
    BreweryRecord(
        id="1",
        name="Sample Micro Brewery",
        brewery_type="micro",
        street="123 Beer Street",
        city="Portland",
        state="Oregon",
        country="United States",
        website_url="https://example.com",
        phone="555-0123",
    ),
    BreweryRecord(
        id="2",
        name="Local Brewpub",
        brewery_type="brewpub",
        street="456 Ale Avenue",
        city="Denver",
        state="Colorado",
        country="United States",
        website_url="https://example.com",
        phone="555-0456",
    ),
    BreweryRecord(
        id="3",
        name="Regional Beer Co.",
        brewery_type="regional",
        street="789 Lager Lane",
        city="San Diego",
        state="California",
        country="United States",
        website_url="https://example.com",
        phone="555-0789",
    ),
]


class InvalidSearch(ValueError):
    """Search input rejected before any lookup is made."""


@dataclass(frozen=True)
class SearchQuery:
    name: str = ""
    city: str = ""
    state: str = ""
    type: str = ""

    @classmethod
    def from_form(cls, name: str = "", city: str = "", state: str = "", type: str = "") -> "SearchQuery":
        return cls(
            name=(name or "").strip(),
            city=(city or "").strip(),
            state=(state or "").strip(),
            type=(type or "").strip(),
        )

    def validate(self) -> "SearchQuery":
        if any(len(v) > MAX_SEARCH_LENGTH for v in (self.name, self.city, self.state)):
            raise InvalidSearch(f"Input too long. Maximum {MAX_SEARCH_LENGTH} characters allowed.")
        if self.type and self.type not in BREWERY_TYPES:
            raise InvalidSearch("Invalid brewery type selected.")
        if self.is_empty:
            raise InvalidSearch("Please enter at least one search criteria.")
        return self

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.city or self.state or self.type)

    def to_params(self) -> Dict[str, str]:
        """API query parameters for the non-empty filters only."""
        params: Dict[str, str] = {}
        if self.name:
            params["by_name"] = self.name
        if self.city:
            params["by_city"] = self.city
        if self.state:
            params["by_state"] = self.state
        if self.type:
            params["by_type"] = self.type
        return params

    def matches(self, brewery: BreweryRecord) -> bool:
        """Local filter: substring (case-insensitive) on text fields, exact on type."""
        def _contains(haystack: Optional[str], needle: str) -> bool:
            return needle.lower() in (haystack or "").lower()

        if self.name and not _contains(brewery.name, self.name):
            return False
        if self.city and not _contains(brewery.city, self.city):
            return False
        if self.state and not _contains(brewery.state, self.state):
            return False
        if self.type and brewery.brewery_type != self.type:
            return False
        return True
