"""Listing-page inputs and the candidate links discovered on them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ListingPage:
    markup: str
    origin_url: str
    search_keyword: str = ""


@dataclass
class CandidateLink:
    """A detail-page link found on a listing page, pending ranking.

    ``score`` is the adapter-assigned base score until the ranker
    replaces it with the composite score.
    """

    url: str
    title: str = ""
    code: str = ""
    score: float = 0.0
    provenance: str = ""
