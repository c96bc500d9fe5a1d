"""Filtering and composite scoring of candidate detail links.

Pure transformation logic, no I/O.  Takes the adapter-scored candidates
from a listing page and returns them filtered, de-duplicated and sorted
by a composite relevance score.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

import structlog
from rapidfuzz import fuzz
from unidecode import unidecode as _unidecode

from gleaner.domain.adapters import NoCandidateLinksError, SiteAdapter
from gleaner.domain.entities import CandidateLink, ListingPage
from gleaner.infrastructure.common import (
    compact_code,
    extract_code,
    host_of,
    is_http_url,
    is_navigation_text,
    is_same_or_subhost,
    is_spam_host,
    matches_exclusion,
    normalize_url,
)

log = structlog.get_logger(__name__)

HIGH_CONFIDENCE_PROVENANCE: frozenset[str] = frozenset(
    {"javbus_moviebox", "javdb_video", "javlibrary_video", "javgg_video"}
)

_PUNCT_RE = re.compile(r"[^\w\s]")
_MIN_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class RankingWeights:
    code_exact_weight: float = 40.0
    code_partial_weight: float = 25.0
    similarity_weight: float = 30.0
    provenance_bonus: float = 15.0
    high_confidence: frozenset[str] = field(default=HIGH_CONFIDENCE_PROVENANCE)


def _normalize(text: str) -> str:
    """Lowercase, transliterate Unicode to ASCII, strip punctuation, collapse ws."""
    text = _unidecode(text.lower())
    text = _PUNCT_RE.sub(" ", text)
    return " ".join(text.split())


def _tokens(text: str) -> list[str]:
    return [t for t in _normalize(text).split() if len(t) >= _MIN_TOKEN_LENGTH]


def title_similarity(a: str, b: str) -> float:
    """Token-set similarity of ``a`` and ``b`` in 0.0-1.0.

    Tokens of two characters or fewer are ignored, so a title sharing
    every word of the keyword scores 1.0 regardless of extra words.
    """
    left, right = _tokens(a), _tokens(b)
    if not left or not right:
        return 0.0
    # rapidfuzz returns 0-100
    return fuzz.token_set_ratio(" ".join(left), " ".join(right)) / 100.0


class LinkRanker:
    def __init__(self, weights: RankingWeights | None = None) -> None:
        self.weights = weights or RankingWeights()

    def rank(
        self,
        candidates: list[CandidateLink],
        listing: ListingPage,
        adapter: SiteAdapter,
    ) -> list[CandidateLink]:
        listing_host = host_of(listing.origin_url)
        listing_norm = normalize_url(listing.origin_url)
        keyword = listing.search_keyword

        seen: set[str] = set()
        kept: list[CandidateLink] = []
        dropped = 0
        for link in candidates:
            if not self._acceptable(link, listing_host, listing_norm, adapter):
                dropped += 1
                continue
            norm = normalize_url(link.url)
            if norm in seen:
                dropped += 1
                continue
            seen.add(norm)
            kept.append(replace(link, score=self._score(link, keyword)))

        # sorted() is stable: equal scores keep discovery order
        ranked = sorted(kept, key=lambda c: c.score, reverse=True)
        log.debug(
            "candidates_ranked",
            listing=listing.origin_url,
            kept=len(ranked),
            dropped=dropped,
            top=ranked[0].url if ranked else None,
        )
        return ranked

    def select_detail_url(
        self,
        candidates: list[CandidateLink],
        listing: ListingPage,
        adapter: SiteAdapter,
    ) -> str:
        """Best detail URL among ``candidates``.

        Raises:
            NoCandidateLinksError: Nothing survived filtering.
        """
        ranked = self.rank(candidates, listing, adapter)
        if not ranked:
            raise NoCandidateLinksError(f"no detail links found on {listing.origin_url}")
        return ranked[0].url

    # ------------------------------------------------------------------

    @staticmethod
    def _acceptable(
        link: CandidateLink,
        listing_host: str,
        listing_norm: str,
        adapter: SiteAdapter,
    ) -> bool:
        if not is_http_url(link.url):
            return False
        if listing_host and not is_same_or_subhost(host_of(link.url), listing_host):
            return False
        if normalize_url(link.url) == listing_norm:
            return False
        if matches_exclusion(link.url) or is_spam_host(link.url):
            return False
        if link.title and is_navigation_text(link.title):
            return False
        return adapter.is_detail_url(link.url)

    def _score(self, link: CandidateLink, keyword: str) -> float:
        w = self.weights
        score = link.score

        if keyword:
            kw_code = compact_code(extract_code(keyword))
            code = compact_code(link.code or extract_code(link.title))
            if kw_code and code:
                if code == kw_code:
                    score += w.code_exact_weight
                elif kw_code in code or code in kw_code:
                    score += w.code_partial_weight
            score += title_similarity(link.title, keyword) * w.similarity_weight

        if link.provenance in w.high_confidence:
            score += w.provenance_bonus

        return max(0.0, min(100.0, score))
