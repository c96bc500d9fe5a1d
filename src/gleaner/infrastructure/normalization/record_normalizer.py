"""Map an adapter's raw field bag onto the canonical ExtractionRecord.

Pure transformation logic, no I/O.  Every value is coerced, validated and
bounded here, so adapters can stay best-effort.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from gleaner.domain.adapters import RawFields
from gleaner.domain.entities import (
    CastMember,
    DownloadLink,
    ExtractionRecord,
    ExtractionStatus,
    MagnetLink,
)
from gleaner.infrastructure.common import (
    host_of,
    is_http_url,
    is_navigation_text,
    is_same_or_subhost,
    is_spam_host,
    parse_date_iso,
    parse_duration_minutes,
    resolve_url,
    to_float,
    to_int,
)

log = structlog.get_logger(__name__)

MAGNET_PREFIX = "magnet:?"
MAX_RATING = 10.0


@dataclass(frozen=True)
class NormalizerLimits:
    max_screenshots: int = 20
    max_download_links: int = 15
    max_magnet_links: int = 15


def _str(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split())


def _list(value: Any) -> list[Any]:
    if value is None or isinstance(value, (str, bytes, dict)):
        return []
    if isinstance(value, Iterable):
        return list(value)
    return []


def normalize_rating(raw: Any) -> float:
    """Coerce to float and clamp to [0, 10]; unparsable -> 0."""
    value = to_float(raw)
    if value is None or value != value:  # NaN
        return 0.0
    return max(0.0, min(MAX_RATING, value))


class RecordNormalizer:
    def __init__(self, limits: NormalizerLimits | None = None) -> None:
        self.limits = limits or NormalizerLimits()

    def normalize(
        self,
        raw: RawFields,
        *,
        source_id: str,
        origin_url: str,
        detail_url: str,
        now_ms: int | None = None,
    ) -> ExtractionRecord:
        detail_host = host_of(detail_url)

        record = ExtractionRecord(
            title=_str(raw.get("title"))[:500],
            code=_str(raw.get("code")).upper(),
            cover=self._image_url(raw.get("cover"), detail_url),
            screenshots=self._screenshots(raw.get("screenshots"), detail_url),
            cast=self._cast(raw.get("actors") or raw.get("cast"), detail_url),
            director=_str(raw.get("director")),
            studio=_str(raw.get("studio")),
            label=_str(raw.get("label")),
            series=_str(raw.get("series")),
            release_date=parse_date_iso(_str(raw.get("release_date"))),
            duration_minutes=self._duration(raw.get("duration")),
            quality=_str(raw.get("quality")),
            file_size=_str(raw.get("file_size")),
            resolution=_str(raw.get("resolution")),
            tags=self._tags(raw.get("tags")),
            magnet_links=self._magnets(raw.get("magnet_links")),
            download_links=self._downloads(raw.get("download_links"), detail_url, detail_host),
            description=_str(raw.get("description"))[:2000],
            rating=normalize_rating(raw.get("rating")),
            source_id=source_id,
            origin_url=origin_url,
            detail_url=detail_url,
            extracted_at_ms=now_ms if now_ms is not None else int(time.time() * 1000),
        )
        record.extraction_status = self.status_for(record)
        return record

    @staticmethod
    def status_for(record: ExtractionRecord) -> ExtractionStatus:
        has_identity = bool(record.title or record.code)
        has_payload = bool(
            record.cover
            or record.screenshots
            or record.cast
            or record.magnet_links
            or record.download_links
        )
        if has_identity and not has_payload:
            return ExtractionStatus.PARTIAL
        return ExtractionStatus.SUCCESS

    # ------------------------------------------------------------------

    @staticmethod
    def _image_url(raw: Any, base_url: str) -> str:
        url = resolve_url(_str(raw), base_url)
        return url if is_http_url(url) else ""

    def _screenshots(self, raw: Any, base_url: str) -> list[str]:
        seen: set[str] = set()
        out: list[str] = []
        for item in _list(raw):
            url = self._image_url(item, base_url)
            if url and url not in seen:
                seen.add(url)
                out.append(url)
        return out[: self.limits.max_screenshots]

    @staticmethod
    def _duration(raw: Any) -> int:
        if isinstance(raw, bool):
            return 0
        if isinstance(raw, (int, float)):
            return max(0, int(raw))
        return parse_duration_minutes(_str(raw))

    @staticmethod
    def _tags(raw: Any) -> list[str]:
        seen: set[str] = set()
        out: list[str] = []
        for item in _list(raw):
            tag = _str(item)
            if tag and tag not in seen:
                seen.add(tag)
                out.append(tag)
        return out

    @staticmethod
    def _cast(raw: Any, base_url: str) -> list[CastMember]:
        seen: set[str] = set()
        out: list[CastMember] = []
        for item in _list(raw):
            if isinstance(item, CastMember):
                member = item
            elif isinstance(item, dict):
                profile = resolve_url(_str(item.get("profileUrl") or item.get("profile_url")), base_url)
                avatar = resolve_url(_str(item.get("avatar")), base_url)
                member = CastMember(
                    name=_str(item.get("name")),
                    profile_url=profile if is_http_url(profile) else "",
                    avatar=avatar if is_http_url(avatar) else "",
                )
            else:
                member = CastMember(name=_str(item))
            if member.name and member.name not in seen:
                seen.add(member.name)
                out.append(member)
        return out

    def _magnets(self, raw: Any) -> list[MagnetLink]:
        seen: set[str] = set()
        out: list[MagnetLink] = []
        for item in _list(raw):
            if not isinstance(item, dict):
                continue
            uri = str(item.get("uri") or item.get("magnet") or "").strip()
            if not uri.startswith(MAGNET_PREFIX) or uri in seen:
                continue
            seen.add(uri)
            out.append(
                MagnetLink(
                    name=_str(item.get("name")) or "magnet",
                    uri=uri,
                    size=_str(item.get("size")),
                    seeders=max(0, to_int(item.get("seeders")) or 0),
                    leechers=max(0, to_int(item.get("leechers")) or 0),
                )
            )
        return out[: self.limits.max_magnet_links]

    def _downloads(self, raw: Any, base_url: str, detail_host: str) -> list[DownloadLink]:
        seen: set[str] = set()
        out: list[DownloadLink] = []
        for item in _list(raw):
            if not isinstance(item, dict):
                continue
            url = resolve_url(_str(item.get("url")), base_url)
            if not is_http_url(url) or url in seen:
                continue
            if detail_host and not is_same_or_subhost(host_of(url), detail_host):
                log.debug("download_link_dropped", url=url, reason="foreign_host")
                continue
            if is_spam_host(url):
                log.debug("download_link_dropped", url=url, reason="spam_host")
                continue
            name = _str(item.get("name")) or "download"
            if is_navigation_text(name):
                continue
            seen.add(url)
            out.append(
                DownloadLink(
                    name=name,
                    url=url,
                    type=_str(item.get("type")) or "download",
                    size=_str(item.get("size")),
                    quality=_str(item.get("quality")),
                )
            )
        return out[: self.limits.max_download_links]
