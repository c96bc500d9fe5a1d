"""Canonical extraction record and its request/response companions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ExtractionStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    CACHED = "cached"
    TIMEOUT = "timeout"
    PARTIAL = "partial"


@dataclass(frozen=True)
class ExtractionItem:
    """One unit of work handed to the orchestrator."""

    id: str
    url: str
    title: str = ""
    source_hint: str | None = None

    # Optional search context used to pick a detail link from a listing page
    keyword: str = ""
    code: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionItem:
        return cls(
            id=str(data.get("id") or ""),
            url=str(data.get("url") or ""),
            title=str(data.get("title") or ""),
            source_hint=data.get("sourceHint") or data.get("source") or None,
            keyword=str(data.get("keyword") or data.get("query") or ""),
            code=str(data.get("code") or ""),
        )


@dataclass(frozen=True)
class BatchProgress:
    current: int
    total: int
    status: ExtractionStatus
    item_id: str


# May be sync or async; an awaitable return value is awaited.
ProgressCallback = Callable[[BatchProgress], Any]


@dataclass(frozen=True)
class ExtractionOptions:
    """Per-call knobs; ``None`` means "use the configured default"."""

    timeout_ms: int | None = None
    enable_retry: bool | None = None
    enable_cache: bool | None = None
    max_concurrency: int | None = None
    on_progress: ProgressCallback | None = None


@dataclass(frozen=True)
class CastMember:
    name: str
    profile_url: str = ""
    avatar: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "profileUrl": self.profile_url, "avatar": self.avatar}


@dataclass(frozen=True)
class MagnetLink:
    name: str
    uri: str
    size: str = ""
    seeders: int = 0
    leechers: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "uri": self.uri,
            "size": self.size,
            "seeders": self.seeders,
            "leechers": self.leechers,
        }


@dataclass(frozen=True)
class DownloadLink:
    name: str
    url: str
    type: str = "download"
    size: str = ""
    quality: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "url": self.url,
            "type": self.type,
            "size": self.size,
            "quality": self.quality,
        }


@dataclass
class ExtractionRecord:
    """Normalized output of one extraction.

    Every field is always present; "absent" means an empty string, empty
    list or zero, so consumers can rely on a total schema.
    """

    title: str = ""
    code: str = ""
    cover: str = ""
    screenshots: list[str] = field(default_factory=list)
    cast: list[CastMember] = field(default_factory=list)
    director: str = ""
    studio: str = ""
    label: str = ""
    series: str = ""
    release_date: str = ""
    duration_minutes: int = 0
    quality: str = ""
    file_size: str = ""
    resolution: str = ""
    tags: list[str] = field(default_factory=list)
    magnet_links: list[MagnetLink] = field(default_factory=list)
    download_links: list[DownloadLink] = field(default_factory=list)
    description: str = ""
    rating: float = 0.0

    source_id: str = ""
    origin_url: str = ""
    detail_url: str = ""
    extraction_status: ExtractionStatus = ExtractionStatus.SUCCESS
    extracted_at_ms: int = 0

    # Request identity, carried through every terminal outcome
    item_id: str = ""
    original_title: str = ""
    extraction_error: str = ""
    extraction_time_ms: int = 0
    retry_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "code": self.code,
            "cover": self.cover,
            "screenshots": list(self.screenshots),
            "cast": [c.to_dict() for c in self.cast],
            "director": self.director,
            "studio": self.studio,
            "label": self.label,
            "series": self.series,
            "releaseDate": self.release_date,
            "durationMinutes": self.duration_minutes,
            "quality": self.quality,
            "fileSize": self.file_size,
            "resolution": self.resolution,
            "tags": list(self.tags),
            "magnetLinks": [m.to_dict() for m in self.magnet_links],
            "downloadLinks": [d.to_dict() for d in self.download_links],
            "description": self.description,
            "rating": self.rating,
            "sourceId": self.source_id,
            "originUrl": self.origin_url,
            "detailUrl": self.detail_url,
            "extractionStatus": self.extraction_status.value,
            "extractedAtMs": self.extracted_at_ms,
            "itemId": self.item_id,
            "originalTitle": self.original_title,
            "extractionError": self.extraction_error,
            "extractionTimeMs": self.extraction_time_ms,
            "retryCount": self.retry_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionRecord:
        """Rebuild a record from :meth:`to_dict` output.

        Raises:
            ValueError: If ``data`` is not a mapping or carries an unknown status.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected mapping, got: {type(data)!r}")

        return cls(
            title=str(data.get("title", "")),
            code=str(data.get("code", "")),
            cover=str(data.get("cover", "")),
            screenshots=[str(s) for s in data.get("screenshots", [])],
            cast=[
                CastMember(
                    name=str(c.get("name", "")),
                    profile_url=str(c.get("profileUrl", "")),
                    avatar=str(c.get("avatar", "")),
                )
                for c in data.get("cast", [])
            ],
            director=str(data.get("director", "")),
            studio=str(data.get("studio", "")),
            label=str(data.get("label", "")),
            series=str(data.get("series", "")),
            release_date=str(data.get("releaseDate", "")),
            duration_minutes=int(data.get("durationMinutes", 0) or 0),
            quality=str(data.get("quality", "")),
            file_size=str(data.get("fileSize", "")),
            resolution=str(data.get("resolution", "")),
            tags=[str(t) for t in data.get("tags", [])],
            magnet_links=[
                MagnetLink(
                    name=str(m.get("name", "")),
                    uri=str(m.get("uri", "")),
                    size=str(m.get("size", "")),
                    seeders=int(m.get("seeders", 0) or 0),
                    leechers=int(m.get("leechers", 0) or 0),
                )
                for m in data.get("magnetLinks", [])
            ],
            download_links=[
                DownloadLink(
                    name=str(d.get("name", "")),
                    url=str(d.get("url", "")),
                    type=str(d.get("type", "download")),
                    size=str(d.get("size", "")),
                    quality=str(d.get("quality", "")),
                )
                for d in data.get("downloadLinks", [])
            ],
            description=str(data.get("description", "")),
            rating=float(data.get("rating", 0) or 0),
            source_id=str(data.get("sourceId", "")),
            origin_url=str(data.get("originUrl", "")),
            detail_url=str(data.get("detailUrl", "")),
            extraction_status=ExtractionStatus(
                data.get("extractionStatus", ExtractionStatus.SUCCESS.value)
            ),
            extracted_at_ms=int(data.get("extractedAtMs", 0) or 0),
            item_id=str(data.get("itemId", "")),
            original_title=str(data.get("originalTitle", "")),
            extraction_error=str(data.get("extractionError", "")),
            extraction_time_ms=int(data.get("extractionTimeMs", 0) or 0),
            retry_count=int(data.get("retryCount", 0) or 0),
        )


@dataclass(frozen=True)
class SourceInfo:
    source_id: str
    display_name: str
    description: str = ""
    capabilities: tuple[str, ...] = ()


@dataclass(frozen=True)
class AdapterValidation:
    source_id: str
    is_valid: bool
    errors: tuple[str, ...] = ()
    capabilities: tuple[str, ...] = ()
