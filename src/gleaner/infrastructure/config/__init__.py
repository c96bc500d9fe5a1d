from __future__ import annotations

from .load import load_config
from .schema import (
    AppConfig,
    CacheConfig,
    EnvOverrides,
    ExtractionConfig,
    NormalizerConfig,
    RankingConfig,
)

__all__ = [
    "AppConfig",
    "CacheConfig",
    "EnvOverrides",
    "ExtractionConfig",
    "NormalizerConfig",
    "RankingConfig",
    "load_config",
]
