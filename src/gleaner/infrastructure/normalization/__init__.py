from .record_normalizer import NormalizerLimits, RecordNormalizer, normalize_rating

__all__ = [
    "NormalizerLimits",
    "RecordNormalizer",
    "normalize_rating",
]
