from .link_ranker import HIGH_CONFIDENCE_PROVENANCE, LinkRanker, RankingWeights, title_similarity

__all__ = [
    "HIGH_CONFIDENCE_PROVENANCE",
    "LinkRanker",
    "RankingWeights",
    "title_similarity",
]
