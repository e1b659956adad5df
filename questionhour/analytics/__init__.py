from typing import Mapping, Sequence

from .aggregation import aggregate, group_by_sentiment
from .layout import RandomSource, build_graph, build_map_points, make_rng


def derive_visualization(question: Mapping, responses: Sequence[Mapping], rng: RandomSource = None) -> dict:
    """Graph, map points and stats for one question and its ordered responses.

    Only ``z`` and the map jitter depend on ``rng``; pass a seed for
    reproducible output.
    """
    rng = make_rng(rng)
    agg = aggregate(responses)
    agree, disagree = group_by_sentiment(responses)
    return {
        "graph": build_graph(question, agree, disagree, rng),
        "points": build_map_points(agg.location_stats, rng),
        "stats": agg.stats_dict(),
    }
