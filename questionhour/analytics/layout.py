"""Node and marker placement for the 3-D graph and the 2-D map.

Agree responses fan out over the upper half-plane (angles in [0, pi)),
disagree responses over the lower half (angles in [pi, 2*pi)). Radius grows
with arrival order inside each sentiment group. ``z`` and the map jitter are
cosmetic and drawn from a ``numpy.random.Generator`` so tests can seed them.
"""

import math
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from .aggregation import AGREE, DISAGREE, LocationStats

BASE_RADIUS = 50
RADIUS_INCREMENT = 30
MAX_RADIUS = 300
Z_SPREAD = 50            # z in [-25, 25]
MAX_JITTER = 0.01        # +/- 0.005 degrees per axis
LINK_WIDTH = 4

QUESTION_COLOR = "#8000FF"
SENTIMENT_COLORS = {AGREE: "green", DISAGREE: "red"}

RandomSource = Union[None, int, np.random.Generator]


def make_rng(source: RandomSource = None) -> np.random.Generator:
    if isinstance(source, np.random.Generator):
        return source
    return np.random.default_rng(source)


def node_angle(index: int, count: int, sentiment: str) -> float:
    offset = 0.0 if sentiment == AGREE else math.pi
    return offset + (index / max(count, 1)) * math.pi


def node_radius(index: int) -> float:
    return min(BASE_RADIUS + index * RADIUS_INCREMENT, MAX_RADIUS)


def marker_radius(total: int) -> int:
    """Rendering radius of a map marker; the map caps it at 30."""
    return min(5 + total, 30)


def add_coordinate_jitter(coord: float, rng: np.random.Generator, max_jitter: float = MAX_JITTER) -> float:
    return coord + (rng.random() - 0.5) * max_jitter


def question_node(question: Mapping) -> dict:
    return {
        "id": f"question-{question['text']}",
        "name": f"Question: {question['text']}",
        "color": QUESTION_COLOR,
        "x": 0.0,
        "y": 0.0,
        "z": 0.0,
        "theme": question.get("theme"),
        "type": "question",
    }


def _place_group(question_text: str, sentiment: str, group: Sequence[Mapping],
                 root_id: str, rng: np.random.Generator, nodes: List[dict], links: List[dict]):
    color = SENTIMENT_COLORS[sentiment]
    count = len(group)
    for index, response in enumerate(group):
        node_id = f"response-{question_text}-{sentiment}-{index}"
        angle = node_angle(index, count, sentiment)
        radius = node_radius(index)
        nodes.append({
            "id": node_id,
            "name": f"ZIP: {response.get('location')}",
            "color": color,
            "x": math.cos(angle) * radius,
            "y": math.sin(angle) * radius,
            "z": (rng.random() - 0.5) * Z_SPREAD,
            "type": "response",
            "sentiment": sentiment,
            "timestamp": response.get("timestamp"),
            "radius": radius,
            "responseId": response.get("id"),
        })
        links.append({
            "source": root_id,
            "target": node_id,
            "color": color,
            "width": LINK_WIDTH,
        })


def build_graph(question: Mapping, agree: Sequence[Mapping], disagree: Sequence[Mapping],
                rng: Optional[np.random.Generator] = None) -> dict:
    rng = make_rng(rng)
    root = question_node(question)
    nodes = [root]
    links: List[dict] = []
    _place_group(question["text"], AGREE, agree, root["id"], rng, nodes, links)
    _place_group(question["text"], DISAGREE, disagree, root["id"], rng, nodes, links)
    return {"nodes": nodes, "links": links}


def build_map_points(location_stats: Dict[str, LocationStats],
                     rng: Optional[np.random.Generator] = None) -> List[dict]:
    rng = make_rng(rng)
    points = []
    for location, stats in location_stats.items():
        points.append({
            "id": f"zip-{location}",
            "lat": add_coordinate_jitter(stats.lat, rng),
            "lng": add_coordinate_jitter(stats.lng, rng),
            # ties favour agree
            "color": SENTIMENT_COLORS[AGREE if stats.agree >= stats.disagree else DISAGREE],
            "stats": {
                "agree": stats.agree,
                "disagree": stats.disagree,
                "total": stats.total,
            },
        })
    return points
