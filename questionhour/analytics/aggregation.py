"""Response aggregation.

Turns the ordered responses of one question into sentiment counts and
per-location statistics. Responses are plain mappings shaped like
``Response.to_dict()``; nothing here touches the database.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

from ..errors import ValidationError

AGREE = "agree"
DISAGREE = "disagree"
SENTIMENTS = (AGREE, DISAGREE)


@dataclass
class LocationStats:
    lat: float
    lng: float
    agree: int = 0
    disagree: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "agree": self.agree,
            "disagree": self.disagree,
            "total": self.total,
            "lat": self.lat,
            "lng": self.lng,
        }


@dataclass
class MostActiveLocation:
    location: str = ""
    count: int = 0

    def to_dict(self) -> dict:
        # "zip" kept for clients that still read the older key
        return {"location": self.location, "zip": self.location, "count": self.count}


@dataclass
class Aggregate:
    total_responses: int = 0
    agree_count: int = 0
    disagree_count: int = 0
    location_stats: Dict[str, LocationStats] = field(default_factory=dict)
    most_active: MostActiveLocation = field(default_factory=MostActiveLocation)

    def stats_dict(self) -> dict:
        return {
            "totalResponses": self.total_responses,
            "agreeCount": self.agree_count,
            "disagreeCount": self.disagree_count,
            "mostActiveLocation": self.most_active.to_dict(),
        }


def sentiment_of(response: Mapping) -> str:
    value = response.get("response")
    if value not in SENTIMENTS:
        raise ValidationError(f"unrecognized sentiment: {value!r}", {"field": "response"})
    return value


def _coordinate(response: Mapping, key: str) -> float:
    value = response.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{key} must be a finite number, got {value!r}", {"field": key})
    return float(value)


def aggregate(responses: Sequence[Mapping]) -> Aggregate:
    """Single pass over ``responses`` in submission order.

    The most active location is tracked during the pass and only replaced
    on a strictly greater total, so on ties the first location to reach the
    maximum wins.
    """
    result = Aggregate()
    stats = result.location_stats
    most_active = result.most_active

    for response in responses:
        sentiment = sentiment_of(response)
        location = response.get("location")
        if not isinstance(location, str) or not location:
            raise ValidationError("location must be a non-empty string", {"field": "location"})
        lat, lng = _coordinate(response, "lat"), _coordinate(response, "lng")

        entry = stats.get(location)
        if entry is None:
            entry = LocationStats(lat=lat, lng=lng)
            stats[location] = entry

        if sentiment == AGREE:
            entry.agree += 1
            result.agree_count += 1
        else:
            entry.disagree += 1
            result.disagree_count += 1
        entry.total += 1
        result.total_responses += 1

        if entry.total > most_active.count:
            most_active.location = location
            most_active.count = entry.total

    return result


def rollup(responses: Sequence[Mapping]) -> Tuple[int, int, int]:
    """(total, agree, disagree) for the archive snapshot."""
    agg = aggregate(responses)
    return agg.total_responses, agg.agree_count, agg.disagree_count


def group_by_sentiment(responses: Sequence[Mapping]) -> Tuple[List[Mapping], List[Mapping]]:
    agree: List[Mapping] = []
    disagree: List[Mapping] = []
    for response in responses:
        (agree if sentiment_of(response) == AGREE else disagree).append(response)
    return agree, disagree
