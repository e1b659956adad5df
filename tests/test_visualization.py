import math

from conftest import make_response
from questionhour.analytics import derive_visualization

QUESTION = {"text": "I arrived to work before 9am today...", "theme": "transportation"}

RESPONSES = [
    make_response("agree", "10001", timestamp="2024-05-01T08:00:00Z"),
    make_response("disagree", "10001", timestamp="2024-05-01T08:05:00Z"),
    make_response("agree", "90210", 34.09, -118.40, timestamp="2024-05-01T08:10:00Z"),
]


def _stable(node):
    return {k: node[k] for k in ("id", "color", "x", "y", "type")}


def test_output_shape():
    data = derive_visualization(QUESTION, RESPONSES, rng=0)
    assert set(data) == {"graph", "points", "stats"}
    assert len(data["graph"]["nodes"]) == 4
    assert len(data["graph"]["links"]) == 3
    assert len(data["points"]) == 2
    assert data["stats"] == {
        "totalResponses": 3,
        "agreeCount": 2,
        "disagreeCount": 1,
        "mostActiveLocation": {"location": "10001", "zip": "10001", "count": 2},
    }


def test_rederivation_is_idempotent_apart_from_jitter():
    first = derive_visualization(QUESTION, RESPONSES)
    second = derive_visualization(QUESTION, RESPONSES)
    assert first["stats"] == second["stats"]
    assert [_stable(n) for n in first["graph"]["nodes"]] == [_stable(n) for n in second["graph"]["nodes"]]
    assert first["graph"]["links"] == second["graph"]["links"]
    assert [p["stats"] for p in first["points"]] == [p["stats"] for p in second["points"]]


def test_same_seed_gives_identical_output():
    assert derive_visualization(QUESTION, RESPONSES, rng=11) == derive_visualization(QUESTION, RESPONSES, rng=11)


def test_empty_question():
    data = derive_visualization(QUESTION, [], rng=0)
    assert data["graph"]["nodes"][0]["type"] == "question"
    assert len(data["graph"]["nodes"]) == 1
    assert data["graph"]["links"] == []
    assert data["points"] == []
    assert data["stats"]["mostActiveLocation"]["count"] == 0


def test_no_response_to_response_links():
    responses = [make_response("agree", "10001") for _ in range(5)]
    data = derive_visualization(QUESTION, responses, rng=0)
    root_id = data["graph"]["nodes"][0]["id"]
    assert all(link["source"] == root_id for link in data["graph"]["links"])


def test_disagree_nodes_use_lower_half_plane():
    responses = [make_response("disagree") for _ in range(4)]
    nodes = derive_visualization(QUESTION, responses, rng=0)["graph"]["nodes"][1:]
    # angle pi + i/4*pi => y <= 0
    assert all(n["y"] <= 1e-9 for n in nodes)
    assert nodes[0]["x"] == -50
    assert math.isclose(nodes[2]["x"], math.cos(1.5 * math.pi) * 110, abs_tol=1e-9)
