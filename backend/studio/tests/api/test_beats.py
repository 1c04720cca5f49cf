from fastapi.testclient import TestClient


def _beat(client: TestClient, project: dict, name: str, order: int) -> dict:
    response = client.post(
        "/api/beats",
        json={"name": name, "type": "plot", "order": order, "project_id": project["id"]},
    )
    assert response.status_code == 201
    return response.json()


def test_beats_are_ordered(client: TestClient, project: dict):
    _beat(client, project, "Climax", 2)
    _beat(client, project, "Inciting incident", 0)

    beats = client.get("/api/beats", params={"projectId": project["id"]}).json()
    assert [b["name"] for b in beats] == ["Inciting incident", "Climax"]


def test_dependencies_carry_beat_names(client: TestClient, project: dict):
    setup = _beat(client, project, "Setup", 0)
    payoff = _beat(client, project, "Payoff", 1)

    created = client.post(
        "/api/beat-dependencies",
        json={"source_beat_id": setup["id"], "target_beat_id": payoff["id"]},
    )
    assert created.status_code == 201
    assert created.json()["dependency_type"] == "sequential"

    by_project = client.get("/api/beat-dependencies", params={"projectId": project["id"]}).json()
    assert len(by_project) == 1
    assert by_project[0]["source_name"] == "Setup"
    assert by_project[0]["target_name"] == "Payoff"

    by_beat = client.get("/api/beat-dependencies", params={"beatId": payoff["id"]}).json()
    assert [d["id"] for d in by_beat] == [created.json()["id"]]

    deleted = client.delete("/api/beat-dependencies", params={"id": created.json()["id"]})
    assert deleted.json() == {"success": True}


def test_dependencies_need_a_scope(client: TestClient):
    response = client.get("/api/beat-dependencies")
    assert response.status_code == 400
    assert response.json()["error"] == "Either projectId or beatId is required"


def test_pacing_suggestions(client: TestClient, project: dict):
    beat = _beat(client, project, "Midpoint", 1)
    for confidence in (0.4, 0.9):
        response = client.post(
            "/api/beat-pacing",
            json={
                "project_id": project["id"],
                "beat_id": beat["id"],
                "suggestion_type": "reorder",
                "reasoning": "Tension drops",
                "confidence": confidence,
            },
        )
        assert response.status_code == 201
        assert response.json()["beat_name"] == "Midpoint"

    suggestions = client.get("/api/beat-pacing", params={"projectId": project["id"]}).json()
    assert [s["confidence"] for s in suggestions] == [0.9, 0.4]

    applied = client.put(
        "/api/beat-pacing", params={"id": suggestions[0]["id"]}, json={"applied": True}
    )
    assert applied.json()["applied"] is True

    pending = client.get(
        "/api/beat-pacing", params={"projectId": project["id"], "applied": "false"}
    ).json()
    assert [s["id"] for s in pending] == [suggestions[1]["id"]]


def test_confidence_is_bounded(client: TestClient, project: dict):
    beat = _beat(client, project, "Midpoint", 1)
    response = client.post(
        "/api/beat-pacing",
        json={
            "project_id": project["id"],
            "beat_id": beat["id"],
            "suggestion_type": "trim",
            "reasoning": "Too long",
            "confidence": 1.5,
        },
    )
    assert response.status_code == 400
