import logging
import uuid
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from studio import crud


def _faction(client: TestClient, project: dict, name: str) -> dict:
    response = client.post("/api/factions", json={"name": name, "project_id": project["id"]})
    assert response.status_code == 201
    return response.json()


def test_relationship_needs_two_factions(client: TestClient, project: dict):
    guild = _faction(client, project, "Thieves Guild")

    response = client.post(
        "/api/faction-relationships",
        json={"faction_a_id": guild["id"], "faction_b_id": guild["id"], "description": "Self"},
    )
    assert response.status_code == 400


def test_relationship_roundtrip(client: TestClient, project: dict):
    guild = _faction(client, project, "Thieves Guild")
    watch = _faction(client, project, "City Watch")

    created = client.post(
        "/api/faction-relationships",
        json={
            "faction_a_id": guild["id"],
            "faction_b_id": watch["id"],
            "relationship_type": "rivalry",
            "description": "Old grudge",
        },
    )
    assert created.status_code == 201
    relationship = created.json()

    for faction in (guild, watch):
        listed = client.get("/api/faction-relationships", params={"factionId": faction["id"]}).json()
        assert [r["id"] for r in listed] == [relationship["id"]]

    assert client.delete(f"/api/faction-relationships/{relationship['id']}").status_code == 200
    assert client.get(f"/api/faction-relationships/{relationship['id']}").status_code == 404


def test_lore_category_is_validated(client: TestClient, project: dict):
    guild = _faction(client, project, "Thieves Guild")
    response = client.post(
        "/api/faction-lore",
        json={
            "faction_id": guild["id"],
            "title": "Origins",
            "content": "Founded in the sewers.",
            "category": "gossip",
            "updated_by": "writer",
        },
    )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid value for category")


def test_summary(client: TestClient, project: dict):
    guild = _faction(client, project, "Thieves Guild")
    watch = _faction(client, project, "City Watch")
    client.post(
        "/api/characters",
        json={"name": "Vex", "project_id": project["id"], "faction_id": guild["id"]},
    )
    client.post(
        "/api/faction-relationships",
        json={"faction_a_id": watch["id"], "faction_b_id": guild["id"], "description": "Hunt them"},
    )
    client.post(
        "/api/faction-lore",
        json={
            "faction_id": guild["id"],
            "title": "Origins",
            "content": "Founded in the sewers.",
            "category": "history",
            "updated_by": "writer",
        },
    )
    for date, title in (("1203", "Great Heist"), ("1190", "Founding")):
        client.post(
            "/api/faction-events",
            json={
                "faction_id": guild["id"],
                "title": title,
                "description": "",
                "date": date,
                "event_type": "founding" if title == "Founding" else "achievement",
                "created_by": "writer",
            },
        )

    summary = client.get(f"/api/factions/{guild['id']}/summary").json()

    assert summary["faction"]["name"] == "Thieves Guild"
    assert [m["name"] for m in summary["members"]] == ["Vex"]
    assert len(summary["relationships"]) == 1
    assert [entry["title"] for entry in summary["lore"]] == ["Origins"]
    assert [e["title"] for e in summary["events"]] == ["Founding", "Great Heist"]
    assert summary["media"] == []
    assert summary["achievements"] == []


def test_summary_of_unknown_faction(client: TestClient):
    response = client.get("/api/factions/00000000-0000-0000-0000-000000000000/summary")
    assert response.status_code == 404
    assert response.json()["error"] == "Faction not found"


def test_summary_keeps_other_sections_when_one_fails(
    client: TestClient, project: dict, monkeypatch, caplog
):
    guild = _faction(client, project, "Thieves Guild")
    client.post(
        "/api/characters",
        json={"name": "Vex", "project_id": project["id"], "faction_id": guild["id"]},
    )
    client.post(
        "/api/faction-lore",
        json={
            "faction_id": guild["id"],
            "title": "Origins",
            "content": "Founded in the sewers.",
            "category": "history",
            "updated_by": "writer",
        },
    )

    def broken_media(session, faction_id):
        raise OperationalError("SELECT faction_media", {}, Exception("relation does not exist"))

    monkeypatch.setattr(crud, "_faction_media", broken_media)

    with caplog.at_level(logging.WARNING, logger="studio.crud"):
        response = client.get(f"/api/factions/{guild['id']}/summary")

    assert response.status_code == 200
    summary = response.json()
    assert summary["media"] == []
    assert [m["name"] for m in summary["members"]] == ["Vex"]
    assert [entry["title"] for entry in summary["lore"]] == ["Origins"]
    assert "Error fetching faction media" in caplog.text


def test_failed_section_rolls_back_the_session():
    session = MagicMock()

    def failing(session, faction_id):
        raise OperationalError("SELECT 1", {}, Exception("aborted"))

    assert crud._faction_section(session, "events", uuid.uuid4(), failing) == []
    session.rollback.assert_called_once()
