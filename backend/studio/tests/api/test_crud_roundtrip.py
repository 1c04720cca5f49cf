import uuid

from fastapi.testclient import TestClient


def test_project_lifecycle(client: TestClient):
    created = client.post("/api/projects", json={"name": "Ashen Crown", "description": "Epic"})
    assert created.status_code == 201
    project_id = created.json()["id"]

    updated = client.put(f"/api/projects/{project_id}", json={"description": "Dark epic"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Ashen Crown"
    assert updated.json()["description"] == "Dark epic"

    deleted = client.delete(f"/api/projects/{project_id}")
    assert deleted.json() == {"success": True, "message": "Project deleted successfully"}

    missing = client.get(f"/api/projects/{project_id}")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Project not found"}


def test_missing_field_is_named(client: TestClient):
    response = client.post("/api/projects", json={"description": "no name"})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required field: name"


def test_trait_roundtrip(client: TestClient, character: dict):
    created = client.post(
        "/api/traits",
        json={"character_id": character["id"], "type": "personality", "description": "Stubborn"},
    )
    assert created.status_code == 201
    trait = created.json()

    listed = client.get(f"/api/characters/{character['id']}/traits").json()
    assert [t["id"] for t in listed] == [trait["id"]]

    updated = client.put(f"/api/traits/{trait['id']}", json={"description": "Loyal"})
    assert updated.json()["description"] == "Loyal"
    assert updated.json()["type"] == "personality"

    assert client.delete(f"/api/traits/{trait['id']}").status_code == 200
    assert client.get(f"/api/traits/{trait['id']}").status_code == 404


def test_trait_for_unknown_character(client: TestClient):
    response = client.post(
        "/api/traits",
        json={"character_id": str(uuid.uuid4()), "type": "quirk", "description": "Hums"},
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Character not found"


def test_deleting_project_cascades(client: TestClient, project: dict, character: dict):
    client.delete(f"/api/projects/{project['id']}")
    assert client.get(f"/api/characters/{character['id']}").status_code == 404


def test_voice_ids_are_unique(client: TestClient, project: dict):
    body = {"voice_id": "narrator-1", "name": "Narrator", "project_id": project["id"]}
    assert client.post("/api/voices", json=body).status_code == 201

    duplicate = client.post("/api/voices", json=body)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False


def test_assets_pagination(client: TestClient):
    for i in range(5):
        response = client.post(
            "/api/assets", json={"name": f"Sword {i}", "type": "equipment"}
        )
        assert response.status_code == 201
    client.post("/api/assets", json={"name": "Tavern", "type": "locations"})

    page = client.get(
        "/api/assets",
        params={"category": "character", "limit": 2, "page": 2, "sortBy": "name", "sortOrder": "asc"},
    ).json()
    assert page["total_assets"] == 5
    assert page["total_pages"] == 3
    assert page["current_page"] == 2
    assert [a["name"] for a in page["assets"]] == ["Sword 2", "Sword 3"]

    story = client.get("/api/assets", params={"category": "story"}).json()
    assert [a["name"] for a in story["assets"]] == ["Tavern"]


def test_scene_act_must_share_project(client: TestClient, project: dict):
    other = client.post("/api/projects", json={"name": "Side Story"}).json()
    foreign_act = client.post("/api/acts", json={"name": "Act I", "project_id": other["id"]}).json()
    own_act = client.post("/api/acts", json={"name": "Act I", "project_id": project["id"]}).json()

    rejected = client.post(
        "/api/scenes",
        json={"name": "Docks", "project_id": project["id"], "act_id": foreign_act["id"]},
    )
    assert rejected.status_code == 400
    assert rejected.json()["error"] == "Act does not belong to the scene's project"

    scene = client.post(
        "/api/scenes",
        json={"name": "Docks", "project_id": project["id"], "act_id": own_act["id"]},
    ).json()
    moved = client.put(f"/api/scenes/{scene['id']}", json={"act_id": foreign_act["id"]})
    assert moved.status_code == 400
