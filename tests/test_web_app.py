import pytest
from fastapi.testclient import TestClient

from pedigree_py.storage import DogStore
from pedigree_py.web.app import app, get_lookup, get_store


FAMILY = [
    {"id": "F", "name": "Champion Duke", "sex": "Male"},
    {"id": "M", "name": "Lady Grace", "sex": "Female"},
    {"id": "S", "name": "Max", "sex": "Male", "sireId": "F", "damId": "M"},
    {"id": "D", "name": "Bella", "sex": "Female", "sireId": "F", "damId": "M"},
    {"id": "U", "name": "Stranger", "sex": "Female"},
    {"id": "PUP", "name": "Pup", "sireId": "S", "damId": "D"},
]


@pytest.fixture
def client(tmp_path):
    store = DogStore(tmp_path)
    store.import_dogs(FAMILY)
    app.dependency_overrides[get_lookup] = lambda: store
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        store.close()


def test_routes_registered():
    paths = {getattr(r, "path", None) for r in app.routes}
    assert "/api/linebreeding" in paths
    assert "/api/dog/{dog_id}" in paths


def test_full_sibling_mating(client):
    r = client.get("/api/linebreeding", params={"sireId": "S", "damId": "D", "generations": 3})
    assert r.status_code == 200
    body = r.json()
    assert body["inbreedingCoefficient"] == 0.25
    assert body["geneticDiversity"] == 0.75
    assert body["riskLevel"] == "Very High"
    assert [a["dog"]["id"] for a in body["commonAncestors"]] == ["F", "M"]
    assert body["commonAncestors"][0]["occurrences"] == 1
    assert body["commonAncestors"][0]["dog"]["name"] == "Champion Duke"
    assert len(body["recommendations"]) == 2
    assert body["warnings"] == []


def test_unrelated_mating_uses_default_generations(client):
    r = client.get("/api/linebreeding", params={"sireId": "S", "damId": "U"})
    assert r.status_code == 200
    body = r.json()
    assert body["generations"] == 6
    assert body["inbreedingCoefficient"] == 0.0
    assert body["commonAncestors"] == []


@pytest.mark.parametrize(
    "params",
    [
        {"sireId": "S", "damId": "D", "generations": 0},
        {"sireId": "S", "damId": "D", "generations": 11},
        {"sireId": "S", "damId": "S", "generations": 3},
    ],
)
def test_invalid_requests(client, params):
    assert client.get("/api/linebreeding", params=params).status_code == 422


def test_unknown_sire(client):
    r = client.get("/api/linebreeding", params={"sireId": "nobody", "damId": "D"})
    assert r.status_code == 404
    assert "nobody" in r.json()["detail"]


def test_dog_crud(client):
    assert client.get("/api/dog/F").json()["name"] == "Champion Duke"
    assert client.get("/api/dog/zzz").status_code == 404

    r = client.post("/api/dog", json={"id": "N", "name": "Newcomer", "sex": "Female", "sireId": "F"})
    assert r.status_code == 201
    assert r.json()["sireId"] == "F"
    assert client.post("/api/dog", json={"id": "N"}).status_code == 409
    assert client.post("/api/dog", json={"name": "no id"}).status_code == 422

    r = client.put("/api/dog/N", json={"name": "Renamed", "sex": "Female"})
    assert r.status_code == 200
    assert client.get("/api/dog/N").json()["name"] == "Renamed"
    assert client.put("/api/dog/zzz", json={"name": "x"}).status_code == 404


def test_dog_inbreeding(client):
    body = client.get("/api/dog/PUP/inbreeding", params={"generations": 3}).json()
    assert body["inbreedingCoefficient"] == 0.25
    assert body["sireId"] == "S" and body["damId"] == "D"
    assert client.get("/api/dog/nobody/inbreeding").status_code == 404


def test_dog_pedigree(client):
    r = client.get("/api/dog/PUP/pedigree", params={"generations": 2})
    assert r.status_code == 200
    tree = r.json()["pedigree"]
    assert tree["dog"]["id"] == "PUP"
    assert tree["sire"]["sire"]["dog"]["id"] == "F"
    assert client.get("/api/dog/PUP/pedigree", params={"generations": 11}).status_code == 422
    assert client.get("/api/dog/nobody/pedigree").status_code == 404


def test_dog_influence(client):
    body = client.get("/api/dog/PUP/influence", params={"generations": 2}).json()
    assert body["influence"]["S"] == 0.5
    assert body["influence"]["F"] == 0.5
    assert client.get("/api/dog/nobody/influence").status_code == 404


def test_store_unavailable_returns_503():
    # no override and no startup: the store was never opened
    client = TestClient(app)
    assert client.get("/api/dog/F").status_code == 503
