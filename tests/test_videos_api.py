"""HTTP tests for /api/v1/videos and the health check."""
import pytest

from conftest import ALICE_PASSWORD, BOB_PASSWORD, bearer, login

VIDEO = {
    "title": "Down the rabbit hole",
    "description": "A very long fall",
    "video_file": "https://media.example.com/videos/rabbit-hole.mp4",
    "thumbnail": "https://media.example.com/thumbs/rabbit-hole.jpg",
    "duration": 312.5,
}


@pytest.fixture
def alice_token(client, alice):
    return login(client, ALICE_PASSWORD, username="alice")["access_token"]


class TestCreateVideo:
    def test_create_video(self, client, alice, alice_token):
        resp = client.post("/api/v1/videos", json=VIDEO, headers=bearer(alice_token))

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["owner_id"] == alice
        assert data["views"] == 0
        assert data["is_published"] is True
        assert data["duration"] == 312.5

    def test_requires_authentication(self, client):
        assert client.post("/api/v1/videos", json=VIDEO).status_code == 401

    @pytest.mark.parametrize("field", ["title", "description", "video_file", "thumbnail", "duration"])
    def test_required_fields(self, client, alice_token, field):
        payload = {k: v for k, v in VIDEO.items() if k != field}

        resp = client.post("/api/v1/videos", json=payload, headers=bearer(alice_token))

        assert resp.status_code == 422
        assert field in resp.get_json()["details"]

    def test_negative_duration(self, client, alice_token):
        resp = client.post("/api/v1/videos", json=dict(VIDEO, duration=-1), headers=bearer(alice_token))

        assert resp.status_code == 422


class TestListVideos:
    def test_lists_only_own_videos(self, client, alice_token, bob):
        bob_token = login(client, BOB_PASSWORD, username="bob")["access_token"]
        client.post("/api/v1/videos", json=VIDEO, headers=bearer(alice_token))
        client.post("/api/v1/videos", json=dict(VIDEO, title="Bob's video"), headers=bearer(bob_token))

        resp = client.get("/api/v1/videos", headers=bearer(alice_token))

        assert resp.status_code == 200
        body = resp.get_json()
        assert [v["title"] for v in body["data"]] == ["Down the rabbit hole"]
        assert body["meta"] == {"page": 1, "limit": 20, "total": 1}

    def test_pagination(self, client, alice_token):
        for i in range(3):
            client.post("/api/v1/videos", json=dict(VIDEO, title=f"Part {i}"), headers=bearer(alice_token))

        resp = client.get("/api/v1/videos?page=2&limit=2", headers=bearer(alice_token))

        body = resp.get_json()
        assert len(body["data"]) == 1
        assert body["meta"] == {"page": 2, "limit": 2, "total": 3}

    def test_bad_pagination(self, client, alice_token):
        resp = client.get("/api/v1/videos?page=abc", headers=bearer(alice_token))

        assert resp.status_code == 400


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "database": "ok"}
