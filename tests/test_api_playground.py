"""Tests for playground, team, and service endpoints."""

from __future__ import annotations

import json

from prompt_craft.core.errors import ExternalServiceError


def _events(resp) -> list[str]:
    return [line[6:] for line in resp.text.splitlines() if line.startswith("data: ")]


class TestAssemble:
    def test_assemble(self, client):
        resp = client.post(
            "/api/v1/assemble",
            json={"config": {"persona": "You are Bob", "skills": ["x"], "personality": "Casual"}},
        )
        assert resp.status_code == 200
        assert resp.json()["system_prompt"] == (
            "Identity: You are Bob\n\n"
            "Skills: You are proficient in x.\n\n"
            "Personality: Maintain a casual tone."
        )

    def test_blank_config(self, client):
        resp = client.post("/api/v1/assemble", json={"config": {"personality": None}})
        assert resp.json()["system_prompt"] == ""


class TestChat:
    def test_stream(self, client, fake_llm):
        resp = client.post(
            "/api/v1/chat",
            json={
                "system_prompt": "Be kind.",
                "message": "hi",
                "history": [{"role": "user", "text": "a"}, {"role": "model", "text": "b"}],
            },
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        events = _events(resp)
        assert events[-1] == "[DONE]"
        assert [json.loads(e)["text"] for e in events[:-1]] == ["Hel", "lo"]

    def test_backend_failure_streams_error(self, client, fake_llm):
        fake_llm.fragments = []
        fake_llm.stream_error = ExternalServiceError("API key is not configured.")
        resp = client.post("/api/v1/chat", json={"system_prompt": "s", "message": "hi"})
        events = _events(resp)
        assert json.loads(events[0])["text"].startswith("Error: Could not get response from AI.")
        assert events[-1] == "[DONE]"

    def test_image_only_message(self, client, fake_llm):
        image = "data:image/jpeg;base64,/9j/4AAQ"
        resp = client.post("/api/v1/chat", json={"system_prompt": "s", "image": image})
        assert resp.status_code == 200
        assert fake_llm.images == [image]
        assert fake_llm.calls[0][1][2] == ""

    def test_history_image_forwarded(self, client, fake_llm):
        image = "data:image/png;base64,iVBORw=="
        client.post(
            "/api/v1/chat",
            json={
                "system_prompt": "s",
                "message": "and this?",
                "history": [{"role": "user", "text": "look", "image": image}],
            },
        )
        assert fake_llm.calls[0][1][1][0].image == image

    def test_image_must_be_data_url(self, client, fake_llm):
        resp = client.post(
            "/api/v1/chat",
            json={"system_prompt": "s", "message": "hi", "image": "https://example.test/cat.png"},
        )
        assert resp.status_code == 422
        assert fake_llm.calls == []

    def test_empty_message_without_image(self, client, fake_llm):
        resp = client.post("/api/v1/chat", json={"system_prompt": "s", "message": " "})
        assert resp.status_code == 422
        assert fake_llm.calls == []

    def test_invalid_role(self, client):
        resp = client.post(
            "/api/v1/chat",
            json={"system_prompt": "s", "message": "hi", "history": [{"role": "system", "text": "x"}]},
        )
        assert resp.status_code == 422


class TestTeam:
    def test_no_team(self, client):
        assert client.get("/api/v1/team").json() == {"id": None, "name": None, "members": []}

    def test_team_and_invite(self, client, mock_db):
        team = mock_db.insert("teams", {"name": "Acme", "owner_id": "user-1"})
        mock_db.insert("team_members", {"user_id": "user-1", "team_id": team["id"], "role": "owner"})

        body = client.get("/api/v1/team").json()
        assert body["name"] == "Acme"
        assert [m["user_id"] for m in body["members"]] == ["user-1"]

        resp = client.post("/api/v1/team/invites", json={"email": "new@acme.test", "role": "viewer"})
        assert resp.status_code == 201
        assert resp.json()["team_id"] == team["id"]

    def test_invite_without_team(self, client):
        resp = client.post("/api/v1/team/invites", json={"email": "new@acme.test"})
        assert resp.status_code == 404


class TestService:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["service"] == "promptcraft"
