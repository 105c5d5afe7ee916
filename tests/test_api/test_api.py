"""
Tests for the HTTP API

Tests for biographer/api using FastAPI's TestClient with dependency
overrides in place of Supabase and the provider.
"""

import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from biographer.api.deps import get_openai_client, get_repository, limiter
from biographer.api.main import app
from biographer.core.config import settings
from biographer.core.exceptions import APIError, QuotaExceededError
from biographer.llm.api_clients import OpenAIClient


@pytest.fixture
def client(repository, fake_client):
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_openai_client] = lambda: fake_client
    limiter.enabled = False
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_reports_checks(self, client):
        body = client.get("/ready").json()
        assert set(body["checks"]) == {"supabase", "openai"}

    def test_unknown_route_uses_error_body(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_cors_preflight(self, client):
        response = client.options(
            "/functions/generate-cartoon",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type,authorization",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestGenerateCartoon:
    """Tests for POST /functions/generate-cartoon."""

    def test_success(self, client, repository, fake_client):
        story = repository.add_story(story_text="I went to the beach with my dog.", desired_panels=1)
        fake_client.replies["segment"] = '["A dog runs along the beach"]'
        fake_client.replies["polish"] = '["First, the dog races the waves."]'

        response = client.post("/functions/generate-cartoon", json={"storyId": story.id})

        assert response.status_code == 200
        assert response.json() == {"success": True, "panels": 1}
        assert repository.stories[story.id]["status"] == "complete"

    def test_advanced_mode_flag(self, client, repository, fake_client):
        story = repository.add_story(
            story_text="x",
            panel_descriptions=[{"description": "A cake with candles"}],
        )
        fake_client.replies["polish"] = '["First, the candles are lit."]'

        response = client.post(
            "/functions/generate-cartoon",
            json={"storyId": story.id, "advancedMode": True},
        )

        assert response.status_code == 200
        assert fake_client.calls_for("segment") == []

    def test_missing_story(self, client):
        response = client.post("/functions/generate-cartoon", json={"storyId": "nope"})

        assert response.status_code == 404
        assert response.json() == {"error": "Story not found: 'nope'"}

    def test_conflict(self, client, repository):
        story = repository.add_story(story_text="x", status="processing")

        response = client.post("/functions/generate-cartoon", json={"storyId": story.id})

        assert response.status_code == 409
        assert "cannot start a new generation" in response.json()["error"]

    def test_provider_failure(self, client, repository, fake_client):
        story = repository.add_story(story_text="A day at the zoo.", desired_panels=2)
        fake_client.replies["segment"] = APIError("HTTP 500: model overloaded", 500)

        response = client.post("/functions/generate-cartoon", json={"storyId": story.id})

        assert response.status_code == 500
        assert response.json() == {"error": "HTTP 500: model overloaded"}
        assert repository.stories[story.id]["status"] == "failed"

    def test_segmentation_quota_is_server_error(self, client, repository, fake_client):
        """Exhausted chat credits are an ordinary provider failure."""
        story = repository.add_story(story_text="A day at the zoo.", desired_panels=2)
        fake_client.replies["segment"] = APIError("HTTP 402: insufficient credits", 402)

        response = client.post("/functions/generate-cartoon", json={"storyId": story.id})

        assert response.status_code == 500
        assert response.json() == {"error": "HTTP 402: insufficient credits"}
        assert repository.stories[story.id]["status"] == "failed"

    def test_transport_failure_keeps_cors_headers(self, client, repository):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        app.dependency_overrides[get_openai_client] = lambda: OpenAIClient(
            api_key="test-key",
            base_url="https://provider.test/v1",
            transport=httpx.MockTransport(handler),
        )
        story = repository.add_story(story_text="A day at the zoo.", desired_panels=2)

        response = client.post(
            "/functions/generate-cartoon",
            json={"storyId": story.id},
            headers={"Origin": "https://app.example.com"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Chat completion request failed: timed out"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert repository.stories[story.id]["status"] == "failed"


    def test_validation_error(self, client):
        response = client.post("/functions/generate-cartoon", json={})

        assert response.status_code == 422
        assert "storyId" in response.json()["error"]


class TestHelperFunctions:
    """Tests for the analyze, filter and transcribe endpoints."""

    def test_analyze_story(self, client, repository, fake_client):
        story = repository.add_story(story_text="We went hiking.")
        fake_client.replies["questions"] = '["Where did you hike?"]'

        response = client.post("/functions/analyze-story", json={"storyId": story.id})

        assert response.json() == {"success": True, "questions": ["Where did you hike?"]}

    def test_analyze_answers(self, client, fake_client):
        fake_client.replies["answers"] = '{"1": "Grandpa"}'

        response = client.post("/functions/analyze-answers", json={
            "transcription": "Grandpa taught me.",
            "questions": ["Where?", "Who taught you?"],
        })

        assert response.json() == {"success": True, "answers": {"0": "", "1": "Grandpa"}}

    def test_filter_conversation(self, client, fake_client):
        fake_client.replies["filter"] = "A boy and his grandfather fish at dawn."

        response = client.post("/functions/filter-conversation", json={"conversationText": "uh so we fished"})

        assert response.json() == {"success": True, "storyPrompt": "A boy and his grandfather fish at dawn."}

    def test_transcribe_audio(self, client, fake_client):
        fake_client.transcript_text = "hello"
        audio = base64.b64encode(b"audio").decode()

        response = client.post("/functions/transcribe-audio", json={"audio": audio})

        assert response.json() == {"success": True, "text": "hello"}

    def test_transcribe_without_audio(self, client):
        response = client.post("/functions/transcribe-audio", json={})

        assert response.status_code == 500
        assert "No audio data provided" in response.json()["error"]

    def test_transcribe_quota_exceeded(self, client, fake_client):
        async def out_of_credits(*args, **kwargs):
            raise QuotaExceededError("Transcription quota exceeded. Add credits or type manually.", 429)

        fake_client.transcribe = out_of_credits

        response = client.post("/functions/transcribe-audio", json={"audio": base64.b64encode(b"a").decode()})

        assert response.status_code == 402
        assert response.json() == {
            "error": "Transcription quota exceeded. Add credits or type manually.",
            "code": "quota_exceeded",
        }


class TestStories:
    """Tests for /api/stories."""

    def test_create_and_fetch(self, client, repository):
        response = client.post("/api/stories", json={
            "user_id": "user-9",
            "story_text": "My first day of school.",
            "desired_panels": 3,
            "animation_style": "watercolor",
            "temperature": 0.7,
        })

        assert response.status_code == 201
        created = response.json()
        assert created["status"] == "pending"
        assert created["temperature"] == 0.7

        fetched = client.get(f"/api/stories/{created['id']}").json()
        assert fetched["story"]["animation_style"] == "watercolor"
        assert fetched["panels"] == []

    def test_create_rejects_unknown_style(self, client):
        response = client.post("/api/stories", json={
            "user_id": "user-9",
            "story_text": "x",
            "animation_style": "oil_painting",
        })
        assert response.status_code == 422

    def test_create_rejects_too_many_panel_descriptions(self, client):
        response = client.post("/api/stories", json={
            "user_id": "user-9",
            "story_text": "x",
            "panel_descriptions": [{"description": f"Scene {n}"} for n in range(settings.max_panel_count + 1)],
        })
        assert response.status_code == 422

    def test_panel_bound_follows_settings(self, client, repository):
        story = repository.add_story(story_text="x")

        too_many = client.patch(f"/api/stories/{story.id}", json={"desired_panels": settings.max_panel_count + 1})
        at_limit = client.patch(f"/api/stories/{story.id}", json={"desired_panels": settings.max_panel_count})

        assert too_many.status_code == 422
        assert at_limit.status_code == 200


    def test_fetch_returns_ordered_panels(self, client, repository):
        story = repository.add_story(story_text="x", status="complete")
        for index in (1, 0):
            repository.panels.append({
                "story_id": story.id, "order_index": index, "scene_text": f"s{index}", "image_url": "u",
            })

        panels = client.get(f"/api/stories/{story.id}").json()["panels"]

        assert [panel["order_index"] for panel in panels] == [0, 1]

    def test_update(self, client, repository):
        story = repository.add_story(story_text="x", status="failed")

        response = client.patch(f"/api/stories/{story.id}", json={"desired_panels": 4, "status": "pending"})

        assert response.status_code == 200
        assert response.json()["desired_panels"] == 4
        assert response.json()["status"] == "pending"

    def test_update_while_processing(self, client, repository):
        story = repository.add_story(story_text="x", status="processing")

        response = client.patch(f"/api/stories/{story.id}", json={"desired_panels": 4})

        assert response.status_code == 409

    def test_update_cannot_mark_complete(self, client, repository):
        story = repository.add_story(story_text="x")

        response = client.patch(f"/api/stories/{story.id}", json={"status": "complete"})

        assert response.status_code == 422

    def test_empty_update(self, client, repository):
        story = repository.add_story(story_text="x")

        response = client.patch(f"/api/stories/{story.id}", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "No updates provided"}

    def test_delete(self, client, repository):
        story = repository.add_story(story_text="x")
        repository.panels.append({"story_id": story.id, "order_index": 0, "scene_text": "s", "image_url": "u"})

        response = client.delete(f"/api/stories/{story.id}")

        assert response.json() == {"success": True}
        assert story.id not in repository.stories
        assert repository.panels == []

    def test_photo_upload(self, client, repository):
        story = repository.add_story(story_text="x", user_id="user-7")

        response = client.post(
            f"/api/stories/{story.id}/photo",
            files={"file": ("me.PNG", b"png bytes", "image/png")},
        )

        assert response.status_code == 200
        [path] = repository.uploads
        assert path.startswith("user-7/")
        assert path.endswith(".png")
        assert response.json()["photo_url"] == f"https://storage.test/cartoons/{path}"
