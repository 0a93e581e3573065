import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.core.config import config
from src.core.models import EventType, WebhookEvent
from src.webhooks.auth import compute_signature, verify_github_signature
from src.webhooks.dispatcher import WebhookDispatcher
from src.webhooks.handlers.push import PushEventHandler
from src.webhooks.models import WebhookResponse
from src.webhooks.router import router


@pytest.fixture
def app() -> FastAPI:
    """Create FastAPI test app with webhook router."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/webhooks")
    test_app.dependency_overrides[verify_github_signature] = lambda: True
    return test_app


@pytest.fixture
def push_payload() -> dict[str, object]:
    return {
        "ref": "refs/heads/main",
        "after": "abc1234def5678",
        "repository": {"id": 123, "name": "hello", "full_name": "octocat/hello"},
        "installation": {"id": 42},
        "sender": {"login": "octocat"},
    }


class TestWebhookRouter:
    """Test webhook router endpoint."""

    @pytest.mark.asyncio
    async def test_push_is_dispatched(self, app: FastAPI, push_payload: dict[str, object]) -> None:
        with patch("src.webhooks.router.dispatcher.dispatch", new_callable=AsyncMock) as mock_dispatch:
            mock_dispatch.return_value = {"status": "processed"}

            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post("/webhooks/github", json=push_payload, headers={"X-GitHub-Event": "push"})

        assert response.status_code == 200
        assert response.json()["status"] == "event dispatched successfully"
        event_arg = mock_dispatch.call_args[0][0]
        assert event_arg.event_type == EventType.PUSH
        assert event_arg.installation_id == 42

    @pytest.mark.asyncio
    async def test_missing_event_header(self, app: FastAPI, push_payload: dict[str, object]) -> None:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/github", json=push_payload)

        assert response.status_code == 400
        assert "Missing X-GitHub-Event header" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_unsupported_event_type(self, app: FastAPI, push_payload: dict[str, object]) -> None:
        with patch("src.webhooks.router.dispatcher.dispatch", new_callable=AsyncMock) as mock_dispatch:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post(
                    "/webhooks/github", json=push_payload, headers={"X-GitHub-Event": "pull_request"}
                )

        assert response.status_code == 200
        assert response.json()["status"] == "event received but not supported"
        mock_dispatch.assert_not_awaited()


class TestSignature:
    @pytest.fixture
    def signed_app(self) -> FastAPI:
        test_app = FastAPI()
        test_app.include_router(router, prefix="/webhooks")
        return test_app

    @pytest.mark.asyncio
    async def test_missing_signature(self, signed_app: FastAPI, push_payload: dict[str, object]) -> None:
        async with AsyncClient(transport=ASGITransport(app=signed_app), base_url="http://test") as client:
            response = await client.post("/webhooks/github", json=push_payload, headers={"X-GitHub-Event": "push"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_and_valid_signature(self, signed_app: FastAPI, push_payload: dict[str, object]) -> None:
        body = json.dumps(push_payload).encode()

        with (
            patch.object(config.github, "webhook_secret", "s3cret"),
            patch("src.webhooks.router.dispatcher.dispatch", new_callable=AsyncMock) as mock_dispatch,
        ):
            mock_dispatch.return_value = {"status": "processed"}
            async with AsyncClient(transport=ASGITransport(app=signed_app), base_url="http://test") as client:
                invalid = await client.post(
                    "/webhooks/github",
                    content=body,
                    headers={"X-GitHub-Event": "push", "X-Hub-Signature-256": compute_signature("wrong", body)},
                )
                valid = await client.post(
                    "/webhooks/github",
                    content=body,
                    headers={"X-GitHub-Event": "push", "X-Hub-Signature-256": compute_signature("s3cret", body)},
                )

        assert invalid.status_code == 401
        assert valid.status_code == 200


class TestDispatcher:
    @pytest.mark.asyncio
    async def test_dispatch_to_push_handler(self, push_payload: dict[str, object]) -> None:
        dispatcher = WebhookDispatcher()
        dispatcher.register_handler(PushEventHandler())

        with patch("src.webhooks.handlers.push.task_queue.enqueue", new_callable=AsyncMock) as mock_enqueue:
            mock_enqueue.return_value = "push_octocat/hello_1"
            result = await dispatcher.dispatch(WebhookEvent(EventType.PUSH, push_payload))

        assert result["status"] == "processed"
        assert result["result"]["status"] == "enqueued"
        assert result["result"]["task_id"] == "push_octocat/hello_1"
        mock_enqueue.assert_awaited_once_with(
            event_type="push", repo_full_name="octocat/hello", installation_id=42, payload=push_payload
        )

    @pytest.mark.asyncio
    async def test_duplicate_delivery_is_ignored(self, push_payload: dict[str, object]) -> None:
        with patch("src.webhooks.handlers.push.task_queue.enqueue", new_callable=AsyncMock) as mock_enqueue:
            mock_enqueue.return_value = None
            response = await PushEventHandler().handle(WebhookEvent(EventType.PUSH, push_payload))

        assert response == WebhookResponse(status="ignored", detail="Duplicate delivery", event_type="push")

    @pytest.mark.asyncio
    async def test_no_handler_registered(self, push_payload: dict[str, object]) -> None:
        result = await WebhookDispatcher().dispatch(WebhookEvent(EventType.PUSH, push_payload))

        assert result["status"] == "skipped"
