"""
Tests for main application
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from airline_assistant.container import ServiceContainer
from airline_assistant.main import create_app
from airline_assistant.services.knowledge_preloader import KnowledgePreloader
from airline_assistant.types import CompletionError, ConfigurationError, ScrapedKnowledgeBase


@pytest.fixture
def knowledge_base():
    return ScrapedKnowledgeBase(baggage="Checked baggage allowance is 23 kg.")


@pytest.fixture
def scraper(knowledge_base):
    scraper = MagicMock()
    scraper.get_knowledge_base = AsyncMock(return_value=knowledge_base)
    scraper.close = AsyncMock()
    return scraper


@pytest.fixture
def flight_client():
    client = MagicMock()
    client.is_configured = True
    client.search = AsyncMock(return_value=[])
    client.close = AsyncMock()
    return client


@pytest.fixture
def completion():
    client = MagicMock()
    client.generate = AsyncMock(return_value="Checked baggage allowance is 23 kg per passenger.")
    client.verify_key = AsyncMock(return_value="API key is working")
    client.close = AsyncMock()
    return client


@pytest.fixture
def container(scraper, flight_client, completion):
    return ServiceContainer(
        flight_client=flight_client,
        scraper=scraper,
        knowledge=KnowledgePreloader(scraper, interval=60, max_age=3600),
        completion=completion,
        start_preloader=False,
    )


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


CHAT_BODY = {"messages": [{"role": "user", "content": "What is the baggage allowance?"}]}


class TestChatEndpoint:
    """Test POST /chat and /api/chat"""

    @pytest.mark.parametrize("path", ["/chat", "/api/chat"])
    def test_chat(self, client, completion, path):
        response = client.post(path, json=CHAT_BODY)

        assert response.status_code == 200
        assert response.json() == {"response": "Checked baggage allowance is 23 kg per passenger."}
        completion.generate.assert_awaited_once()

    @pytest.mark.parametrize("body", [
        {},
        {"messages": "hello"},
        {"messages": []},
        {"messages": [{"content": "missing role"}]},
    ])
    def test_malformed_request(self, client, completion, body):
        response = client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Messages array is required"}
        completion.generate.assert_not_awaited()

    def test_rate_limited(self, client, completion):
        completion.generate.side_effect = CompletionError("quota exceeded", 429, "RATE_LIMITED")

        response = client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 429
        assert response.json()["error"].startswith("Rate limit exceeded")

    def test_invalid_api_key(self, client, completion):
        completion.generate.side_effect = CompletionError("bad key", 401, "INVALID_API_KEY")

        response = client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 401
        assert response.json()["error"].startswith("Invalid API key")

    def test_service_unavailable(self, client, completion):
        completion.generate.side_effect = CompletionError("upstream down", 500, "SERVICE_UNAVAILABLE")

        response = client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 500
        assert "temporarily unavailable" in response.json()["error"]

    def test_other_completion_failure_keeps_upstream_message(self, client, completion):
        completion.generate.side_effect = CompletionError("context length exceeded", 400, "COMPLETION_FAILED")

        response = client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 400
        assert response.json() == {"error": "context length exceeded"}

    def test_unexpected_failure(self, client, completion):
        completion.generate.side_effect = RuntimeError("boom")

        response = client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 500
        assert response.json() == {"error": "Error communicating with OpenAI API. Please try again later."}


class TestHealthEndpoint:
    """Test GET /api/health"""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert "timestamp" in data
        assert "version" in data
        assert data["components"]["flight_search"]["status"] == "configured"
        assert data["components"]["knowledge_base"]["status"] == "not_loaded"

    def test_knowledge_state_after_first_info_query(self, client):
        client.post("/api/chat", json=CHAT_BODY)

        data = client.get("/api/health").json()
        assert data["components"]["knowledge_base"]["status"] == "live"

    def test_flight_search_disabled(self, client, flight_client):
        flight_client.is_configured = False
        data = client.get("/api/health").json()
        assert data["components"]["flight_search"]["status"] == "disabled"


class TestKeyCheckEndpoint:
    """Test GET /api/test-key"""

    def test_key_is_valid(self, client):
        response = client.get("/api/test-key")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "API key is valid and working!",
            "testResponse": "API key is working",
        }

    @pytest.mark.parametrize("error, expected_status, expected_error", [
        (CompletionError("bad key", 401, "INVALID_API_KEY"), 401, "Invalid API key. Please check your API key."),
        (CompletionError("quota", 429, "RATE_LIMITED"), 429, "Rate limit exceeded. Please try again later."),
        (CompletionError("upstream down", 500, "SERVICE_UNAVAILABLE"), 500, "upstream down"),
    ])
    def test_key_check_failures(self, client, completion, error, expected_status, expected_error):
        completion.verify_key.side_effect = error

        response = client.get("/api/test-key")

        assert response.status_code == expected_status
        assert response.json() == {"success": False, "error": expected_error}


class TestScrapeEndpoint:
    """Test GET /api/scrape"""

    def test_scrape(self, client):
        response = client.get("/api/scrape")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["baggage"] == "Checked baggage allowance is 23 kg."
        assert data["data"]["is_fallback"] is False

    def test_scrape_failure(self, client, scraper):
        scraper.get_knowledge_base.side_effect = RuntimeError("scrape exploded")

        response = client.get("/api/scrape")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "scrape exploded"}


class TestEvaluateEndpoint:
    """Test POST /api/evaluate"""

    def test_evaluate(self, client):
        response = client.post("/api/evaluate", json={
            "question": "What is the baggage allowance?",
            "ground_truth": "Checked baggage allowance is 23 kg.",
            "expectedKeywords": ["23 kg"],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["question"] == "What is the baggage allowance?"
        assert data["queryType"] == "airline_info"
        assert data["response"] == "Checked baggage allowance is 23 kg per passenger."

        metrics = data["metrics"]
        assert metrics["usedScraping"] is True
        assert metrics["usedFlightAPI"] is False
        assert metrics["hasScrapedData"] is True
        assert metrics["hasFlightData"] is False
        assert metrics["responseLength"] == len(data["response"])
        assert 0 <= metrics["accuracy"] <= 100
        assert 0 <= metrics["relevance"] <= 100

    def test_evaluate_without_ground_truth(self, client):
        data = client.post("/api/evaluate", json={"question": "What is the baggage allowance?"}).json()

        assert "accuracy" not in data["metrics"]
        assert "relevance" not in data["metrics"]

    def test_evaluate_requires_question(self, client):
        response = client.post("/api/evaluate", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}

    def test_evaluate_failure(self, client, completion):
        completion.generate.side_effect = CompletionError("quota exceeded", 429, "RATE_LIMITED")

        response = client.post("/api/evaluate", json={"question": "What is the baggage allowance?"})

        assert response.status_code == 500
        assert response.json()["success"] is False


class TestServiceContainer:
    """Test container lifecycle"""

    @pytest.mark.asyncio
    async def test_missing_completion_key_aborts_startup(self, scraper, flight_client):
        container = ServiceContainer(flight_client=flight_client, scraper=scraper, start_preloader=False)

        with patch(
            "airline_assistant.container.CompletionClient",
            side_effect=ConfigurationError("OPENAI_API_KEY is not set"),
        ):
            with pytest.raises(ConfigurationError):
                await container.initialize()

        assert not container.is_initialized()

    @pytest.mark.asyncio
    async def test_cleanup_closes_clients(self, container, scraper, flight_client, completion):
        await container.initialize()
        assert container.is_initialized()

        await container.cleanup()

        scraper.close.assert_awaited_once()
        flight_client.close.assert_awaited_once()
        completion.close.assert_awaited_once()
        assert not container.is_initialized()

    @pytest.mark.asyncio
    async def test_get_service_before_initialize(self, container):
        with pytest.raises(RuntimeError):
            container.get_orchestrator()
