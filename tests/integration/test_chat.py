import json

import httpx
import respx
from fastapi.testclient import TestClient

from apps.graphql_api.main import create_app
from lib.config.server_loader import DeepSeekSettings, ServerConfig

BASE_URL = "https://api.deepseek.test"
CHAT_QUERY = """
query Ask($message: String!, $system: String) {
  chat(message: $message, systemPrompt: $system) {
    content
    model
    finishReason
    usage { promptTokens completionTokens totalTokens }
  }
}
"""

client = TestClient(
    create_app(
        ServerConfig(deepseek=DeepSeekSettings(api_key="sk-test", base_url=BASE_URL))
    )
)


def test_chat_round_trip():
    completion = {
        "model": "deepseek-chat",
        "choices": [
            {"message": {"role": "assistant", "content": "Pong"}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 7, "completion_tokens": 1, "total_tokens": 8},
    }
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.post("/chat/completions").mock(
            return_value=httpx.Response(200, json=completion)
        )
        response = client.post(
            "/graphql",
            json={"query": CHAT_QUERY, "variables": {"message": "Ping", "system": "Be brief"}},
        )

    assert response.status_code == 200
    assert response.json() == {
        "data": {
            "chat": {
                "content": "Pong",
                "model": "deepseek-chat",
                "finishReason": "stop",
                "usage": {"promptTokens": 7, "completionTokens": 1, "totalTokens": 8},
            }
        }
    }
    sent = json.loads(route.calls.last.request.content)
    assert sent["messages"] == [
        {"role": "system", "content": "Be brief"},
        {"role": "user", "content": "Ping"},
    ]
    assert route.calls.last.request.headers["Authorization"] == "Bearer sk-test"


def test_upstream_failure_is_a_graphql_error():
    with respx.mock(base_url=BASE_URL) as mock:
        mock.post("/chat/completions").mock(
            return_value=httpx.Response(401, json={"error": {"message": "bad key"}})
        )
        response = client.post(
            "/graphql", json={"query": CHAT_QUERY, "variables": {"message": "Ping"}}
        )

    assert response.status_code == 200
    body = response.json()
    assert "data" in body
    assert body["data"] is None
    assert body["errors"][0]["message"] == "DeepSeek API error 401: bad key"
    assert body["errors"][0]["path"] == ["chat"]


def test_missing_api_key_is_a_graphql_error():
    unconfigured = TestClient(create_app(ServerConfig()))
    response = unconfigured.post(
        "/graphql", json={"query": '{ chat(message: "hi") { content } }'}
    )
    assert response.status_code == 200
    assert response.json() == {
        "data": None,
        "errors": [
            {
                "message": "DEEPSEEK_API_KEY is not configured",
                "locations": [{"line": 1, "column": 3}],
                "path": ["chat"],
            }
        ],
    }
