from fastapi.testclient import TestClient

from apps.graphql_api.main import create_app
from lib.config.server_loader import ServerConfig

client = TestClient(create_app(ServerConfig()))


def test_full_flow():
    welcome = client.get("/").json()
    assert client.get(welcome["endpoints"]["health"]).json()["status"] == "ok"

    response = client.post(
        welcome["endpoints"]["graphql"],
        json={
            "query": "query Greet($name: String!) { hello(name: $name) models }",
            "variables": {"name": "Ada"},
            "operationName": "Greet",
        },
    )
    assert response.status_code == 200
    assert response.json() == {
        "data": {
            "hello": "Hello, Ada!",
            "models": ["deepseek-chat", "deepseek-reasoner"],
        }
    }
