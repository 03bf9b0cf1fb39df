import pytest

from lib.config.server_loader import load_server_config

YAML = """
server:
  host: 127.0.0.1
  port: 8080
  environment: staging
  development_environments: [development, local]
graphql:
  path: /api/graphql
  execution_timeout_seconds: 5
cors:
  allow_origins: ["http://a.test"]
deepseek:
  model: deepseek-reasoner
  base_url: https://api.deepseek.test/
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text(YAML)
    return str(path)


def test_defaults_when_file_missing(tmp_path):
    cfg = load_server_config(str(tmp_path / "absent.yaml"), environ={})
    assert cfg.port == 4000
    assert cfg.host == "0.0.0.0"
    assert cfg.environment == "production"
    assert cfg.development is False
    assert cfg.graphql_path == "/graphql"
    assert cfg.execution_timeout == 60
    assert cfg.cors_allow_origins == ["*"]
    assert cfg.deepseek.api_key is None
    assert cfg.raw == {}


def test_file_values(config_file):
    cfg = load_server_config(config_file, environ={})
    assert (cfg.host, cfg.port, cfg.graphql_path) == ("127.0.0.1", 8080, "/api/graphql")
    assert cfg.execution_timeout == 5
    assert cfg.cors_allow_origins == ["http://a.test"]
    assert cfg.deepseek.model == "deepseek-reasoner"
    assert cfg.deepseek.base_url == "https://api.deepseek.test"
    assert cfg.raw["server"]["environment"] == "staging"


def test_environment_overrides_file(config_file):
    cfg = load_server_config(
        config_file,
        environ={
            "PORT": "9000",
            "NODE_ENV": "local",
            "GRAPHQL_EXECUTION_TIMEOUT": "0",
            "DEEPSEEK_API_KEY": "sk-env",
        },
    )
    assert cfg.port == 9000
    assert cfg.development is True
    assert cfg.execution_timeout is None
    assert cfg.deepseek.api_key == "sk-env"


def test_app_env_wins_over_node_env(tmp_path):
    cfg = load_server_config(
        str(tmp_path / "absent.yaml"),
        environ={"APP_ENV": "production", "NODE_ENV": "development"},
    )
    assert cfg.development is False


def test_config_path_from_environment(config_file):
    cfg = load_server_config(environ={"SERVER_CONFIG": config_file})
    assert cfg.port == 8080


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port_rejected(tmp_path, port):
    with pytest.raises(ValueError, match="PORT"):
        load_server_config(str(tmp_path / "absent.yaml"), environ={"PORT": port})


def test_non_mapping_yaml_rejected(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_server_config(str(path), environ={})
