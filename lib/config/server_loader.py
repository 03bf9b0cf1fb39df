from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from lib.utils.validation import as_int, as_optional_seconds, ensure

from .yaml_loader import load_yaml


DEFAULT_CONFIG_PATH = "config/server.yaml"
DEFAULT_PORT = 4000


@dataclass
class DeepSeekSettings:
    """Connection settings for the DeepSeek chat completion API."""

    api_key: Optional[str] = None
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-chat"
    models: List[str] = field(
        default_factory=lambda: ["deepseek-chat", "deepseek-reasoner"]
    )
    timeout: float = 60.0


@dataclass
class ServerConfig:
    """Typed view over ``server.yaml`` merged with the process environment.

    The raw mapping is retained so that keys not modelled here remain
    reachable without duplicating the structure in Python.
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    environment: str = "production"
    development_environments: List[str] = field(
        default_factory=lambda: ["development"]
    )
    log_level: str = "INFO"
    graphql_path: str = "/graphql"
    execution_timeout: Optional[float] = 60.0
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    deepseek: DeepSeekSettings = field(default_factory=DeepSeekSettings)
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def development(self) -> bool:
        """Stack traces are only exposed in development environments."""
        return self.environment in self.development_environments


def load_server_config(
    path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> ServerConfig:
    """Load ``server.yaml`` and apply environment overrides.

    Parameters
    ----------
    path:
        File system path to the YAML configuration file.  Defaults to the
        ``SERVER_CONFIG`` environment variable, then ``config/server.yaml``.
        A missing file is not an error; built-in defaults are used instead.
    environ:
        Mapping used instead of :data:`os.environ`.
    """

    env = os.environ if environ is None else environ
    path = path or env.get("SERVER_CONFIG") or DEFAULT_CONFIG_PATH
    raw = load_yaml(path) if Path(path).exists() else {}

    server = raw.get("server", {}) or {}
    graphql = raw.get("graphql", {}) or {}
    cors = raw.get("cors", {}) or {}
    logging_cfg = raw.get("logging", {}) or {}
    deepseek = raw.get("deepseek", {}) or {}
    defaults = ServerConfig()
    ds_defaults = DeepSeekSettings()

    port = as_int(env.get("PORT") or server.get("port", DEFAULT_PORT), "PORT")
    ensure(1 <= port <= 65535, f"PORT must be between 1 and 65535, got {port}")

    timeout_raw = env.get("GRAPHQL_EXECUTION_TIMEOUT")
    if timeout_raw is None:
        timeout_raw = graphql.get("execution_timeout_seconds", defaults.execution_timeout)
    graphql_path = str(graphql.get("path", defaults.graphql_path))
    ensure(graphql_path.startswith("/"), "graphql.path must start with '/'")

    return ServerConfig(
        host=env.get("HOST") or server.get("host", defaults.host),
        port=port,
        environment=(
            env.get("APP_ENV")
            or env.get("NODE_ENV")
            or server.get("environment", defaults.environment)
        ),
        development_environments=list(
            server.get("development_environments", defaults.development_environments)
        ),
        log_level=str(env.get("LOG_LEVEL") or logging_cfg.get("level", defaults.log_level)),
        graphql_path=graphql_path,
        execution_timeout=as_optional_seconds(timeout_raw, "GRAPHQL_EXECUTION_TIMEOUT"),
        cors_allow_origins=list(cors.get("allow_origins", defaults.cors_allow_origins)),
        deepseek=DeepSeekSettings(
            api_key=env.get("DEEPSEEK_API_KEY") or deepseek.get("api_key"),
            base_url=(
                env.get("DEEPSEEK_BASE_URL") or deepseek.get("base_url", ds_defaults.base_url)
            ).rstrip("/"),
            model=env.get("DEEPSEEK_MODEL") or deepseek.get("model", ds_defaults.model),
            models=list(deepseek.get("models", ds_defaults.models)),
            timeout=float(deepseek.get("timeout_seconds", ds_defaults.timeout)),
        ),
        raw=raw,
    )
