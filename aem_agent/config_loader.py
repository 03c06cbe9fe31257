"""
Configuration Loader

Loads agent configuration from YAML file with environment variable substitution.
The guardrail policy has no built-in default, so a config file is required.
"""

import os
import re
from typing import Any, Literal, Optional
from pathlib import Path

import yaml
import structlog
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .schemas.policy import PolicyConfig
from .schemas.state import MAX_STEPS

logger = structlog.get_logger(__name__)


def _substitute_env_vars(value: Any) -> Any:
    """
    Recursively substitute environment variables in configuration.

    Supports format: ${VAR_NAME:-default_value}
    """
    if isinstance(value, str):
        # Pattern: ${VAR:-default} or ${VAR}
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replace(match):
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""
            return os.getenv(var_name, default)

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]

    return value


class RuntimeSettings(BaseSettings):
    """Process-level overrides read from AEM_AGENT_* env vars or .env"""
    model_config = SettingsConfigDict(env_prefix="AEM_AGENT_", env_file=".env", extra="ignore")

    config_path: str = "config.yaml"
    log_level: Optional[str] = None
    log_format: Optional[Literal["json", "console"]] = None


class AgentInfo(BaseModel):
    """Agent identification configuration"""
    name: str = "aem_agent"
    version: str = "1.0.0"
    description: str = "Autonomous AEM content authoring agent"


class WorkflowConfig(BaseModel):
    """Workflow configuration"""
    max_steps: int = Field(default=MAX_STEPS, ge=1, le=MAX_STEPS)


class LLMSettings(BaseModel):
    """LLM configuration"""
    provider: Literal["openai", "anthropic", "bedrock"] = "openai"
    model: str = "gpt-5-mini"
    temperature: float = 0.0
    max_tokens: int = 2048


class MCPConfig(BaseModel):
    """AEM MCP gateway configuration"""
    base_url: str = "http://localhost:3001"
    timeout_seconds: float = 30.0
    max_attempts: int = Field(default=3, ge=1)


class ObservabilityConfig(BaseModel):
    """Observability configuration"""
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"


class ServerConfig(BaseModel):
    """HTTP front end configuration"""
    host: str = "0.0.0.0"
    port: int = 8080


class Config(BaseModel):
    """Complete agent configuration"""
    agent: AgentInfo = Field(default_factory=lambda: AgentInfo())
    workflow: WorkflowConfig = Field(default_factory=lambda: WorkflowConfig())
    llm: LLMSettings = Field(default_factory=lambda: LLMSettings())
    mcp: MCPConfig = Field(default_factory=lambda: MCPConfig())
    policy: PolicyConfig
    observability: ObservabilityConfig = Field(default_factory=lambda: ObservabilityConfig())
    server: ServerConfig = Field(default_factory=lambda: ServerConfig())


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses AEM_AGENT_CONFIG_PATH
            or config.yaml in the current directory.

    Returns:
        Parsed Config object

    Raises:
        ConfigError: file missing, not YAML, or failing validation
    """
    if config_path is None:
        config_path = RuntimeSettings().config_path

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    logger.info("Loading configuration", path=str(path))

    try:
        with open(path, "r") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    # Substitute environment variables
    config_data = _substitute_env_vars(raw_config)

    try:
        config = Config(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info(
        "Configuration loaded",
        agent_name=config.agent.name,
        agent_version=config.agent.version,
        allowed_roots=list(config.policy.allowed_roots),
    )

    return config
