"""gitr configuration: SCM hosts and their clone policies.

The configuration lives in a YAML file (``~/.gitr.yaml`` unless ``GITR_CONFIG``
points elsewhere). It is loaded once per process and handed to the components
that need it; nothing here is global state.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from gitr.exceptions import GitrError
from gitr.model.repo import Provider
from gitr.model.scm import HostPolicy, HttpScheme, ScmHostRegistry

logger = logging.getLogger(__name__)

APP_NAME = "gitr"
CONFIG_ENV_VAR = "GITR_CONFIG"


class ConfigError(GitrError):
    """Raised when the configuration file cannot be read, parsed or validated."""

    title = "Configuration Error"

    def __init__(self, message: str, config_path: Optional[Path] = None):
        self.config_path = config_path
        hints = ["Run 'gitr config init' to reset your configuration"]
        if config_path is not None:
            message = f"{message} ({config_path})"
        super().__init__(message, hints=hints)


class ScmSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    home_dir: Optional[str] = Field(
        None, description="Directory repositories are cloned under, cwd when unset"
    )
    hosts: List[HostPolicy] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_hosts(self) -> "ScmSettings":
        seen = set()
        for host in self.hosts:
            key = host.hostname.lower()
            if key in seen:
                raise ValueError(f"Found duplicate SCM host: {host.hostname}")
            seen.add(key)
        return self


class CloneSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    not_found_patterns: List[str] = Field(
        default_factory=list,
        description="Extra transport error phrases meaning 'repository does not exist'",
    )


class GitrConfig(BaseModel):
    """Root of the configuration file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scm: ScmSettings = Field(default_factory=ScmSettings)
    clone: CloneSettings = Field(default_factory=CloneSettings)

    def registry(self) -> ScmHostRegistry:
        return ScmHostRegistry(self.scm.hosts)


def get_config_file() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path("~").expanduser() / f".{APP_NAME}.yaml"


def default_config() -> GitrConfig:
    """Configuration written by ``gitr config init``."""
    hierarchy = dict(
        scheme=HttpScheme.https,
        always_create_dir_hierarchy=True,
        include_host_in_dir_hierarchy=True,
    )
    return GitrConfig(
        scm=ScmSettings(
            home_dir="~/scm",
            hosts=[
                HostPolicy(
                    hostname="github.com", provider=Provider.github, **hierarchy
                ),
                HostPolicy(
                    hostname="gitlab.com", provider=Provider.gitlab, **hierarchy
                ),
                HostPolicy(
                    hostname="bitbucket.org",
                    provider=Provider.bitbucket_cloud,
                    **hierarchy,
                ),
            ],
        )
    )


def dump_config(config: GitrConfig) -> str:
    return yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False)


def _format_validation_error(error: PydanticValidationError) -> str:
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        lines.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "\n".join(lines)


def parse_config(text: str, config_path: Optional[Path] = None) -> GitrConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", config_path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping", config_path)

    try:
        return GitrConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(
            f"Invalid configuration:\n{_format_validation_error(e)}", config_path
        ) from e


def load_config(config_path: Optional[Path] = None) -> GitrConfig:
    """
    Load and validate the configuration file.

    Args:
        config_path: Path to the YAML file. If None, uses the default path.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    config_path = config_path or get_config_file()
    try:
        text = config_path.read_text()
    except FileNotFoundError:
        raise ConfigError("Configuration file not found", config_path) from None
    except OSError as e:
        raise ConfigError(f"Could not read configuration: {e}", config_path) from e
    return parse_config(text, config_path)


def ensure_initial_config(config_path: Optional[Path] = None) -> Path:
    """
    Write the default configuration unless a config file already exists.

    Returns:
        Path to the configuration file
    """
    config_path = config_path or get_config_file()
    if config_path.exists():
        return config_path

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(dump_config(default_config()))
    except OSError as e:
        raise ConfigError(f"Could not write configuration: {e}", config_path) from e
    logger.debug(f"Wrote default configuration to {config_path}")
    return config_path
