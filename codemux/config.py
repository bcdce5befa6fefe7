"""Configuration for codemux.

Settings are read from CODEMUX_* environment variables. Command line flags
override them through ``CodemuxConfig.replace``.
"""

import os
from collections.abc import Mapping

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .launcher import MultiplexerKind
from .session import Strategy

ENV_PREFIX = "CODEMUX_"


class ConfigError(ValueError):
    """Raised when a configuration value cannot be parsed."""
    pass


class CodemuxConfig(BaseSettings):
    """codemux settings.

    Overridable through environment variables prefixed with CODEMUX_.
    Example: CODEMUX_MULTIPLEXER=zellij
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        frozen=True,
        populate_by_name=True,
    )

    multiplexer: MultiplexerKind = Field(
        default=MultiplexerKind.TMUX, description="tmux or zellij"
    )
    auto_attach: bool = Field(
        default=True, description="Attach to the session if it is already running"
    )
    attach_if_exists: bool = Field(
        default=True, description="Reuse the base session name when it is live"
    )
    strategy: Strategy = Field(
        default=Strategy.WORKSPACE,
        validation_alias="CODEMUX_SESSION_NAME_STRATEGY",
        description="Session name source",
    )
    custom_name: str = Field(
        default="",
        validation_alias="CODEMUX_CUSTOM_SESSION_NAME",
        description="Session name used by the custom strategy",
    )
    use_command_mode: bool = Field(
        default=False, description="Open a plain shell instead of a session"
    )

    @field_validator("multiplexer", "strategy", mode="before")
    @classmethod
    def _lowercase_choice(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def replace(self, **overrides) -> "CodemuxConfig":
        """Return a validated copy with every non-None override applied.

        Raises
        ------
        ConfigError
            When an override is not a valid value for its field
        """
        changes = {key: value for key, value in overrides.items() if value is not None}
        try:
            return type(self).model_validate(self.model_copy(update=changes).model_dump())
        except ValidationError as e:
            raise ConfigError(_describe(e, env=False)) from None


def _describe(error: ValidationError, env: bool) -> str:
    messages = []
    for detail in error.errors():
        name = str(detail["loc"][0]) if detail["loc"] else "config"
        if env:
            name = name.upper()
            if not name.startswith(ENV_PREFIX):
                name = f"{ENV_PREFIX}{name}"
        messages.append(f"{name}: {detail['msg']}")
    return "; ".join(messages)


def load_config() -> CodemuxConfig:
    """Load configuration from the environment.

    Unset variables keep their defaults.

    Raises
    ------
    ConfigError
        When a variable holds a value that cannot be parsed
    """
    try:
        return CodemuxConfig()
    except ValidationError as e:
        raise ConfigError(_describe(e, env=True)) from None


def workspace_name_from_env(environ: Mapping[str, str] | None = None) -> str | None:
    """Workspace display name supplied by the host, if any."""
    if environ is None:
        environ = os.environ
    return environ.get(f"{ENV_PREFIX}WORKSPACE_NAME")
