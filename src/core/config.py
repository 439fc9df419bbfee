"""Runtime settings of the relay server, read from the environment."""

import os
from typing import Optional, Self

from pydantic import BaseModel, ValidationError, field_validator

from src.core.exceptions import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# env var name -> RelaySettings field
ENV_VARS: dict[str, str] = {
    "RELAY_HOST": "host",
    "RELAY_PORT": "port",
    "RELAY_TURN_TIMEOUT": "turn_timeout",
    "RELAY_NOTIFY_ON_TERMINATION": "notify_on_termination",
    "RELAY_AUTHORITATIVE_BOARD": "authoritative_board",
    "RELAY_MAX_FRAME_BYTES": "max_frame_bytes",
    "RELAY_LOG_LEVEL": "log_level",
}


class RelaySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 5000
    # Seconds to wait for a single player's message. None: wait forever.
    turn_timeout: Optional[float] = None
    notify_on_termination: bool = True
    authoritative_board: bool = False
    max_frame_bytes: int = 64 * 1024
    log_level: str = "INFO"

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 <= value <= 65535:
            raise ValueError(f"port must be within 0-65535, got {value}")
        return value

    @field_validator("turn_timeout")
    @classmethod
    def validate_turn_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError(f"turn_timeout must be positive, got {value}")
        return value

    @field_validator("max_frame_bytes")
    @classmethod
    def validate_max_frame_bytes(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"max_frame_bytes must be positive, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def build(cls, **values: object) -> Self:
        """Validate the given values, raising ConfigurationError instead of pydantic's ValidationError."""
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> Self:
        """Settings from RELAY_* environment variables; unset or empty ones keep their default."""
        environ = os.environ if environ is None else environ
        values = {
            field_name: environ[env_name]
            for env_name, field_name in ENV_VARS.items()
            if environ.get(env_name, "").strip()
        }
        return cls.build(**values)

    def override(self, **changes: object) -> Self:
        """Copy with the given (non-None) values replaced, validated again."""
        values = self.model_dump()
        values.update({key: value for key, value in changes.items() if value is not None})
        return self.build(**values)
