"""
Engine settings read from environment variables.

| Variable                   | Default                     |
|----------------------------|-----------------------------|
| WATER_CALC_SERVICE_URL     | http://127.0.0.1:8000/api/  |
| WATER_CALC_TIMEOUT_S       | 30                          |
| WATER_API_TOKEN            | (none)                      |
| WATER_CONFIG_PATH          | (none)                      |
| WATER_CONFIG_SERVICE_URL   | (none)                      |
| WATER_CONFIG_TIMEOUT_S     | 30                          |
| WATER_CONFIG_CACHE_S       | 60                          |
| WATER_LOG_LEVEL            | INFO                        |
"""

from typing import Mapping, Optional
import os

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "WATER_"


class EngineSettings(BaseModel):
    """Runtime configuration of the server and its service adapters"""
    calc_service_url: str = Field(
        "http://127.0.0.1:8000/api/",
        description="Base URL of the calculation service",
    )
    calc_timeout_s: float = Field(30.0, description="Calculation request timeout (s)", gt=0)
    api_token: Optional[str] = Field(None, description="Bearer token for both services")
    config_path: Optional[str] = Field(None, description="YAML file with plants and water systems")
    config_service_url: Optional[str] = Field(None, description="Base URL of the config service")
    config_timeout_s: float = Field(30.0, description="Config service request timeout (s)", gt=0)
    config_cache_s: int = Field(60, description="HTTP cache lifetime for config lookups (s)", ge=0)
    log_level: str = Field("INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v_upper = v.strip().upper()
        if v_upper not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return v_upper

    @field_validator("calc_service_url", "config_service_url")
    @classmethod
    def ensure_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v if v.endswith("/") else v + "/"


_FIELDS = {
    "CALC_SERVICE_URL": "calc_service_url",
    "CALC_TIMEOUT_S": "calc_timeout_s",
    "API_TOKEN": "api_token",
    "CONFIG_PATH": "config_path",
    "CONFIG_SERVICE_URL": "config_service_url",
    "CONFIG_TIMEOUT_S": "config_timeout_s",
    "CONFIG_CACHE_S": "config_cache_s",
    "LOG_LEVEL": "log_level",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
    """
    Build settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ (for tests)

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value
    """
    environ = os.environ if environ is None else environ
    values = {}
    for suffix, field_name in _FIELDS.items():
        raw = environ.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw.strip() != "":
            values[field_name] = raw
    return EngineSettings(**values)
