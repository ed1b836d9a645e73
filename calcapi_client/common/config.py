"""Runtime settings of the calculator client."""
import os
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, IPvAnyAddress, field_validator

DEFAULT_BASE_URL = "http://localhost:8080/api/v1"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

# Environment variable -> settings field
ENV_VARS: dict[str, str] = {
    "CALCAPI_BASE_URL": "base_url",
    "CALCAPI_TIMEOUT": "timeout",
    "CALCAPI_UI_HOST": "host",
    "CALCAPI_UI_PORT": "port",
    "CALCAPI_LOG_LEVEL": "log_level",
}


class ClientSettings(BaseModel):
    """
    Settings shared by the HTTP client and the browser UI.

    The instance is immutable so that the API location cannot change while
    a calculation is in flight.
    """

    model_config = ConfigDict(frozen=True)

    base_url: HttpUrl = Field(default=DEFAULT_BASE_URL, description="Base URL of the calculation API")
    timeout: float = Field(default=10.0, gt=0, description="HTTP timeout in seconds")
    history_size: int = Field(default=5, ge=1, description="Number of history entries kept")
    host: IPvAnyAddress = Field(default="127.0.0.1", description="Address the UI server binds to")
    port: int = Field(default=7860, ge=1, le=65535, description="Port the UI server listens on")
    log_level: LogLevel = Field(default="INFO", description="Logging level of the client")

    @field_validator("log_level", mode="before")
    def log_level_upper_case(cls, v: Any) -> Any:
        """Accept level names in any case ("debug" is DEBUG)."""
        return v.upper() if isinstance(v, str) else v

    @property
    def api_root(self) -> str:
        """Base URL as a string without trailing slash."""
        return str(self.base_url).rstrip("/")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "ClientSettings":
        """
        Build settings from environment variables, then apply explicit overrides.

        Overrides set to None are ignored so CLI flags that were not given fall back
        to the environment or to the defaults.

        :param Mapping environ: Environment to read (defaults to os.environ)
        :param overrides: Field values taking precedence over the environment

        :return: Validated settings
        :rtype: ClientSettings
        :raises pydantic.ValidationError: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {
            field: environ[var] for var, field in ENV_VARS.items() if environ.get(var)
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
