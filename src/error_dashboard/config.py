from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "https://higuard-error-dashboard.shuttleapp.rs/sdk/error"


class ConfigurationError(ValueError):
    """Raised when a configuration value is rejected.

    Misconfiguration is a programming error, so it is raised eagerly at
    the point of mutation instead of being clamped or ignored.
    """


class ConfigKey(StrEnum):
    VERBOSE = "verbose"
    SAMPLING_RATE = "sampling_rate"
    MAX_AGE = "max_age"
    RETRY_DELAY = "retry_delay"
    RETRY_ATTEMPTS = "retry_attempts"


_BOOL_KEYS = frozenset({ConfigKey.VERBOSE})


class PartialConfigs(BaseModel):
    """Subset of configuration overrides; unset fields keep their defaults."""

    model_config = ConfigDict(strict=True)

    verbose: bool | None = None
    sampling_rate: int | None = None
    max_age: int | None = None
    retry_delay: int | None = None
    retry_attempts: int | None = None


class Configuration(BaseModel):
    """Runtime behaviour of the error dashboard client.

    Durations are in milliseconds.  A live configuration is never mutated
    in place by the client; ``override_configs`` swaps the whole value.
    """

    model_config = ConfigDict(strict=True, validate_assignment=True)

    verbose: bool = False
    sampling_rate: int = Field(default=2, gt=0)
    max_age: int = Field(default=20_000, gt=0)
    retry_delay: int = Field(default=3_000, gt=0)
    retry_attempts: int = Field(default=3, gt=0)

    @classmethod
    def new(cls, overrides: PartialConfigs | None = None) -> "Configuration":
        """Return the defaults with *overrides* applied.

        Raises ConfigurationError if any override is invalid.
        """
        config = cls()
        if overrides is not None:
            for name, value in overrides.model_dump(exclude_none=True).items():
                config.set_config(ConfigKey(name), value)
        return config

    @property
    def max_age_seconds(self) -> float:
        return self.max_age / 1000

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay / 1000

    def get_config(self, key: ConfigKey) -> bool | int:
        return getattr(self, ConfigKey(key).value)

    def set_config(self, key: ConfigKey, value: bool | int) -> None:
        """Validate and store *value* under *key*.

        Raises ConfigurationError for a value of the wrong type or a
        non-positive numeric value.
        """
        key = ConfigKey(key)
        if key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise ConfigurationError("Invalid type for the given key")
        else:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError("Invalid type for the given key")
            if value <= 0:
                raise ConfigurationError(f"{key.value} must be a positive number")
        setattr(self, key.value, value)


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ERROR_DASHBOARD_")

    client_id: str = ""
    client_secret: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    request_timeout_seconds: float = 10.0
    log_level: str = "INFO"
