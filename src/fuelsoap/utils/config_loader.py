# fuelsoap/utils/config_loader.py
"""
Configuration for the SOAP client.

The YAML file has four sections:

    auth      installed-package credentials and the token endpoint
    soap      the partner API endpoint
    client    HTTP timeouts and SSL verification
    logging   console level and optional log file

Only 'auth' is required. Everything is validated by Pydantic when the file is
loaded, so a bad value fails before the first token request is attempted.
"""

import logging
from pathlib import Path
from typing import Any, Literal, cast

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

logger: logging.Logger = logging.getLogger(__name__)

LogLevelName = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
LogLevel = LogLevelName | int

STANDARD_LEVELS: frozenset[int] = frozenset({10, 20, 30, 40, 50})

DEFAULT_AUTH_URL: str = 'https://auth.exacttargetapis.com/v1/requestToken?legacy=1'
DEFAULT_SOAP_ENDPOINT: str = 'https://webservice.exacttarget.com/Service.asmx'


def _level_to_int(level: LogLevel) -> int:
    if isinstance(level, int):
        return level
    return cast(int, getattr(logging, level))


# =============================================================================
# Sections
# =============================================================================


class AuthSection(BaseModel):
    """Credentials exchanged for the token placed in the SOAP oAuth header."""

    model_config = ConfigDict(extra='forbid')

    client_id: str = Field(..., min_length=1, description='Installed package client id.')
    client_secret: SecretStr = Field(
        ..., description='Installed package client secret; never logged.'
    )
    auth_url: HttpUrl = Field(
        default=DEFAULT_AUTH_URL,
        validate_default=True,
        description='Endpoint issuing legacy (SOAP header) tokens.',
    )

    @field_validator('client_secret')
    @classmethod
    def secret_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError('Client secret cannot be empty')
        return v


class SoapSection(BaseModel):
    model_config = ConfigDict(extra='forbid')

    endpoint_url: HttpUrl = Field(
        default=DEFAULT_SOAP_ENDPOINT,
        validate_default=True,
        description='Partner API SOAP endpoint (Service.asmx).',
    )


class ClientSection(BaseModel):
    """
    HTTP behavior shared by SOAP calls and token requests.

    The retry policy is fixed (one retry per SOAP call) and has no setting.
    """

    model_config = ConfigDict(extra='forbid')

    request_timeout: tuple[float, float] = Field(
        default=(180.0, 180.0),
        description='(connect, read) timeouts in seconds.',
    )
    verify_ssl: bool = Field(default=True, description='Verify TLS certificates.')

    @field_validator('request_timeout')
    @classmethod
    def check_timeouts(cls, v: tuple[float, float]) -> tuple[float, float]:
        """Both timeouts must be positive, and connect must not exceed read."""
        connect_timeout: float
        read_timeout: float
        connect_timeout, read_timeout = v

        for label, seconds in (('Connect', connect_timeout), ('Read', read_timeout)):
            if seconds <= 0:
                raise ValueError(f'{label} timeout must be positive, got {seconds}')

        if connect_timeout > read_timeout:
            raise ValueError(
                f'Connect timeout ({connect_timeout}s) should not exceed '
                f'read timeout ({read_timeout}s)'
            )
        return v


class LoggingSection(BaseModel):
    """
    Console logging is always on. File logging is on when file_path is set.

    Levels accept a name ('DEBUG') or a standard number (10).
    """

    model_config = ConfigDict(extra='forbid')

    console_level: LogLevel = 'INFO'
    file_path: Path | None = None
    file_level: LogLevel | None = None

    @field_validator('console_level', 'file_level')
    @classmethod
    def check_numeric_level(cls, v: LogLevel | None) -> LogLevel | None:
        # Names are already checked by the Literal
        if isinstance(v, int) and v not in STANDARD_LEVELS:
            raise ValueError(
                f'Numeric log level must be one of {sorted(STANDARD_LEVELS)}, got {v}'
            )
        return v

    @model_validator(mode='after')
    def check_file_logging(self) -> 'LoggingSection':
        if self.file_level is not None and self.file_path is None:
            raise ValueError(
                'file_level is specified but file_path is missing. '
                'Both must be provided to enable file logging.'
            )
        if self.file_path is not None and self.file_level is None:
            logger.warning('file_path set without file_level; file logging will use DEBUG')
            self.file_level = 'DEBUG'
        return self

    def get_console_level_int(self) -> int:
        return _level_to_int(self.console_level)

    def get_file_level_int(self) -> int | None:
        """The file handler level, or None when file logging is off."""
        if self.file_level is None:
            return None
        return _level_to_int(self.file_level)


class FuelSoapConfig(BaseModel):
    """
    Root of config.yaml.

    Usage:
        config = load_config()
        config.soap.endpoint_url
        config.client.request_timeout
    """

    model_config = ConfigDict(extra='forbid')

    auth: AuthSection
    soap: SoapSection = Field(default_factory=SoapSection)
    client: ClientSection = Field(default_factory=ClientSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)


# =============================================================================
# Loading
# =============================================================================


def _get_default_config_path() -> Path:
    """Return src/fuelsoap/config/config.yaml, resolved from this module's location."""
    return Path(__file__).resolve().parent.parent / 'config' / 'config.yaml'


def load_config(config_path: Path | str | None = None) -> FuelSoapConfig:
    """
    Read and validate a configuration file.

    Args:
        config_path: File to load. Defaults to fuelsoap/config/config.yaml.

    Returns:
        The validated configuration.

    Raises:
        FileNotFoundError: The file does not exist.
        yaml.YAMLError: The file is not valid YAML.
        ValidationError: The YAML does not match FuelSoapConfig.

    Example:
        >>> config = load_config('/etc/fuelsoap/config.yaml')
        >>> config.auth.client_id
    """
    path_obj: Path = Path(config_path) if config_path else _get_default_config_path()
    logger.debug('Resolving configuration from: %s', path_obj)

    if not path_obj.exists():
        error_msg: str = f'Configuration file not found at: {path_obj}'
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    try:
        with open(path_obj, encoding='utf-8') as f:
            raw_config: dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error('Failed to parse YAML config file: %s', e)
        raise

    try:
        config: FuelSoapConfig = FuelSoapConfig.model_validate(raw_config)
    except ValidationError as e:
        logger.error('Configuration validation failed: %s', e)
        raise

    logger.debug('Configuration validated successfully.')
    return config
