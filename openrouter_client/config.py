import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ATTEMPTS = 4
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 30.0


class RetryConfig(BaseModel):
    max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS,
        ge=1,
        description="Total attempts per request, including the first"
    )

    base_delay: float = Field(
        default=DEFAULT_BASE_DELAY,
        ge=0.0,
        description="Seconds to wait before the second attempt; doubles per retry"
    )

    max_delay: float = Field(
        default=DEFAULT_MAX_DELAY,
        ge=0.0,
        description="Ceiling on any single backoff wait"
    )

    jitter: float = Field(
        default=0.0,
        ge=0.0,
        lt=1.0,
        description="Random spread applied to each wait, as a fraction (0.25 = +/-25%)"
    )

    @model_validator(mode='after')
    def validate_ceiling(self) -> 'RetryConfig':
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})"
            )
        return self

    model_config = {
        "frozen": True
    }


class ClientConfig(BaseModel):
    api_key: str = Field(
        default="",
        description="OpenRouter API key (checked per request, not at construction)"
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="API root; endpoint paths are appended to it"
    )

    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Per-request connect/read timeout in seconds"
    )

    referer: Optional[str] = Field(
        default=None,
        description="Sent as HTTP-Referer for app attribution"
    )

    app_name: Optional[str] = Field(
        default=None,
        description="Sent as X-Title for app attribution"
    )

    default_model: Optional[str] = Field(
        default=None,
        description="Model used when a request does not name one"
    )

    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers added to every request"
    )

    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Backoff policy for non-streaming requests"
    )

    @field_validator('api_key')
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        v = v.strip().rstrip('/')
        if not v.startswith(('http://', 'https://')):
            raise ValueError(f"base_url must start with http:// or https://, got {v!r}")
        return v

    model_config = {
        "frozen": True
    }


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def load_config(env_file: Optional[str] = None, **overrides) -> ClientConfig:
    """
    Build a ClientConfig from the environment (and .env), then apply overrides.

    Environment variables:
        OPENROUTER_API_KEY, OPENROUTER_BASE_URL, OPENROUTER_TIMEOUT,
        OPENROUTER_MAX_RETRIES (retries after the first attempt),
        OPENROUTER_RETRY_DELAY, OPENROUTER_SITE_URL, OPENROUTER_SITE_NAME,
        OPENROUTER_DEFAULT_MODEL

    Overrides use ClientConfig field names, plus ``max_retries`` and
    ``retry_delay`` for the retry policy. ``None`` overrides are ignored.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    env_fields = {
        'api_key': 'OPENROUTER_API_KEY',
        'base_url': 'OPENROUTER_BASE_URL',
        'timeout': 'OPENROUTER_TIMEOUT',
        'referer': 'OPENROUTER_SITE_URL',
        'app_name': 'OPENROUTER_SITE_NAME',
        'default_model': 'OPENROUTER_DEFAULT_MODEL',
    }

    values = {}
    for field_name, env_name in env_fields.items():
        value = os.getenv(env_name)
        if value:
            values[field_name] = value

    retry = {}
    max_retries = _env_int('OPENROUTER_MAX_RETRIES')
    if max_retries is not None:
        retry['max_attempts'] = max_retries + 1
    retry_delay = os.getenv('OPENROUTER_RETRY_DELAY')
    if retry_delay:
        retry['base_delay'] = retry_delay

    overrides = {k: v for k, v in overrides.items() if v is not None}
    if 'max_retries' in overrides:
        retry['max_attempts'] = int(overrides.pop('max_retries')) + 1
    if 'retry_delay' in overrides:
        retry['base_delay'] = overrides.pop('retry_delay')

    values.update(overrides)
    if retry and 'retry' not in values:
        values['retry'] = RetryConfig(**retry)

    return ClientConfig(**values)
