#!/usr/bin/env python3
"""
OpenRouter client.

Composes the transport, retry, parsing and streaming layers behind one object
whose attributes group the API's endpoints.
"""

from typing import Optional

from .config import ClientConfig, RetryConfig, load_config
from .dispatcher import Dispatcher
from .events import EventCallback
from .logger import ClientLogger, get_logger
from .resources import (
    ActivityResource,
    ChatResource,
    CompletionsResource,
    CreditsResource,
    KeysResource,
    ModelsResource,
    ProvidersResource,
    system_message,
    user_message,
)
from .transport import OpenRouterTransport, ResponseParser, RetryPolicy, ThreadLocalSessionManager


class OpenRouterClient:
    """
    Client for the OpenRouter API.

    Resources:
    - chat: /chat/completions (create, stream)
    - completions: /completions (create, stream, few-shot helpers)
    - models, providers: catalogue
    - credits, activity, keys: account

    Components:
    - OpenRouterTransport: HTTP requests over thread-local sessions
    - RetryPolicy: capped exponential backoff, cancellation
    - ResponseParser: JSON decoding into typed models
    - Dispatcher: validation and orchestration of the above

    The client holds no per-request state and may be shared between threads.
    A Stream it returns belongs to the thread that iterates it.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        on_event: Optional[EventCallback] = None,
        logger: Optional[ClientLogger] = None,
        session_manager: Optional[ThreadLocalSessionManager] = None,
        **overrides
    ):
        """
        Initialize the client.

        Args:
            config: Complete configuration; when omitted, built with load_config()
                    from the environment and ``overrides``
            on_event: Callback receiving an EventData per request lifecycle step
            logger: Structured logger (default: "openrouter_client")
            session_manager: Source of requests sessions (tests inject fakes here)
            **overrides: ClientConfig fields (api_key, timeout, ...) or
                         max_retries/retry_delay; applied on top of ``config``
        """
        if config is None:
            config = load_config(**overrides)
        elif overrides:
            config = _apply_overrides(config, overrides)

        self.config = config
        self.logger = logger or get_logger()
        self.on_event = on_event

        self.transport = OpenRouterTransport(config, session_manager=session_manager, logger=self.logger)
        self.retry = RetryPolicy(config.retry, logger=self.logger, on_event=on_event)
        self.parser = ResponseParser(logger=self.logger)
        self.dispatcher = Dispatcher(
            config,
            transport=self.transport,
            retry=self.retry,
            parser=self.parser,
            logger=self.logger,
            on_event=on_event
        )

        self.chat = ChatResource(self.dispatcher)
        self.completions = CompletionsResource(self.dispatcher)
        self.models = ModelsResource(self.dispatcher)
        self.providers = ProvidersResource(self.dispatcher)
        self.credits = CreditsResource(self.dispatcher)
        self.activity = ActivityResource(self.dispatcher)
        self.keys = KeysResource(self.dispatcher)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **kwargs) -> 'OpenRouterClient':
        """Build a client from OPENROUTER_* environment variables (and .env)."""
        on_event = kwargs.pop('on_event', None)
        logger = kwargs.pop('logger', None)
        session_manager = kwargs.pop('session_manager', None)
        return cls(
            load_config(env_file=env_file, **kwargs),
            on_event=on_event,
            logger=logger,
            session_manager=session_manager
        )

    def simple_call(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        **params
    ) -> str:
        """
        One system + user exchange, returning only the reply text.

        Args:
            system_prompt: System message content
            user_prompt: User message content
            model: Model to use (default: config.default_model)
            **params: Extra ChatCompletionRequest fields

        Returns:
            Text of the first choice ("" when the model returned none)
        """
        response = self.chat.create(
            [system_message(system_prompt), user_message(user_prompt)],
            model=model,
            **params
        )
        return response.content

    def close(self):
        """Close the calling thread's HTTP session."""
        self.transport.session_manager.close()

    def __enter__(self) -> 'OpenRouterClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def _apply_overrides(config: ClientConfig, overrides: dict) -> ClientConfig:
    overrides = {k: v for k, v in overrides.items() if v is not None}
    retry_updates = {}
    if 'max_retries' in overrides:
        retry_updates['max_attempts'] = int(overrides.pop('max_retries')) + 1
    if 'retry_delay' in overrides:
        retry_updates['base_delay'] = float(overrides.pop('retry_delay'))
    if retry_updates:
        overrides['retry'] = RetryConfig(**{**config.retry.model_dump(), **retry_updates})
    return ClientConfig(**{**config.model_dump(), **overrides})
