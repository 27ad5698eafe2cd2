from rich.console import Console

from openrouter_client import OpenRouterClient, configure_logging, load_config
from openrouter_client.events import EventData, RequestEvent

DEFAULT_MODEL = "openai/gpt-4o-mini"

console = Console()
err_console = Console(stderr=True)


def print_event(event: EventData):
    """Lifecycle callback for -v: one dim line per retry and stream change."""
    if event.event_type == RequestEvent.RETRY:
        err_console.print(
            f"[dim]↻ {event.path} attempt {event.attempt} failed "
            f"({event.error}); retrying in {event.delay_seconds:.1f}s[/dim]"
        )
    elif event.event_type == RequestEvent.STREAM_OPENED:
        err_console.print(f"[dim]⇢ stream opened ({event.path})[/dim]")
    elif event.event_type == RequestEvent.STREAM_CLOSED:
        err_console.print(
            f"[dim]⇠ stream closed after {event.events_received} events "
            f"in {event.elapsed_seconds:.1f}s[/dim]"
        )


def build_client(args) -> OpenRouterClient:
    if args.verbose:
        configure_logging("DEBUG", json_output=args.json_logs)
    elif args.json_logs:
        configure_logging("INFO", json_output=True)

    config = load_config(
        timeout=args.timeout,
        max_retries=args.retries,
        default_model=getattr(args, 'model', None)
    )
    if not config.default_model:
        config = config.model_copy(update={"default_model": DEFAULT_MODEL})

    return OpenRouterClient(config, on_event=print_event if args.verbose else None)


def format_usd(value) -> str:
    if value is None:
        return "unlimited"
    return f"${value:,.4f}"
