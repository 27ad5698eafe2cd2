"""
orclient chat / stream / complete - live completion checks.
"""

import threading

from rich.markup import escape

from openrouter_client import concatenate_chat_stream, system_message, user_message
from cli.helpers import build_client, console, err_console


def _messages(args):
    messages = []
    if args.system:
        messages.append(system_message(args.system))
    messages.append(user_message(args.prompt))
    return messages


def cmd_chat(args):
    client = build_client(args)
    response = client.chat.create(
        _messages(args),
        max_tokens=args.max_tokens,
        temperature=args.temperature
    )

    console.print(escape(response.content))
    if response.usage:
        err_console.print(
            f"[dim]{response.model} · {response.usage.prompt_tokens} prompt + "
            f"{response.usage.completion_tokens} completion tokens[/dim]"
        )


def cmd_stream(args):
    client = build_client(args)
    cancel = threading.Event()
    received = []

    stream = client.chat.stream(
        _messages(args),
        cancel=cancel,
        max_tokens=args.max_tokens,
        temperature=args.temperature
    )
    try:
        for event in stream:
            received.append(event)
            console.print(escape(event.content), end="")
    except KeyboardInterrupt:
        cancel.set()
    finally:
        stream.close()
    console.print()

    err_console.print(f"[dim]{len(received)} events, {len(concatenate_chat_stream(received))} chars[/dim]")
    stream.raise_for_error()


def cmd_complete(args):
    client = build_client(args)
    response = client.completions.create(
        args.prompt,
        max_tokens=args.max_tokens,
        temperature=args.temperature
    )
    console.print(escape(response.text))


def _add_generation_args(parser):
    parser.add_argument('prompt', help='Prompt text')
    parser.add_argument('--model', help='Model slug (e.g. openai/gpt-4o-mini, ...:nitro)')
    parser.add_argument('--max-tokens', type=int, default=256, help='Completion token limit (default: 256)')
    parser.add_argument('--temperature', type=float, help='Sampling temperature (0.0-2.0)')


def setup_parser(subparsers):
    chat_parser = subparsers.add_parser('chat', help='Send one chat completion')
    _add_generation_args(chat_parser)
    chat_parser.add_argument('--system', help='Optional system prompt')
    chat_parser.set_defaults(func=cmd_chat)

    stream_parser = subparsers.add_parser('stream', help='Stream a chat completion (Ctrl-C cancels)')
    _add_generation_args(stream_parser)
    stream_parser.add_argument('--system', help='Optional system prompt')
    stream_parser.set_defaults(func=cmd_stream)

    complete_parser = subparsers.add_parser('complete', help='Legacy prompt completion')
    _add_generation_args(complete_parser)
    complete_parser.set_defaults(func=cmd_complete)
