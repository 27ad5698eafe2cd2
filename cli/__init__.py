import argparse
import sys

import cli.account
import cli.catalog
import cli.chat
from cli.helpers import err_console
from openrouter_client import OpenRouterError


def create_parser():
    parser = argparse.ArgumentParser(
        prog='orclient',
        description='orclient - live checks against the OpenRouter API',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reads OPENROUTER_API_KEY from the environment or .env
  orclient chat "Say hello" --model openai/gpt-4o-mini
  orclient chat "Say hello" --model meta-llama/llama-3.1-8b-instruct:nitro
  orclient stream "Count to ten" --max-tokens 100
  orclient complete "Once upon a time"

  # Catalogue
  orclient models --search claude
  orclient providers

  # Account
  orclient credits
  orclient activity --date 2025-01-31
  orclient key

  # Show retries and stream lifecycle
  orclient -v --retries 5 chat "Hello"
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging and lifecycle events')
    parser.add_argument('--json-logs', action='store_true', help='Emit logs as JSON lines')
    parser.add_argument('--timeout', type=float, help='Request timeout in seconds')
    parser.add_argument('--retries', type=int, help='Retries after the first attempt')

    subparsers = parser.add_subparsers(dest='command', help='Command')
    subparsers.required = True

    cli.chat.setup_parser(subparsers)
    cli.catalog.setup_parser(subparsers)
    cli.account.setup_parser(subparsers)

    return parser


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except OpenRouterError as e:
        err_console.print(f"[red]✗ {type(e).__name__}: {e}[/red]")
        sys.exit(1)
