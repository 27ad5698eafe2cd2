"""
orclient models / providers - catalogue listings.
"""

from rich.table import Table

from cli.helpers import build_client, console


def cmd_models(args):
    client = build_client(args)
    models = client.models.list(category=args.category).data

    if args.search:
        needle = args.search.lower()
        models = [m for m in models if needle in m.id.lower() or needle in m.name.lower()]

    table = Table(title=f"Models ({len(models)})")
    table.add_column("id", style="cyan")
    table.add_column("context", justify="right")
    table.add_column("prompt $/M", justify="right")
    table.add_column("completion $/M", justify="right")

    for model in models[:args.limit] if args.limit else models:
        table.add_row(
            model.id,
            f"{int(model.context_length or 0):,}",
            _per_million(model.pricing.prompt),
            _per_million(model.pricing.completion)
        )

    console.print(table)


def cmd_providers(args):
    client = build_client(args)
    providers = client.providers.list().data

    table = Table(title=f"Providers ({len(providers)})")
    table.add_column("slug", style="cyan")
    table.add_column("name")
    table.add_column("status page")

    for provider in providers:
        table.add_row(provider.slug, provider.name, provider.status_page_url or "")

    console.print(table)


def _per_million(price: str) -> str:
    try:
        return f"{float(price) * 1_000_000:.2f}"
    except ValueError:
        return price


def setup_parser(subparsers):
    models_parser = subparsers.add_parser('models', help='List available models')
    models_parser.add_argument('--category', help='Filter by category (e.g. programming)')
    models_parser.add_argument('--search', help='Substring match on id or name')
    models_parser.add_argument('--limit', type=int, default=25, help='Rows to show (0 = all, default: 25)')
    models_parser.set_defaults(func=cmd_models)

    providers_parser = subparsers.add_parser('providers', help='List providers')
    providers_parser.set_defaults(func=cmd_providers)
