"""
orclient credits / activity / key - account information.
"""

from rich.table import Table

from cli.helpers import build_client, console, format_usd


def cmd_credits(args):
    client = build_client(args)
    credits = client.credits.get().data

    console.print(f"Total credits: {format_usd(credits.total_credits)}")
    console.print(f"Total usage:   {format_usd(credits.total_usage)}")
    console.print(f"Remaining:     [bold]{format_usd(credits.remaining)}[/bold]")


def cmd_activity(args):
    client = build_client(args)
    rows = client.activity.get(date=args.date).data

    table = Table(title=f"Activity ({args.date or 'last 30 days'})")
    table.add_column("date")
    table.add_column("model", style="cyan")
    table.add_column("provider")
    table.add_column("requests", justify="right")
    table.add_column("usage", justify="right")

    for row in rows:
        table.add_row(row.date, row.model, row.provider_name, f"{int(row.requests):,}", format_usd(row.usage))

    console.print(table)


def cmd_key(args):
    client = build_client(args)
    key = client.keys.current().data

    console.print(f"Label:     {key.label}")
    console.print(f"Usage:     {format_usd(key.usage)}")
    console.print(f"Limit:     {format_usd(key.limit)}")
    console.print(f"Free tier: {'yes' if key.is_free_tier else 'no'}")
    if key.rate_limit:
        console.print(f"Rate:      {int(key.rate_limit.requests)} requests / {key.rate_limit.interval}")


def setup_parser(subparsers):
    credits_parser = subparsers.add_parser('credits', help='Show account credits')
    credits_parser.set_defaults(func=cmd_credits)

    activity_parser = subparsers.add_parser('activity', help='Show usage by model endpoint')
    activity_parser.add_argument('--date', help='Single day, YYYY-MM-DD (default: last 30 days)')
    activity_parser.set_defaults(func=cmd_activity)

    key_parser = subparsers.add_parser('key', help='Show the current API key')
    key_parser.set_defaults(func=cmd_key)
