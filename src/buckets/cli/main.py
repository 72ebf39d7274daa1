#!/usr/bin/env python3
"""
Main CLI Entry Point for Savings Buckets

Runs the engine against ledger events and exposes the maintenance
operations (percentage validation, reconciliation, cleanup) as commands.
"""

import json
import logging
import os
from typing import IO, Any

import click

from ..core.config import get_config
from ..distribution.percentages import describe_invalid, validate_percentages
from ..events.handler import EventHandler
from ..ledger.client import BkperClient, LedgerBook, LedgerClient, LedgerError
from ..ledger.models import WebhookEvent
from ..reconciliation.balances import validate_balances
from ..reconciliation.cleanup import cleanup_by_gl_account_id, cleanup_by_gl_id


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Savings Buckets - envelope budgeting for ledger savings accounts

    Mirrors every movement on a GL savings account into a bucket book,
    split across bucket accounts by percentage, suffix or override.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["BUCKETS_ENV"] = config_env

    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("buckets").setLevel(logging.DEBUG)

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = get_config()

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Ledger API: {ctx.obj['config'].ledger.base_url}")

    if debug:
        click.echo("Debug logging enabled")


def _get_client(ctx: click.Context) -> LedgerClient:
    """The injected client, or a platform client built from configuration."""
    client = ctx.obj.get("client")
    if client is not None:
        return client

    config_obj = ctx.obj["config"]
    errors = config_obj.validate()
    if errors:
        raise click.ClickException("Invalid configuration: " + "; ".join(errors))

    bkper = BkperClient.from_config(config_obj.ledger)
    ctx.call_on_close(bkper.close)
    ctx.obj["client"] = bkper
    return bkper


def _echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2))


@main.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from buckets import __author__, __version__

    click.echo(f"Savings Buckets v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration (credentials redacted)."""
    config_obj = ctx.obj["config"]
    settings = config_obj.to_dict()

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {settings['environment']}")
    click.echo(f"  Ledger API: {settings['ledger']['base_url']}")
    click.echo(f"  API Key: {settings['ledger']['api_key']}")
    click.echo(f"  OAuth Token: {settings['ledger']['oauth_token']}")
    click.echo(f"  Page Size: {settings['ledger']['page_size']}")
    click.echo(f"  Verify Retries: {settings['verification']['max_retries']}")
    click.echo(f"  Verify Delay (ms): {settings['verification']['retry_delay_ms']}")
    click.echo(f"  Debug Mode: {settings['debug']}")
    click.echo(f"  Log Level: {settings['log_level']}")


@main.command("handle-event")
@click.argument("payload", type=click.File("r"))
@click.pass_context
def handle_event(ctx: click.Context, payload: IO[str]) -> None:
    """
    Handle one ledger event payload (a JSON file, or - for stdin).

    Prints the outcome as JSON and exits non-zero when the event failed.

    Examples:
      buckets handle-event event.json
      cat event.json | buckets handle-event -
    """
    try:
        data = json.load(payload)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid event payload: {e}") from e

    event = WebhookEvent.from_dict(data)
    handler = EventHandler.from_config(_get_client(ctx), ctx.obj["config"])

    try:
        outcome = handler.handle(event)
    except LedgerError as e:
        raise click.ClickException(f"Ledger request failed: {e}") from e

    _echo_json(outcome.to_dict())
    if not outcome.success:
        ctx.exit(1)


@main.command("validate-percentages")
@click.argument("book_id")
@click.pass_context
def validate_percentages_command(ctx: click.Context, book_id: str) -> None:
    """Check that the bucket percentages of a book sum to exactly 100."""
    try:
        book = LedgerBook.open(_get_client(ctx), book_id)
        validation = validate_percentages(book)
    except LedgerError as e:
        raise click.ClickException(f"Ledger request failed: {e}") from e

    click.echo(f"Book: {book.name}")
    click.echo(f"Bucket accounts: {validation.account_count}")
    click.echo(f"Total percentage: {validation.total_percentage}%")

    if not validation.is_valid:
        raise click.ClickException(describe_invalid(validation))
    click.echo("✅ Percentages are valid")


@main.command()
@click.argument("gl_book_id")
@click.argument("bucket_book_id")
@click.pass_context
def reconcile(ctx: click.Context, gl_book_id: str, bucket_book_id: str) -> None:
    """Compare the GL savings total with the bucket total."""
    client = _get_client(ctx)
    try:
        validation = validate_balances(LedgerBook.open(client, gl_book_id), LedgerBook.open(client, bucket_book_id))
    except LedgerError as e:
        raise click.ClickException(f"Ledger request failed: {e}") from e

    click.echo(f"GL savings total: {validation.gl_total}")
    click.echo(f"Bucket total: {validation.bucket_total}")
    click.echo(f"Difference: {validation.difference}")

    if not validation.is_balanced:
        raise click.ClickException(f"Books are out of balance by {validation.difference}")
    click.echo("✅ Books are balanced")


@main.command()
@click.argument("bucket_book_id")
@click.option("--gl-account-id", help="Trash every entry linked to this GL savings account")
@click.option("--gl-transaction-id", help="Trash the entries derived from this GL transaction")
@click.option("--date", help="GL transaction date (YYYY-MM-DD), required with --gl-transaction-id")
@click.option("--hashtag", default="", help="Bucket hashtag narrowing the search")
@click.option("--expected-count", type=int, help="Stop searching after this many matches")
@click.pass_context
def cleanup(
    ctx: click.Context,
    bucket_book_id: str,
    gl_account_id: str | None,
    gl_transaction_id: str | None,
    date: str | None,
    hashtag: str,
    expected_count: int | None,
) -> None:
    """
    Trash derived bucket entries and verify they are gone.

    Examples:
      buckets cleanup BUCKET_BOOK --gl-account-id acc123
      buckets cleanup BUCKET_BOOK --gl-transaction-id tx9 --date 2025-01-15 --hashtag "#bucket"
    """
    if bool(gl_account_id) == bool(gl_transaction_id):
        raise click.UsageError("Pass exactly one of --gl-account-id or --gl-transaction-id")
    if gl_transaction_id and not date:
        raise click.UsageError("--date is required with --gl-transaction-id")

    verification = ctx.obj["config"].verification
    try:
        book = LedgerBook.open(_get_client(ctx), bucket_book_id)
        if gl_account_id:
            count = cleanup_by_gl_account_id(
                book,
                gl_account_id,
                max_retries=verification.max_retries,
                retry_delay_ms=verification.retry_delay_ms,
            )
        else:
            count = cleanup_by_gl_id(
                book,
                hashtag,
                date or "",
                gl_transaction_id or "",
                expected_count=expected_count,
                max_retries=verification.max_retries,
                retry_delay_ms=verification.retry_delay_ms,
            )
    except LedgerError as e:
        raise click.ClickException(f"Ledger request failed: {e}") from e

    click.echo(f"Trashed {count} bucket transactions")


if __name__ == "__main__":
    main()
