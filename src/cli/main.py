"""CLI commands for the challenge submissions tool."""

import json
import logging
import sys
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click
import structlog
from pydantic import ValidationError

from src.collectors.errors import CollectorError
from src.observability.logging import bind_run_context, configure_logging
from src.ranker.constants import SORT_LATEST, SORT_OPTIONS
from src.settings.app import AppSettings, get_settings
from src.store.errors import NoTagsError, StoreError
from src.submissions import (
    FetchOutcome,
    RemovalAction,
    SubmissionService,
    build_service,
    plan_removal,
    resolve_selection,
)


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


@dataclass
class CliContext:
    """Options shared by every command."""

    settings: AppSettings
    run_id: str
    verbose: bool
    json_logs: bool


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _service(ctx: click.Context) -> SubmissionService:
    """Build the service for the current invocation."""
    options: CliContext = ctx.obj
    return build_service(options.settings, run_id=options.run_id)


def _echo_outcome(verb: str, outcome: FetchOutcome) -> None:
    if not outcome.saved:
        click.echo(
            f"No valid submissions found for tag: {outcome.tag} "
            f"({outcome.articles_fetched} articles checked). Nothing was saved."
        )
        return

    click.echo(
        f"Successfully {verb} {outcome.submissions_count} submissions "
        f"for tag: {outcome.tag}"
    )
    if outcome.announcements_count:
        click.echo(f"  Announcements: {outcome.announcements_count}")
    if outcome.dropped_count:
        click.echo(f"  Skipped (missing marker tag): {outcome.dropped_count}")
    if outcome.backup_path:
        click.echo(f"  Backup: {outcome.backup_path}")


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON format for logs (default: false).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
@click.pass_context
def cli(ctx: click.Context, json_logs: bool, verbose: bool) -> None:
    """Collect and browse dev.to challenge submissions."""
    run_id = str(uuid.uuid4())
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=json_logs,
    )
    bind_run_context(run_id)

    try:
        settings = get_settings()
    except ValidationError as e:
        click.echo("Configuration validation failed:", err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            click.echo(f"  - {location}: {error['msg']}", err=True)
        sys.exit(1)

    ctx.obj = CliContext(
        settings=settings, run_id=run_id, verbose=verbose, json_logs=json_logs
    )


@cli.command()
@click.argument("tag")
@click.pass_context
def fetch(ctx: click.Context, tag: str) -> None:
    """Fetch every submission for a challenge TAG and save it."""
    log = logger.bind(component=COMPONENT_CLI, command="fetch", tag=tag)
    log.info("command_started")
    service = _service(ctx)

    try:
        outcome = service.fetch_submissions(tag)
    except (CollectorError, StoreError) as e:
        log.error("command_failed", error=str(e))
        _fail(f"Failed to fetch submissions for tag '{tag}': {e}")

    _echo_outcome("fetched", outcome)


@cli.command()
@click.argument("tag", required=False)
@click.option(
    "--all",
    "update_all",
    is_flag=True,
    help="Update every tag in the index.",
)
@click.pass_context
def update(ctx: click.Context, tag: str | None, update_all: bool) -> None:
    """Back up and re-fetch one TAG, or every indexed tag with --all."""
    if tag and update_all:
        raise click.UsageError("Give either a TAG or --all, not both.")
    if not tag and not update_all:
        raise click.UsageError("Give a TAG to update, or --all to update every tag.")

    log = logger.bind(component=COMPONENT_CLI, command="update", tag=tag)
    service = _service(ctx)

    if tag:
        try:
            outcome = service.update_tag(tag)
        except (CollectorError, StoreError) as e:
            log.error("command_failed", error=str(e))
            _fail(f"Failed to update tag '{tag}': {e}")
        _echo_outcome("updated", outcome)
        return

    try:
        result = service.update_all_tags()
    except NoTagsError as e:
        _fail(str(e))

    for entry in result.outcomes:
        if entry.success and entry.outcome is not None:
            click.echo(
                f"  {entry.tag}: {entry.outcome.submissions_count} submissions"
            )
        else:
            click.echo(f"  {entry.tag}: FAILED ({entry.error})", err=True)

    click.echo(
        f"Updated {len(result.succeeded)} of {len(result.outcomes)} tags "
        f"({result.total_submissions} submissions)."
    )


@cli.command()
@click.argument("tag", required=False)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Remove without asking for confirmation.",
)
@click.pass_context
def remove(ctx: click.Context, tag: str | None, yes: bool) -> None:
    """Remove a tag's data, keeping a backup.

    Without TAG, lists the known tags and asks which one to remove.
    """
    service = _service(ctx)
    available = service.get_existing_tags()

    if not available:
        click.echo("No tags found to remove.")
        return

    if tag is None:
        click.echo("Existing tags:")
        for number, name in enumerate(available, start=1):
            click.echo(f"  {number}. {name}")
        tag = click.prompt("Select a tag to remove (name or number)", type=str)

    resolved = resolve_selection(available, tag)
    confirmed = yes
    if resolved is not None and not yes:
        confirmed = click.confirm(
            f"Remove all data for '{resolved}'? A backup will be kept.",
            default=False,
        )

    plan = plan_removal(available, tag, confirmed)
    if plan.action == RemovalAction.INVALID_SELECTION:
        _fail(plan.message)
    if plan.action != RemovalAction.REMOVE or plan.tag is None:
        click.echo(plan.message)
        return

    try:
        result = service.remove_tag(plan.tag)
    except StoreError as e:
        _fail(f"Failed to remove tag '{plan.tag}': {e}")

    click.echo(f"Removed tag: {result.tag}")
    if result.backup_path:
        click.echo(f"  Backup: {result.backup_path}")
    for path in result.removed_files:
        click.echo(f"  Deleted: {path}")


@cli.command()
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output as JSON.",
)
@click.pass_context
def tags(ctx: click.Context, json_output: bool) -> None:
    """List every fetched challenge tag."""
    existing = _service(ctx).get_existing_tags()

    if json_output:
        click.echo(json.dumps({"tags": existing, "count": len(existing)}, indent=2))
        return

    if not existing:
        click.echo("No challenge tags found. Use 'fetch' to add some.")
        return

    for name in existing:
        click.echo(name)


@cli.command("list")
@click.argument("tag")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(SORT_OPTIONS),
    default=SORT_LATEST,
    show_default=True,
    help="Sort order.",
)
@click.option(
    "--search",
    type=str,
    default=None,
    help="Only show submissions whose title, description or author match.",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of submissions to show.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output as JSON.",
)
@click.pass_context
def list_submissions(  # noqa: PLR0913
    ctx: click.Context,
    tag: str,
    sort_by: str,
    search: str | None,
    limit: int | None,
    json_output: bool,
) -> None:
    """Show the stored submissions for TAG."""
    service = _service(ctx)
    try:
        listing = service.list_submissions(
            tag, sort_by=sort_by, search=search, limit=limit
        )
    except StoreError as e:
        _fail(str(e))

    if listing is None:
        _fail(f"No data found for tag: {tag}. Use 'fetch {tag}' first.")

    if json_output:
        payload = {
            "tag": listing.tag,
            "total": listing.total,
            "matched": listing.matched,
            "submissions": [
                {
                    **article.to_json_dict(),
                    **(
                        {"relevance_score": round(listing.scores.get(article.id, 0.0), 2)}
                        if listing.scores is not None
                        else {}
                    ),
                }
                for article in listing.articles
            ],
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    click.echo(
        f"{listing.tag}: showing {len(listing.articles)} of {listing.matched} "
        f"matching ({listing.total} total), sorted by {sort_by}"
    )
    for article in listing.articles:
        score = ""
        if listing.scores is not None:
            score = f"[{listing.scores.get(article.id, 0.0):5.1f}] "
        click.echo(
            f"  {score}{article.title} - {article.author_name or 'unknown'} "
            f"({article.positive_reactions_count} reactions, "
            f"{article.comments_count} comments)"
        )


@cli.command("sweep-cache")
@click.pass_context
def sweep_cache(ctx: click.Context) -> None:
    """Delete relevance cache entries older than 24 hours."""
    try:
        removed = _service(ctx).sweep_cache()
    except StoreError as e:
        _fail(str(e))
    click.echo(f"Removed {removed} expired cache entries.")


@cli.command()
@click.option(
    "--to",
    "target_dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory receiving a copy of the data files.",
)
@click.pass_context
def publish(ctx: click.Context, target_dir: Path) -> None:
    """Copy the data files to a directory for static hosting."""
    try:
        copied = _service(ctx).store.publish(target_dir)
    except StoreError as e:
        _fail(str(e))

    if not copied:
        click.echo("No data files to publish.")
        return
    click.echo(f"Published {len(copied)} files to {target_dir}")


if __name__ == "__main__":
    cli()
