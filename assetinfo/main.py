"""
assetinfo — CLI entrypoint.

Usage:
    assetinfo --help
    assetinfo list
    assetinfo info nginx
    assetinfo info-all
    assetinfo update
    assetinfo scan /usr/local/bin --db hashes.json
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from assetinfo import __version__
from assetinfo.core.observability.logging_config import configure_logging


def _load_config(ctx: click.Context):
    """Load the config once per invocation, exiting on error."""
    from assetinfo.core.config.loader import ConfigError, load_config

    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = load_config(ctx.obj.get("config_path"))
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)
    return ctx.obj["config"]


def _load_catalog(ctx: click.Context):
    from assetinfo.core.errors import CatalogError
    from assetinfo.core.services.catalog import ProgramCatalog

    config = _load_config(ctx)
    try:
        return ProgramCatalog.load(config.database_folder)
    except CatalogError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        click.echo("   Run 'assetinfo update' to install the program catalog.", err=True)
        sys.exit(1)


def _eol_client(ctx: click.Context):
    from assetinfo.core.services.endoflife import EndOfLifeDateClient

    if ctx.obj.get("no_eol"):
        return None
    config = _load_config(ctx)
    return EndOfLifeDateClient(config.endoflife_base_url, timeout=config.http_timeout)


@click.group()
@click.version_option(version=__version__, prog_name="assetinfo")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to assetinfo.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """assetinfo — identify installed software and its end-of-life status."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    config = _load_config(ctx)

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        flag_level = "DEBUG"
    elif verbose:
        flag_level = "INFO"
    elif quiet:
        flag_level = "ERROR"
    else:
        flag_level = None
    configure_logging(flag_level, config.log_level)


# ── Catalog ─────────────────────────────────────────────────────


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_programs(ctx: click.Context, as_json: bool) -> None:
    """List all supported programs."""
    catalog = _load_catalog(ctx)
    programs = sorted(catalog.programs, key=lambda p: p.info.title.casefold())

    if as_json:
        click.echo(json.dumps([
            {
                "id": p.info.id,
                "title": p.info.title,
                "binary": p.has_binary,
                "docker": p.has_docker,
            }
            for p in programs
        ], indent=2))
        return

    click.secho(f"\n📦 Supported programs ({len(programs)})", fg="cyan", bold=True)
    if not programs:
        click.echo("   (catalog is empty)")
    width = max((len(p.info.title) for p in programs), default=0)
    for p in programs:
        sources = [name for name, on in (("binary", p.has_binary), ("docker", p.has_docker)) if on]
        click.echo(f"   • {p.info.title:<{width}}  {p.info.id}  [{', '.join(sources) or '-'}]")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def update(ctx: click.Context, as_json: bool) -> None:
    """Update the local program catalog from the update source."""
    from assetinfo.core.use_cases.update import update_catalog

    config = _load_config(ctx)
    result = update_catalog(config)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ Update failed: {result.error}", fg="red", err=True)
        sys.exit(1)

    click.secho("✅ Catalog updated", fg="green", bold=True)
    click.echo(f"   Folder:   {result.database_folder}")
    click.echo(f"   Programs: {result.programs_loaded}")


# ── Detection ───────────────────────────────────────────────────


def _print_report(report, verbose: bool) -> None:
    from assetinfo.core.services.endoflife import support_status

    if not report.detections:
        click.secho(f"   ⊘ {report.info.title} ", fg="yellow", nl=False)
        click.echo("(not found)")
        return

    for detection in report.detections:
        if detection.error:
            click.secho(f"   ✗ {report.info.title} ({detection.source})", fg="red")
            for line in detection.error.splitlines()[:5]:
                click.echo(f"     │ {line}")
            continue

        version = detection.version
        click.secho(f"   ✓ {report.info.title} ", fg="green", nl=False)
        click.echo(f"({detection.source}) found in Version {version}")

        if detection.release_cycle is not None:
            status = support_status(detection.release_cycle)
            color = "green" if status.supported else "red"
            click.secho(f"     {status.describe(version.cycle)}", fg=color)
            if verbose:
                click.echo(f"     Latest: {detection.release_cycle.latest}")


@cli.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--no-eol", is_flag=True, help="Skip end-of-life lookups.")
@click.pass_context
def info(ctx: click.Context, name: str, as_json: bool, no_eol: bool) -> None:
    """Get information for a program (by id or title)."""
    from assetinfo.core.use_cases.info import gather_program_info

    ctx.obj["no_eol"] = no_eol
    catalog = _load_catalog(ctx)
    program = catalog.get(name)
    if program is None:
        click.secho(f"❌ Could not find any program matching {name}", fg="red", err=True)
        sys.exit(1)

    config = _load_config(ctx)
    report = gather_program_info(
        program,
        eol_client=_eol_client(ctx),
        timeout=config.command_timeout,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.echo()
    _print_report(report, ctx.obj.get("verbose", False))
    click.echo()


@cli.command("info-all")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--no-eol", is_flag=True, help="Skip end-of-life lookups.")
@click.option("--found-only", is_flag=True, help="Hide programs that were not detected.")
@click.pass_context
def info_all(ctx: click.Context, as_json: bool, no_eol: bool, found_only: bool) -> None:
    """Get information for all supported programs."""
    from assetinfo.core.use_cases.info import gather_all

    ctx.obj["no_eol"] = no_eol
    catalog = _load_catalog(ctx)
    config = _load_config(ctx)

    reports = gather_all(
        catalog.programs,
        eol_client=_eol_client(ctx),
        timeout=config.command_timeout,
    )
    if found_only:
        reports = [r for r in reports if r.detections]

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
        return

    found = sum(1 for r in reports if r.found)
    click.secho(f"\n🔍 Programs: {found}/{len(catalog)} detected", fg="cyan", bold=True)
    click.echo()
    for report in reports:
        _print_report(report, ctx.obj.get("verbose", False))
    click.echo()


# ── Hash scan ───────────────────────────────────────────────────


@cli.command("scan")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--db",
    "db_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON hash database (repeatable, queried in order).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--identified-only", is_flag=True, help="Only list recognised files.")
@click.pass_context
def scan_cmd(
    ctx: click.Context,
    paths: tuple[Path, ...],
    db_files: tuple[Path, ...],
    as_json: bool,
    identified_only: bool,
) -> None:
    """Identify files in folders by their SHA-256 hash."""
    from assetinfo.core.errors import HashDatabaseError
    from assetinfo.core.use_cases.scan import build_databases, run_scan

    config = _load_config(ctx)
    try:
        databases = build_databases(config, list(db_files))
    except HashDatabaseError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if not databases:
        click.secho("⚠️  No hash databases configured, every file will be unknown", fg="yellow", err=True)

    result = run_scan(list(paths), databases)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ Scan failed: {result.error}", fg="red", err=True)
        sys.exit(1)

    click.secho(
        f"\n🔎 Scanned {len(result.results)} files, {result.identified} identified",
        fg="cyan",
        bold=True,
    )
    for r in result.results:
        if r.program_info is not None:
            click.secho(f"   ✓ {r.file_path} ", fg="green", nl=False)
            click.echo(f"→ {r.program_info.title} {r.program_info.version}")
        elif not identified_only:
            click.echo(f"   ? {r.file_path}")
            if ctx.obj.get("verbose"):
                click.echo(f"     {r.file_hash}")
    click.echo()


if __name__ == "__main__":
    cli()
