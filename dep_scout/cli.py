# === FILE: dep_scout/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for DepScout.

Commands:
  scan      Scan target URLs for npm package references and check the registry
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON options file (defaults apply when omitted)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)

scan options:
  -i, --infile PATH       Read targets from a file, one per line
  -c, --concurrency INT   Targets fetched at the same time
  -t, --timeout SEC       Per-request deadline
  -d, --delay MS          Delay between requests
  --delay-jitter MS       Upper bound of random extra delay
  --user-agent TEXT       User-Agent header ("" sends none)
  --proxy HOST:PORT       Upstream HTTP proxy
  -r, --resolvers PATH    File with DNS resolvers, one host[:port] per line
  -o, --outfile PATH      Write "<status> <url>" lines
  --json PATH             Write the full results as JSON
  --hide-claimed          Only print packages that are not registered
  -s, --silence           Only print results
  -v, --verbose           Debug logging

Targets are taken from --infile, the positional arguments (comma separated
lists are split) or, when neither is given, from piped standard input.

Example:
  dep_scout scan -c 20 https://example.com/main.js,https://example.com/package.json
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from dep_scout import __version__
from dep_scout.config import ScanOptions, load_config, read_lines, read_resolvers
from dep_scout.engine import NoTargetsError, start_scan
from dep_scout.logger import configure, level_for
from dep_scout.models import Result
from dep_scout.report import package_lines, render_json, render_text

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def print_error(message: str) -> None:
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def split_targets(values: List[str]) -> List[str]:
    """Split comma separated arguments into single targets."""
    targets = []
    for value in values:
        targets.extend(part.strip() for part in value.split(",") if part.strip())
    return targets


def collect_targets(urls: List[str], infile: Optional[Path]) -> List[str]:
    targets: List[str] = []
    if infile is not None:
        targets.extend(read_lines(infile))
    targets.extend(split_targets(urls))
    if not targets:
        stdin = click.get_text_stream("stdin")
        if not stdin.isatty():
            targets.extend(split_targets([line for line in stdin.read().splitlines() if line.strip()]))
    return targets


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", message="DepScout, version %(version)s")
@click.option(
    "--config", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Options file (YAML or JSON).",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level.",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Log file (stderr only when omitted).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: str, log_file: Optional[Path]) -> None:
    """DepScout: find unclaimed npm package names referenced by web assets."""
    try:
        options = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f"Could not load configuration: {e}")
    ctx.ensure_object(dict)
    ctx.obj["options"] = options
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file


@cli.command("scan", context_settings=CONTEXT_SETTINGS)
@click.argument("urls", nargs=-1)
@click.option("-i", "--infile", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="File with targets, one per line.")
@click.option("-c", "--concurrency", type=click.IntRange(min=1), default=None,
              help="Targets fetched at the same time.")
@click.option("-t", "--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Per-request deadline in seconds.")
@click.option("-d", "--delay", type=click.IntRange(min=0), default=None,
              help="Delay between requests in milliseconds.")
@click.option("--delay-jitter", "delay_jitter", type=click.IntRange(min=0), default=None,
              help="Upper bound of random extra delay in milliseconds.")
@click.option("--user-agent", "user_agent", default=None, help="User-Agent header.")
@click.option("--proxy", default=None, help="Upstream HTTP proxy as host:port.")
@click.option("-r", "--resolvers", "resolvers_file", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="File with DNS resolvers, one host[:port] per line.")
@click.option("-o", "--outfile", type=click.Path(writable=True, dir_okay=False, path_type=Path),
              default=None, help='Write "<status> <url>" lines to this file.')
@click.option("--json", "json_output", type=click.Path(writable=True, dir_okay=False, path_type=Path),
              default=None, help="Write the full results as JSON.")
@click.option("--hide-claimed", "hide_claimed", is_flag=True, help="Only print unclaimed packages.")
@click.option("-s", "--silence", is_flag=True, help="Only print results.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.pass_context
def scan(
    ctx: click.Context,
    urls: List[str],
    infile: Optional[Path],
    resolvers_file: Optional[Path],
    outfile: Optional[Path],
    json_output: Optional[Path],
    hide_claimed: bool,
    **overrides: Any,
) -> None:
    """Scan targets and print one line per discovered package."""
    base: ScanOptions = ctx.obj["options"]
    verbose = overrides["verbose"] or base.verbose
    silence = overrides["silence"] or base.silence
    level = level_for(verbose, silence) if verbose or silence else ctx.obj["log_level"]
    logger = configure(level=level, log_file=ctx.obj["log_file"])

    # unset flags and options keep the configured value
    update: Dict[str, Any] = {
        key: value for key, value in overrides.items() if value is not None and value is not False
    }
    if resolvers_file is not None:
        update["resolvers"] = read_resolvers(resolvers_file, logger)
    try:
        options = ScanOptions(**{**base.model_dump(), **update})
    except ValueError as e:
        print_error(f"Invalid options: {e}")

    targets = collect_targets(list(urls), infile)

    def show(result: Result) -> None:
        for line in package_lines(result, hide_claimed):
            click.echo(line)

    try:
        results = asyncio.run(start_scan(options, targets, on_result=show, logger=logger))
    except NoTargetsError:
        print_error("No targets supplied: pass URLs, --infile or pipe them on stdin")
    except Exception as e:
        print_error(f"Scan failed: {e}")

    if outfile:
        saved = render_text(results, outfile)
        logger.info("Status report saved: %s", saved)
    if json_output:
        saved = render_json(results, json_output)
        logger.info("JSON report saved: %s", saved)


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration as JSON."""
    options: ScanOptions = ctx.obj["options"]
    click.echo(options.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
