"""
Handpick — CLI entrypoint.

Usage:
    handpick                                  # plain install
    handpick optionalDependencies             # install + optionalDependencies
    handpick peerDependencies buildDependencies
    handpick --cleanup                        # restore after a killed run
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click

from handpick import __version__
from handpick.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    ENV_LOG_LEVEL,
    resolve_level,
    setup_logging,
)

logger = logging.getLogger(__name__)


def _error_block(message: str, *details: str) -> None:
    """Print the single aggregated error block on stderr."""
    click.secho("\nAn Error Has Occurred :", fg="red", bold=True, err=True)
    click.echo(f"  {message}", err=True)
    for line in details:
        click.echo(f"  {line}", err=True)


@click.command(context_settings={"ignore_unknown_options": True})
@click.version_option(version=__version__, prog_name="handpick")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to handpick.yml (default: ./handpick.yml if present).",
)
@click.option("--dry-run", is_flag=True, help="Show the merged manifest; don't install.")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def cli(
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    dry_run: bool,
    args: tuple[str, ...],
) -> None:
    """Install dependencies plus extra XxxDependencies groups.

    Each ARG ending in "Dependencies" names a manifest group that is merged
    into devDependencies for this install only.  The manifest is restored
    afterwards.  Pass --cleanup to restore after an interrupted run.

    Examples:

        handpick optionalDependencies

        handpick peerDependencies buildDependencies

        handpick --cleanup
    """
    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get(ENV_LOG_LEVEL),
        ),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
    )

    try:
        exit_code = _main(args, config_path, dry_run=dry_run, quiet=quiet)
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        _error_block(f"{type(e).__name__}: {e}")
        exit_code = 1

    sys.exit(exit_code)


def _main(args: tuple[str, ...], config_path: str | None, *, dry_run: bool, quiet: bool) -> int:
    from handpick.core.config.loader import ConfigError, load_settings
    from handpick.core.services.arguments import classify_arguments

    try:
        settings = load_settings(Path(config_path) if config_path else None)
    except ConfigError as e:
        _error_block(str(e))
        return 1

    invocation = classify_arguments(args)
    if invocation.ignored:
        click.secho(f"Ignoring arguments: {' '.join(invocation.ignored)}", fg="yellow", err=True)

    if invocation.cleanup_only:
        return _cleanup(settings)
    return _install(invocation, settings, dry_run=dry_run, quiet=quiet)


def _cleanup(settings) -> int:
    from handpick.core.use_cases.cleanup import run_cleanup

    click.secho("Handpick : Cleanup Mode", fg="cyan", bold=True)
    result = run_cleanup(settings)

    if result.error:
        _error_block(result.error)
    else:
        click.echo(f"  Restored : {result.session.manifest_path.name}")
    return result.exit_code


def _install(invocation, settings, *, dry_run: bool, quiet: bool) -> int:
    from handpick.core.persistence.manifest_file import dump_manifest
    from handpick.core.use_cases.install import run_install

    def _announce(result) -> None:
        if quiet:
            return
        mode = " (dry run)" if dry_run else ""
        click.secho(f"Handpick{mode}", fg="cyan", bold=True)
        click.echo("  Install  : dependencies devDependencies")
        if result.group_names:
            click.echo(f"  Includes : {' '.join(result.group_names)}")
        if dry_run:
            click.echo()
            click.echo(dump_manifest(result.working_manifest), nl=False)

    result = run_install(invocation, settings, dry_run=dry_run, before_install=_announce)

    if result.error:
        details = []
        if result.session.restore_error:
            details.append(f"Restore failed: {result.session.restore_error}")
            details.append("Run 'handpick --cleanup' to restore the manifest.")
        _error_block(f"{result.error_type}: {result.error}", *details)
        return result.exit_code

    if result.session.restore_error:
        _error_block(
            f"Restore failed: {result.session.restore_error}",
            "Run 'handpick --cleanup' to restore the manifest.",
        )
        return result.exit_code

    if result.status == "cancelled":
        click.secho("\nCancelled", fg="yellow", err=True)
    elif result.status == "ok" and not dry_run:
        click.secho("\nInstall Succeeded", fg="green")
    elif result.status == "ok":
        click.echo("\n  Dry run: installer skipped, manifest restored")

    return result.exit_code


if __name__ == "__main__":
    cli()
