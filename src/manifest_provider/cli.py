"""
Command-line interface for the manifest providers.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from . import __version__
from .config import get_config_manager, reset_config_manager
from .error_handling import ProviderError
from .logging import LoggerConfig, set_log_level, setup_logging
from .orchestrator import AnalysisOrchestrator, AnalysisType


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', '-c',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to configuration file'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (use -v or -vv)'
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    Manifest Provider - Build dependency analysis request bodies from project manifests.

    Supports Maven (pom.xml), npm (package.json), Go modules (go.mod) and
    pip (requirements.txt). The CycloneDX document is written to standard
    output unless --output is given; logs go to standard error.
    """
    ctx.ensure_object(dict)

    reset_config_manager()
    try:
        provider_config = get_config_manager(config).get_config()
    except ProviderError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    configure_logging(provider_config.logging, verbose)

    ctx.obj['config'] = provider_config
    ctx.obj['verbose'] = verbose


def _analysis_options(command):
    command = click.option(
        '--output', '-o',
        type=click.Path(dir_okay=False, path_type=Path),
        help='File to write the request body to (standard output if omitted)'
    )(command)
    command = click.option(
        '--lock-file-dir',
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        help='Directory holding the lock file (defaults to the manifest directory)'
    )(command)
    command = click.option(
        '--validate-lock-file/--no-validate-lock-file',
        default=True,
        help='Check that the lock file the ecosystem needs is present'
    )(command)
    command = click.option(
        '--timeout', '-t',
        type=click.FloatRange(min=0, min_open=True),
        help='Seconds to wait for the package manager'
    )(command)
    return click.argument(
        'manifest',
        type=click.Path(dir_okay=False, path_type=Path)
    )(command)


@cli.command()
@_analysis_options
@click.pass_context
def stack(ctx: click.Context, manifest: Path, **options) -> None:
    """
    Produce a stack analysis request body: the full dependency graph.

    Examples:

        manifest-provider stack pom.xml

        manifest-provider stack -o sbom.json --lock-file-dir ./web web/package.json
    """
    run_analysis(ctx, manifest, AnalysisType.STACK, **options)


@cli.command()
@_analysis_options
@click.pass_context
def component(ctx: click.Context, manifest: Path, **options) -> None:
    """
    Produce a component analysis request body: direct dependencies only.

    Examples:

        manifest-provider component requirements.txt

        manifest-provider component --timeout 60 go.mod
    """
    run_analysis(ctx, manifest, AnalysisType.COMPONENT, **options)


@cli.command()
@click.option(
    '--format', '-f',
    type=click.Choice(['table', 'json', 'yaml'], case_sensitive=False),
    default='table',
    help='Output format for configuration display'
)
@click.pass_context
def config(ctx: click.Context, format: str) -> None:
    """
    Display current configuration settings.

    Shows the effective configuration after defaults, the configuration
    file and environment variable overrides have been applied.
    """
    config_dict = ctx.obj['config'].to_dict()

    if format == 'json':
        click.echo(json.dumps(config_dict, indent=2, default=str))
    elif format == 'yaml':
        click.echo(yaml.safe_dump(config_dict, default_flow_style=False))
    else:
        display_config_table(config_dict)


def run_analysis(
    ctx: click.Context,
    manifest: Path,
    analysis_type: AnalysisType,
    output: Optional[Path],
    lock_file_dir: Optional[Path],
    validate_lock_file: bool,
    timeout: Optional[float]
) -> None:
    """Run one analysis and write the content, exiting non-zero on failure."""
    orchestrator = AnalysisOrchestrator(ctx.obj['config'])
    result = orchestrator.analyze(
        manifest,
        analysis_type,
        lock_file_dir=lock_file_dir,
        validate_lock_file=validate_lock_file,
        timeout=timeout
    )

    if not result.ok:
        error = result.error
        click.echo(f"Error: {error.message}", err=True)
        if ctx.obj.get('verbose', 0) > 0:
            for key, value in error.context.items():
                click.echo(f"  {key}: {value}", err=True)
        sys.exit(1)

    content = result.content
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(content.buffer)
        if ctx.obj.get('verbose', 0) > 0:
            click.echo(f"Wrote {len(content.buffer)} bytes of {content.type} to {output}", err=True)
    else:
        click.echo(content.buffer, nl=False)


def configure_logging(logging_config, verbose: int) -> None:
    """Set up logging from configuration, raised by the verbosity level."""
    setup_logging(LoggerConfig.from_config(logging_config), force=True)
    if verbose == 1:
        set_log_level("INFO")
    elif verbose >= 2:
        set_log_level("DEBUG")


def display_config_table(config_dict) -> None:
    """Display configuration in table format."""
    click.echo("\nCurrent Configuration:")
    click.echo("-" * 50)

    for section_name, section in config_dict.items():
        click.echo(f"\n[{section_name.capitalize()}]")
        for key, value in section.items():
            click.echo(f"  {key}: {value}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
