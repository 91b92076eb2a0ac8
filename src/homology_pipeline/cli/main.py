"""Main CLI entry point for homology.

Provides command group with global options and subcommands.
"""

import logging
from pathlib import Path

import click

from homology_pipeline import __version__
from homology_pipeline.config import load_config_with_overrides
from homology_pipeline.cli.orthologs_cmd import orthologs
from homology_pipeline.orthology.organisms import TAXIDS_BY_NAME, display_name


# Root logger for stdlib-logging modules (HTTP client, CLI)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def _parse_overrides(ctx, param, values):
    """Turn repeated KEY=VALUE options into a dotted-key overrides dict."""
    overrides = {}
    for item in values:
        key, sep, value = item.partition('=')
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", ctx=ctx, param=param)
        overrides[key.strip()] = value
    return overrides


@click.group()
@click.version_option(__version__, prog_name='homology')
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Path to configuration YAML file (defaults built in)'
)
@click.option(
    '--set', 'overrides',
    multiple=True,
    metavar='KEY=VALUE',
    callback=_parse_overrides,
    help='Override a config value, e.g. api.timeout_seconds=5 (repeatable)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, overrides, verbose):
    """Homology: find orthologous genes and their genomic locations.

    Queries OrthoDB for orthologs, ranks ambiguous candidates by protein
    features, and resolves coordinates via MyGene.info and NCBI Gene.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['overrides'] = overrides
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Homology v{__version__}")
    click.echo(f"Config: {config_path or '(defaults)'}")
    click.echo()

    try:
        config = load_config_with_overrides(config_path, ctx.obj['overrides'])

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Endpoints:", bold=True))
        click.echo(f"  OrthoDB SPARQL: {config.endpoints.sparql_url}")
        click.echo(f"  OrthoDB API:    {config.endpoints.orthodb_api_url}")
        click.echo(f"  MyGene.info:    {config.endpoints.mygene_url}")
        click.echo(f"  NCBI email:     {config.endpoints.ncbi_email or 'not set'}")
        click.echo(f"  NCBI API key:   {'set' if config.endpoints.ncbi_api_key else 'not set'}")
        click.echo()

        click.echo(click.style("API Configuration:", bold=True))
        click.echo(f"  Max Retries: {config.api.max_retries}")
        click.echo(f"  Timeout: {config.api.timeout_seconds}s")
        click.echo(f"  Detail Concurrency: {config.api.detail_max_concurrency}")
        click.echo(f"  Detail Interval: {config.api.detail_min_interval_seconds}s")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


@cli.command()
def organisms():
    """List supported organisms and their NCBI Taxonomy IDs."""
    for name, taxid in sorted(TAXIDS_BY_NAME.items()):
        click.echo(f"{taxid}\t{display_name(name)}")


# Subcommands defined in their own modules
cli.add_command(orthologs)


if __name__ == '__main__':
    cli()
