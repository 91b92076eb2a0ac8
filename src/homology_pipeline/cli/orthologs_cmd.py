"""Ortholog command: resolve orthologs and locations for genes."""

import asyncio
import json
import logging
from urllib.error import URLError

import click
import httpx

from homology_pipeline.config import load_config_with_overrides
from homology_pipeline.orthology.pipeline import HomologyPipeline

logger = logging.getLogger(__name__)


async def _run(config, genes, source, target):
    async with HomologyPipeline.from_config(config) as pipeline:
        return await pipeline.resolve(genes, source, [target])


@click.command('orthologs')
@click.argument('genes', nargs=-1, required=True)
@click.option(
    '--source',
    default='homo sapiens',
    show_default=True,
    help='Source organism scientific name'
)
@click.option(
    '--target',
    required=True,
    help='Target organism scientific name, e.g. "mus musculus"'
)
@click.option(
    '--json', 'as_json',
    is_flag=True,
    help='Print results as JSON'
)
@click.option(
    '--strict',
    is_flag=True,
    help='Exit non-zero if any gene fails'
)
@click.pass_context
def orthologs(ctx, genes, source, target, as_json, strict):
    """Find orthologs of GENES and print their genomic locations.

    The first line of each block is the source gene; the following lines are
    its orthologs, best match first.

    Examples:

        homology orthologs MTOR --target "mus musculus"

        homology orthologs NFYA BRCA1 --source homo-sapiens --target caenorhabditis-elegans --json
    """
    try:
        config = load_config_with_overrides(ctx.obj['config_path'], ctx.obj['overrides'])
    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)

    try:
        report = asyncio.run(_run(config, list(genes), source, target))
    except (httpx.HTTPError, URLError) as e:
        click.echo(click.style(f"Upstream request failed: {e}", fg='red'), err=True)
        ctx.exit(2)

    errors = report.ordered_errors()

    if as_json:
        click.echo(json.dumps({
            "results": report.to_list(),
            "errors": [
                {"gene": e.gene, "kind": e.kind.value, "message": e.message}
                for e in errors
            ],
        }, indent=2))
    else:
        for block in report.to_list():
            for entry in block:
                click.echo(f"{entry['gene']}\t{entry['location']}")
            click.echo()
        for error in errors:
            click.echo(click.style(f"Error: {error.message}", fg='red'), err=True)

    if errors and (strict or not report.results):
        logger.debug(f"{len(errors)} of {len(report.genes)} genes failed")
        ctx.exit(1)
