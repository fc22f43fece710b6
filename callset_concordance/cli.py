"""Typer CLI for call-set concordance.

Usage:
    # Compare every pair of call sets per sample from a YAML configuration
    callset-concordance compare experiments.yaml

    # Write split files and the summary into an output directory
    callset-concordance compare experiments.yaml --outdir results/

    # Split a merged pair into concordant and discordant records only
    callset-concordance split a.vcf b.vcf --ref GRCh37.fa
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from callset_concordance import __version__

app = typer.Typer(
    name="callset-concordance",
    help="Pairwise genotype concordance between variant call sets of the same sample",
    add_completion=False,
)

console = Console(stderr=True)


def _banner() -> None:
    console.print("\n")
    console.print("[bold]Call Set Concordance[/bold]", style="blue")
    console.print(f"Version {__version__}\n")


def _start_logging(log_dir: Path | None, verbose: bool, job_name: str) -> None:
    from callset_concordance.logging_config import setup_logging

    log_file = setup_logging(
        log_dir=log_dir,
        job_name=job_name,
        console_level=logging.INFO if verbose else logging.WARNING,
    )
    console.print(f"Log file:                    {log_file}")


@app.command()
def compare(
    config_file: Annotated[
        Path,
        typer.Argument(
            help="YAML configuration listing experiments and call sets",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    outdir: Annotated[
        Path | None,
        typer.Option(
            "--outdir", "-o",
            help="Output directory (overrides the configuration's outdir)",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    gatk_path: Annotated[
        Path | None,
        typer.Option(
            "--gatk",
            help="Path to GATK 3 executable or GenomeAnalysisTK.jar (default: auto-detect from PATH)",
        ),
    ] = None,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Directory for log files (default: output directory or current directory)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v",
            help="Enable verbose logging",
        ),
    ] = False,
) -> None:
    """Compare call sets pairwise for every sample in a configuration.

    For each pair of call sets of a sample, writes concordant and
    directional discordant VCF files, runs GATK VariantEval for
    genotype concordance metrics, and writes a summary report.

    Existing outputs are reused as-is; remove them to force recomputation.
    """
    from callset_concordance.config import load_config
    from callset_concordance.exceptions import ConcordanceError
    from callset_concordance.main import run_comparisons

    _banner()

    try:
        config = load_config(
            config_file,
            outdir=outdir,
            gatk_path=gatk_path,
            log_dir=log_dir,
            verbose=verbose,
        )
    except ConcordanceError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        raise typer.Exit(code=1)

    console.print("Options Set:")
    console.print(f"Configuration:               {config.config_file}")
    console.print(f"Experiments:                 {len(config.experiments)}")
    console.print(f"Output directory:            {config.outdir or '(next to first call set)'}")
    console.print(f"Summary:                     {config.summary_file or '(stdout)'}")
    if config.gatk_path:
        console.print(f"GATK:                        {config.gatk_path}")
    if config.verbose:
        console.print("Verbose logging flag set")
    console.print("")

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]ERROR:[/red] {error}")
        raise typer.Exit(code=1)

    _start_logging(config.log_dir or config.outdir, config.verbose, config.config_root)

    try:
        results = run_comparisons(config)
    except Exception as e:
        console.print(f"[red]ERROR:[/red] {e}")
        if config.verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(code=1)

    console.print(f"\n[green]Completed {len(results)} comparisons.[/green]\n")


@app.command()
def split(
    vcf_a: Annotated[
        Path,
        typer.Argument(help="First call-set VCF", exists=True, dir_okay=False, readable=True),
    ],
    vcf_b: Annotated[
        Path,
        typer.Argument(help="Second call-set VCF", exists=True, dir_okay=False, readable=True),
    ],
    ref: Annotated[
        Path,
        typer.Option(
            "--ref", "-r",
            help="Reference FASTA both call sets were made against",
        ),
    ],
    outdir: Annotated[
        Path | None,
        typer.Option(
            "--outdir", "-o",
            help="Output directory (default: directory of the first VCF)",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v",
            help="Enable verbose logging",
        ),
    ] = False,
) -> None:
    """Merge two call sets and split the merged records by genotype agreement.

    Writes the merged file ({a}-combine.vcf) and its concordant and
    discordant subsets ({a}-combine-concordant.vcf, {a}-combine-discordant.vcf).
    """
    from callset_concordance.models import CallSet
    from callset_concordance.split import split_variants_by_match
    from callset_concordance.utils import provenance_label

    _banner()
    _start_logging(outdir, verbose, "split")

    call_a = CallSet(name=provenance_label(vcf_a), file=vcf_a, reference=ref)
    call_b = CallSet(name=provenance_label(vcf_b), file=vcf_b, reference=ref)

    try:
        out_map = split_variants_by_match(call_a, call_b, outdir)
    except Exception as e:
        console.print(f"[red]ERROR:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(code=1)

    for category, path in out_map.items():
        console.print(f"  {category.value:<12} {path}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
