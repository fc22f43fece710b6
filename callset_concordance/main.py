"""Main orchestration for call-set comparison runs.

For every experiment the call sets are compared pairwise: each unordered
pair is split into concordant and directional discordant files, evaluated
with GATK VariantEval, and written to the summary report with statistics
for every split file and the sample's concordance metrics.

Pairs are processed one at a time, in configuration order. A failure in any
pair propagates and aborts the run.
"""

import logging
import sys
from itertools import combinations
from pathlib import Path
from typing import IO

from callset_concordance.config import Config, Experiment
from callset_concordance.gatk_runner import GatkRunner
from callset_concordance.io_utils import atomic_output
from callset_concordance.logging_config import get_progress_logger
from callset_concordance.metrics import concordance_report_metrics
from callset_concordance.models import CallSet, ComparisonResult
from callset_concordance.split import select_by_concordance
from callset_concordance.stats import vcf_stats
from callset_concordance.writers.summary import (
    write_concordance_metrics,
    write_pair_heading,
    write_sample_heading,
    write_summary_table,
)

logger = logging.getLogger(__name__)


def call_pairs(calls: list[CallSet]) -> list[tuple[CallSet, CallSet]]:
    """All unordered pairs of call sets, in configuration order.

    Example:
        >>> [(a.name, b.name) for a, b in call_pairs([x, y, z])]
        [("x", "y"), ("x", "z"), ("y", "z")]
    """
    return list(combinations(calls, 2))


def compare_pair(
    sample: str,
    call_a: CallSet,
    call_b: CallSet,
    runner: GatkRunner,
    out_dir: Path | None = None,
) -> ComparisonResult:
    """Compare one pair of call sets for a sample.

    Args:
        sample: Sample name
        call_a: First call set
        call_b: Second call set
        runner: GATK runner for VariantEval
        out_dir: Output directory (default: directory of call_a.file)

    Returns:
        ComparisonResult with split files, report and metrics
    """
    concordant, discordant_a, discordant_b = select_by_concordance(
        sample, call_a, call_b, out_dir
    )

    eval_file = runner.variant_eval(
        sample,
        eval_file=call_a.file,
        comp_file=call_b.file,
        reference=call_a.reference,
        out_base=concordant,
    )
    metrics = concordance_report_metrics(sample, eval_file)
    if len(metrics) > 1:
        logger.debug(f"{len(metrics)} metric rows for {sample} in {eval_file}; using the first")

    return ComparisonResult(
        sample=sample,
        call_a=call_a,
        call_b=call_b,
        concordant=concordant,
        discordant_a_vs_b=discordant_a,
        discordant_b_vs_a=discordant_b,
        eval_file=eval_file,
        metrics=metrics[0] if metrics else None,
    )


def write_comparison(result: ComparisonResult, out: IO[str]) -> None:
    """Write one pair's section of the summary report."""
    write_pair_heading(out, result.call_a.name, result.call_b.name)
    for path in result.output_files:
        out.write(f"{path.name}\n")
        write_summary_table(vcf_stats(path), out)
    write_concordance_metrics(result.metrics, out)


def run_experiment(
    experiment: Experiment,
    runner: GatkRunner,
    out: IO[str],
    out_dir: Path | None = None,
) -> list[ComparisonResult]:
    """Compare every pair of call sets of one experiment.

    An experiment with a single call set has no pairs; only its heading is
    written.

    Returns:
        One ComparisonResult per pair
    """
    progress = get_progress_logger()
    write_sample_heading(out, experiment.sample)

    results: list[ComparisonResult] = []
    for call_a, call_b in call_pairs(experiment.calls):
        progress.info(f"Comparing {call_a.name} and {call_b.name} for {experiment.sample}")
        result = compare_pair(experiment.sample, call_a, call_b, runner, out_dir)
        write_comparison(result, out)
        results.append(result)

    return results


def _run_all(config: Config, runner: GatkRunner, out: IO[str]) -> list[ComparisonResult]:
    results: list[ComparisonResult] = []
    for experiment in config.experiments:
        results.extend(run_experiment(experiment, runner, out, config.outdir))
    return results


def run_comparisons(config: Config, runner: GatkRunner | None = None) -> list[ComparisonResult]:
    """Run every experiment of a configuration.

    The summary report goes to ``{outdir}/{config name}-summary.txt`` when an
    output directory is configured, otherwise to stdout. The summary is
    rewritten on every run; the split files and reports it describes are
    reused when present.

    Args:
        config: Run configuration
        runner: GATK runner (created from the configuration if None)

    Returns:
        All ComparisonResults in run order

    Raises:
        ConcordanceError: If any comparison fails
        RuntimeError: If GATK is not available
    """
    if runner is None:
        runner = GatkRunner(gatk_path=config.gatk_path, verbose=config.verbose)

    summary_file = config.summary_file
    if summary_file is None:
        results = _run_all(config, runner, sys.stdout)
    else:
        with atomic_output(summary_file) as out:
            results = _run_all(config, runner, out)
        get_progress_logger().info(f"Summary written to {summary_file}")

    logger.info(f"Completed {len(results)} comparisons from {config.config_file}")
    return results
