"""Summary report writer.

Writes the plain-text comparison summary: per experiment a ``* sample``
heading, per call-set pair a ``** A and B`` heading, then for each split
output its file name and statistics table, then the concordance metrics.

Example output:
    * NA12878
    ** gatk and freebayes
    NA12878-gatk-freebayes-concordance.vcf
      Variants                    1,523
      SNP                         1,410
    ...
"""

import math
from numbers import Number
from typing import IO

import pandas as pd

from callset_concordance.models import ConcordanceMetrics

LABEL_WIDTH = 28


def format_value(value: object) -> str:
    """Render a statistic or metric value for the text report."""
    if value is None:
        return "NA"
    if isinstance(value, Number) and not isinstance(value, bool):
        number = float(value)
        if math.isnan(number):
            return "NA"
        if number.is_integer() and not isinstance(value, float):
            return f"{int(number):,}"
        return f"{number:.2f}"
    return str(value)


def write_sample_heading(out: IO[str], sample: str) -> None:
    out.write(f"* {sample}\n")


def write_pair_heading(out: IO[str], name_a: str, name_b: str) -> None:
    out.write(f"** {name_a} and {name_b}\n")


def write_summary_table(stats: pd.DataFrame, out: IO[str]) -> None:
    """Write a statistics frame (metric, value) as an indented two-column table.

    Args:
        stats: Frame from ``vcf_stats``
        out: Report stream
    """
    for metric, value in zip(stats["metric"], stats["value"]):
        out.write(f"  {metric:<{LABEL_WIDTH}}{format_value(value)}\n")


def write_concordance_metrics(metrics: ConcordanceMetrics | None, out: IO[str]) -> None:
    """Write the concordance metrics of a comparison.

    Args:
        metrics: Metrics for the sample, or None when the report had none
        out: Report stream
    """
    if metrics is None:
        out.write("Concordance metrics: none reported\n")
        return

    out.write(f"Concordance metrics ({metrics.table})\n")
    for name, value in metrics.values.items():
        out.write(f"  {name:<{LABEL_WIDTH}}{format_value(value)}\n")
