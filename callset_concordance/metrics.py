"""Concordance metrics from GATK VariantEval reports.

GATKReport text format (v1.x):

    #:GATKReport.v1.1:8
    #:GATKTable:11:3:%s:%s:%s:%s:%s:%.2f:%.2f:%.2f:;
    #:GATKTable:GenotypeConcordance_Summary:Genotype concordance summary
    GenotypeConcordance_Summary  CompRod  EvalRod  JexlExpression  Novelty  Sample  ...
    GenotypeConcordance_Summary  comp     eval     none            all      NA12878 ...

Each table is a format line, a name line, a whitespace-separated header row
and data rows, closed by a blank line. Older v0.x reports open each table
with ``##:GATKReport.v0.x <name> : <description>`` instead.
"""

import logging
from pathlib import Path

import pandas as pd

from callset_concordance.gatk_runner import EVAL_MODULE, STRATIFICATION_MODULE
from callset_concordance.io_utils import iter_lines
from callset_concordance.models import ConcordanceMetrics

logger = logging.getLogger(__name__)

TABLE_PREFIX = "#:GATKTable:"
LEGACY_TABLE_PREFIX = "##:GATKReport.v0"

# Stratification columns that identify a row rather than measure anything
KEY_COLUMNS = {"CompRod", "EvalRod", "JexlExpression", "Novelty", STRATIFICATION_MODULE}


def _to_frame(name: str, header: list[str], rows: list[list[str]]) -> pd.DataFrame:
    """Build a table frame, converting numeric columns."""
    width = len(header)
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(
                f"GATK report table {name}: row {i + 1} has {len(row)} values, "
                f"header has {width}"
            )

    frame = pd.DataFrame(rows, columns=header)
    for column in frame.columns:
        try:
            frame[column] = pd.to_numeric(frame[column])
        except (ValueError, TypeError):
            pass
    return frame


def parse_gatk_report(filepath: Path) -> dict[str, pd.DataFrame]:
    """Parse every table of a GATKReport file.

    Args:
        filepath: Path to the report (.eval)

    Returns:
        Table name -> DataFrame

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If a table row doesn't match its header
    """
    if not filepath.exists():
        raise FileNotFoundError(f"GATK report not found: {filepath}")

    tables: dict[str, pd.DataFrame] = {}
    name: str | None = None
    header: list[str] | None = None
    rows: list[list[str]] = []

    def close_table() -> None:
        if name is not None and header is not None:
            tables[name] = _to_frame(name, header, rows)

    for line in iter_lines(filepath):
        if line.startswith(TABLE_PREFIX):
            fields = line[len(TABLE_PREFIX):].split(":")
            if fields[0].isdigit():
                # Column count / format line
                continue
            close_table()
            name, header, rows = fields[0], None, []
        elif line.startswith(LEGACY_TABLE_PREFIX):
            close_table()
            parts = line.split()
            name, header, rows = (parts[1] if len(parts) > 1 else None), None, []
        elif line.startswith("#"):
            continue
        elif not line.strip():
            close_table()
            name, header, rows = None, None, []
        elif name is not None:
            if header is None:
                header = line.split()
            else:
                rows.append(line.split())

    close_table()
    return tables


def _table_priority(name: str) -> tuple[bool, str]:
    # Summary tables first, then by name
    return not name.lower().endswith("summary"), name


def concordance_report_metrics(sample: str, eval_file: Path) -> list[ConcordanceMetrics]:
    """Extract GenotypeConcordance metrics for a sample from a VariantEval report.

    Picks the first GenotypeConcordance table (summary tables preferred)
    that has rows for the sample, restricted to the "all" novelty stratum
    when the table is stratified by novelty.

    Args:
        sample: Sample name
        eval_file: VariantEval report

    Returns:
        One ConcordanceMetrics per matching row (empty if none)
    """
    tables = parse_gatk_report(eval_file)
    candidates = sorted(
        (name for name in tables if name.startswith(EVAL_MODULE)),
        key=_table_priority,
    )

    for name in candidates:
        frame = tables[name]
        if STRATIFICATION_MODULE not in frame.columns:
            continue

        rows = frame[frame[STRATIFICATION_MODULE].astype(str) == sample]
        if "Novelty" in rows.columns and (rows["Novelty"] == "all").any():
            rows = rows[rows["Novelty"] == "all"]
        if rows.empty:
            continue

        drop = KEY_COLUMNS | {name}
        return [
            ConcordanceMetrics(
                sample=sample,
                table=name,
                values={k: v for k, v in row.items() if k not in drop},
            )
            for row in rows.to_dict(orient="records")
        ]

    logger.warning(f"No {EVAL_MODULE} rows for sample '{sample}' in {eval_file}")
    return []
