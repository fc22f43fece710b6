"""Summary statistics for a VCF file.

Records are streamed into a compact per-record frame (variant type,
transition/transversion, QUAL, DP) and summarised with pandas:

    metric        value
    Variants      1523
    SNP           1410
    ...
    Ts/Tv         2.07
    QUAL min      30.0
    QUAL 25%      ...
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from callset_concordance.models import VariantRecord
from callset_concordance.parsers.vcf import parse_vcf

logger = logging.getLogger(__name__)

VARIANT_TYPES = ["SNP", "MNP", "Indel", "Mixed", "Reference"]

TRANSITIONS = {frozenset({"A", "G"}), frozenset({"C", "T"})}

QUANTILES = {"min": 0.0, "25%": 0.25, "median": 0.5, "75%": 0.75, "max": 1.0}


def _real_alts(record: VariantRecord) -> list[str]:
    # Symbolic (<DEL>) and spanning-deletion (*) alleles carry no sequence
    return [a for a in record.alts if a != "*" and not a.startswith("<")]


def variant_type(record: VariantRecord) -> str:
    """Classify a record as SNP, MNP, Indel, Mixed or Reference.

    Example:
        >>> variant_type(VariantRecord("1", 100, ".", "A", ("T",)))
        'SNP'
    """
    alts = _real_alts(record)
    if not alts:
        return "Reference"

    ref_len = len(record.ref)
    if all(len(a) == ref_len == 1 for a in alts):
        return "SNP"
    if all(len(a) == ref_len for a in alts):
        return "MNP"
    if all(len(a) != ref_len for a in alts):
        return "Indel"
    return "Mixed"


def substitution_class(record: VariantRecord) -> str | None:
    """Return "Ts" or "Tv" for a biallelic SNP, None otherwise."""
    alts = _real_alts(record)
    if len(alts) != 1 or len(alts[0]) != 1 or len(record.ref) != 1:
        return None
    pair = frozenset({record.ref, alts[0]})
    if len(pair) != 2:
        return None
    return "Ts" if pair in TRANSITIONS else "Tv"


def _parse_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return np.nan


def _info_depth(info: str) -> float:
    for entry in info.split(";"):
        key, _, value = entry.partition("=")
        if key == "DP":
            return _parse_float(value)
    return np.nan


def record_frame(filepath: Path) -> pd.DataFrame:
    """Per-record statistics of a VCF file.

    Returns:
        DataFrame with columns type, substitution, qual, depth
    """
    rows = [
        (
            variant_type(record),
            substitution_class(record),
            _parse_float(record.qual),
            _info_depth(record.info),
        )
        for record in parse_vcf(filepath)
    ]
    return pd.DataFrame(rows, columns=["type", "substitution", "qual", "depth"])


def vcf_stats(filepath: Path) -> pd.DataFrame:
    """Summarise variant counts and quality of a VCF file.

    Args:
        filepath: Path to VCF file (may be gzipped)

    Returns:
        DataFrame with "metric" and "value" columns, one row per metric
    """
    frame = record_frame(filepath)
    logger.debug(f"Collected statistics for {len(frame):,} records in {filepath}")

    metrics: list[tuple[str, float | int]] = [("Variants", len(frame))]

    type_counts = frame["type"].value_counts()
    for name in VARIANT_TYPES:
        metrics.append((name, int(type_counts.get(name, 0))))

    transitions = int((frame["substitution"] == "Ts").sum())
    transversions = int((frame["substitution"] == "Tv").sum())
    metrics.append(("Transitions", transitions))
    metrics.append(("Transversions", transversions))
    metrics.append(("Ts/Tv", round(transitions / transversions, 2) if transversions else np.nan))

    for column, label in (("qual", "QUAL"), ("depth", "DP")):
        values = frame[column].dropna()
        if values.empty:
            continue
        for name, q in QUANTILES.items():
            metrics.append((f"{label} {name}", round(float(values.quantile(q)), 2)))

    return pd.DataFrame(metrics, columns=["metric", "value"], dtype=object)
