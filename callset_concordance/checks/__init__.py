"""Genotype concordance checks on merged records."""

from callset_concordance.checks.concordance import (
    categorize_records,
    classify,
    genotype_allele_set,
    is_concordant,
)

__all__ = ["categorize_records", "classify", "genotype_allele_set", "is_concordant"]
