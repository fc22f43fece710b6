"""Output writers for split VCF files and the summary report."""

from callset_concordance.writers.summary import (
    write_concordance_metrics,
    write_summary_table,
)
from callset_concordance.writers.vcf import VcfWriter, write_vcf_w_template

__all__ = [
    "VcfWriter",
    "write_concordance_metrics",
    "write_summary_table",
    "write_vcf_w_template",
]
