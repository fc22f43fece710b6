"""Streaming parsers for call-set VCF files and merged artifacts."""

from callset_concordance.parsers.merged import parse_merged_vcf, read_source_labels
from callset_concordance.parsers.vcf import (
    count_vcf_records,
    parse_genotype,
    parse_vcf,
    read_vcf_header,
)

__all__ = [
    "count_vcf_records",
    "parse_genotype",
    "parse_merged_vcf",
    "parse_vcf",
    "read_source_labels",
    "read_vcf_header",
]
