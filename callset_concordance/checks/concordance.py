"""Genotype concordance classification.

A merged record is concordant when every provenance called the same set of
alleles: the genotypes are reduced to unordered allele sets and the record is
concordant iff exactly one distinct set remains. A provenance with no record
at the position is a distinct value of its own, so absence never makes a
record concordant.

Example:
    A/T vs T/A -> concordant
    A/T vs A/G -> discordant
    A/T vs (absent) -> discordant
"""

from collections.abc import Iterable, Iterator

from callset_concordance.models import Classification, Genotype, MergedRecord

# Stands in for the allele set of an absent genotype; never equal to a real set
ABSENT = frozenset({None})


def genotype_allele_set(genotype: Genotype | None) -> frozenset:
    """Allele set used for comparison, ABSENT for a missing genotype."""
    if genotype is None:
        return ABSENT
    return genotype.allele_set


def is_concordant(record: MergedRecord) -> bool:
    """Check whether all provenances agree on the genotype at a record.

    Args:
        record: Merged record (optionally narrowed to one sample)

    Returns:
        True if exactly one distinct allele set exists across provenances
    """
    distinct = {genotype_allele_set(g) for g in record.genotypes.values()}
    return len(distinct) == 1


def classify(record: MergedRecord) -> Classification:
    """Classify a merged record as concordant or discordant."""
    if is_concordant(record):
        return Classification.CONCORDANT
    return Classification.DISCORDANT


def categorize_records(
    records: Iterable[MergedRecord],
) -> Iterator[tuple[Classification, MergedRecord]]:
    """Lazily pair each merged record with its classification.

    Single pass: each record is classified as it is produced.
    """
    for record in records:
        yield classify(record), record
