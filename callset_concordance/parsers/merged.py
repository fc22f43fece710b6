"""Parser for merged call-set artifacts written by ``combine_variants``.

The merged VCF names its call sets in ``##source_callset`` header lines and
lists, per record, the call sets that had a record at that position in the
``SOURCES`` INFO key. Genotype columns of call sets missing from ``SOURCES``
are read back as None (absent), not as no-calls.
"""

from collections.abc import Iterator
from pathlib import Path

from callset_concordance.exceptions import VcfFormatError
from callset_concordance.io_utils import smart_open
from callset_concordance.models import Genotype, MergedRecord, VcfHeader
from callset_concordance.parsers.vcf import parse_header, parse_record

SOURCE_CALLSET_PREFIX = "##source_callset=<"
SOURCES_KEY = "SOURCES"


def source_labels(header: VcfHeader) -> list[str]:
    """Provenance labels declared in a merged header, in column order."""
    labels: list[str] = []
    for line in header.meta_lines:
        if not line.startswith(SOURCE_CALLSET_PREFIX):
            continue
        for part in line[len(SOURCE_CALLSET_PREFIX):].rstrip(">").split(","):
            key, _, value = part.partition("=")
            if key == "ID":
                labels.append(value)
                break
    return labels


def read_source_labels(filepath: Path) -> list[str]:
    """Provenance labels of a merged VCF file."""
    with smart_open(filepath) as f:
        return source_labels(parse_header(f, filepath))


def column_labels(header: VcfHeader) -> dict[str, str]:
    """Map each merged sample column to the label of its call set.

    Raises:
        VcfFormatError: If a column matches none of the declared labels
    """
    labels = source_labels(header)
    if not labels:
        raise VcfFormatError("Merged VCF declares no ##source_callset lines")

    mapping: dict[str, str] = {}
    for column in header.samples:
        # Longest label wins when one label is a suffix of another
        matches = [label for label in labels if column.endswith(f".{label}")]
        if not matches:
            raise VcfFormatError(f"Merged column '{column}' matches no call set label")
        mapping[column] = max(matches, key=len)
    return mapping


def _record_sources(info: str) -> tuple[str, ...]:
    for entry in info.split(";"):
        key, _, value = entry.partition("=")
        if key == SOURCES_KEY:
            return tuple(value.split(",")) if value else ()
    return ()


def parse_merged_vcf(filepath: Path) -> Iterator[MergedRecord]:
    """Stream merged records from a merged VCF artifact.

    Args:
        filepath: Path to the merged VCF (may be gzipped)

    Yields:
        MergedRecord per data line; ``raw`` holds the line itself

    Raises:
        FileNotFoundError: If file doesn't exist
        VcfFormatError: If the header lacks call set declarations
    """
    if not filepath.exists():
        raise FileNotFoundError(f"Merged VCF file not found: {filepath}")

    with smart_open(filepath) as f:
        header = parse_header(f, filepath)
        labels_by_column = column_labels(header)

        line_num = 0
        for line in f:
            line = line.rstrip("\r\n")
            if not line or line.startswith("#"):
                continue
            line_num += 1

            record = parse_record(line, header.samples, line_num)
            sources = _record_sources(record.info)

            genotypes: dict[str, Genotype | None] = {
                column: (record.calls[column] if label in sources else None)
                for column, label in labels_by_column.items()
            }
            yield MergedRecord(
                chrom=record.chrom,
                pos=record.pos,
                ref=record.ref,
                alts=record.alts,
                genotypes=genotypes,
                sources=sources,
                raw=line,
            )
