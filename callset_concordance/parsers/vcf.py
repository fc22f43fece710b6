"""VCF file parser.

Implements streaming VCF parsing: records are yielded one at a time so a
call set of any size is classified in constant memory. Supports gzipped files.

VCF format (tab-separated, meta lines start with ##, header line with #CHROM):
#CHROM  POS    ID   REF  ALT  QUAL  FILTER  INFO  FORMAT  NA12878
1       10177  .    A    AC   50    PASS    .     GT:DP   0/1:12
"""

import re
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from callset_concordance.exceptions import VcfFormatError
from callset_concordance.io_utils import smart_open
from callset_concordance.models import NO_CALL, Genotype, VariantRecord, VcfHeader

FIXED_COLUMNS = ("CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO")

_GT_SPLIT = re.compile(r"[/|]")


def parse_header(f: IO[str], filepath: Path) -> VcfHeader:
    """Consume meta lines and the #CHROM line from an open VCF.

    The handle is left positioned at the first data line.
    """
    meta_lines: list[str] = []
    for line in f:
        line = line.rstrip("\r\n")
        if line.startswith("##"):
            meta_lines.append(line)
        elif line.startswith("#CHROM"):
            columns = tuple(line[1:].split("\t"))
            if columns[: len(FIXED_COLUMNS)] != FIXED_COLUMNS:
                raise VcfFormatError(
                    f"Invalid VCF header in {filepath}: expected columns "
                    f"{', '.join(FIXED_COLUMNS)}, got {', '.join(columns)}"
                )
            return VcfHeader(meta_lines=tuple(meta_lines), columns=columns)
        else:
            break
    raise VcfFormatError(f"No #CHROM header line found in {filepath}")


def read_vcf_header(filepath: Path) -> VcfHeader:
    """Read the header of a VCF file.

    Args:
        filepath: Path to VCF file (may be gzipped)

    Returns:
        VcfHeader with meta lines and column names

    Raises:
        FileNotFoundError: If file doesn't exist
        VcfFormatError: If the #CHROM line is missing or malformed
    """
    if not filepath.exists():
        raise FileNotFoundError(f"VCF file not found: {filepath}")

    with smart_open(filepath) as f:
        return parse_header(f, filepath)


def parse_genotype(gt: str, alleles: tuple[str, ...]) -> Genotype:
    """Translate a GT value into allele strings.

    Args:
        gt: GT field value ("0/1", "1|1", "./.", ".")
        alleles: Record alleles, reference first

    Returns:
        Genotype with allele strings in call order

    Raises:
        VcfFormatError: If an allele index is not a number or out of range

    Example:
        >>> parse_genotype("0/1", ("A", "T"))
        Genotype(alleles=("A", "T"), phased=False)
    """
    if gt in ("", NO_CALL):
        return Genotype(alleles=(NO_CALL,))

    called: list[str] = []
    for index in _GT_SPLIT.split(gt):
        if index == NO_CALL:
            called.append(NO_CALL)
            continue
        try:
            called.append(alleles[int(index)])
        except (ValueError, IndexError):
            raise VcfFormatError(
                f"Invalid genotype '{gt}' for alleles {','.join(alleles)}"
            ) from None

    return Genotype(alleles=tuple(called), phased="|" in gt)


def parse_record(line: str, samples: tuple[str, ...], line_num: int = 0) -> VariantRecord:
    """Parse one VCF data line.

    Args:
        line: Data line without trailing newline
        samples: Sample column names from the header
        line_num: Data line number for error messages

    Returns:
        VariantRecord with a Genotype per sample column
    """
    parts = line.split("\t")
    expected = len(FIXED_COLUMNS) + (1 + len(samples) if samples else 0)
    if len(parts) < len(FIXED_COLUMNS) or (samples and len(parts) < expected):
        raise VcfFormatError(
            f"Invalid VCF format at line {line_num}: "
            f"expected {expected} columns, got {len(parts)}"
        )

    try:
        pos = int(parts[1])
    except ValueError:
        raise VcfFormatError(
            f"Invalid VCF format at line {line_num}: position '{parts[1]}' is not a number"
        ) from None

    ref = parts[3].upper()
    alts = tuple(a.upper() for a in parts[4].split(",")) if parts[4] != NO_CALL else ()
    alleles = (ref, *alts)

    format_col = parts[8] if samples else ""
    calls: dict[str, Genotype] = {}
    if samples:
        keys = format_col.split(":")
        gt_index = keys.index("GT") if "GT" in keys else None
        for sample, value in zip(samples, parts[9:]):
            fields = value.split(":")
            if gt_index is None or gt_index >= len(fields):
                calls[sample] = Genotype(alleles=(NO_CALL,))
            else:
                calls[sample] = parse_genotype(fields[gt_index], alleles)

    return VariantRecord(
        chrom=parts[0],
        pos=pos,
        id=parts[2],
        ref=ref,
        alts=alts,
        qual=parts[5],
        filter=parts[6],
        info=parts[7],
        format=format_col,
        calls=calls,
        raw=line,
    )


def parse_vcf(filepath: Path) -> Iterator[VariantRecord]:
    """Stream records from a VCF file.

    The sequence is consumed once; iterate again by calling parse_vcf again.

    Args:
        filepath: Path to VCF file (may be gzipped)

    Yields:
        VariantRecord for each data line

    Raises:
        FileNotFoundError: If file doesn't exist
        VcfFormatError: If header or a data line is malformed

    Example:
        >>> for record in parse_vcf(Path("calls.vcf")):
        ...     print(record.chrom, record.pos, record.calls)
    """
    if not filepath.exists():
        raise FileNotFoundError(f"VCF file not found: {filepath}")

    with smart_open(filepath) as f:
        header = parse_header(f, filepath)
        samples = header.samples

        line_num = 0
        for line in f:
            line = line.rstrip("\r\n")
            if not line or line.startswith("#"):
                continue
            line_num += 1
            yield parse_record(line, samples, line_num)


def count_vcf_records(filepath: Path) -> int:
    """Count data lines in a VCF file (skipping header and comments)."""
    if not filepath.exists():
        raise FileNotFoundError(f"VCF file not found: {filepath}")

    count = 0
    with smart_open(filepath) as f:
        for line in f:
            if line.strip() and not line.startswith("#"):
                count += 1
    return count
