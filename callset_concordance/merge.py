"""Record merger: combine two call sets into one position-ordered stream.

Both inputs are walked once, in parallel, as a sorted union: every position
present in either file yields exactly one merged record, and a call set with
no record at that position contributes ``None`` genotypes. Genotype columns
are uniquified as ``{sample}.{label}`` where the label is the call-set file
name without directory and extension.

The merged artifact is written next to the first call set (or into the output
directory) as ``{root}-combine{ext}`` and reused as-is when it already exists.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from callset_concordance.exceptions import (
    ContigOrderError,
    ProvenanceCollisionError,
    ReferenceMismatchError,
)
from callset_concordance.io_utils import atomic_output
from callset_concordance.models import (
    NO_CALL,
    CallSet,
    Genotype,
    MergedRecord,
    VariantRecord,
    VcfHeader,
    uniquify_column,
)
from callset_concordance.parsers.merged import SOURCE_CALLSET_PREFIX, SOURCES_KEY
from callset_concordance.parsers.vcf import FIXED_COLUMNS, parse_vcf, read_vcf_header
from callset_concordance.utils import add_file_part

logger = logging.getLogger(__name__)

MERGE_PART = "combine"

# (label, sample columns of that call set, record stream)
MergeSource = tuple[str, tuple[str, ...], Iterable[VariantRecord]]


def uniquify_labels(call_a: CallSet, call_b: CallSet) -> tuple[str, str]:
    """Provenance labels for a pair of call sets.

    Raises:
        ProvenanceCollisionError: If both files reduce to the same label
    """
    label_a, label_b = call_a.label, call_b.label
    if label_a == label_b:
        raise ProvenanceCollisionError(
            f"Call sets '{call_a.name}' ({call_a.file}) and '{call_b.name}' "
            f"({call_b.file}) share the provenance label '{label_a}'; "
            f"rename one of the files"
        )
    return label_a, label_b


def check_reference(call_a: CallSet, call_b: CallSet) -> None:
    """Require both call sets to be called against the same reference.

    Raises:
        ReferenceMismatchError: If the reference paths differ
    """
    if Path(call_a.reference).resolve() != Path(call_b.reference).resolve():
        raise ReferenceMismatchError(
            f"Call sets '{call_a.name}' and '{call_b.name}' use different references: "
            f"{call_a.reference} vs {call_b.reference}"
        )


def _read_fai(reference: Path) -> list[str]:
    """Contig names from a samtools .fai index next to the reference, if any."""
    fai = Path(f"{reference}.fai")
    if not fai.exists():
        return []
    with open(fai) as f:
        return [line.split("\t", 1)[0] for line in f if line.strip()]


def contig_order(reference: Path | None, *headers: VcfHeader) -> dict[str, int]:
    """Rank contigs in reference coordinate order.

    Uses the reference .fai index when present, otherwise ##contig header
    lines. Contigs found in neither are placed during the merge from the
    order the input files visit them.

    Args:
        reference: Reference FASTA path
        headers: Headers of the files being merged

    Returns:
        Contig name -> rank
    """
    names = _read_fai(reference) if reference is not None else []
    if not names:
        for header in headers:
            names.extend(name for name in header.contigs() if name not in names)

    return {name: i for i, name in enumerate(names)}


def _group_by_position(records: Iterable[VariantRecord]) -> Iterator[tuple[VariantRecord, ...]]:
    """Group consecutive records sharing chromosome and position."""
    group: list[VariantRecord] = []
    for record in records:
        if group and record.key != group[0].key:
            yield tuple(group)
            group = []
        group.append(record)
    if group:
        yield tuple(group)


def _pick_genotype(group: tuple[VariantRecord, ...], sample: str) -> Genotype:
    """Genotype of a sample at a position, preferring a called genotype."""
    calls = [record.calls[sample] for record in group if sample in record.calls]
    for genotype in calls:
        if genotype.is_called:
            return genotype
    return calls[0] if calls else Genotype(alleles=(NO_CALL,))


def _merge_position(
    present: dict[str, tuple[VariantRecord, ...]],
    sources: list[tuple[str, tuple[str, ...]]],
) -> MergedRecord:
    """Build one merged record from the source records at a position."""
    first = next(iter(present.values()))[0]
    ref = first.ref

    alts: list[str] = []
    for group in present.values():
        for record in group:
            for allele in record.alleles:
                if allele != ref and allele not in alts:
                    alts.append(allele)

    genotypes: dict[str, Genotype | None] = {}
    for label, samples in sources:
        group = present.get(label)
        for sample in samples:
            column = uniquify_column(sample, label)
            genotypes[column] = _pick_genotype(group, sample) if group else None

    return MergedRecord(
        chrom=first.chrom,
        pos=first.pos,
        ref=ref,
        alts=tuple(alts),
        genotypes=genotypes,
        sources=tuple(label for label, _ in sources if label in present),
        records=present,
    )


def merge_records(
    sources: list[MergeSource],
    order: dict[str, int] | None = None,
) -> Iterator[MergedRecord]:
    """Sorted union merge of position-ordered record streams.

    Args:
        sources: (label, sample columns, records) per call set
        order: Contig ranking; extended in place with unseen contigs

    Yields:
        MergedRecord for each distinct position, in coordinate order

    Raises:
        ContigOrderError: If the next contig differs between inputs and
            neither the ranking nor the inputs themselves order them

    Note:
        Unsorted input is not detected: every record is still emitted, but a
        position may then appear more than once.
    """
    order = {} if order is None else order

    streams = [_group_by_position(records) for _, _, records in sources]
    heads = [next(stream, None) for stream in streams]
    columns = [(label, samples) for label, samples, _ in sources]
    # Contigs each stream has reached so far
    visited: list[set[str]] = [set() if head is None else {head[0].chrom} for head in heads]

    def precedes(i: int, j: int) -> bool:
        a, b = heads[i][0], heads[j][0]
        if a.chrom == b.chrom:
            return a.pos < b.pos
        # A sorted stream that moved past a contig places it first
        if a.chrom in visited[j]:
            return True
        if b.chrom in visited[i]:
            return False
        if a.chrom in order and b.chrom in order:
            return order[a.chrom] < order[b.chrom]
        raise ContigOrderError(
            f"Cannot order contigs '{a.chrom}' ({columns[i][0]}) and '{b.chrom}' "
            f"({columns[j][0]}); index the reference with samtools faidx or add "
            f"##contig header lines"
        )

    while any(head is not None for head in heads):
        live = [i for i, head in enumerate(heads) if head is not None]
        first = live[0]
        for i in live[1:]:
            if precedes(i, first):
                first = i
        current = heads[first][0].key
        if current[0] not in order:
            order[current[0]] = len(order)

        present: dict[str, tuple[VariantRecord, ...]] = {}
        for i in live:
            if heads[i][0].key == current:
                present[columns[i][0]] = heads[i]
                heads[i] = next(streams[i], None)
                if heads[i] is not None:
                    visited[i].add(heads[i][0].chrom)

        yield _merge_position(present, columns)


def merge_call_sets(
    call_a: CallSet,
    call_b: CallSet,
    header_a: VcfHeader | None = None,
    header_b: VcfHeader | None = None,
) -> Iterator[MergedRecord]:
    """Lazily merge the records of two call sets.

    Labels and references are checked before the first record is read.

    Raises:
        ProvenanceCollisionError: If both files reduce to the same label
        ReferenceMismatchError: If the call sets use different references
    """
    label_a, label_b = uniquify_labels(call_a, call_b)
    check_reference(call_a, call_b)

    header_a = header_a or read_vcf_header(call_a.file)
    header_b = header_b or read_vcf_header(call_b.file)
    order = contig_order(call_a.reference, header_a, header_b)

    return merge_records(
        [
            (label_a, header_a.samples, parse_vcf(call_a.file)),
            (label_b, header_b.samples, parse_vcf(call_b.file)),
        ],
        order,
    )


def merged_header(
    call_a: CallSet,
    call_b: CallSet,
    header_a: VcfHeader,
    header_b: VcfHeader,
) -> VcfHeader:
    """Header of the merged artifact for a pair of call sets."""
    meta = [
        "##fileformat=VCFv4.2",
        f"##source=callset-concordance {MERGE_PART}",
        f"##reference=file://{Path(call_a.reference).resolve()}",
    ]
    for call in (call_a, call_b):
        meta.append(f"{SOURCE_CALLSET_PREFIX}ID={call.label},Name={call.name},File={call.file}>")
    meta.append(
        f'##INFO=<ID={SOURCES_KEY},Number=.,Type=String,'
        f'Description="Call sets with a record at this position">'
    )
    meta.append('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">')

    seen: set[str] = set()
    for header in (header_a, header_b):
        for line in header.meta_lines:
            if line.startswith("##contig=<") and line not in seen:
                seen.add(line)
                meta.append(line)

    columns = list(FIXED_COLUMNS) + ["FORMAT"]
    for call, header in ((call_a, header_a), (call_b, header_b)):
        columns.extend(uniquify_column(sample, call.label) for sample in header.samples)

    return VcfHeader(meta_lines=tuple(meta), columns=tuple(columns))


def encode_genotype(genotype: Genotype | None, alleles: tuple[str, ...]) -> str:
    """Render a genotype as a GT value against the merged allele list."""
    if genotype is None:
        return "./."
    separator = "|" if genotype.phased else "/"
    return separator.join(
        allele if allele == NO_CALL else str(alleles.index(allele))
        for allele in genotype.alleles
    )


def format_merged_line(record: MergedRecord, columns: tuple[str, ...]) -> str:
    """Render a merged record as a VCF data line."""
    alleles = record.alleles
    fields = [
        record.chrom,
        str(record.pos),
        ".",
        record.ref,
        ",".join(record.alts) if record.alts else ".",
        ".",
        ".",
        f"{SOURCES_KEY}={','.join(record.sources)}",
        "GT",
    ]
    fields.extend(encode_genotype(record.genotypes.get(column), alleles) for column in columns)
    return "\t".join(fields)


def combine_variants(
    call_a: CallSet,
    call_b: CallSet,
    out_dir: Path | None = None,
) -> Path:
    """Combine two call sets into a merged VCF artifact.

    Skipped entirely when the artifact already exists; the existing file is
    reused without checking its content.

    Args:
        call_a: First call set (names the artifact)
        call_b: Second call set
        out_dir: Directory for the artifact (default: next to call_a.file)

    Returns:
        Path to the merged VCF
    """
    out_file = add_file_part(call_a.file, MERGE_PART)
    if out_dir is not None:
        out_file = Path(out_dir) / out_file.name

    if out_file.exists():
        logger.info(f"Reusing existing merged file {out_file}")
        return out_file

    header_a = read_vcf_header(call_a.file)
    header_b = read_vcf_header(call_b.file)
    records = merge_call_sets(call_a, call_b, header_a, header_b)
    header = merged_header(call_a, call_b, header_a, header_b)
    sample_columns = header.samples

    logger.debug(f"Merging {call_a.file} and {call_b.file} into {out_file}")

    count = 0
    with atomic_output(out_file) as f:
        for line in header.meta_lines:
            f.write(line + "\n")
        f.write(header.column_line() + "\n")
        for record in records:
            f.write(format_merged_line(record, sample_columns) + "\n")
            count += 1

    logger.info(f"Wrote {count:,} merged records to {out_file}")
    return out_file
