"""Data models for call-set comparison.

Variant records are produced transiently while streaming a VCF file and are
never collected into whole-file structures; each merged record carries one
genotype per provenance column, with ``None`` marking a call set that has no
record at that position.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from callset_concordance.utils import provenance_label

NO_CALL = "."


class Classification(Enum):
    """Concordance category of a merged record."""

    CONCORDANT = "concordant"
    DISCORDANT = "discordant"


class ComparisonType(Enum):
    """Selection performed for one split output file."""

    CONCORDANCE = "concordance"
    DISCORDANCE = "discordance"


@dataclass(frozen=True)
class CallSet:
    """A named set of variant calls for a sample from one calling pipeline.

    Attributes:
        name: Call-set identifier from the configuration
        file: Path to the VCF file with the calls
        reference: Path to the reference FASTA the calls were made against
    """

    name: str
    file: Path
    reference: Path

    def __post_init__(self) -> None:
        # Frozen dataclass: coerce through object.__setattr__
        if isinstance(self.file, str):
            object.__setattr__(self, "file", Path(self.file))
        if isinstance(self.reference, str):
            object.__setattr__(self, "reference", Path(self.reference))

    @property
    def label(self) -> str:
        """Provenance label derived from the file name."""
        return provenance_label(self.file)


@dataclass(frozen=True, slots=True)
class Genotype:
    """Alleles called for one sample at one provenance.

    Attributes:
        alleles: Allele strings in call order ("." for an uncalled allele)
        phased: Whether the call was phased ("|" separator)
    """

    alleles: tuple[str, ...]
    phased: bool = False

    @property
    def allele_set(self) -> frozenset[str]:
        """Alleles as an unordered set, the unit of genotype comparison."""
        return frozenset(self.alleles)

    @property
    def is_called(self) -> bool:
        """True unless every allele is a no-call."""
        return any(allele != NO_CALL for allele in self.alleles)

    def __str__(self) -> str:
        return ("|" if self.phased else "/").join(self.alleles)


@dataclass(frozen=True)
class VcfHeader:
    """Header of a VCF file.

    Attributes:
        meta_lines: "##" lines without trailing newline
        columns: Column names from the "#CHROM" line (without the "#")
    """

    meta_lines: tuple[str, ...]
    columns: tuple[str, ...]

    @property
    def samples(self) -> tuple[str, ...]:
        """Sample column names (everything after FORMAT)."""
        return self.columns[9:]

    def contigs(self) -> list[str]:
        """Contig IDs declared by ##contig lines, in declaration order."""
        names: list[str] = []
        for line in self.meta_lines:
            if not line.startswith("##contig=<"):
                continue
            for part in line[len("##contig=<"):].rstrip(">").split(","):
                key, _, value = part.partition("=")
                if key == "ID":
                    names.append(value)
                    break
        return names

    def column_line(self) -> str:
        return "#" + "\t".join(self.columns)


@dataclass(slots=True)
class VariantRecord:
    """One data line of a VCF file.

    Attributes:
        chrom: Chromosome as written in the file
        pos: 1-based position
        id: Variant identifier ("." if none)
        ref: Reference allele
        alts: Alternate alleles (empty for reference-only sites)
        qual: Quality string ("." if missing)
        filter: FILTER column
        info: INFO column
        format: FORMAT column ("" if the file has no sample columns)
        calls: Sample column name -> Genotype
        raw: Original text line, used when writing filtered subsets
    """

    chrom: str
    pos: int
    id: str
    ref: str
    alts: tuple[str, ...]
    qual: str = "."
    filter: str = "."
    info: str = "."
    format: str = ""
    calls: dict[str, Genotype] = field(default_factory=dict)
    raw: str | None = None

    @property
    def key(self) -> tuple[str, int]:
        return self.chrom, self.pos

    @property
    def alleles(self) -> tuple[str, ...]:
        return (self.ref, *self.alts)


@dataclass(slots=True)
class MergedRecord:
    """A position combining the genotype calls of two or more call sets.

    Attributes:
        chrom: Chromosome
        pos: Position
        ref: Reference allele (from the first source with a record here)
        alts: Union of alternate alleles across sources
        genotypes: Provenance column -> Genotype, or None when the call set
            has no record at this position
        sources: Provenance labels with a record at this position
        records: Provenance label -> source records at this position; only
            set while merging original files, empty when read back from a
            merged artifact
        raw: Merged artifact line, set when read back from that file
    """

    chrom: str
    pos: int
    ref: str
    alts: tuple[str, ...]
    genotypes: dict[str, Genotype | None]
    sources: tuple[str, ...] = ()
    records: dict[str, tuple[VariantRecord, ...]] = field(default_factory=dict)
    raw: str | None = None

    @property
    def key(self) -> tuple[str, int]:
        return self.chrom, self.pos

    @property
    def alleles(self) -> tuple[str, ...]:
        return (self.ref, *self.alts)

    def for_sample(self, columns: dict[str, str]) -> "MergedRecord":
        """Narrow the genotypes to one sample, keyed by provenance label.

        Args:
            columns: Provenance label -> merged column holding the sample

        A label whose column is missing maps to None.
        """
        genotypes = {
            label: self.genotypes.get(column) for label, column in columns.items()
        }
        return MergedRecord(
            chrom=self.chrom,
            pos=self.pos,
            ref=self.ref,
            alts=self.alts,
            genotypes=genotypes,
            sources=self.sources,
            records=self.records,
            raw=self.raw,
        )

    def present(self, label: str) -> bool:
        """True if the call set with this label has a record here."""
        return label in self.sources


def uniquify_column(sample: str, label: str) -> str:
    """Name the merged sample column for one sample of one call set."""
    return f"{sample}.{label}"


@dataclass
class ConcordanceMetrics:
    """Genotype concordance metrics for one sample from a VariantEval report.

    The values are kept as reported; only rendering interprets them.

    Attributes:
        sample: Sample name
        table: Report table the row came from
        values: Column name -> value
    """

    sample: str
    table: str
    values: dict[str, Any] = field(default_factory=dict)


@dataclass
class ComparisonResult:
    """Outputs of comparing one unordered pair of call sets.

    Attributes:
        sample: Sample name
        call_a: First call set of the pair
        call_b: Second call set of the pair
        concordant: Records where both call sets agree
        discordant_a_vs_b: Records called in A that B calls differently or not at all
        discordant_b_vs_a: Records called only in B
        eval_file: VariantEval report for the pair
        metrics: Concordance metrics for the sample (None if the report had none)
    """

    sample: str
    call_a: CallSet
    call_b: CallSet
    concordant: Path
    discordant_a_vs_b: Path
    discordant_b_vs_a: Path
    eval_file: Path | None = None
    metrics: ConcordanceMetrics | None = None

    @property
    def output_files(self) -> list[Path]:
        """Split outputs in report order."""
        return [self.concordant, self.discordant_a_vs_b, self.discordant_b_vs_a]
