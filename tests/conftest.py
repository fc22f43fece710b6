"""Pytest fixtures for callset_concordance tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from callset_concordance.logging_config import reset_logging
from callset_concordance.models import CallSet

SAMPLE = "NA12878"

VcfFactory = Callable[..., Path]


def vcf_text(
    records: list[tuple],
    samples: tuple[str, ...] = (SAMPLE,),
    contigs: tuple[str, ...] = ("1", "2"),
) -> str:
    """Build VCF text from (chrom, pos, ref, alt, *genotypes) tuples."""
    lines = ["##fileformat=VCFv4.2"]
    lines += [f"##contig=<ID={c},length=1000000>" for c in contigs]
    lines.append('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">')
    columns = ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO"]
    if samples:
        columns += ["FORMAT", *samples]
    lines.append("\t".join(columns))

    for chrom, pos, ref, alt, *genotypes in records:
        fields = [chrom, str(pos), ".", ref, alt, "50", "PASS", "DP=20"]
        if samples:
            fields += ["GT", *genotypes]
        lines.append("\t".join(fields))
    return "\n".join(lines) + "\n"


@pytest.fixture(autouse=True)
def clean_logging() -> Iterator[None]:
    """Leave no handlers behind between tests."""
    yield
    reset_logging()


@pytest.fixture
def make_vcf(tmp_path: Path) -> VcfFactory:
    """Factory writing a small VCF into tmp_path.

    Usage:
        path = make_vcf("calls.vcf", [("1", 100, "A", "T", "0/1")])
    """

    def factory(
        name: str,
        records: list[tuple],
        samples: tuple[str, ...] = (SAMPLE,),
        contigs: tuple[str, ...] = ("1", "2"),
    ) -> Path:
        path = tmp_path / name
        path.write_text(vcf_text(records, samples, contigs))
        return path

    return factory


@pytest.fixture
def reference(tmp_path: Path) -> Path:
    """Minimal reference FASTA with a samtools index."""
    fasta = tmp_path / "ref.fa"
    fasta.write_text(">1\nACGTACGTAC\n>2\nACGTACGTAC\n")
    Path(f"{fasta}.fai").write_text("1\t10\t3\t10\t11\n2\t10\t17\t10\t11\n")
    return fasta


@pytest.fixture
def caller_pair(make_vcf: VcfFactory, reference: Path) -> tuple[CallSet, CallSet]:
    """Two call sets for NA12878.

    - 1:100 A/T in both -> concordant
    - 1:200 A/G only in callerY -> discordant, Y vs X
    """
    x_file = make_vcf(f"{SAMPLE}-callerX.vcf", [("1", 100, "A", "T", "0/1")])
    y_file = make_vcf(
        f"{SAMPLE}-callerY.vcf",
        [("1", 100, "A", "T", "0/1"), ("1", 200, "A", "G", "0/1")],
    )
    return (
        CallSet(name="callerX", file=x_file, reference=reference),
        CallSet(name="callerY", file=y_file, reference=reference),
    )


@pytest.fixture
def mixed_pair(make_vcf: VcfFactory, reference: Path) -> tuple[CallSet, CallSet]:
    """Two call sets covering every classification case.

    - 1:100 A/T vs T/A       -> concordant (allele order ignored)
    - 1:150 A/T vs A/A       -> discordant, called in both (A vs B)
    - 1:200 A/C only in A    -> discordant, A vs B
    - 1:300 only in B        -> discordant, B vs A
    - 1:400 ./. vs ./.       -> concordant no-calls
    - 2:50  A/G vs A/G       -> concordant
    - 2:60  ./. in A only    -> discordant, A vs B (record B lacks)
    """
    a_file = make_vcf(
        "sample-gatk.vcf",
        [
            ("1", 100, "A", "T", "0/1"),
            ("1", 150, "A", "T", "0/1"),
            ("1", 200, "A", "C", "0/1"),
            ("1", 400, "G", "T", "./."),
            ("2", 50, "A", "G", "0/1"),
            ("2", 60, "C", "T", "./."),
        ],
    )
    b_file = make_vcf(
        "sample-freebayes.vcf",
        [
            ("1", 100, "A", "T", "1/0"),
            ("1", 150, "A", "T", "0/0"),
            ("1", 300, "C", "G", "1/1"),
            ("1", 400, "G", "T", "./."),
            ("2", 50, "A", "G", "0|1"),
        ],
    )
    return (
        CallSet(name="gatk", file=a_file, reference=reference),
        CallSet(name="freebayes", file=b_file, reference=reference),
    )


GATK_REPORT = """#:GATKReport.v1.1:2
#:GATKTable:7:1:%s:%s:%s:%s:%s:%s:%s:;
#:GATKTable:CompOverlap:The overlap between eval and comp sites
CompOverlap  CompRod  EvalRod  JexlExpression  Novelty  Sample   nEvalVariants
CompOverlap  comp     eval     none            all      NA12878  2

#:GATKTable:10:3:%s:%s:%s:%s:%s:%s:%.2f:%.2f:%.2f:%.2f:;
#:GATKTable:GenotypeConcordance_Summary:Per-sample summary statistics
GenotypeConcordance_Summary  CompRod  EvalRod  JexlExpression  Novelty  Sample   Non-Reference_Discrepancy  Non-Reference_Sensitivity  Overall_Genotype_Concordance  percent_comp_ref_called_var
GenotypeConcordance_Summary  comp     eval     none            all      NA12878  0.00                       50.00                      100.00                        0.00
GenotypeConcordance_Summary  comp     eval     none            known    NA12878  0.00                       0.00                       100.00                        0.00
GenotypeConcordance_Summary  comp     eval     none            all      NA19240  12.50                      80.00                      90.00                         1.00

"""


@pytest.fixture
def gatk_report(tmp_path: Path) -> Path:
    """VariantEval report with CompOverlap and GenotypeConcordance tables."""
    path = tmp_path / "pair.eval"
    path.write_text(GATK_REPORT)
    return path
