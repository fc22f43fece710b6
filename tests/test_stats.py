"""Tests for VCF summary statistics."""

import math
from pathlib import Path

import pytest

from callset_concordance.models import VariantRecord
from callset_concordance.stats import record_frame, substitution_class, variant_type, vcf_stats
from tests.conftest import VcfFactory


def site(ref: str, *alts: str) -> VariantRecord:
    return VariantRecord(chrom="1", pos=1, id=".", ref=ref, alts=alts)


class TestVariantType:
    """Test variant type classification."""

    @pytest.mark.parametrize(
        "ref,alts,expected",
        [
            ("A", ("T",), "SNP"),
            ("A", ("T", "G"), "SNP"),
            ("AC", ("GT",), "MNP"),
            ("A", ("AT",), "Indel"),
            ("AT", ("A",), "Indel"),
            ("A", ("T", "AT"), "Mixed"),
            ("A", (), "Reference"),
            ("A", ("<DEL>",), "Reference"),
            ("A", ("T", "*"), "SNP"),
        ],
    )
    def test_types(self, ref: str, alts: tuple[str, ...], expected: str) -> None:
        """Classify variant types."""
        assert variant_type(site(ref, *alts)) == expected


class TestSubstitutionClass:
    """Test transition/transversion classification."""

    def test_transitions(self) -> None:
        """Classify purine and pyrimidine swaps as transitions."""
        assert substitution_class(site("A", "G")) == "Ts"
        assert substitution_class(site("T", "C")) == "Ts"

    def test_transversions(self) -> None:
        """Classify other substitutions as transversions."""
        assert substitution_class(site("A", "T")) == "Tv"
        assert substitution_class(site("C", "G")) == "Tv"

    def test_not_a_biallelic_snp(self) -> None:
        """Skip multiallelic sites and indels."""
        assert substitution_class(site("A", "T", "G")) is None
        assert substitution_class(site("A", "AT")) is None


class TestVcfStats:
    """Test per-file summary."""

    def test_counts(self, make_vcf: VcfFactory) -> None:
        """Count types and substitutions and summarize QUAL and DP."""
        path = make_vcf(
            "calls.vcf",
            [
                ("1", 100, "A", "G", "0/1"),
                ("1", 200, "C", "T", "1/1"),
                ("1", 300, "A", "T", "0/1"),
                ("1", 400, "A", "AT", "0/1"),
            ],
        )
        frame = vcf_stats(path)
        stats = dict(zip(frame["metric"], frame["value"]))

        assert stats["Variants"] == 4
        assert stats["SNP"] == 3
        assert stats["Indel"] == 1
        assert stats["MNP"] == 0
        assert stats["Transitions"] == 2
        assert stats["Transversions"] == 1
        assert stats["Ts/Tv"] == 2.0
        assert stats["QUAL median"] == 50.0
        assert stats["DP max"] == 20.0

    def test_empty_file(self, make_vcf: VcfFactory) -> None:
        """Summarize an empty file without quantiles."""
        frame = vcf_stats(make_vcf("empty.vcf", []))
        stats = dict(zip(frame["metric"], frame["value"]))

        assert stats["Variants"] == 0
        assert math.isnan(stats["Ts/Tv"])
        assert "QUAL min" not in stats

    def test_missing_qual(self, tmp_path: Path) -> None:
        """Read a missing QUAL and DP as NaN."""
        path = tmp_path / "noqual.vcf"
        path.write_text(
            "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
            "1\t100\t.\tA\tG\t.\t.\t.\n"
        )

        frame = record_frame(path)
        assert math.isnan(frame["qual"].iloc[0])
        assert math.isnan(frame["depth"].iloc[0])
