"""Tests for the VCF parser."""

import gzip
from pathlib import Path

import pytest

from callset_concordance.exceptions import VcfFormatError
from callset_concordance.models import Genotype
from callset_concordance.parsers.vcf import (
    count_vcf_records,
    parse_genotype,
    parse_record,
    parse_vcf,
    read_vcf_header,
)
from tests.conftest import SAMPLE, VcfFactory, vcf_text


class TestParseGenotype:
    """Test GT translation to allele strings."""

    def test_heterozygous(self) -> None:
        """Translate a heterozygous genotype."""
        assert parse_genotype("0/1", ("A", "T")) == Genotype(alleles=("A", "T"))

    def test_phased(self) -> None:
        """Keep phasing and allele order."""
        genotype = parse_genotype("1|0", ("A", "T"))
        assert genotype.alleles == ("T", "A")
        assert genotype.phased is True

    def test_multiallelic(self) -> None:
        """Translate multiallelic indices."""
        assert parse_genotype("1/2", ("A", "T", "G")).alleles == ("T", "G")

    def test_no_call(self) -> None:
        """Translate a diploid no-call."""
        genotype = parse_genotype("./.", ("A", "T"))
        assert genotype.alleles == (".", ".")
        assert genotype.is_called is False

    def test_single_dot(self) -> None:
        """Translate a single-dot no-call."""
        assert parse_genotype(".", ("A",)).is_called is False

    def test_half_call(self) -> None:
        """Treat a half call as called."""
        genotype = parse_genotype("./1", ("A", "T"))
        assert genotype.is_called is True
        assert genotype.allele_set == frozenset({".", "T"})

    def test_haploid(self) -> None:
        """Translate a haploid genotype."""
        assert parse_genotype("1", ("A", "T")).alleles == ("T",)

    def test_index_out_of_range(self) -> None:
        """Reject an allele index past the ALT list."""
        with pytest.raises(VcfFormatError, match="Invalid genotype"):
            parse_genotype("0/2", ("A", "T"))

    def test_not_a_number(self) -> None:
        """Reject a non-numeric allele index."""
        with pytest.raises(VcfFormatError):
            parse_genotype("A/T", ("A", "T"))


class TestParseRecord:
    """Test single data line parsing."""

    def test_basic_record(self) -> None:
        """Parse fields, genotype and raw line."""
        line = "1\t100\trs1\ta\tt\t50\tPASS\tDP=10\tGT:DP\t0/1:10"
        record = parse_record(line, (SAMPLE,), 1)

        assert record.key == ("1", 100)
        assert record.ref == "A"
        assert record.alts == ("T",)
        assert record.calls[SAMPLE] == Genotype(alleles=("A", "T"))
        assert record.raw == line

    def test_gt_not_first(self) -> None:
        """Find GT anywhere in FORMAT."""
        line = "1\t100\t.\tA\tT\t50\tPASS\t.\tDP:GT\t10:1/1"
        record = parse_record(line, (SAMPLE,), 1)
        assert record.calls[SAMPLE].alleles == ("T", "T")

    def test_missing_gt_is_no_call(self) -> None:
        """Read a missing GT as a no-call."""
        line = "1\t100\t.\tA\tT\t50\tPASS\t.\tDP\t10"
        record = parse_record(line, (SAMPLE,), 1)
        assert record.calls[SAMPLE].is_called is False

    def test_reference_only_site(self) -> None:
        """Parse a site without ALT alleles."""
        line = "1\t100\t.\tA\t.\t50\tPASS\t.\tGT\t0/0"
        record = parse_record(line, (SAMPLE,), 1)
        assert record.alts == ()
        assert record.calls[SAMPLE].alleles == ("A", "A")

    def test_sites_only(self) -> None:
        """Parse a record without sample columns."""
        record = parse_record("1\t100\t.\tA\tT\t50\tPASS\t.", (), 1)
        assert record.calls == {}

    def test_too_few_columns(self) -> None:
        """Report the line number of a short line."""
        with pytest.raises(VcfFormatError, match="line 7"):
            parse_record("1\t100\t.\tA", (SAMPLE,), 7)

    def test_bad_position(self) -> None:
        """Reject a non-numeric position."""
        with pytest.raises(VcfFormatError, match="not a number"):
            parse_record("1\tabc\t.\tA\tT\t50\tPASS\t.\tGT\t0/1", (SAMPLE,), 1)


class TestReadVcfHeader:
    """Test header reading."""

    def test_samples_and_contigs(self, make_vcf: VcfFactory) -> None:
        """Read samples, contigs and meta lines."""
        path = make_vcf("calls.vcf", [], samples=("S1", "S2"), contigs=("chr1", "chr2"))
        header = read_vcf_header(path)

        assert header.samples == ("S1", "S2")
        assert header.contigs() == ["chr1", "chr2"]
        assert header.meta_lines[0] == "##fileformat=VCFv4.2"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Raise for a missing file."""
        with pytest.raises(FileNotFoundError):
            read_vcf_header(tmp_path / "missing.vcf")

    def test_no_column_line(self, tmp_path: Path) -> None:
        """Reject a file without a column line."""
        path = tmp_path / "bad.vcf"
        path.write_text("##fileformat=VCFv4.2\n1\t100\t.\tA\tT\t.\t.\t.\n")

        with pytest.raises(VcfFormatError, match="No #CHROM header"):
            read_vcf_header(path)

    def test_wrong_columns(self, tmp_path: Path) -> None:
        """Reject a column line with the wrong fields."""
        path = tmp_path / "bad.vcf"
        path.write_text("#CHROM\tPOS\tREF\tALT\n")

        with pytest.raises(VcfFormatError, match="Invalid VCF header"):
            read_vcf_header(path)


class TestParseVcf:
    """Test streaming VCF parsing."""

    def test_records_in_order(self, make_vcf: VcfFactory) -> None:
        """Yield records in file order."""
        path = make_vcf(
            "calls.vcf",
            [("1", 100, "A", "T", "0/1"), ("1", 200, "C", "G", "1/1")],
        )
        records = list(parse_vcf(path))

        assert [r.pos for r in records] == [100, 200]
        assert records[1].calls[SAMPLE].allele_set == frozenset({"G"})

    def test_gzipped(self, tmp_path: Path) -> None:
        """Read a gzipped VCF."""
        path = tmp_path / "calls.vcf.gz"
        with gzip.open(path, "wt") as f:
            f.write(vcf_text([("1", 100, "A", "T", "0/1")]))

        records = list(parse_vcf(path))
        assert len(records) == 1

    def test_is_lazy(self, make_vcf: VcfFactory) -> None:
        """Malformed lines only fail when reached."""
        path = make_vcf("calls.vcf", [("1", 100, "A", "T", "0/1")])
        with open(path, "a") as f:
            f.write("1\tbad\n")

        records = parse_vcf(path)
        assert next(records).pos == 100
        with pytest.raises(VcfFormatError, match="line 2"):
            next(records)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Raise for a missing file."""
        with pytest.raises(FileNotFoundError):
            list(parse_vcf(tmp_path / "missing.vcf"))


class TestCountVcfRecords:
    """Test record counting."""

    def test_count(self, make_vcf: VcfFactory) -> None:
        """Count data lines."""
        path = make_vcf(
            "calls.vcf",
            [("1", 100, "A", "T", "0/1"), ("1", 200, "C", "G", "1/1"), ("2", 5, "G", "A", "0/0")],
        )
        assert count_vcf_records(path) == 3

    def test_empty(self, make_vcf: VcfFactory) -> None:
        """Count zero for a header-only file."""
        assert count_vcf_records(make_vcf("calls.vcf", [])) == 0
