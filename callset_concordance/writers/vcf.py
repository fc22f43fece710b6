"""VCF output writers.

Filtered subsets of a call set are written with another VCF as structural
template: its meta lines and column header are copied unchanged and the
selected records follow in input order.
"""

from collections.abc import Hashable, Iterable
from contextlib import ExitStack
from pathlib import Path
from types import TracebackType
from typing import Protocol

from callset_concordance.io_utils import atomic_output
from callset_concordance.models import VcfHeader
from callset_concordance.parsers.vcf import read_vcf_header


class RawRecord(Protocol):
    raw: str | None


class VcfWriter:
    """Writes records under a template header.

    The file only appears at its final path once the writer is closed
    without error.

    Usage:
        with VcfWriter(out_path, header) as writer:
            for record in records:
                writer.write_record(record)
    """

    def __init__(self, filepath: Path, template: VcfHeader) -> None:
        """Initialize writer; the file is opened on entering the context.

        Args:
            filepath: Output VCF path (.gz paths are gzip-compressed)
            template: Header to copy
        """
        self.filepath = filepath
        self.template = template
        self.record_count = 0

    def write_record(self, record: RawRecord) -> None:
        """Write one record as its original text line."""
        if record.raw is None:
            raise ValueError("Record has no source line to write")
        self._file.write(record.raw + "\n")
        self.record_count += 1

    def close(self) -> None:
        self._context.__exit__(None, None, None)

    def __enter__(self) -> "VcfWriter":
        self._context = atomic_output(self.filepath)
        self._file = self._context.__enter__()
        try:
            for line in self.template.meta_lines:
                self._file.write(line + "\n")
            self._file.write(self.template.column_line() + "\n")
        except BaseException as e:
            self._context.__exit__(type(e), e, e.__traceback__)
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self._context.__exit__(exc_type, exc_val, exc_tb)


def write_vcf_w_template(
    template: Path,
    out_map: dict[Hashable, Path],
    categorized: Iterable[tuple[Hashable, RawRecord]],
) -> dict[Hashable, int]:
    """Write categorized records to one VCF per category.

    Args:
        template: VCF whose header every output copies
        out_map: Category -> output path
        categorized: Lazy stream of (category, record); categories missing
            from out_map are skipped

    Returns:
        Category -> number of records written
    """
    header = read_vcf_header(template)
    with ExitStack() as stack:
        writers = {
            category: stack.enter_context(VcfWriter(path, header))
            for category, path in out_map.items()
        }
        for category, record in categorized:
            writer = writers.get(category)
            if writer is not None:
                writer.write_record(record)
        return {category: w.record_count for category, w in writers.items()}
