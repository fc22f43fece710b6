"""Pair selector: split two call sets into concordant and discordant records.

For one sample, every position present in either call set lands in exactly
one of three outputs:

- ``{sample}-{A}-{B}-concordance.vcf``: both call the same genotype
  (A's records, A's header)
- ``{sample}-{A}-{B}-discordance.vcf``: A has a call that B calls
  differently or not at all, or A has a record B lacks (A's records,
  A's header)
- ``{sample}-{B}-{A}-discordance.vcf``: B has a call A lacks, or B has a
  record A lacks (B's records, B's header)

Existing outputs are reused and not rewritten.
"""

import logging
from collections import Counter
from contextlib import ExitStack
from pathlib import Path

from callset_concordance.checks.concordance import categorize_records, classify
from callset_concordance.exceptions import VcfFormatError
from callset_concordance.merge import combine_variants, merge_call_sets, uniquify_labels
from callset_concordance.models import (
    CallSet,
    Classification,
    ComparisonType,
    VcfHeader,
    uniquify_column,
)
from callset_concordance.parsers.merged import parse_merged_vcf
from callset_concordance.parsers.vcf import read_vcf_header
from callset_concordance.utils import add_file_part
from callset_concordance.writers.vcf import VcfWriter, write_vcf_w_template

logger = logging.getLogger(__name__)

CONCORDANT = 0
DISCORDANT_A_VS_B = 1
DISCORDANT_B_VS_A = 2


def comparison_path(
    base_dir: Path,
    sample: str,
    first: CallSet,
    second: CallSet,
    comparison_type: ComparisonType,
) -> Path:
    """Output path for one selection of a call-set pair."""
    return base_dir / f"{sample}-{first.name}-{second.name}-{comparison_type.value}.vcf"


def sample_column(header: VcfHeader, sample: str, call: CallSet) -> str:
    """Find the column holding a sample's calls in a call-set file.

    A single-sample file is accepted under any column name.

    Raises:
        VcfFormatError: If the sample is not in a multi-sample file
    """
    if sample in header.samples:
        return sample
    if len(header.samples) == 1:
        logger.warning(
            f"Sample '{sample}' not in {call.file}; using its only column "
            f"'{header.samples[0]}'"
        )
        return header.samples[0]
    raise VcfFormatError(
        f"Sample '{sample}' not found in {call.file} "
        f"(columns: {', '.join(header.samples) or 'none'})"
    )


def select_by_concordance(
    sample: str,
    call_a: CallSet,
    call_b: CallSet,
    out_dir: Path | None = None,
) -> list[Path]:
    """Split a pair of call sets into concordant and directional discordant files.

    Args:
        sample: Sample whose genotypes are compared
        call_a: First call set
        call_b: Second call set
        out_dir: Output directory (default: directory of call_a.file)

    Returns:
        [concordant, discordant A vs B, discordant B vs A] output paths
    """
    base_dir = Path(out_dir) if out_dir is not None else call_a.file.parent
    base_dir.mkdir(parents=True, exist_ok=True)

    targets = [
        comparison_path(base_dir, sample, call_a, call_b, ComparisonType.CONCORDANCE),
        comparison_path(base_dir, sample, call_a, call_b, ComparisonType.DISCORDANCE),
        comparison_path(base_dir, sample, call_b, call_a, ComparisonType.DISCORDANCE),
    ]
    pending = {i: path for i, path in enumerate(targets) if not path.exists()}
    if not pending:
        logger.info(f"Reusing existing comparison files for {call_a.name} and {call_b.name}")
        return targets

    label_a, label_b = uniquify_labels(call_a, call_b)
    header_a = read_vcf_header(call_a.file)
    header_b = read_vcf_header(call_b.file)
    columns = {
        label_a: uniquify_column(sample_column(header_a, sample, call_a), label_a),
        label_b: uniquify_column(sample_column(header_b, sample, call_b), label_b),
    }
    templates = {
        CONCORDANT: header_a,
        DISCORDANT_A_VS_B: header_a,
        DISCORDANT_B_VS_A: header_b,
    }

    counts: Counter[str] = Counter()
    with ExitStack() as stack:
        writers = {
            i: stack.enter_context(VcfWriter(path, templates[i]))
            for i, path in pending.items()
        }

        for record in merge_call_sets(call_a, call_b, header_a, header_b):
            narrowed = record.for_sample(columns)
            gt_a = narrowed.genotypes[label_a]
            gt_b = narrowed.genotypes[label_b]

            if classify(narrowed) is Classification.CONCORDANT:
                target, source = CONCORDANT, label_a
            elif gt_a is not None and (gt_a.is_called or gt_b is None):
                target, source = DISCORDANT_A_VS_B, label_a
            else:
                target, source = DISCORDANT_B_VS_A, label_b

            counts[targets[target].name] += 1
            writer = writers.get(target)
            if writer is not None:
                for source_record in record.records[source]:
                    writer.write_record(source_record)

    for path in targets:
        logger.info(f"{path.name}: {counts[path.name]:,} positions")

    return targets


def split_variants_by_match(
    call_a: CallSet,
    call_b: CallSet,
    out_dir: Path | None = None,
) -> dict[Classification, Path]:
    """Provide concordant and discordant variants for two call sets.

    Classifies the merged artifact over all of its genotype columns and
    writes ``{combine}-concordant`` and ``{combine}-discordant`` files.
    Skipped when the concordant file already exists.

    Returns:
        Classification -> output path
    """
    combo_file = combine_variants(call_a, call_b, out_dir)
    out_map = {
        Classification.CONCORDANT: add_file_part(combo_file, Classification.CONCORDANT.value),
        Classification.DISCORDANT: add_file_part(combo_file, Classification.DISCORDANT.value),
    }

    if out_map[Classification.CONCORDANT].exists():
        logger.info(f"Reusing existing split of {combo_file.name}")
        return out_map

    written = write_vcf_w_template(
        combo_file,
        out_map,
        categorize_records(parse_merged_vcf(combo_file)),
    )
    for category, count in written.items():
        logger.info(f"{out_map[category].name}: {count:,} records")

    return out_map
