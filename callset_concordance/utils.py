"""File name helpers shared by the merger, splitter and GATK runner.

Output artifacts are named from their inputs so that a second run finds the
files of the first one and skips the work (see ``combine_variants`` and
``select_by_concordance``).
"""

from pathlib import Path

# Suffixes that wrap the real extension (data.vcf.gz -> .vcf.gz)
COMPRESSION_SUFFIXES = {".gz", ".bgz"}


def split_extension(filepath: Path | str) -> tuple[str, str]:
    """Split a file's base name into root and extension.

    A compression suffix is kept together with the extension before it.

    Args:
        filepath: File path

    Returns:
        Tuple of (name without extension, extension including the dot)

    Example:
        >>> split_extension("/data/calls.vcf")
        ("calls", ".vcf")
        >>> split_extension("/data/calls.vcf.gz")
        ("calls", ".vcf.gz")
        >>> split_extension("/data/NA12878")
        ("NA12878", "")
    """
    path = Path(filepath)
    suffix = path.suffix
    name = path.name

    if suffix.lower() in COMPRESSION_SUFFIXES:
        inner = Path(path.stem).suffix
        suffix = inner + suffix

    if not suffix or suffix == name:
        return name, ""
    return name[: -len(suffix)], suffix


def file_root(filepath: Path | str) -> Path:
    """Retrieve file path without extension: /path/to/fname.txt -> /path/to/fname."""
    path = Path(filepath)
    root, _ = split_extension(path)
    return path.with_name(root)


def add_file_part(filepath: Path | str, part: str) -> Path:
    """Add file extender: base.txt -> base-part.txt.

    Example:
        >>> add_file_part(Path("/data/calls.vcf"), "combine")
        PosixPath("/data/calls-combine.vcf")
    """
    path = Path(filepath)
    root, ext = split_extension(path)
    return path.with_name(f"{root}-{part}{ext}")


def provenance_label(filepath: Path | str) -> str:
    """Derive the provenance label of a call-set file.

    The label is the base name with directory and extension stripped and
    tags the file's genotypes in merged records.

    Example:
        >>> provenance_label("/data/sampleX-calls.vcf")
        "sampleX-calls"
    """
    root, _ = split_extension(filepath)
    return root


def is_compressed(filepath: Path | str) -> bool:
    """Check whether an output path should be written gzip-compressed."""
    return Path(filepath).suffix.lower() in COMPRESSION_SUFFIXES
