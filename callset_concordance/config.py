"""Configuration for call-set comparison runs.

A run is described by a YAML document listing experiments; each experiment
is one sample, the reference its calls were made against, and two or more
named call sets:

    outdir: /path/to/out        # optional, summary goes to stdout without it
    experiments:
      - sample: NA12878
        ref: /path/to/GRCh37.fa
        calls:
          - name: gatk
            file: /path/to/NA12878-gatk.vcf
          - name: freebayes
            file: /path/to/NA12878-freebayes.vcf

Paths are used as written (relative paths resolve against the working
directory).
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from callset_concordance.exceptions import ConfigurationError
from callset_concordance.models import CallSet
from callset_concordance.utils import split_extension

SUMMARY_SUFFIX = "-summary.txt"


@dataclass
class Experiment:
    """One sample compared across its call sets.

    Attributes:
        sample: Sample name (column looked up in each call-set file)
        reference: Reference FASTA shared by all call sets
        calls: Call sets in configuration order
    """

    sample: str
    reference: Path
    calls: list[CallSet] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.reference, str):
            self.reference = Path(self.reference)


@dataclass
class Config:
    """Configuration for a comparison run.

    Attributes:
        config_file: YAML file the run was loaded from (names the summary)
        experiments: Experiments in configuration order
        outdir: Output directory for split files and the summary
            (None: split files go next to each first call set, summary to stdout)
        gatk_path: GATK executable or jar (auto-detect if None)
        verbose: Enable verbose logging
        log_dir: Directory for the rotating log file (default: outdir or cwd)
    """

    config_file: Path
    experiments: list[Experiment] = field(default_factory=list)
    outdir: Path | None = None
    gatk_path: Path | None = None
    verbose: bool = False
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if isinstance(self.config_file, str):
            self.config_file = Path(self.config_file)
        if isinstance(self.outdir, str):
            self.outdir = Path(self.outdir)
        if isinstance(self.gatk_path, str):
            self.gatk_path = Path(self.gatk_path)
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    @property
    def config_root(self) -> str:
        """Config file name without directory and extension."""
        root, _ = split_extension(self.config_file)
        return root

    @property
    def summary_file(self) -> Path | None:
        """Summary report path, or None when the summary goes to stdout."""
        if self.outdir is None:
            return None
        return self.outdir / f"{self.config_root}{SUMMARY_SUFFIX}"

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        if not self.experiments:
            errors.append(f"No experiments defined in {self.config_file}")

        if self.outdir is not None and self.outdir.exists() and not self.outdir.is_dir():
            errors.append(f"Output path is not a directory: {self.outdir}")

        if self.gatk_path is not None and not self.gatk_path.exists():
            errors.append(f"GATK executable not found: {self.gatk_path}")

        for experiment in self.experiments:
            sample = experiment.sample

            if not experiment.reference.exists():
                errors.append(f"Reference file not found for {sample}: {experiment.reference}")

            if not experiment.calls:
                errors.append(f"Experiment for {sample} has no call sets")

            for call in experiment.calls:
                if not call.file.exists():
                    errors.append(f"Call set '{call.name}' file not found for {sample}: {call.file}")

            names = Counter(call.name for call in experiment.calls)
            for name, count in names.items():
                if count > 1:
                    errors.append(f"Call set name '{name}' used {count} times for {sample}")

            labels = Counter(call.label for call in experiment.calls)
            for label, count in labels.items():
                if count > 1:
                    errors.append(
                        f"{count} call set files for {sample} share the provenance "
                        f"label '{label}'; file names must differ once directory "
                        f"and extension are removed"
                    )

        return errors


def _require(entry: dict[str, Any], key: str, where: str) -> Any:
    value = entry.get(key)
    if value is None or value == "":
        raise ConfigurationError(f"Missing '{key}' in {where}")
    return value


def _parse_experiment(entry: Any, index: int) -> Experiment:
    where = f"experiment {index + 1}"
    if not isinstance(entry, dict):
        raise ConfigurationError(f"{where} must be a mapping, got {type(entry).__name__}")

    sample = str(_require(entry, "sample", where))
    reference = Path(_require(entry, "ref", where))

    calls_data = entry.get("calls") or []
    if not isinstance(calls_data, list):
        raise ConfigurationError(f"'calls' of {where} ({sample}) must be a list")

    calls: list[CallSet] = []
    for j, call in enumerate(calls_data):
        call_where = f"call {j + 1} of {where} ({sample})"
        if not isinstance(call, dict):
            raise ConfigurationError(f"{call_where} must be a mapping")
        calls.append(
            CallSet(
                name=str(_require(call, "name", call_where)),
                file=Path(_require(call, "file", call_where)),
                reference=reference,
            )
        )

    return Experiment(sample=sample, reference=reference, calls=calls)


def load_config(config_file: Path, **overrides: Any) -> Config:
    """Load a comparison run configuration from YAML.

    Args:
        config_file: YAML configuration file
        **overrides: Config fields that replace the file's values when not None
            (outdir, gatk_path, verbose, log_dir)

    Returns:
        Config with one Experiment per configured sample

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    config_file = Path(config_file)
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    try:
        with open(config_file) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {config_file} must be a YAML mapping")

    experiments_data = data.get("experiments") or []
    if not isinstance(experiments_data, list):
        raise ConfigurationError(f"'experiments' in {config_file} must be a list")

    values: dict[str, Any] = {
        "config_file": config_file,
        "experiments": [_parse_experiment(e, i) for i, e in enumerate(experiments_data)],
        "outdir": data.get("outdir"),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    return Config(**values)
