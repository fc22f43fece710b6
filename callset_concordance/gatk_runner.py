"""GATK command execution for genotype concordance metrics.

Runs the GATK 3 VariantEval walker with the GenotypeConcordance module,
stratified by sample, on the two original (unmerged) call-set files. The
report it writes is treated as an opaque artifact; ``metrics`` extracts the
per-sample rows from it.

Command layout (GATK 3):
    gatk -T VariantEval --phone_home NO_ET -R ref.fa --out pair.eval
         --eval a.vcf --comp b.vcf --sample NA12878
         --evalModule GenotypeConcordance --stratificationModule Sample
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from callset_concordance.exceptions import GatkError
from callset_concordance.utils import file_root

logger = logging.getLogger(__name__)

EVAL_MODULE = "GenotypeConcordance"
STRATIFICATION_MODULE = "Sample"
EVAL_EXTENSION = ".eval"

# 6 hours; VariantEval on whole-genome call sets is slow
DEFAULT_TIMEOUT = 6 * 3600


@dataclass
class GatkResult:
    """Result from a GATK command execution.

    Attributes:
        success: Whether command succeeded
        command: Full command that was run
        stdout: Standard output
        stderr: Standard error
        output_file: Path given to --out, if any
    """

    success: bool
    command: str
    stdout: str
    stderr: str
    output_file: Path | None


def find_gatk() -> Path | None:
    """Find a GATK 3 executable in PATH.

    Searches for gatk3 first, then falls back to gatk.

    Returns:
        Path to executable, or None if not found
    """
    for name in ["gatk3", "gatk"]:
        path = shutil.which(name)
        if path:
            return Path(path)
    return None


def gatk_command(gatk_path: Path) -> list[str]:
    """Command prefix for a GATK wrapper script or a GenomeAnalysisTK.jar."""
    if gatk_path.suffix == ".jar":
        return ["java", "-jar", str(gatk_path)]
    return [str(gatk_path)]


def eval_output_path(eval_file: Path, out_base: Path | None = None) -> Path:
    """VariantEval report path: the base file with its extension replaced by .eval."""
    root = file_root(out_base if out_base is not None else eval_file)
    return root.with_name(root.name + EVAL_EXTENSION)


class GatkRunner:
    """Invokes GATK walkers as external processes.

    Usage:
        runner = GatkRunner()
        eval_file = runner.variant_eval("NA12878", a_vcf, b_vcf, ref)
    """

    def __init__(
        self,
        gatk_path: Path | None = None,
        verbose: bool = False,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize runner.

        Args:
            gatk_path: GATK executable or jar (auto-detect if None)
            verbose: Log full commands and GATK stderr on failure
            timeout: Seconds before a walker is abandoned

        Raises:
            RuntimeError: If GATK not found
        """
        self.gatk_path = gatk_path or find_gatk()
        if self.gatk_path is None:
            raise RuntimeError(
                "GATK not found in PATH. Please install GATK 3 or specify --gatk"
            )
        self.verbose = verbose
        self.timeout = timeout

    def _run_gatk(self, program: str, args: list[str]) -> GatkResult:
        """Execute a GATK walker.

        Args:
            program: Walker name passed to -T
            args: Walker arguments

        Returns:
            GatkResult with execution details
        """
        cmd = gatk_command(self.gatk_path) + ["-T", program, "--phone_home", "NO_ET"] + args
        cmd_str = " ".join(cmd)

        if self.verbose:
            logger.info(f"Running: {cmd_str}")
        else:
            logger.debug(f"Running: {cmd_str}")

        output_file = None
        for i, arg in enumerate(args):
            if arg in ("--out", "-o") and i + 1 < len(args):
                output_file = Path(args[i + 1])
                break

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return GatkResult(
                success=False,
                command=cmd_str,
                stdout="",
                stderr=f"Command timed out after {self.timeout} seconds",
                output_file=None,
            )

        success = result.returncode == 0
        if not success:
            logger.error(f"GATK {program} failed: {result.stderr}")

        return GatkResult(
            success=success,
            command=cmd_str,
            stdout=result.stdout,
            stderr=result.stderr,
            output_file=output_file,
        )

    def variant_eval(
        self,
        sample: str,
        eval_file: Path,
        comp_file: Path,
        reference: Path,
        out_base: Path | None = None,
    ) -> Path:
        """Compare two variant files with GenotypeConcordance in VariantEval.

        Skipped when the report already exists.

        Args:
            sample: Sample to stratify by
            eval_file: Call set evaluated
            comp_file: Call set compared against
            reference: Reference FASTA
            out_base: File whose name the report takes (default: eval_file)

        Returns:
            Path to the VariantEval report

        Raises:
            GatkError: If VariantEval fails
        """
        out_file = eval_output_path(eval_file, out_base)
        if out_file.exists():
            logger.info(f"Reusing existing VariantEval report {out_file}")
            return out_file

        args = [
            "-R", str(reference),
            "--out", str(out_file),
            "--eval", str(eval_file),
            "--comp", str(comp_file),
            "--sample", sample,
            "--evalModule", EVAL_MODULE,
            "--stratificationModule", STRATIFICATION_MODULE,
        ]
        result = self._run_gatk("VariantEval", args)
        if not result.success:
            raise GatkError(f"VariantEval failed for {eval_file} vs {comp_file}:\n{result.stderr}")

        logger.info(f"Wrote VariantEval report {out_file}")
        return out_file
