"""
Custom exceptions for call-set comparison.
Kept minimal - only what's needed for clear error handling.
"""


class ConcordanceError(Exception):
    """Base exception for call-set comparison errors."""
    pass


class ConfigurationError(ConcordanceError):
    """Raised when the experiment configuration is missing or malformed."""
    pass


class ProvenanceCollisionError(ConfigurationError):
    """Raised when two call sets reduce to the same provenance label."""
    pass


class ReferenceMismatchError(ConfigurationError):
    """Raised when call sets being merged name different reference files."""
    pass


class VcfFormatError(ConcordanceError):
    """Raised when a variant file doesn't meet the expected VCF layout."""
    pass


class GatkError(ConcordanceError):
    """Raised when a GATK walker exits with a non-zero status."""
    pass


class ContigOrderError(ConcordanceError):
    """Raised when two call sets cannot be merged in a known contig order."""
    pass
