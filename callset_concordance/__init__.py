"""
Call-set concordance checker.

Compares variant calls produced by different calling pipelines for the same
sample, splitting every pair of call sets into concordant and directionally
discordant records and collecting GATK genotype concordance metrics.
"""

__version__ = "1.0.0"
__author__ = "Data Tecnica International"
