"""
Services built on the data-access layer: seed migration and analysis.
"""

from .migration import MigrationPipeline, MigrationReport
from .seed_analysis import analyze_seed

__all__ = ["MigrationPipeline", "MigrationReport", "analyze_seed"]
