"""Progress reporting for export and import runs."""

from site_backup.monitoring.progress import ProgressCallback, ProgressReporter, band

__all__ = ["ProgressCallback", "ProgressReporter", "band"]
