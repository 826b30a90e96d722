"""
Export pipeline handlers.

- TableEnumerator / ThroughputSampler: table discovery and scan page sizing
- ScanPaginator: full-table scan, one page at a time
- BackupOrchestrator: per-table and multi-table export to S3
"""

from .backup import BackupOrchestrator, OutcomeCollector
from .scan import ScanPaginator, ScanState
from .tables import TableEnumerator, ThroughputSampler, sample_limit

__all__ = [
    "BackupOrchestrator",
    "OutcomeCollector",
    "ScanPaginator",
    "ScanState",
    "TableEnumerator",
    "ThroughputSampler",
    "sample_limit",
]
