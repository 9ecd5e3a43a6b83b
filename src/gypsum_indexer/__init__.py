"""gypsum-indexer: summarise uploaded project versions in an R2 bucket."""

__version__ = "0.1.0"

from gypsum_indexer.config import IndexerConfig
from gypsum_indexer.errors import (
    ConfigurationError,
    IndexerError,
    InvalidMetadata,
    InvalidParameters,
    MalformedState,
    PreconditionFailed,
    RemoteCallFailed,
)
from gypsum_indexer.indexer import IndexResult, RunOutcome, index_version, run
from gypsum_indexer.lease import AdvisoryLease
from gypsum_indexer.params import JobParameters
from gypsum_indexer.storage import ObjectStore
from gypsum_indexer.tracker import IssueTracker

__all__ = [
    "__version__",
    "IndexerConfig",
    "JobParameters",
    "ObjectStore",
    "IssueTracker",
    "AdvisoryLease",
    "IndexResult",
    "RunOutcome",
    "index_version",
    "run",
    "IndexerError",
    "ConfigurationError",
    "InvalidParameters",
    "PreconditionFailed",
    "RemoteCallFailed",
    "MalformedState",
    "InvalidMetadata",
]
