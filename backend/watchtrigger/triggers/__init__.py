"""
Directory triggers: polling file discovery for downstream jobs.

A trigger watches registered glob patterns and emits one job descriptor per
newly matched file. Discovery is polling-based, so files that already exist
when a pattern is registered are picked up on the next scan.

Public API:
    compile_glob / GlobMatcher: Glob expression compilation and matching
    PathPattern: Whitelist/blacklist value object with value identity
    PatternRegistry: Thread-safe store of active patterns
    FileScanner: Bounded filesystem traversal
    FetchedJobSink: Thread-safe buffer of emitted jobs
    DirectoryTrigger: Orchestration (register → scan → match → emit)
"""

from .errors import (
    TriggerError,
    InvalidPatternError,
    InvalidConfigError,
    TriggerStateError,
)
from .globs import GlobMatcher, compile_glob
from .models import PathPattern, JobDescriptor, TriggerState, TriggerStatus
from .config import TriggerConfig, DEFAULT_CHECK_INTERVAL
from .registry import PatternRegistry
from .scanner import FileScanner
from .sink import FetchedJobSink
from .engine import DirectoryTrigger

__all__ = [
    # Errors
    "TriggerError",
    "InvalidPatternError",
    "InvalidConfigError",
    "TriggerStateError",
    # Matching
    "GlobMatcher",
    "compile_glob",
    # Models
    "PathPattern",
    "JobDescriptor",
    "TriggerState",
    "TriggerStatus",
    # Config
    "TriggerConfig",
    "DEFAULT_CHECK_INTERVAL",
    # Core
    "PatternRegistry",
    "FileScanner",
    "FetchedJobSink",
    "DirectoryTrigger",
]
