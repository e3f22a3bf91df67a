"""
Directory trigger data models.

PathPattern is an immutable value type: two patterns built from the same
job id and the same whitelist/blacklist contents are equal and hash the
same, whatever containers or ordering were used to build them. The resume
offset travels with the pattern but is not part of its identity.

JobDescriptor and TriggerStatus use Pydantic with strict validation.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import InvalidPatternError
from .globs import GlobMatcher, compile_glob


def _as_frozenset(expressions: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    if expressions is None:
        return frozenset()
    if isinstance(expressions, str):
        return frozenset([expressions])
    return frozenset(expressions)


@dataclass(frozen=True)
class PathPattern:
    """
    One registered watch: whitelist globs, blacklist globs and owning job.

    A path matches when it matches at least one whitelist expression and no
    blacklist expression. Blacklist entries are prefix matches, so a
    blacklisted directory excludes every file beneath it.

    Raises:
        InvalidPatternError: On construction, if any expression is malformed
            or the whitelist is empty
    """

    job_id: str
    whitelist: FrozenSet[str]
    blacklist: FrozenSet[str] = frozenset()
    offset: Optional[str] = field(default=None, compare=False)
    _whitelist_matchers: Tuple[GlobMatcher, ...] = field(
        init=False, compare=False, repr=False
    )
    _blacklist_matchers: Tuple[GlobMatcher, ...] = field(
        init=False, compare=False, repr=False
    )

    def __post_init__(self):
        whitelist = _as_frozenset(self.whitelist)
        blacklist = _as_frozenset(self.blacklist)
        if not whitelist:
            raise InvalidPatternError("", "whitelist must contain at least one expression")

        object.__setattr__(self, "whitelist", whitelist)
        object.__setattr__(self, "blacklist", blacklist)
        # Sorted so matching order (and source_pattern) is deterministic
        object.__setattr__(
            self, "_whitelist_matchers", tuple(compile_glob(e) for e in sorted(whitelist))
        )
        object.__setattr__(
            self, "_blacklist_matchers", tuple(compile_glob(e) for e in sorted(blacklist))
        )

    def is_blacklisted(self, path: Union[str, Path]) -> bool:
        """True if the path, or any directory above it, hits a blacklist entry."""
        return any(m.matches_prefix(path) for m in self._blacklist_matchers)

    def matching_expression(self, path: Union[str, Path]) -> Optional[str]:
        """
        Return the whitelist expression that accepts this path.

        Returns:
            The first matching whitelist expression, or None if the path is
            not whitelisted or is blacklisted
        """
        for matcher in self._whitelist_matchers:
            if matcher.matches(path):
                if self.is_blacklisted(path):
                    return None
                return matcher.expression
        return None

    def matches(self, path: Union[str, Path]) -> bool:
        return self.matching_expression(path) is not None

    def root_hints(self) -> Set[str]:
        """Longest literal directory prefix of each whitelist expression."""
        return {m.literal_root for m in self._whitelist_matchers}

    def walk_roots(self) -> List[Tuple[str, Optional[int]]]:
        """
        Directories to walk with their depth bound.

        When several whitelist expressions share a root, the deepest bound
        wins (None meaning unbounded).

        Returns:
            Sorted list of (root, max_depth)
        """
        roots: Dict[str, Optional[int]] = {}
        for matcher in self._whitelist_matchers:
            root = matcher.literal_root
            if root not in roots:
                roots[root] = matcher.max_depth
                continue
            current = roots[root]
            if current is None or matcher.max_depth is None:
                roots[root] = None
            else:
                roots[root] = max(current, matcher.max_depth)
        return sorted(roots.items())

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form with sorted expression lists."""
        return {
            "job_id": self.job_id,
            "whitelist": sorted(self.whitelist),
            "blacklist": sorted(self.blacklist),
            "offset": self.offset,
        }


class TriggerState(str, Enum):
    """Scan loop lifecycle state."""

    STOPPED = "stopped"
    RUNNING = "running"


class JobDescriptor(BaseModel):
    """
    A job emitted for one matched file.

    The matched file is carried as a single-file filter pattern so the
    consuming scheduler reads exactly that file. Created once per
    (pattern, file) pair and never mutated.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    job_id: str = Field(..., description="Owning job identifier")
    trigger_id: str = Field(..., description="Trigger that emitted this job")
    dir_filter_pattern: str = Field(
        ..., description="Absolute path of the matched file"
    )
    source_pattern: str = Field(
        ..., description="Whitelist expression that matched the file"
    )
    offset: Optional[str] = Field(
        default=None, description="Resume offset inherited from the pattern"
    )
    properties: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("dir_filter_pattern")
    @classmethod
    def validate_absolute_path(cls, v: str) -> str:
        """Ensure path is absolute."""
        if not Path(v).is_absolute():
            raise ValueError(f"Job file path must be absolute: {v}")
        return v


class TriggerStatus(BaseModel):
    """Point-in-time view of a trigger, for inspection endpoints."""

    model_config = ConfigDict(extra="forbid")

    trigger_id: Optional[str] = None
    job_id: Optional[str] = None
    state: TriggerState
    check_interval: Optional[float] = None
    registered_patterns: int = 0
    fetched_jobs: int = 0
    ticks_completed: int = 0
    last_tick_at: Optional[datetime] = None
