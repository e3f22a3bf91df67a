"""
Pattern registry.

Thread-safe store of active PathPattern entries keyed by value identity,
plus the per-pattern record of files already emitted.

Registration and removal may come from any thread while the scan loop is
reading snapshots. The scan loop is the only caller of claim().
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Set, Union

from .errors import InvalidPatternError
from .globs import compile_glob
from .models import PathPattern

logger = logging.getLogger(__name__)


class PatternRegistry:
    """
    In-memory registry of active path patterns.

    Holds at most one entry per identity. Emitted-file bookkeeping is scoped
    to the identity and is discarded when the pattern is unregistered.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # identity -> live pattern (insertion ordered)
        self._patterns: Dict[PathPattern, PathPattern] = {}
        # identity -> absolute paths already emitted for it
        self._emitted: Dict[PathPattern, Set[str]] = {}

    def register(
        self,
        job_id: str,
        whitelist: Union[str, Iterable[str]],
        offset: Optional[str] = None,
        blacklist: Union[str, Iterable[str], None] = None,
    ) -> Set[PathPattern]:
        """
        Register one pattern per whitelist expression.

        All patterns built from one call share the blacklist, offset and job
        id. Identities already present are left untouched (the existing entry
        keeps its offset) but are still reported back.

        Returns:
            Identities of every pattern from this call, new or pre-existing

        Raises:
            InvalidPatternError: If a blacklist expression is malformed
                (nothing is registered), or if any whitelist expression is
                malformed (the valid ones are registered first and listed on
                the error's `registered` attribute)
        """
        expressions = [whitelist] if isinstance(whitelist, str) else list(whitelist)
        if not expressions:
            raise InvalidPatternError("", "whitelist must contain at least one expression")
        blacklist_set = (
            frozenset([blacklist]) if isinstance(blacklist, str) else frozenset(blacklist or ())
        )

        # Shared by every entry; a bad one fails the whole call
        for expression in sorted(blacklist_set):
            compile_glob(expression)

        candidates: List[PathPattern] = []
        failure: Optional[InvalidPatternError] = None
        for expression in sorted(set(expressions)):
            try:
                candidates.append(
                    PathPattern(
                        job_id=job_id,
                        whitelist=frozenset([expression]),
                        blacklist=blacklist_set,
                        offset=offset,
                    )
                )
            except InvalidPatternError as e:
                if failure is None:
                    failure = e

        identities: Set[PathPattern] = set()
        with self._lock:
            for pattern in candidates:
                if pattern not in self._patterns:
                    self._patterns[pattern] = pattern
                    self._emitted[pattern] = set()
                    logger.info(
                        f"Registered pattern {sorted(pattern.whitelist)} for job {job_id} "
                        f"(blacklist: {sorted(pattern.blacklist)})"
                    )
                else:
                    logger.debug(f"Pattern already registered: {sorted(pattern.whitelist)}")
                identities.add(self._patterns[pattern])

        if failure is not None:
            raise InvalidPatternError(failure.expression, failure.reason, registered=identities)

        return identities

    def unregister(self, identity: PathPattern) -> bool:
        """
        Remove a pattern and its emitted-file bookkeeping.

        Does not raise if the identity is unknown (idempotent).

        Returns:
            True if an entry was removed
        """
        with self._lock:
            removed = self._patterns.pop(identity, None)
            self._emitted.pop(identity, None)

        if removed is not None:
            logger.info(f"Unregistered pattern {sorted(identity.whitelist)} for job {identity.job_id}")
        return removed is not None

    def snapshot(self) -> List[PathPattern]:
        """Point-in-time copy of active patterns, in registration order."""
        with self._lock:
            return list(self._patterns.values())

    def is_emitted(self, identity: PathPattern, path: str) -> bool:
        """True if a job was already emitted for this (pattern, file) pair."""
        with self._lock:
            emitted = self._emitted.get(identity)
            return emitted is not None and path in emitted

    def claim(self, identity: PathPattern, path: str) -> bool:
        """
        Atomically reserve the right to emit a job for a (pattern, file) pair.

        Fails for a pattern that was unregistered while a scan was in flight,
        and bookkeeping is never recreated for it.

        Returns:
            True if the pattern is still registered and the path had not been
            claimed before; the path is recorded as emitted
        """
        with self._lock:
            emitted = self._emitted.get(identity)
            if emitted is None or path in emitted:
                return False
            emitted.add(path)
            return True

    def emitted_count(self, identity: PathPattern) -> int:
        with self._lock:
            return len(self._emitted.get(identity, ()))

    def clear(self) -> None:
        """
        Remove all patterns and bookkeeping.

        Used primarily for testing.
        """
        with self._lock:
            self._patterns.clear()
            self._emitted.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)
