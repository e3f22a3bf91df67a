"""
Directory trigger engine: polling discovery of files for registered patterns.

Coordinates:
1. Pattern registration (via PatternRegistry)
2. Filesystem walking bounded by each pattern's literal roots (via FileScanner)
3. Whitelist/blacklist evaluation (via PathPattern)
4. Duplicate prevention (per-pattern emitted bookkeeping)
5. Job emission (into FetchedJobSink)

Discovery is poll-based rather than event-based so that files which already
existed before a pattern was registered are found on the first tick.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from .config import TriggerConfig
from .errors import TriggerStateError
from .models import JobDescriptor, PathPattern, TriggerState, TriggerStatus
from .registry import PatternRegistry
from .scanner import FileScanner
from .sink import FetchedJobSink

logger = logging.getLogger(__name__)


class DirectoryTrigger:
    """
    Background directory watcher that emits one job per newly matched file.

    Lifecycle:
        trigger = DirectoryTrigger()
        trigger.init(config)
        trigger.start()
        ...
        trigger.stop()
        trigger.join()

    register()/unregister() and the fetched-job sink may be used from any
    thread while the loop runs. Ticks never overlap: the next tick is
    scheduled check_interval seconds after the previous one finishes.
    """

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        sink: Optional[FetchedJobSink] = None,
    ):
        self.registry = registry or PatternRegistry()
        self.sink = sink or FetchedJobSink()
        self.config: Optional[TriggerConfig] = None
        self.scanner: Optional[FileScanner] = None

        self._lock = threading.Lock()
        # Serializes ticks so emitted bookkeeping is never raced
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ticks_completed = 0
        self._last_tick_at: Optional[datetime] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def init(self, config: Union[TriggerConfig, Dict[str, Any]]) -> None:
        """
        Apply configuration.

        Raises:
            InvalidConfigError: If the interval is not positive or the job id
                is missing
            TriggerStateError: If the loop is running
        """
        if not isinstance(config, TriggerConfig):
            config = TriggerConfig.from_dict(config)

        with self._lock:
            if self._is_alive():
                raise TriggerStateError("Cannot re-initialize a running trigger")
            self.config = config
            self.scanner = FileScanner(
                skip_hidden=config.skip_hidden,
                follow_symlinks=config.follow_symlinks,
            )

        logger.info(
            f"[{config.trigger_id}] Initialized for job {config.job_id} "
            f"(interval: {config.check_interval}s)"
        )

    def start(self) -> None:
        """
        Start the background scan loop.

        No-op if already running. If a previous loop was stopped but has not
        finished yet, waits for it before starting a new one.

        Raises:
            TriggerStateError: If init() has not been called
        """
        config = self._require_config()

        with self._lock:
            if self._is_alive() and not self._stop_event.is_set():
                return
            previous = self._thread

        if previous is not None:
            previous.join()

        with self._lock:
            if self._is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._scan_loop,
                daemon=True,
                name=config.trigger_id,
            )
            self._thread.start()

        logger.info(f"[{config.trigger_id}] Started")

    def stop(self) -> None:
        """
        Ask the loop to exit.

        The loop finishes the pattern it is currently scanning and then
        exits; call join() to wait for it. Safe if never started.
        """
        self._stop_event.set()
        if self.config is not None and self._thread is not None:
            logger.info(f"[{self.config.trigger_id}] Stop requested")

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the loop thread has exited.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True if the loop is no longer running
        """
        with self._lock:
            thread = self._thread
        if thread is None:
            return True

        thread.join(timeout)
        if thread.is_alive():
            return False

        with self._lock:
            if self._thread is thread:
                self._thread = None
        return True

    @property
    def state(self) -> TriggerState:
        with self._lock:
            if self._is_alive() and not self._stop_event.is_set():
                return TriggerState.RUNNING
        return TriggerState.STOPPED

    # =========================================================================
    # Registration
    # =========================================================================

    def register(
        self,
        whitelist: Union[str, Iterable[str]],
        offset: Optional[str] = None,
        blacklist: Union[str, Iterable[str], None] = None,
    ) -> Set[PathPattern]:
        """
        Watch for files matching the whitelist expressions.

        Each whitelist expression becomes its own pattern owned by the
        configured job, sharing the blacklist and offset.

        Returns:
            Identities of all patterns from this call (new and existing)

        Raises:
            InvalidPatternError: If an expression is malformed
            TriggerStateError: If init() has not been called
        """
        config = self._require_config()
        return self.registry.register(config.job_id, whitelist, offset=offset, blacklist=blacklist)

    def unregister(self, identity: PathPattern) -> bool:
        """
        Stop watching a pattern.

        Jobs already emitted for it stay in the sink. A tick already in
        progress emits nothing further for it, and later ticks skip it.
        """
        return self.registry.unregister(identity)

    def registered_patterns(self) -> List[PathPattern]:
        return self.registry.snapshot()

    def fetched_jobs(self) -> FetchedJobSink:
        return self.sink

    # =========================================================================
    # Scanning
    # =========================================================================

    def run_tick(self) -> List[JobDescriptor]:
        """
        Scan every active pattern once and emit jobs for new matches.

        This is what the background loop runs each interval. Call directly
        for a synchronous single scan.

        Returns:
            Jobs emitted by this tick (may be empty)

        Warn-and-continue semantics: a failure on one pattern does not
        block the others.
        """
        config = self._require_config()
        emitted: List[JobDescriptor] = []

        with self._tick_lock:
            for pattern in self.registry.snapshot():
                if self._stop_event.is_set() and self._is_loop_thread():
                    logger.debug(f"[{config.trigger_id}] Stop observed mid-tick")
                    break
                try:
                    emitted.extend(self._scan_pattern(pattern, config))
                except Exception:
                    logger.exception(
                        f"[{config.trigger_id}] Unexpected error scanning pattern "
                        f"{sorted(pattern.whitelist)}"
                    )
                    continue

        with self._lock:
            self._ticks_completed += 1
            self._last_tick_at = datetime.now(timezone.utc)

        logger.debug(f"[{config.trigger_id}] Tick complete: {len(emitted)} job(s) emitted")
        return emitted

    def _scan_pattern(self, pattern: PathPattern, config: TriggerConfig) -> List[JobDescriptor]:
        """
        Scan the roots of one pattern and emit jobs for unseen matching files.

        Returns:
            Newly emitted jobs
        """
        scanner = self.scanner
        emitted: List[JobDescriptor] = []
        seen: Set[str] = set()

        for root, max_depth in pattern.walk_roots():
            if pattern.is_blacklisted(root):
                continue

            for path in scanner.scan(root, max_depth=max_depth, prune=pattern.is_blacklisted):
                if path in seen:
                    continue
                seen.add(path)

                # Skip if already emitted for this pattern
                if self.registry.is_emitted(pattern, path):
                    continue

                source_pattern = pattern.matching_expression(path)
                if source_pattern is None:
                    continue

                # Fails once the pattern is unregistered mid-tick
                if not self.registry.claim(pattern, path):
                    continue

                job = JobDescriptor(
                    job_id=pattern.job_id,
                    trigger_id=config.trigger_id,
                    dir_filter_pattern=path,
                    source_pattern=source_pattern,
                    offset=pattern.offset,
                    properties=dict(config.job_properties),
                )
                self.sink.append(job)
                emitted.append(job)

                logger.info(
                    f"[{config.trigger_id}] Emitted job {job.id} for file: {path} "
                    f"(pattern: {source_pattern})"
                )

        return emitted

    def _scan_loop(self) -> None:
        """Background thread body: tick, then wait out the interval."""
        config = self._require_config()
        while not self._stop_event.is_set():
            try:
                self.run_tick()
            except Exception:
                logger.exception(f"[{config.trigger_id}] Scan tick failed")
            self._stop_event.wait(config.check_interval)
        logger.info(f"[{config.trigger_id}] Stopped")

    # =========================================================================
    # Inspection
    # =========================================================================

    def status(self) -> TriggerStatus:
        config = self.config
        with self._lock:
            ticks = self._ticks_completed
            last_tick_at = self._last_tick_at
        return TriggerStatus(
            trigger_id=config.trigger_id if config else None,
            job_id=config.job_id if config else None,
            state=self.state,
            check_interval=config.check_interval if config else None,
            registered_patterns=len(self.registry),
            fetched_jobs=len(self.sink),
            ticks_completed=ticks,
            last_tick_at=last_tick_at,
        )

    def _require_config(self) -> TriggerConfig:
        if self.config is None:
            raise TriggerStateError("Trigger is not initialized; call init(config) first")
        return self.config

    def _is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _is_loop_thread(self) -> bool:
        return threading.current_thread() is self._thread
