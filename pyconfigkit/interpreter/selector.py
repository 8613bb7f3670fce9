"""
pyconfigkit/interpreter/selector.py

Interpreter selection - probes candidates in search order and returns the
configurations that satisfy a caller predicate.

Probe and parse failures never abort selection: the candidate is recorded in
the SelectionReport and the next one is tried. Only discovery failures and the
final NoMatchError reach the caller.
"""

import time
import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Deque, Iterator, List, Optional, Tuple, Union

from ..core.exceptions import (
    NoMatchError,
    ParseError,
    ProbeError,
    SelectionCancelledError,
)
from .candidates import Candidate, CandidateLocator
from .config import Config
from .parser import parse
from .prober import DEFAULT_PROBE_TIMEOUT, Prober, RawProbeOutput, SubprocessProber
from .version import VersionLike, coerce_version

logger = logging.getLogger(__name__)

Predicate = Callable[[Config], bool]

# Outcome statuses recorded in a SelectionReport
PROBE_FAILED = "probe_failed"
PARSE_FAILED = "parse_failed"
REJECTED = "rejected"
MATCHED = "matched"


@dataclass(frozen=True)
class CandidateOutcome:
    """
    What happened to one candidate during selection.

    Attributes:
        candidate: The candidate
        status: One of 'probe_failed', 'parse_failed', 'rejected', 'matched'
        detail: Failure message for failed candidates, empty otherwise
        config: Parsed configuration for rejected and matched candidates
    """

    candidate: Candidate
    status: str
    detail: str = ""
    config: Optional[Config] = None

    def __str__(self) -> str:
        """String representation."""
        text = f"{self.candidate.path}: {self.status.replace('_', ' ')}"
        if self.detail:
            text += f" ({self.detail})"
        return text


@dataclass
class SelectionReport:
    """Outcomes of every candidate tried during one selection call."""

    outcomes: List[CandidateOutcome] = field(default_factory=list)

    def add(self, outcome: CandidateOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def tried(self) -> int:
        return len(self.outcomes)

    def summary(self) -> str:
        """
        One-line summary of the outcomes.

        Example:
            '3 candidate(s) tried: 1 probe failure(s), 1 parse failure(s), 1 rejected'
        """
        if not self.outcomes:
            return "no candidates found"
        parts = []
        if self.count(PROBE_FAILED):
            parts.append(f"{self.count(PROBE_FAILED)} probe failure(s)")
        if self.count(PARSE_FAILED):
            parts.append(f"{self.count(PARSE_FAILED)} parse failure(s)")
        if self.count(REJECTED):
            parts.append(f"{self.count(REJECTED)} rejected")
        if self.count(MATCHED):
            parts.append(f"{self.count(MATCHED)} matched")
        return f"{self.tried} candidate(s) tried: {', '.join(parts)}"

    def details(self) -> str:
        """Multi-line listing of every outcome."""
        return "\n".join(str(outcome) for outcome in self.outcomes)


class _Cancellation:
    """Deadline and cancellation event for one selection call."""

    def __init__(
        self, deadline: Optional[float], cancel_event: Optional[threading.Event]
    ):
        self.expires_at = time.monotonic() + deadline if deadline is not None else None
        self.cancel_event = cancel_event

    def check(self, report: SelectionReport) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SelectionCancelledError("cancellation requested", report)
        if self.expires_at is not None and time.monotonic() >= self.expires_at:
            raise SelectionCancelledError("deadline exceeded", report)

    def clamp(self, timeout: Optional[float]) -> Optional[float]:
        """Limit a probe timeout to the time left before the deadline."""
        if self.expires_at is None:
            return timeout
        remaining = max(self.expires_at - time.monotonic(), 0.001)
        return remaining if timeout is None else min(timeout, remaining)


class Selector:
    """
    Coordinate discovery, probing and parsing of interpreter candidates.

    Candidates are handled strictly in search order. With max_workers > 1,
    up to max_workers candidates are probed ahead in background threads, but
    results are still consumed in search order, so the returned configurations
    are the same as with sequential probing.

    Example:
        >>> selector = Selector()
        >>> config = selector.find_matching(lambda c: c.version.major == 3)
        >>> print(config.include_dirs)
    """

    def __init__(
        self,
        locator: Optional[CandidateLocator] = None,
        prober: Optional[Prober] = None,
        max_workers: int = 1,
    ):
        """
        Initialize selector.

        Args:
            locator: Candidate source (defaults to scanning PATH)
            prober: Prober (defaults to SubprocessProber)
            max_workers: Number of candidates probed concurrently
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.locator = locator if locator is not None else CandidateLocator()
        self.prober = prober if prober is not None else SubprocessProber()
        self.max_workers = max_workers

    def find_matching(
        self,
        predicate: Predicate,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Config:
        """
        Return the first configuration, in search order, satisfying predicate.

        Remaining candidates are not probed once a match is found.

        Args:
            predicate: Called with each successfully parsed Config
            deadline: Seconds allowed for the whole call
            cancel_event: Event that cancels the call when set

        Returns:
            The matching Config

        Raises:
            NoMatchError: If no candidate matches; the report lists every candidate
            SelectionCancelledError: If the deadline passes or cancellation is requested
            DiscoveryError: If candidates cannot be enumerated
        """
        report = SelectionReport()
        results = self._iter_matches(predicate, report, deadline, cancel_event)
        try:
            config = next(results, None)
        finally:
            results.close()

        if config is None:
            logger.info(f"No interpreter matched: {report.summary()}")
            raise NoMatchError(report)

        logger.info(f"Selected {config}")
        return config

    def find_all_matching(
        self,
        predicate: Predicate,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[Config]:
        """
        Lazily yield every configuration satisfying predicate, in search order.

        Args:
            predicate: Called with each successfully parsed Config
            deadline: Seconds allowed for the whole iteration
            cancel_event: Event that stops the iteration when set

        Yields:
            Matching Config instances

        Raises:
            SelectionCancelledError: If the deadline passes or cancellation is requested
            DiscoveryError: If candidates cannot be enumerated
        """
        report = SelectionReport()
        yield from self._iter_matches(predicate, report, deadline, cancel_event)
        logger.debug(f"Selection finished: {report.summary()}")

    def _iter_matches(
        self,
        predicate: Predicate,
        report: SelectionReport,
        deadline: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> Iterator[Config]:
        """Yield matching configs, recording every candidate in report."""
        cancellation = _Cancellation(deadline, cancel_event)

        for candidate, result in self._probe_in_order(cancellation, report):
            if isinstance(result, ProbeError):
                logger.debug(f"Skipping {candidate.path}: {result}")
                report.add(CandidateOutcome(candidate, PROBE_FAILED, str(result)))
                continue

            try:
                config = parse(result)
            except ParseError as e:
                logger.debug(f"Skipping {candidate.path}: {e}")
                report.add(CandidateOutcome(candidate, PARSE_FAILED, str(e)))
                continue

            if predicate(config):
                logger.debug(f"{candidate.path} matched: {config}")
                report.add(CandidateOutcome(candidate, MATCHED, config=config))
                yield config
            else:
                logger.debug(f"{candidate.path} rejected by predicate: {config}")
                report.add(CandidateOutcome(candidate, REJECTED, config=config))

    def _probe_in_order(
        self, cancellation: _Cancellation, report: SelectionReport
    ) -> Iterator[Tuple[Candidate, Union[RawProbeOutput, ProbeError]]]:
        """Probe candidates, yielding results in search order."""
        candidates = self.locator.list_candidates()

        if self.max_workers == 1:
            for candidate in candidates:
                cancellation.check(report)
                yield candidate, self._probe_one(candidate, cancellation)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            pending: Deque[Tuple[Candidate, "Future"]] = deque()
            exhausted = False
            try:
                while True:
                    while not exhausted and len(pending) < self.max_workers:
                        candidate = next(candidates, None)
                        if candidate is None:
                            exhausted = True
                            break
                        future = executor.submit(self._probe_one, candidate, cancellation)
                        pending.append((candidate, future))
                    if not pending:
                        return
                    cancellation.check(report)
                    candidate, future = pending.popleft()
                    yield candidate, future.result()
            finally:
                for _, future in pending:
                    future.cancel()

    def _probe_one(
        self, candidate: Candidate, cancellation: _Cancellation
    ) -> Union[RawProbeOutput, ProbeError]:
        """Probe one candidate, returning the ProbeError instead of raising it."""
        try:
            return self.prober.probe(candidate, timeout=cancellation.clamp(None))
        except ProbeError as e:
            return e


# ============================================================================
# Predicates
# ============================================================================


def any_interpreter(config: Config) -> bool:
    """Predicate accepting every interpreter."""
    return True


def version_at_least(minimum: VersionLike) -> Predicate:
    """
    Predicate accepting interpreters whose version is at least minimum.

    Example:
        >>> find_interpreter_matching(version_at_least("3.8"))
    """
    minimum = coerce_version(minimum)
    return lambda config: config.version.at_least(
        minimum.major, minimum.minor, minimum.patch or 0
    )


def major_is(major: int) -> Predicate:
    """Predicate accepting interpreters with the given major version."""
    return lambda config: config.version.matches_major(major)


def implementation_is(name: str) -> Predicate:
    """Predicate accepting interpreters of an implementation, case-insensitively."""
    return lambda config: config.implementation.lower() == name.lower()


def all_of(*predicates: Predicate) -> Predicate:
    """Predicate accepting interpreters that satisfy every given predicate."""
    return lambda config: all(predicate(config) for predicate in predicates)


# ============================================================================
# Public entry points
# ============================================================================


def _build_selector(
    search_path=None,
    explicit=(),
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    max_workers: int = 1,
    prober: Optional[Prober] = None,
) -> Selector:
    locator = CandidateLocator(search_path=search_path, explicit=explicit)
    return Selector(
        locator=locator,
        prober=prober if prober is not None else SubprocessProber(timeout=timeout),
        max_workers=max_workers,
    )


def find_interpreter_matching(
    predicate: Predicate = any_interpreter,
    deadline: Optional[float] = None,
    **options,
) -> Config:
    """
    Find the first installed interpreter satisfying predicate.

    Args:
        predicate: Called with each successfully probed Config
        deadline: Seconds allowed for the whole search
        **options: search_path, explicit, timeout, max_workers, prober

    Returns:
        Config of the first matching interpreter in search order

    Raises:
        NoMatchError: If no interpreter matches
        SelectionCancelledError: If the deadline passes
        DiscoveryError: If the search path cannot be read

    Example:
        >>> config = find_interpreter_matching(lambda c: c.version.major == 3)
        >>> config.libraries
        ('python3.11', 'dl', 'm')
    """
    return _build_selector(**options).find_matching(predicate, deadline=deadline)


def list_interpreters(deadline: Optional[float] = None, **options) -> Iterator[Config]:
    """
    Lazily yield every discoverable, successfully probed interpreter.

    Args:
        deadline: Seconds allowed for the whole iteration
        **options: search_path, explicit, timeout, max_workers, prober

    Returns:
        Iterator of Config in search order
    """
    return _build_selector(**options).find_all_matching(any_interpreter, deadline=deadline)
