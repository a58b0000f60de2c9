"""AttendanceReconciler decides attendance for every mentee on a roster.

Per mentee, in roster order:
1. Candidate pool = attendee names not yet claimed in this run
2. Best candidate from the selector
3. Admission gate (score below threshold -> no match, no oracle call)
4. Oracle adjudication; a confirmed candidate is claimed for this run
5. Duration and present/absent status from the matched attendee

Assignment is greedy: earlier mentees get first pick, and a claimed
attendee is never offered again, so no attendee is matched twice.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from attendance_recon.config import settings
from attendance_recon.matching.adjudicator import Adjudicator
from attendance_recon.matching.candidate_selector import (
    CandidateSelector,
    RuleCandidateSelector,
)
from attendance_recon.matching.exceptions import ConfigurationError
from attendance_recon.matching.schemas import (
    AttendanceResult,
    AttendanceSummary,
    AttendeeRecord,
    MatchMeta,
    MatchSource,
    MenteeRecord,
    ReconciliationReport,
    RunState,
)

logger = structlog.get_logger()


class RosterSource(Protocol):
    """Supplies the mentee roster, fully materialized, in a stable order."""

    def load_mentees(self) -> list[MenteeRecord]: ...


class AttendanceSource(Protocol):
    """Supplies the session-call attendee records."""

    def load_attendees(self) -> list[AttendeeRecord]: ...


@dataclass
class ReconciliationRun:
    """State owned by a single reconciliation run.

    Created at run start and discarded with it. claimed_names holds
    every attendee name already assigned to a mentee.
    """

    state: RunState = RunState.IDLE
    claimed_names: set[str] = field(default_factory=set)
    results: list[AttendanceResult] = field(default_factory=list)

    def transition(self, state: RunState) -> None:
        logger.debug(
            "reconciliation state", from_state=self.state.value, to_state=state.value
        )
        self.state = state


def build_attendee_lookup(attendees: Sequence[AttendeeRecord]) -> dict[str, AttendeeRecord]:
    """Key attendees by display name.

    Later records overwrite earlier ones with the same name.
    """
    lookup: dict[str, AttendeeRecord] = {}
    for attendee in attendees:
        if attendee.name in lookup:
            logger.warning(
                "duplicate attendee name, keeping last record",
                attendee_name=attendee.name,
                dropped_minutes=lookup[attendee.name].duration_minutes,
                kept_minutes=attendee.duration_minutes,
            )
        lookup[attendee.name] = attendee
    return lookup


class AttendanceReconciler:
    """Orchestrates candidate selection, adjudication and status derivation."""

    def __init__(
        self,
        adjudicator: Adjudicator,
        selector: CandidateSelector | None = None,
        admission_threshold: float | None = None,
        presence_threshold_minutes: int | None = None,
    ):
        """Initialize reconciler with required components.

        Args:
            adjudicator: Oracle that confirms or denies candidate matches
            selector: Candidate selection strategy (default: rule-based)
            admission_threshold: Minimum candidate score before adjudication
            presence_threshold_minutes: Minutes required to count as present
        """
        self._adjudicator = adjudicator
        self._selector = selector or RuleCandidateSelector()
        self._admission_threshold = (
            settings.admission_threshold
            if admission_threshold is None
            else admission_threshold
        )
        self._presence_threshold = (
            settings.presence_threshold_minutes
            if presence_threshold_minutes is None
            else presence_threshold_minutes
        )

    async def run(
        self,
        roster_source: RosterSource,
        attendance_source: AttendanceSource,
    ) -> ReconciliationReport:
        """Load both sources and reconcile them.

        Raises:
            InputDataError: If either source holds malformed data
            ConfigurationError: If the adjudicator is not configured
        """
        run = ReconciliationRun()
        try:
            run.transition(RunState.LOADING_ROSTER)
            mentees = roster_source.load_mentees()
            run.transition(RunState.LOADING_ATTENDEES)
            attendees = attendance_source.load_attendees()
            return await self._reconcile(run, mentees, attendees)
        except Exception as e:
            self._fail(run, e)
            raise

    async def reconcile(
        self,
        mentees: Sequence[MenteeRecord],
        attendees: Sequence[AttendeeRecord],
    ) -> ReconciliationReport:
        """Reconcile already-loaded roster and attendance records.

        Raises:
            ConfigurationError: If the adjudicator is not configured
        """
        run = ReconciliationRun()
        try:
            return await self._reconcile(run, mentees, attendees)
        except Exception as e:
            self._fail(run, e)
            raise

    def _fail(self, run: ReconciliationRun, error: Exception) -> None:
        failed_in = run.state
        run.transition(RunState.FAILED)
        run.results.clear()
        logger.error(
            "reconciliation failed",
            state=failed_in.value,
            error=str(error),
            error_type=type(error).__name__,
        )

    async def _reconcile(
        self,
        run: ReconciliationRun,
        mentees: Sequence[MenteeRecord],
        attendees: Sequence[AttendeeRecord],
    ) -> ReconciliationReport:
        # Configuration errors must surface before any oracle call
        self._adjudicator.check_ready()

        lookup = build_attendee_lookup(attendees)

        run.transition(RunState.MATCHING)
        logger.info(
            "matching started", mentees=len(mentees), attendees=len(lookup)
        )
        for mentee in mentees:
            run.results.append(await self._match_mentee(run, mentee, lookup))

        run.transition(RunState.SUMMARIZING)
        summary = AttendanceSummary.from_results(run.results)

        run.transition(RunState.DONE)
        logger.info(
            "reconciliation complete",
            total=summary.total,
            present=summary.present,
            absent=summary.absent,
        )
        return ReconciliationReport(
            state=run.state, results=list(run.results), summary=summary
        )

    async def _match_mentee(
        self,
        run: ReconciliationRun,
        mentee: MenteeRecord,
        lookup: dict[str, AttendeeRecord],
    ) -> AttendanceResult:
        matched: AttendeeRecord | None = None
        meta = MatchMeta(source=MatchSource.NONE)

        try:
            pool = [name for name in lookup if name not in run.claimed_names]
            candidate = await self._selector.select(mentee.name, pool)

            if candidate is None or candidate.score < self._admission_threshold:
                logger.debug(
                    "candidate below admission gate",
                    mentee=mentee.name,
                    candidate=candidate.name if candidate else None,
                    score=candidate.score if candidate else None,
                )
            else:
                verdict = await self._adjudicator.adjudicate(
                    candidate.name, [mentee.name]
                )
                if verdict.best_match is not None:
                    run.claimed_names.add(candidate.name)
                    matched = lookup[candidate.name]
                    meta = MatchMeta(
                        source=MatchSource.AI,
                        score=candidate.score,
                        confidence=verdict.confidence,
                    )
        except ConfigurationError:
            raise
        except Exception as e:
            # A single adjudication fault never aborts the run
            logger.warning(
                "mentee matching failed", mentee=mentee.name, error=str(e)
            )

        duration = matched.duration_minutes if matched else 0
        return AttendanceResult(
            mentee=mentee,
            duration_minutes=duration,
            status=1 if duration >= self._presence_threshold else 0,
            matched_name=(
                matched.name if matched and matched.name != mentee.name else None
            ),
            match_meta=meta,
        )
