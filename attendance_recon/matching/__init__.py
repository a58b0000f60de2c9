"""Name reconciliation engine for matching mentees to call attendees.

This module provides:
- normalize/variations: name canonicalization and variation expansion
- similarity: rule-based name similarity scoring
- RuleCandidateSelector / EmbeddingCandidateSelector: candidate strategies
- LLMAdjudicator: oracle confirmation with validation and retry
- AttendanceReconciler: greedy one-to-one reconciliation loop
- Schemas for records, verdicts and results
"""

from attendance_recon.matching.adjudicator import Adjudicator, LLMAdjudicator
from attendance_recon.matching.candidate_selector import (
    CandidateSelector,
    RuleCandidateSelector,
)
from attendance_recon.matching.embeddings import EmbeddingCandidateSelector
from attendance_recon.matching.exceptions import (
    AdjudicationValidationError,
    ConfigurationError,
    InputDataError,
    ReconciliationError,
)
from attendance_recon.matching.normalizer import normalize, variations
from attendance_recon.matching.reconciler import AttendanceReconciler
from attendance_recon.matching.schemas import (
    Adjudication,
    AttendanceResult,
    AttendanceSummary,
    AttendeeRecord,
    CandidateMatch,
    MatchMeta,
    MatchSource,
    MenteeRecord,
    ReconciliationReport,
    RunState,
)
from attendance_recon.matching.similarity import similarity

__all__ = [
    "Adjudication",
    "AdjudicationValidationError",
    "Adjudicator",
    "AttendanceReconciler",
    "AttendanceResult",
    "AttendanceSummary",
    "AttendeeRecord",
    "CandidateMatch",
    "CandidateSelector",
    "ConfigurationError",
    "EmbeddingCandidateSelector",
    "InputDataError",
    "LLMAdjudicator",
    "MatchMeta",
    "MatchSource",
    "MenteeRecord",
    "ReconciliationError",
    "ReconciliationReport",
    "RuleCandidateSelector",
    "RunState",
    "normalize",
    "similarity",
    "variations",
]
