"""Pytest configuration and fixtures."""

from collections.abc import Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from attendance_recon.matching.adjudicator import LLMAdjudicator
from attendance_recon.matching.schemas import Adjudication, MatchType


@pytest.fixture
def roster_csv() -> str:
    """Roster export with program-tagged and nicknamed mentees."""
    return (
        "Nama,Program,Mentor\n"
        "Klaudio_AI,AI,Rina\n"
        "Fauzan Dwi Nugroho,Web,Rina\n"
        "Bela Putri Carolian (Bella),AI,Andi\n"
    )


@pytest.fixture
def zoom_csv() -> str:
    """Zoom participants export for the same session."""
    return (
        "Nama (nama asli),Email,Total durasi (menit),Tamu\n"
        "Klaudio P.H,,45,Ya\n"
        "Indri Dwi Lestari,indri@example.com,60,Tidak\n"
        "Bella,,12,Ya\n"
    )


def confirm_only_shared_tokens(
    zoom_name: str, candidates: Sequence[str]
) -> Adjudication:
    """Oracle stand-in: confirms unless the names only share 'Dwi'."""
    if "Dwi" in zoom_name and "Dwi" in candidates[0]:
        return Adjudication(
            zoom_name=zoom_name, best_match=None, confidence=0.1, reason="common word"
        )
    return Adjudication(
        zoom_name=zoom_name,
        best_match=candidates[0],
        confidence=0.9,
        reason="same person",
        match_type=MatchType.NICKNAME,
    )


@pytest.fixture
def mock_adjudicator() -> MagicMock:
    """Mock adjudicator with oracle-like verdicts and a configured credential."""
    adjudicator = MagicMock(spec=LLMAdjudicator)
    adjudicator.adjudicate = AsyncMock(side_effect=confirm_only_shared_tokens)
    adjudicator.check_ready = MagicMock()
    return adjudicator
