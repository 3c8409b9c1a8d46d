"""Proof-date freshness window shared by issuance and verification."""

from __future__ import annotations

from .codec import timestamp_to_date, yyyymmdd_to_date
from .config import RegistryConfig
from .exceptions import ProofDateFromFuture, ProofDateTooOld


def check_proof_date(proof_date: int, now: int, config: RegistryConfig) -> None:
    """
    Accept ``proof_date`` iff it lies in
    ``[today - past_days, today + future_days]`` (UTC days, both ends
    inclusive).

    Raises:
        MalformedInput: If ``proof_date`` is not a calendar date
        ProofDateFromFuture: If the date is past the future edge
        ProofDateTooOld: If the date is before the past edge
    """
    offset = (yyyymmdd_to_date(proof_date) - timestamp_to_date(now)).days
    if offset > config.proof_date_future_days:
        raise ProofDateFromFuture(
            f"proof dated {offset} day(s) ahead (max {config.proof_date_future_days})"
        )
    if -offset > config.proof_date_past_days:
        raise ProofDateTooOld(
            f"proof dated {-offset} day(s) ago (max {config.proof_date_past_days})"
        )
