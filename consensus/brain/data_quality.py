"""consensus.brain.data_quality

A bad row shrinks the dataset. It never fails the call.

History reaches the engine from a caller we do not control. Malformed entries
are dropped here, in one place, so the rest of the engine can assume a clean
newest-first sequence of :class:`Observation`.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from consensus.core.types import FeatureSet, Observation, Outcome, ResolutionStatus


@dataclass(frozen=True, slots=True)
class NormalizedHistory:
    observations: list[Observation]
    dropped: int

    def __len__(self) -> int:
        return len(self.observations)


def _finite_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _outcome(v: Any) -> Outcome | None:
    if isinstance(v, Outcome):
        return v
    if isinstance(v, str):
        try:
            return Outcome(v.strip().upper())
        except ValueError:
            return None
    return None


def _status(v: Any) -> ResolutionStatus:
    if isinstance(v, ResolutionStatus):
        return v
    if isinstance(v, str):
        for s in ResolutionStatus:
            if s.value.lower() == v.strip().lower():
                return s
    return ResolutionStatus.PENDING


def _features(v: Any) -> FeatureSet | None:
    if isinstance(v, FeatureSet):
        return v
    if isinstance(v, Mapping):
        return FeatureSet.from_mapping(v)
    return None


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in row and row[k] is not None:
            return row[k]
    return None


def observation_from_mapping(row: Mapping[str, Any]) -> Observation | None:
    """Best-effort conversion of a loose record. Returns None when unusable."""

    number = _finite_float(_first(row, "number", "actual_number", "actualNumber", "actual"))
    if number is None:
        return None

    raw_outcome = _first(row, "outcome", "result_type", "resultType")
    outcome = _outcome(raw_outcome) if raw_outcome is not None else Outcome.from_number(number)
    if outcome is None:
        return None

    ts = row.get("timestamp")
    return Observation(
        period=str(_first(row, "period", "issue_number", "issueNumber") or ""),
        number=number,
        outcome=outcome,
        status=_status(row.get("status")),
        timestamp=ts if isinstance(ts, datetime) else None,
        prediction=_outcome(_first(row, "prediction", "last_predicted", "lastPredictedOutcome")),
        features=_features(_first(row, "features", "ml_features", "mlFeatures")),
    )


def _coerce(obs: Observation) -> Observation | None:
    """Re-type an Observation built by a caller that skipped our enums."""

    number = _finite_float(obs.number)
    if number is None:
        return None
    outcome = _outcome(obs.outcome) if obs.outcome is not None else Outcome.from_number(number)
    if outcome is None:
        return None

    return replace(
        obs,
        period=str(obs.period),
        number=number,
        outcome=outcome,
        status=_status(obs.status),
        timestamp=obs.timestamp if isinstance(obs.timestamp, datetime) else None,
        prediction=_outcome(obs.prediction),
        features=_features(obs.features),
    )


def normalize_history(history: Any) -> NormalizedHistory:
    """Filter caller history down to resolved observations, preserving order."""

    if not isinstance(history, Iterable) or isinstance(history, (str, bytes, Mapping)):
        return NormalizedHistory(observations=[], dropped=0)

    items: Sequence[Any] = list(history)
    out: list[Observation] = []
    for item in items:
        if isinstance(item, Observation):
            obs = _coerce(item)
        elif isinstance(item, Mapping):
            obs = observation_from_mapping(item)
        else:
            continue
        if obs is not None:
            out.append(obs)

    return NormalizedHistory(observations=out, dropped=len(items) - len(out))
