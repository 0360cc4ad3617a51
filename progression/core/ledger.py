"""
Competence Ledger.

Holds the learner's competence distribution as five slices that always sum
to 100:
- four competence magnitudes, each capped at 33
- an "unassigned" remainder (0-100) derived from the other four

Every operation returns a new ledger; the sum-to-100 invariant is restored
by the same pipeline on construction, so no instance can violate it.

Pipeline:
    1. clamp each magnitude to [0, 33] and round to ``round_to`` decimals
    2. if the four sum to <= 100, unassigned = 100 - sum
       otherwise rescale all four by 100 / sum and set unassigned = 0
    3. drift correction: push the rounding residual into unassigned, or
       into the largest slice when the residual reaches 0.05; a negative
       residual that unassigned cannot absorb goes to the largest competence
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from loguru import logger

from progression.core.competence import CompetenceKey

MAX_COMPETENCE = 33.0
LEDGER_TOTAL = 100.0
DRIFT_TOLERANCE = 0.05
DEFAULT_ROUND_TO = 1

UNASSIGNED_SLICE = "nessuna"

COMPETENCE_ORDER: tuple[CompetenceKey, ...] = tuple(CompetenceKey)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp to [low, high]; NaN collapses to ``low``."""
    if value is None or math.isnan(value):
        return low
    return max(low, min(high, value))


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round halves away from the floor (``2.25 -> 2.3``, ``-0.5 -> 0``)."""
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def _normalise(
    raw: tuple[float, ...], round_to: int
) -> tuple[tuple[float, ...], float]:
    """Run the clamp / rescale / drift-correction pipeline on four magnitudes."""

    def rnd(v: float) -> float:
        return round_half_up(v, round_to)

    magnitudes = [rnd(clamp(float(v), 0.0, MAX_COMPETENCE)) for v in raw]
    total = sum(magnitudes)

    if total <= LEDGER_TOTAL:
        unassigned = clamp(rnd(LEDGER_TOTAL - total), 0.0, LEDGER_TOTAL)
    else:
        factor = LEDGER_TOTAL / total
        magnitudes = [rnd(v * factor) for v in magnitudes]
        unassigned = 0.0

    # Drift correction
    diff = rnd(LEDGER_TOTAL - (sum(magnitudes) + unassigned))
    if abs(diff) < DRIFT_TOLERANCE:
        target = rnd(unassigned + diff)
        unassigned = clamp(target, 0.0, LEDGER_TOTAL)
        leftover = rnd(target - unassigned)
        if leftover != 0:
            # unassigned is already 0; the largest competence gives up the rest
            top = max(range(len(magnitudes)), key=lambda i: (magnitudes[i], -i))
            magnitudes[top] = rnd(clamp(magnitudes[top] + leftover, 0.0, MAX_COMPETENCE))
    elif diff != 0:
        slices = [*magnitudes, unassigned]
        top = max(range(len(slices)), key=lambda i: (slices[i], -i))
        if top == len(magnitudes):
            unassigned = clamp(rnd(unassigned + diff), 0.0, LEDGER_TOTAL)
        else:
            current = magnitudes[top]
            corrected = clamp(current + diff, 0.0, MAX_COMPETENCE)
            absorbed = corrected - current
            magnitudes[top] = rnd(corrected)
            residual = rnd(diff - absorbed)
            if residual != 0:
                unassigned = clamp(rnd(unassigned + residual), 0.0, LEDGER_TOTAL)
            logger.debug(
                f"Ledger drift {diff:+} absorbed by {COMPETENCE_ORDER[top].value} "
                f"(residual {residual:+})"
            )

    return tuple(magnitudes), unassigned


@dataclass(frozen=True)
class CompetenceLedger:
    """
    Immutable competence distribution.

    Attributes:
        magnitudes: One value per CompetenceKey, in declaration order (0-33)
        round_to: Decimal places kept for every slice
        unassigned: Derived remainder so that all five slices sum to 100
    """

    magnitudes: tuple[float, ...] = (0.0, 0.0, 0.0, 0.0)
    round_to: int = DEFAULT_ROUND_TO
    unassigned: float = field(default=LEDGER_TOTAL, init=False)

    def __post_init__(self):
        raw = tuple(self.magnitudes) + (0.0,) * (len(COMPETENCE_ORDER) - len(self.magnitudes))
        magnitudes, unassigned = _normalise(raw[: len(COMPETENCE_ORDER)], self.round_to)
        object.__setattr__(self, "magnitudes", magnitudes)
        object.__setattr__(self, "unassigned", unassigned)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_scores(
        cls,
        scores: Mapping[str, float] | None,
        round_to: int = DEFAULT_ROUND_TO,
    ) -> CompetenceLedger:
        """
        Restore a ledger from persisted magnitudes.

        Runs the same pipeline as ``set``; unknown keys are ignored and
        missing keys default to 0. The unassigned slice is recomputed.
        """
        values = dict.fromkeys(COMPETENCE_ORDER, 0.0)
        for name, value in (scores or {}).items():
            key = CompetenceKey.parse(name)
            if key is None:
                logger.debug(f"Ignoring unknown competence '{name}' in stored scores")
                continue
            values[key] = value or 0.0
        return cls(magnitudes=tuple(values[k] for k in COMPETENCE_ORDER), round_to=round_to)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def update(self, key: CompetenceKey | str, incoming_percent: float) -> CompetenceLedger:
        """
        Blend an exercise result (0-100) into a competence.

        The new magnitude is the average of the current one and the incoming
        percentage, capped at 33. Out-of-range input is clamped.
        """
        index = self._index(key)
        if index is None:
            return self
        incoming = clamp(incoming_percent, 0.0, LEDGER_TOTAL)
        blended = (self.magnitudes[index] + incoming) / 2
        return self._with_value(index, clamp(blended, 0.0, MAX_COMPETENCE))

    def set(self, key: CompetenceKey | str, percent: float) -> CompetenceLedger:
        """Assign a competence directly (clamped to 0-33), skipping the blend."""
        index = self._index(key)
        if index is None:
            return self
        return self._with_value(index, clamp(percent, 0.0, MAX_COMPETENCE))

    def reset(self) -> CompetenceLedger:
        return CompetenceLedger(round_to=self.round_to)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __getitem__(self, key: CompetenceKey | str) -> float:
        index = self._index(key)
        if index is None:
            raise KeyError(key)
        return self.magnitudes[index]

    def items(self) -> Iterator[tuple[CompetenceKey, float]]:
        return iter(zip(COMPETENCE_ORDER, self.magnitudes))

    @property
    def total(self) -> float:
        """Sum of all five slices (100 up to rounding)."""
        return sum(self.magnitudes) + self.unassigned

    @property
    def average(self) -> float:
        """Mean of the four competence magnitudes."""
        return sum(self.magnitudes) / len(self.magnitudes)

    def to_scores(self) -> dict[str, float]:
        """Persisted shape: competence key -> magnitude (unassigned is derived)."""
        return {key.value: value for key, value in self.items()}

    def as_slices(self) -> dict[str, float]:
        """All five slices, e.g. for a pie chart."""
        slices = self.to_scores()
        slices[UNASSIGNED_SLICE] = self.unassigned
        return slices

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _index(self, key: CompetenceKey | str) -> int | None:
        parsed = CompetenceKey.parse(key)
        if parsed is None:
            logger.debug(f"Unknown competence '{key}' - ledger unchanged")
            return None
        return COMPETENCE_ORDER.index(parsed)

    def _with_value(self, index: int, value: float) -> CompetenceLedger:
        magnitudes = list(self.magnitudes)
        magnitudes[index] = value
        return CompetenceLedger(magnitudes=tuple(magnitudes), round_to=self.round_to)
