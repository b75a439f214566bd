"""
Weighted aggregation of the five dimension scores.

Weights are rescaled so that they sum to 100 (each rounded independently, so the sum may
drift by a few points), then the weighted score is ``round(Σ score_i × weight_i / 100)``
clipped to [0, 100]. Rounding is half-up throughout.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Generic, List, Mapping, Optional, Sequence, TypeVar

import numpy as np

DIMENSIONS = ("sancai", "wuxing", "sound", "meaning", "social")

DIMENSION_NAMES = MappingProxyType(
    {
        "sancai": "三才五格",
        "wuxing": "五行平衡",
        "sound": "音韵美感",
        "meaning": "字义寓意",
        "social": "社会认可",
    }
)


@dataclass(frozen=True)
class WeightConfig:
    """Non-negative per-dimension weights; only their proportions matter."""

    sancai: float
    wuxing: float
    sound: float
    meaning: float
    social: float

    def as_array(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in DIMENSIONS], dtype=float)

    @property
    def total(self) -> float:
        return float(self.as_array().sum())

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "WeightConfig":
        return cls(*(int(v) for v in values))


DEFAULT_WEIGHTS = WeightConfig(sancai=25, wuxing=25, sound=20, meaning=20, social=10)


def round_half_up(value: float) -> int:
    """Round halves upward: 73.5 -> 74 and 72.5 -> 73 (builtin round() gives 72 for the latter)."""
    return int(math.floor(value + 0.5))


def clip_score(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ScoreComponents:
    """Per-dimension scores, each in [0, 100]."""

    sancai: float
    wuxing: float
    sound: float
    meaning: float
    social: float

    def as_array(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in DIMENSIONS], dtype=float)


@dataclass(frozen=True)
class ScoreBreakdown:
    score: float
    weighted: float  # contribution, rounded to 2 decimals


@dataclass(frozen=True)
class DetailedScore:
    total_score: int
    components: ScoreComponents
    weights: WeightConfig
    breakdown: Mapping[str, ScoreBreakdown]


T = TypeVar("T")


@dataclass(frozen=True)
class RankedCandidate(Generic[T]):
    item: T
    weighted_score: int


def normalize(weights: Optional[WeightConfig]) -> WeightConfig:
    """
    Rescale weights to sum to 100.

    A missing, zero-sum, negative or non-finite vector, or one whose sum overflows, yields
    DEFAULT_WEIGHTS. The result sums to 100 within ±5 because each weight is rounded on its own.
    """
    if weights is None:
        return DEFAULT_WEIGHTS
    values = weights.as_array()
    if not np.isfinite(values).all() or (values < 0).any():
        return DEFAULT_WEIGHTS
    with np.errstate(over="ignore"):
        total = values.sum()
        if total == 0 or not np.isfinite(total):
            return DEFAULT_WEIGHTS
        scaled = values * 100 / total
    if not np.isfinite(scaled).all():
        scaled = values / total * 100
    return WeightConfig.from_array(np.floor(scaled + 0.5))


def weighted_score(components: ScoreComponents, weights: Optional[WeightConfig] = None) -> int:
    effective = normalize(weights)
    value = float(components.as_array() @ effective.as_array()) / 100
    return max(0, min(100, round_half_up(value)))


def detailed_score(components: ScoreComponents, weights: Optional[WeightConfig] = None) -> DetailedScore:
    effective = normalize(weights)
    contributions = np.floor(components.as_array() * effective.as_array() + 0.5) / 100

    breakdown = {
        name: ScoreBreakdown(score=getattr(components, name), weighted=float(contribution))
        for name, contribution in zip(DIMENSIONS, contributions)
    }
    total = round_half_up(float(contributions.sum()))
    return DetailedScore(
        total_score=max(0, min(100, total)),
        components=components,
        weights=effective,
        breakdown=MappingProxyType(breakdown),
    )


def rank(
    candidates: Sequence[T],
    weights: Optional[WeightConfig] = None,
    components_of: Callable[[T], ScoreComponents] = lambda c: c.components,
) -> List[RankedCandidate[T]]:
    """
    Sort candidates by weighted score, highest first.

    Ties keep the input order (stable sort).
    """
    if not candidates:
        return []
    effective = normalize(weights).as_array()
    matrix = np.vstack([components_of(c).as_array() for c in candidates])
    scores = np.clip(np.floor(matrix @ effective / 100 + 0.5), 0, 100).astype(int)
    order = np.argsort(-scores, kind="stable")
    return [RankedCandidate(candidates[i], int(scores[i])) for i in order]


def score_level(score: float) -> str:
    if score >= 90:
        return "优秀"
    if score >= 80:
        return "良好"
    if score >= 70:
        return "一般"
    if score >= 60:
        return "及格"
    return "需要改进"


def score_explanation(detailed: DetailedScore) -> str:
    """Multi-line summary; the largest contribution is starred."""
    lines = [f"总评分：{detailed.total_score}分 ({score_level(detailed.total_score)})"]
    top = max(b.weighted for b in detailed.breakdown.values())
    for name in DIMENSIONS:
        item = detailed.breakdown[name]
        weight = getattr(detailed.weights, name)
        star = " ⭐" if item.weighted == top else ""
        lines.append(f"{DIMENSION_NAMES[name]}：{item.score:g}分 × {weight:g}% = {item.weighted:.1f}分{star}")
    return "\n".join(lines)
