"""
Five Grids (Wuge) and Three Talents (Sancai) numerology.

## Overview

A Chinese name is reduced to three stroke counts (family, middle, last). From those the
five grids are derived by fixed arithmetic:

- **Heaven** (天格) = family + 1
- **Human** (人格) = family + middle
- **Earth** (地格) = middle + last
- **Total** (总格) = family + middle + last
- **Outer** (外格) = total - human + 1

Every grid number maps to one of the five elements through its last decimal digit, and the
Heaven/Human/Earth element triple is looked up in the Sancai rule table to obtain a fortune
level (大吉 / 中吉 / 吉 / 凶 / 大凶).

## Main entry point

`GridCalculator` wraps a loaded `NamingDataSet` and offers:

- `strokes_of()` with a deterministic code-point estimate when the dictionary misses
- `grids()` / `sancai()` / `evaluate_number()` / `number_categories()`
- `best_combinations()` which enumerates every (middle, last) stroke pair in the configured
  range and keeps the pairs whose grids and Sancai triple are all auspicious
- `check_name()` which scores a complete name and renders the explanation text

The calculator holds no mutable state and is safe to share between threads.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from qiming.naming_data import (
    BEST_NUM_SET,
    NUMBER_CATEGORIES,
    RESULT_UNKNOWN,
    SANCAI_JIXIANG,
    SANCAI_XIAOJI,
    SANCAI_XIONG,
    NumberFortune,
    SancaiLevel,
    WuxingElement,
)
from qiming.config import NamingConfig

if TYPE_CHECKING:
    from qiming.data_service import NamingDataSet


# ════════════════════════════════════════════════════════════════════════════════
# RESULT TYPES
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GridCalculation:
    """The five grid numbers of a name (tiange / renge / dige / zongge / waige)."""

    heaven: int
    human: int
    earth: int
    total: int
    outer: int

    @classmethod
    def from_strokes(cls, family_strokes: int, mid_strokes: int, last_strokes: int) -> "GridCalculation":
        total = family_strokes + mid_strokes + last_strokes
        human = family_strokes + mid_strokes
        return cls(
            heaven=family_strokes + 1,
            human=human,
            earth=mid_strokes + last_strokes,
            total=total,
            outer=total - human + 1,
        )

    @classmethod
    def empty(cls) -> "GridCalculation":
        return cls(heaven=0, human=0, earth=0, total=0, outer=0)

    def as_dict(self) -> Dict[str, int]:
        return {
            "heaven": self.heaven,
            "human": self.human,
            "earth": self.earth,
            "total": self.total,
            "outer": self.outer,
        }


@dataclass(frozen=True)
class SancaiResult:
    """Heaven/Human/Earth element triple with its rule-table verdict."""

    heaven_element: WuxingElement
    human_element: WuxingElement
    earth_element: WuxingElement
    level: SancaiLevel
    description: str
    result: Optional[str] = None  # raw rule text, None when the table has no entry

    @property
    def key(self) -> str:
        """Rule-table key, e.g. ``土-土-金``."""
        return sancai_key(self.heaven_element, self.human_element, self.earth_element)

    @property
    def combination(self) -> str:
        """Display form, e.g. ``土土金``."""
        return f"{self.heaven_element.symbol}{self.human_element.symbol}{self.earth_element.symbol}"

    @property
    def level_text(self) -> str:
        return self.level.value


@dataclass(frozen=True)
class StrokeCombination:
    mid: int
    last: int

    @property
    def given_strokes(self) -> int:
        return self.mid + self.last


@dataclass(frozen=True)
class NameValidation:
    """Numerology verdict for a full name."""

    is_valid: bool
    grids: GridCalculation
    sancai: Optional[SancaiResult]
    score: int
    issues: Tuple[str, ...]
    explanation: str


def sancai_key(heaven: WuxingElement, human: WuxingElement, earth: WuxingElement) -> str:
    return f"{heaven.symbol}-{human.symbol}-{earth.symbol}"


def evaluate_number(number: int) -> NumberFortune:
    """Classify a grid number against the three primary sets, in precedence order."""
    if number in SANCAI_JIXIANG:
        return NumberFortune.GREAT_LUCK
    if number in SANCAI_XIAOJI:
        return NumberFortune.SEMI_LUCKY
    if number in SANCAI_XIONG:
        return NumberFortune.UNLUCKY
    return NumberFortune.NEUTRAL


def number_categories(number: int) -> List[str]:
    """Descriptive category labels (吉祥运, 财富运, ...) that contain the number."""
    return [label for label, numbers in NUMBER_CATEGORIES if number in numbers]


def estimate_strokes(char: str) -> int:
    """
    Deterministic stroke estimate derived from the character's code point.

    CJK unified ideographs land in 5..19, anything else in 1..20. This is a degraded-mode
    fallback with no accuracy guarantee.
    """
    if not char:
        return 0
    code = ord(char[0])
    if 0x4E00 <= code <= 0x9FFF:
        return ((code - 0x4E00) % 15) + 5
    return (code % 20) + 1


# Per-grid (great luck bonus, semi-lucky bonus, unlucky penalty, label)
_GRID_SCORING: Tuple[Tuple[str, int, int, int, str], ...] = (
    ("heaven", 20, 15, 0, "天格"),
    ("human", 25, 20, 10, "人格"),
    ("earth", 25, 20, 10, "地格"),
    ("total", 20, 15, 5, "总格"),
    ("outer", 10, 8, 5, "外格"),
)

_SANCAI_LEVEL_BONUS = {
    SancaiLevel.GREAT_LUCK: 20,
    SancaiLevel.MEDIUM_LUCK: 15,
    SancaiLevel.LUCK: 10,
    SancaiLevel.UNLUCKY: -15,
}


# ════════════════════════════════════════════════════════════════════════════════
# GRID CALCULATOR
# ════════════════════════════════════════════════════════════════════════════════


class GridCalculator:
    """Stroke numerology over a loaded data set - pure with respect to its inputs."""

    def __init__(self, data: NamingDataSet, config: Optional[NamingConfig] = None):
        self._data = data
        self._config = config or NamingConfig.create_default()

    @property
    def data(self) -> NamingDataSet:
        return self._data

    @property
    def config(self) -> NamingConfig:
        return self._config

    def strokes_of(self, char: str, use_traditional: bool = False) -> int:
        """Stroke count from the dictionary, or a logged code-point estimate on a miss."""
        if not char:
            return 0
        strokes = self._data.strokes_of(char, use_traditional)
        if strokes is not None:
            return strokes
        estimate = estimate_strokes(char)
        logging.warning(f"No stroke data for '{char}', using estimate {estimate}")
        return estimate

    def family_strokes(self, family_name: str, use_traditional: bool = False) -> int:
        """Compound surnames count the strokes of every character."""
        return sum(self.strokes_of(c, use_traditional) for c in family_name)

    @staticmethod
    def grids(family_strokes: int, mid_strokes: int, last_strokes: int) -> GridCalculation:
        return GridCalculation.from_strokes(family_strokes, mid_strokes, last_strokes)

    def sancai(self, grids: GridCalculation) -> SancaiResult:
        heaven = WuxingElement.from_number(grids.heaven)
        human = WuxingElement.from_number(grids.human)
        earth = WuxingElement.from_number(grids.earth)

        rule = self._data.sancai_rule(sancai_key(heaven, human, earth))
        if rule is None:
            return SancaiResult(heaven, human, earth, SancaiLevel.UNKNOWN, RESULT_UNKNOWN, None)

        return SancaiResult(
            heaven,
            human,
            earth,
            SancaiLevel.from_result(rule.result),
            rule.description,
            rule.result,
        )

    evaluate_number = staticmethod(evaluate_number)
    number_categories = staticmethod(number_categories)

    def _is_selected(self, sancai: SancaiResult) -> bool:
        """Combination-search acceptance of a Sancai verdict."""
        if sancai.result is None or sancai.level is SancaiLevel.UNKNOWN:
            return False
        if "凶" in sancai.result:
            return False
        return sancai.result in self._config.selected_sancai

    def best_combinations(self, family_strokes: int) -> List[StrokeCombination]:
        """
        Enumerate (middle, last) stroke pairs and keep the auspicious ones.

        Middle strokes form the outer loop and last strokes the inner loop, both ascending
        over the inclusive configured range; the output preserves that order.

        Args:
            family_strokes: Stroke count of the family name (already summed for compound
                surnames, already traditional/simplified as the caller requires)

        Returns:
            Accepted combinations in canonical enumeration order
        """
        low = self._config.min_single_strokes
        high = self._config.max_single_strokes
        accepted: List[StrokeCombination] = []

        for mid in range(low, high + 1):
            for last in range(low, high + 1):
                grids = self.grids(family_strokes, mid, last)
                if not all(n in BEST_NUM_SET for n in (grids.human, grids.earth, grids.total, grids.outer)):
                    continue
                if not self._is_selected(self.sancai(grids)):
                    continue
                accepted.append(StrokeCombination(mid, last))

        logging.info(
            f"Stroke search for family strokes {family_strokes}: "
            f"{len(accepted)} of {(high - low + 1) ** 2} combinations accepted"
        )
        return accepted

    def best_combinations_for(self, family_name: str, use_traditional: bool = False) -> List[StrokeCombination]:
        return self.best_combinations(self.family_strokes(family_name, use_traditional))

    def score_grids(self, grids: GridCalculation, sancai: SancaiResult) -> Tuple[int, List[str]]:
        """Numerology score in [0, 100] plus the list of issues found."""
        score = 0
        issues: List[str] = []

        for attr, great, semi, penalty, label in _GRID_SCORING:
            value = getattr(grids, attr)
            fortune = evaluate_number(value)
            if fortune is NumberFortune.GREAT_LUCK:
                score += great
            elif fortune is NumberFortune.SEMI_LUCKY:
                score += semi
            elif fortune is NumberFortune.UNLUCKY:
                issues.append(f"{label}{value}为凶数")
                score -= penalty

        score += _SANCAI_LEVEL_BONUS.get(sancai.level, 0)
        if sancai.level is SancaiLevel.UNLUCKY:
            issues.append("三才配置不佳")

        return max(0, min(100, score)), issues

    def check_name(
        self, full_name: str, family_name: Optional[str] = None, use_traditional: bool = False
    ) -> NameValidation:
        """
        Validate a complete name (2-4 characters).

        The family name defaults to the first character; pass `family_name` for compound
        surnames. A missing last character counts as zero strokes.
        """
        if len(full_name) < 2 or len(full_name) > 4:
            return NameValidation(
                is_valid=False,
                grids=GridCalculation.empty(),
                sancai=None,
                score=0,
                issues=("名字长度必须是2-4个字符",),
                explanation="无效姓名",
            )

        if family_name and full_name.startswith(family_name) and len(full_name) > len(family_name):
            given = full_name[len(family_name) :]
        else:
            family_name, given = full_name[0], full_name[1:]

        mid_char = given[0]
        last_char = given[1] if len(given) > 1 else ""

        grids = self.grids(
            self.family_strokes(family_name, use_traditional),
            self.strokes_of(mid_char, use_traditional),
            self.strokes_of(last_char, use_traditional),
        )
        sancai = self.sancai(grids)
        score, issues = self.score_grids(grids, sancai)

        return NameValidation(
            is_valid=not issues and score >= 60,
            grids=grids,
            sancai=sancai,
            score=score,
            issues=tuple(issues),
            explanation=format_explanation(full_name, grids, sancai, use_traditional),
        )

    def batch_check(self, names: Iterable[str], use_traditional: bool = False) -> Dict[str, NameValidation]:
        return {name: self.check_name(name, use_traditional=use_traditional) for name in names}


def format_explanation(full_name: str, grids: GridCalculation, sancai: SancaiResult, use_traditional: bool) -> str:
    """
    Render the human-readable numerology explanation.

    Downstream consumers parse this text, so the layout is fixed::

        王小明-简体笔画计算：
        天格：5 【大吉】
        ...
        土土金 大吉 <description>
    """
    stroke_type = "繁体" if use_traditional else "简体"
    lines = [f"{full_name}-{stroke_type}笔画计算："]
    for label, value in (
        ("天格", grids.heaven),
        ("人格", grids.human),
        ("地格", grids.earth),
        ("总格", grids.total),
        ("外格", grids.outer),
    ):
        lines.append(f"{label}：{value} 【{evaluate_number(value).value}】")
    lines.append(f"{sancai.combination} {sancai.level_text} {sancai.description}")
    return "\n".join(lines)
