"""
The five independent name scorers.

Each scorer maps a name (or its two given-name characters) to a score in [0, 100] and
returns a frozen result carrying the score together with its analysis and advice strings:

- **SancaiScorer**: Five Grids / Three Talents numerology (delegates to GridCalculator)
- **WuxingScorer**: element production/destruction chain plus preference match
- **PhoneticScorer**: tone and initial-consonant harmony from pinyin
- **MeaningScorer**: keyword positivity, cultural depth and corpus commonness
- **SocialScorer**: commonness, era modernity, uniqueness and popularity trend

Scorers only read from the injected data set and pinyin service.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from qiming.data_service import NamingDataSet, PinyinInfo, PinyinService
from qiming.errors import UnsupportedNameLength
from qiming.naming_data import (
    CLASSICAL_PARTICLES,
    CULTURAL_KEYWORDS,
    CULTURAL_REFERENCES,
    DEFAULT_WUXING,
    ERA_CLASSICAL,
    ERA_MODERN,
    ERA_NEUTRAL,
    ERA_OUTDATED,
    ERA_SENSITIVE,
    HIGH_DUPLICATION,
    LOW_DUPLICATION,
    MEANING_FREQUENCY_STEPS,
    MEDIUM_DUPLICATION,
    NEGATIVE_KEYWORD_GROUPS,
    OVERUSED_CHARACTERS,
    POSITIVE_KEYWORD_GROUPS,
    SOCIAL_FREQUENCY_STEPS,
    UNIQUE_CHARACTERS,
    WUXING_DESTRUCTION,
    WUXING_PRODUCTION,
    WuxingElement,
)
from qiming.numerology import GridCalculator, NameValidation, estimate_strokes
from qiming.weighting import clip_score, round_half_up

_MEANING_SPLIT_PATTERN = re.compile(r"[，。；、]")


def _step_score(value: int, steps: Sequence[Tuple[int, int]], floor_score: int) -> int:
    for minimum, score in steps:
        if value >= minimum:
            return score
    return floor_score


# ════════════════════════════════════════════════════════════════════════════════
# SANCAI (NUMEROLOGY)
# ════════════════════════════════════════════════════════════════════════════════


class SancaiScorer:
    """Numerology score of a full name; see `GridCalculator.score_grids` for the rules."""

    def __init__(self, calculator: GridCalculator):
        self._calculator = calculator

    def score(self, full_name: str, family_name: Optional[str] = None, use_traditional: bool = False) -> int:
        return self.validate(full_name, family_name, use_traditional).score

    def validate(
        self, full_name: str, family_name: Optional[str] = None, use_traditional: bool = False
    ) -> NameValidation:
        return self._calculator.check_name(full_name, family_name, use_traditional)


# ════════════════════════════════════════════════════════════════════════════════
# WUXING (FIVE ELEMENTS)
# ════════════════════════════════════════════════════════════════════════════════


class ElementRelation(Enum):
    PRODUCTION = "sheng"
    DESTRUCTION = "ke"
    NEUTRAL = "neutral"

    @property
    def label(self) -> str:
        return {"sheng": "相生", "ke": "相克", "neutral": "平和"}[self.value]


def element_relation(source: WuxingElement, target: WuxingElement) -> ElementRelation:
    pair = (source.symbol, target.symbol)
    if pair in WUXING_PRODUCTION:
        return ElementRelation.PRODUCTION
    if pair in WUXING_DESTRUCTION:
        return ElementRelation.DESTRUCTION
    return ElementRelation.NEUTRAL


@dataclass(frozen=True)
class WuxingAnalysis:
    family_element: WuxingElement
    mid_element: WuxingElement
    last_element: WuxingElement
    harmony: int
    interaction: ElementRelation
    explanation: str


@dataclass(frozen=True)
class WuxingScoreResult:
    score: int
    analysis: WuxingAnalysis
    preference_match: int
    suggestions: Tuple[str, ...]


class WuxingScorer:
    """Element harmony along family → middle → last, blended 70/30 with the preference match."""

    HARMONY_BASE = 60
    PRODUCTION_BONUS = 20
    DESTRUCTION_PENALTY = 15
    FULL_CHAIN_BONUS = 10
    NO_PREFERENCE_MATCH = 80

    def __init__(self, data: NamingDataSet):
        self._data = data

    def element_of(self, char: str) -> WuxingElement:
        element = self._data.element_of(char)
        if element is None:
            logging.warning(f"No element data for '{char}', defaulting to {DEFAULT_WUXING}")
            return WuxingElement(DEFAULT_WUXING)
        return element

    def score(
        self, family_name: str, given_name: str, preferences: Optional[Iterable[WuxingElement]] = None
    ) -> WuxingScoreResult:
        """
        Score a two-character given name.

        Raises:
            UnsupportedNameLength: the given name is not exactly two characters
        """
        if len(given_name) != 2:
            raise UnsupportedNameLength(given_name)

        # Compound surnames: the character adjacent to the given name carries the element
        family_element = self.element_of(family_name[-1]) if family_name else WuxingElement(DEFAULT_WUXING)
        mid_element = self.element_of(given_name[0])
        last_element = self.element_of(given_name[1])

        analysis = self.analyze(family_element, mid_element, last_element)
        preference_match = self.preference_match([mid_element, last_element], list(preferences or []))
        final = clip_score(round_half_up(analysis.harmony * 0.7 + preference_match * 0.3))

        return WuxingScoreResult(
            score=int(final),
            analysis=analysis,
            preference_match=preference_match,
            suggestions=tuple(self._suggestions(analysis, preference_match)),
        )

    def analyze(
        self, family_element: WuxingElement, mid_element: WuxingElement, last_element: WuxingElement
    ) -> WuxingAnalysis:
        family_mid = element_relation(family_element, mid_element)
        mid_last = element_relation(mid_element, last_element)

        harmony = self.HARMONY_BASE
        interaction = ElementRelation.NEUTRAL
        if ElementRelation.PRODUCTION in (family_mid, mid_last):
            harmony += self.PRODUCTION_BONUS
            interaction = ElementRelation.PRODUCTION
        elif ElementRelation.DESTRUCTION in (family_mid, mid_last):
            harmony -= self.DESTRUCTION_PENALTY
            interaction = ElementRelation.DESTRUCTION

        if family_mid is ElementRelation.PRODUCTION and mid_last is ElementRelation.PRODUCTION:
            harmony += self.FULL_CHAIN_BONUS

        return WuxingAnalysis(
            family_element=family_element,
            mid_element=mid_element,
            last_element=last_element,
            harmony=int(clip_score(harmony)),
            interaction=interaction,
            explanation=self._explain(family_element, mid_element, last_element, family_mid, mid_last),
        )

    def preference_match(self, name_elements: Sequence[WuxingElement], preferences: Sequence[WuxingElement]) -> int:
        """Percentage of the name's elements found in the preferences, capped at 100."""
        if not preferences:
            return self.NO_PREFERENCE_MATCH
        matches = sum(1 for element in name_elements if element in preferences)
        ratio = matches / min(len(name_elements), len(preferences))
        return min(100, round_half_up(ratio * 100))

    @staticmethod
    def _explain(
        family_element: WuxingElement,
        mid_element: WuxingElement,
        last_element: WuxingElement,
        family_mid: ElementRelation,
        mid_last: ElementRelation,
    ) -> str:
        text = f"姓氏五行为{family_element.symbol}，名字五行配置为{mid_element.symbol}{last_element.symbol}。"
        if family_mid is not ElementRelation.NEUTRAL:
            text += f"姓与名首字{family_mid.label}，"
        if mid_last is not ElementRelation.NEUTRAL:
            text += f"名字内部{mid_last.label}。"

        if family_mid is ElementRelation.PRODUCTION and mid_last is ElementRelation.PRODUCTION:
            text += "整体形成相生链，五行配置极佳。"
        elif ElementRelation.DESTRUCTION in (family_mid, mid_last):
            text += "存在相克关系，建议调整。"
        else:
            text += "五行配置平和稳定。"
        return text

    @staticmethod
    def _suggestions(analysis: WuxingAnalysis, preference_match: int) -> List[str]:
        suggestions = []
        if analysis.interaction is ElementRelation.DESTRUCTION:
            suggestions.append("存在五行相克，建议选择能够化解的五行属性字符")
        if analysis.harmony < 70:
            suggestions.append("五行配置不够和谐，建议重新选择五行属性更匹配的字符")
        if preference_match < 50:
            suggestions.append("名字五行与您的偏好匹配度较低，建议调整")
        if analysis.interaction is ElementRelation.PRODUCTION:
            suggestions.append("五行相生配置良好，有利于运势发展")
        return suggestions or ["五行配置整体良好，无需特别调整"]


# ════════════════════════════════════════════════════════════════════════════════
# PHONETICS
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PhoneticScoreResult:
    score: int
    analysis: Tuple[PinyinInfo, ...]
    tone_pattern: str
    suggestions: Tuple[str, ...]


class PhoneticScorer:
    """Tone and initial-consonant harmony over every character of the full name."""

    def __init__(self, pinyin: PinyinService):
        self._pinyin = pinyin

    def score(self, family_name: str, given_name: str) -> PhoneticScoreResult:
        analysis = tuple(
            info for info in (self._pinyin.analyze(c) for c in family_name + given_name) if info.pinyin
        )
        if len(analysis) < 2:
            return PhoneticScoreResult(0, analysis, "", ("无法分析音律",))

        harmony = self.harmony(analysis)
        suggestions = []
        if harmony < 70:
            suggestions.append("建议调整名字的声调搭配")
        if self._has_repeated_initials(analysis):
            suggestions.append("避免声母重复，影响发音流畅度")
        if self._has_all_same_tone(analysis):
            suggestions.append("避免所有字使用相同声调")

        return PhoneticScoreResult(
            score=harmony,
            analysis=analysis,
            tone_pattern="".join(str(info.tone) for info in analysis),
            suggestions=tuple(suggestions),
        )

    def harmony(self, analysis: Sequence[PinyinInfo]) -> int:
        score = 100
        tones = [info.tone for info in analysis]

        if self._has_all_same_tone(analysis):
            score -= 20
        for previous, current in zip(tones, tones[1:]):
            if previous == current:
                score -= 10
        if self._has_repeated_initials(analysis):
            score -= 15
        if self._has_good_pingze_pattern([info.is_ping for info in analysis]):
            score += 10

        return int(clip_score(score))

    @staticmethod
    def _has_all_same_tone(analysis: Sequence[PinyinInfo]) -> bool:
        return len(analysis) > 1 and len({info.tone for info in analysis}) == 1

    @staticmethod
    def _has_repeated_initials(analysis: Sequence[PinyinInfo]) -> bool:
        initials = [info.initial for info in analysis if info.initial]
        return len(set(initials)) < len(initials)

    @staticmethod
    def _has_good_pingze_pattern(pattern: Sequence[bool]) -> bool:
        if len(pattern) == 2:
            return pattern[0] != pattern[1]
        if len(pattern) == 3:
            return pattern[0] != pattern[1] and pattern[1] != pattern[2]
        return False


# ════════════════════════════════════════════════════════════════════════════════
# MEANING
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CharacterMeaning:
    char: str
    meanings: Tuple[str, ...]
    positivity: int
    cultural_depth: int
    commonness: int


@dataclass(frozen=True)
class MeaningAnalysis:
    first: CharacterMeaning
    second: CharacterMeaning
    combination_harmony: int
    combination_meaning: str
    cultural_references: Tuple[str, ...]


@dataclass(frozen=True)
class MeaningScoreResult:
    score: int
    analysis: MeaningAnalysis
    strengths: Tuple[str, ...]
    suggestions: Tuple[str, ...]


class MeaningScorer:
    """Weighted blend: 40% positivity, 30% pair harmony, 20% cultural depth, 10% commonness."""

    def __init__(self, data: NamingDataSet):
        self._data = data

    def score(self, first: str, second: str) -> MeaningScoreResult:
        first_meaning = self.analyze_character(first)
        second_meaning = self.analyze_character(second)
        combination = first + second

        analysis = MeaningAnalysis(
            first=first_meaning,
            second=second_meaning,
            combination_harmony=self.combination_harmony(first_meaning, second_meaning),
            combination_meaning=CULTURAL_REFERENCES.get(combination, f"{combination}寓意美好，象征积极向上的品质"),
            cultural_references=tuple(self.cultural_references(combination)),
        )

        avg_positivity = (first_meaning.positivity + second_meaning.positivity) / 2
        avg_cultural = (first_meaning.cultural_depth + second_meaning.cultural_depth) / 2
        avg_commonness = (first_meaning.commonness + second_meaning.commonness) / 2
        total = (
            avg_positivity * 0.4 + analysis.combination_harmony * 0.3 + avg_cultural * 0.2 + avg_commonness * 0.1
        )

        return MeaningScoreResult(
            score=int(clip_score(round_half_up(total))),
            analysis=analysis,
            strengths=tuple(self._strengths(analysis)),
            suggestions=tuple(self._suggestions(analysis)),
        )

    def analyze_character(self, char: str) -> CharacterMeaning:
        explanation = self._data.explanation_of(char)
        if explanation is None:
            return CharacterMeaning(
                char=char,
                meanings=(f"{char}字的含义",),
                positivity=self.basic_positivity(char),
                cultural_depth=50,
                commonness=60,
            )

        meanings = self.extract_meanings(explanation)
        return CharacterMeaning(
            char=char,
            meanings=tuple(meanings),
            positivity=self.positivity(char, meanings),
            cultural_depth=self.cultural_depth(char, meanings),
            commonness=_step_score(self._data.frequency_of(char), MEANING_FREQUENCY_STEPS, 40),
        )

    @staticmethod
    def extract_meanings(explanation: str) -> List[str]:
        parts = [p for p in _MEANING_SPLIT_PATTERN.split(explanation) if 0 < len(p) < 20][:3]
        return parts or ["含义说明"]

    @staticmethod
    def positivity(char: str, meanings: Sequence[str]) -> int:
        """70 base, +15 per positive keyword group hit, -20 per negative group hit."""

        def hits(group: Sequence[str]) -> bool:
            return any(keyword in char or any(keyword in m for m in meanings) for keyword in group)

        score = 70
        score += 15 * sum(1 for group in POSITIVE_KEYWORD_GROUPS if hits(group))
        score -= 20 * sum(1 for group in NEGATIVE_KEYWORD_GROUPS if hits(group))
        return int(clip_score(score))

    @staticmethod
    def basic_positivity(char: str) -> int:
        """Positivity without dictionary data: at most one bonus and one penalty."""
        score = 70
        if any(char in group for group in POSITIVE_KEYWORD_GROUPS):
            score += 15
        if any(char in group for group in NEGATIVE_KEYWORD_GROUPS):
            score -= 20
        return int(clip_score(score))

    @staticmethod
    def cultural_depth(char: str, meanings: Sequence[str]) -> int:
        depth = 50
        if any(keyword in m for keyword in CULTURAL_KEYWORDS for m in meanings):
            depth += 20
        if char in CLASSICAL_PARTICLES:
            depth += 15
        return int(clip_score(depth))

    @staticmethod
    def combination_harmony(first: CharacterMeaning, second: CharacterMeaning) -> int:
        harmony = 75
        diff = abs(first.positivity - second.positivity)
        if diff > 30:
            harmony -= 15
        elif diff < 10:
            harmony += 10
        if first.positivity >= 80 and second.positivity >= 80:
            harmony += 15
        if first.cultural_depth >= 70 and second.cultural_depth >= 70:
            harmony += 10
        return int(clip_score(harmony))

    @staticmethod
    def cultural_references(combination: str) -> List[str]:
        """Exact match first, then references sharing a character; at most two."""
        references = []
        exact = CULTURAL_REFERENCES.get(combination)
        if exact:
            references.append(exact)
        for key, value in CULTURAL_REFERENCES.items():
            if any(c in key for c in combination[:2]) and value not in references:
                references.append(value)
        return references[:2]

    @staticmethod
    def _strengths(analysis: MeaningAnalysis) -> List[str]:
        first, second = analysis.first, analysis.second
        strengths = []
        if first.positivity >= 80 or second.positivity >= 80:
            strengths.append("字义积极正面，寓意美好")
        if analysis.combination_harmony >= 85:
            strengths.append("字义组合和谐，相得益彰")
        if first.cultural_depth >= 70 or second.cultural_depth >= 70:
            strengths.append("具有深厚的文化内涵")
        if analysis.cultural_references:
            strengths.append("有经典文化典故支撑")
        return strengths or ["字义表达清晰，含义明确"]

    @staticmethod
    def _suggestions(analysis: MeaningAnalysis) -> List[str]:
        first, second = analysis.first, analysis.second
        suggestions = []
        if first.positivity < 60 or second.positivity < 60:
            suggestions.append("建议选择寓意更积极的字符")
        if analysis.combination_harmony < 70:
            suggestions.append("建议调整字符组合，提升整体和谐度")
        if first.cultural_depth < 50 and second.cultural_depth < 50:
            suggestions.append("可以考虑选择文化内涵更深的字符")
        return suggestions or ["字义寓意良好，可以考虑保持当前选择"]


# ════════════════════════════════════════════════════════════════════════════════
# SOCIAL ACCEPTANCE
# ════════════════════════════════════════════════════════════════════════════════


class PopularityTrend(Enum):
    RISING = "rising"
    STABLE = "stable"
    DECLINING = "declining"


@dataclass(frozen=True)
class CharacterSocialData:
    char: str
    frequency: int
    commonness: int
    modernity: int
    uniqueness: float


@dataclass(frozen=True)
class SocialAnalysis:
    first: CharacterSocialData
    second: CharacterSocialData
    overall_commonness: float
    timeliness: float
    uniqueness: float
    trend: PopularityTrend


@dataclass(frozen=True)
class SocialScoreResult:
    score: int
    analysis: SocialAnalysis
    advantages: Tuple[str, ...]
    concerns: Tuple[str, ...]
    recommendations: Tuple[str, ...]


class SocialScorer:
    """Weighted blend: 40% commonness, 30% era modernity, 30% uniqueness, adjusted by trend."""

    TREND_ADJUSTMENT = {PopularityTrend.RISING: 5, PopularityTrend.STABLE: 0, PopularityTrend.DECLINING: -10}

    def __init__(self, data: NamingDataSet):
        self._data = data

    def score(self, first: str, second: str) -> SocialScoreResult:
        first_social = self.analyze_character(first)
        second_social = self.analyze_character(second)

        timeliness = (first_social.modernity + second_social.modernity) / 2
        analysis = SocialAnalysis(
            first=first_social,
            second=second_social,
            overall_commonness=(first_social.commonness + second_social.commonness) / 2,
            timeliness=timeliness,
            uniqueness=(first_social.uniqueness + second_social.uniqueness) / 2,
            trend=self.popularity_trend(first + second, timeliness),
        )

        total = analysis.overall_commonness * 0.4 + analysis.timeliness * 0.3 + analysis.uniqueness * 0.3
        total += self.TREND_ADJUSTMENT[analysis.trend]

        return SocialScoreResult(
            score=int(clip_score(round_half_up(total))),
            analysis=analysis,
            advantages=tuple(self._advantages(analysis)),
            concerns=tuple(self._concerns(analysis)),
            recommendations=tuple(self._recommendations(analysis)),
        )

    def analyze_character(self, char: str) -> CharacterSocialData:
        frequency = self._data.frequency_of(char)
        if char in self._data.records:
            commonness = self.commonness(frequency)
        else:
            commonness = self.estimate_basic_commonness(char)
        return CharacterSocialData(
            char=char,
            frequency=frequency,
            commonness=commonness,
            modernity=self.modernity(char),
            uniqueness=self.uniqueness(char),
        )

    @staticmethod
    def commonness(frequency: int) -> int:
        return _step_score(frequency, SOCIAL_FREQUENCY_STEPS, 40)

    def _complexity(self, char: str) -> int:
        strokes = self._data.strokes_of(char)
        return strokes if strokes is not None else estimate_strokes(char)

    def estimate_basic_commonness(self, char: str) -> int:
        """Commonness guess from era lists and stroke complexity, clamped to [20, 95]."""
        commonness = 50
        if char in ERA_CLASSICAL or char in ERA_MODERN or char in ERA_NEUTRAL:
            commonness += 20
        complexity = self._complexity(char)
        if complexity <= 8:
            commonness += 10
        elif complexity >= 15:
            commonness -= 15
        return int(clip_score(commonness, 20, 95))

    @staticmethod
    def modernity(char: str) -> int:
        modernity = 60
        if char in ERA_MODERN:
            modernity += 25
        elif char in ERA_CLASSICAL:
            modernity += 15
        elif char in ERA_NEUTRAL:
            modernity += 10
        elif char in ERA_OUTDATED:
            modernity -= 20
        if char in ERA_SENSITIVE:
            modernity -= 10
        return int(clip_score(modernity))

    def uniqueness(self, char: str) -> float:
        uniqueness = 100 - self.estimate_basic_commonness(char) * 0.6
        if char in UNIQUE_CHARACTERS:
            uniqueness += 15
        if char in OVERUSED_CHARACTERS:
            uniqueness -= 20
        return clip_score(uniqueness, 10, 100)

    @staticmethod
    def popularity_trend(combination: str, timeliness: float) -> PopularityTrend:
        if combination in HIGH_DUPLICATION:
            return PopularityTrend.DECLINING
        if combination in MEDIUM_DUPLICATION:
            return PopularityTrend.STABLE
        if timeliness >= 80:
            return PopularityTrend.RISING
        if timeliness >= 60:
            return PopularityTrend.STABLE
        return PopularityTrend.DECLINING

    @staticmethod
    def check_duplication_level(combination: str) -> str:
        if combination in HIGH_DUPLICATION:
            return "high"
        if combination in MEDIUM_DUPLICATION:
            return "medium"
        if combination in LOW_DUPLICATION:
            return "low"
        return "unknown"

    @staticmethod
    def _advantages(analysis: SocialAnalysis) -> List[str]:
        advantages = []
        if analysis.overall_commonness >= 80:
            advantages.append("字符常用度高，社会接受度好")
        if analysis.timeliness >= 80:
            advantages.append("具有现代感，符合当代审美")
        if analysis.uniqueness >= 75:
            advantages.append("独特性适中，不会过于大众化")
        if analysis.trend is PopularityTrend.RISING:
            advantages.append("符合流行趋势，具有时代特色")
        elif analysis.trend is PopularityTrend.STABLE:
            advantages.append("经典稳定，不受流行波动影响")
        return advantages or ["名字选择平稳，社会认可度适中"]

    @staticmethod
    def _concerns(analysis: SocialAnalysis) -> List[str]:
        concerns = []
        if analysis.overall_commonness < 50:
            concerns.append("字符可能过于生僻，影响日常使用")
        if analysis.timeliness < 50:
            concerns.append("可能带有过时感，缺乏现代气息")
        if analysis.uniqueness < 40:
            concerns.append("重名率可能较高，缺乏个性特色")
        if analysis.trend is PopularityTrend.DECLINING:
            concerns.append("流行趋势下降，可能不够时尚")
        return concerns

    @staticmethod
    def _recommendations(analysis: SocialAnalysis) -> List[str]:
        recommendations = []
        if analysis.overall_commonness < 60:
            recommendations.append("考虑选择更常用的字符，提升社会接受度")
        if analysis.timeliness < 60:
            recommendations.append("可以添加更有现代感的字符")
        if analysis.uniqueness < 50:
            recommendations.append("建议避免过于热门的组合，增加独特性")
        if analysis.overall_commonness > 90 and analysis.uniqueness < 40:
            recommendations.append("名字过于大众化，建议在保持常用度的同时增加独特元素")
        return recommendations or ["整体社会认可度良好，可以保持当前选择"]
