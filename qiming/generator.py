"""
Name generation orchestrator.

## Overview

`NameGenerator.generate()` composes the pieces of the engine:

1. **Element requirements**: the first two preferred elements, else Water (middle) and
   Metal (last)
2. **Combination search**: auspicious (middle, last) stroke pairs for the family name
3. **Candidate filter**: characters per stroke/element, narrowed to standard, gender-common,
   non-avoided characters
4. **Cross product**: every (middle, last) pair becomes a full name, scored on numerology and
   kept when it reaches the threshold
5. **Ranking**: numerology score, or the weighted five-dimension score when weights are given;
   ties keep enumeration order
6. **Pagination**: the slice ``[offset, offset + limit)``

The cross-product loop honours a `Deadline` (timeout and/or cancellation event) and raises
`GenerationCancelled` once it has passed.

## Usage

```python
from qiming.data_service import NamingDataLoader
from qiming.generator import GenerationConfig, NameGenerator

loader = NamingDataLoader()
loader.get()  # block until the bundled data is loaded

generator = NameGenerator(loader=loader)
for name in generator.generate(GenerationConfig(family_name="王", gender="male", limit=10)):
    print(name.full_name, name.score)
    print(name.explanation)
```

## Thread Safety

The scorers and calculator are built once per generator, under a lock, and published as a
single immutable engine. After that the only shared mutable state is the bounded, thread-safe
pinyin cache, so one instance can serve concurrent requests, including the first ones
racing a finished load.
"""

from __future__ import annotations
import csv
import io
import logging
import random
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from qiming.candidates import CandidateFilter
from qiming.config import NamingConfig
from qiming.data_service import DataStatus, NamingDataLoader, NamingDataSet, PinyinService
from qiming.errors import DataNotReadyError, GenerationCancelled, InvalidGenerationConfig, UnsupportedNameLength
from qiming.naming_data import Gender, WuxingElement
from qiming.numerology import GridCalculation, GridCalculator, NameValidation, SancaiResult
from qiming.scorers import MeaningScorer, PhoneticScorer, SancaiScorer, SocialScorer, WuxingScorer
from qiming.weighting import ScoreComponents, WeightConfig, rank

# Score used when the five-element scorer cannot handle the given-name length
NEUTRAL_WUXING_SCORE = 60


# ════════════════════════════════════════════════════════════════════════════════
# REQUEST / RESULT TYPES
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GenerationConfig:
    """A generation request; unset fields fall back to NamingConfig defaults in `resolve()`."""

    family_name: str
    gender: Union[Gender, str] = Gender.MALE
    score_threshold: Optional[int] = None
    use_traditional: bool = False
    avoided_words: Tuple[str, ...] = ()
    limit: Optional[int] = None
    offset: int = 0
    weights: Optional[WeightConfig] = None
    preferred_wuxing: Tuple[Union[WuxingElement, str], ...] = ()

    def resolve(self, naming_config: NamingConfig) -> "ResolvedGenerationConfig":
        """Validate the request and fill every default exactly once."""
        family_name = (self.family_name or "").strip()
        if not 1 <= len(family_name) <= 2:
            raise InvalidGenerationConfig(f"Family name must be 1-2 characters, got '{self.family_name}'")

        gender = _parse_gender(self.gender)
        limit = naming_config.default_limit if self.limit is None else self.limit
        if limit < 0 or self.offset < 0:
            raise InvalidGenerationConfig(f"limit and offset must be non-negative (limit={limit}, offset={self.offset})")

        preferences = tuple(_parse_element(e) for e in self.preferred_wuxing)
        if len(preferences) >= 2:
            mid_element, last_element = preferences[0], preferences[1]
        else:
            mid_element, last_element = naming_config.default_mid_element, naming_config.default_last_element

        return ResolvedGenerationConfig(
            family_name=family_name,
            gender=gender,
            score_threshold=naming_config.threshold_score if self.score_threshold is None else self.score_threshold,
            use_traditional=self.use_traditional,
            avoided_words=frozenset(self.avoided_words),
            limit=limit,
            offset=self.offset,
            weights=self.weights,
            preferences=preferences,
            mid_element=mid_element,
            last_element=last_element,
        )


@dataclass(frozen=True)
class ResolvedGenerationConfig:
    family_name: str
    gender: Gender
    score_threshold: int
    use_traditional: bool
    avoided_words: frozenset
    limit: int
    offset: int
    weights: Optional[WeightConfig]
    preferences: Tuple[WuxingElement, ...]
    mid_element: WuxingElement
    last_element: WuxingElement


@dataclass(frozen=True)
class GeneratedName:
    full_name: str
    family_name: str
    mid_char: str
    last_char: str
    grids: GridCalculation
    sancai: SancaiResult
    score: int
    explanation: str
    components: Optional[ScoreComponents] = None
    weighted_score: Optional[int] = None

    @property
    def given_name(self) -> str:
        return self.mid_char + self.last_char


@dataclass(frozen=True)
class ToneFilterResult:
    names: Tuple[str, ...]
    mid_characters: Tuple[str, ...]
    last_characters: Tuple[str, ...]


@dataclass(frozen=True)
class CharacterValidation:
    is_valid: bool
    invalid_chars: Tuple[str, ...]
    suggestions: Tuple[str, ...]


@dataclass(frozen=True)
class BatchCheckResult:
    simplified: NameValidation
    traditional: NameValidation


def _parse_gender(value: Union[Gender, str]) -> Gender:
    if isinstance(value, Gender):
        return value
    normalized = {"male": Gender.MALE, "男": Gender.MALE, "female": Gender.FEMALE, "女": Gender.FEMALE}
    gender = normalized.get(str(value).strip().lower())
    if gender is None:
        raise InvalidGenerationConfig(f"Gender must be 'male' or 'female', got '{value}'")
    return gender


def _parse_element(value: Union[WuxingElement, str]) -> WuxingElement:
    if isinstance(value, WuxingElement):
        return value
    element = WuxingElement.from_symbol(value)
    if element is None:
        try:
            element = WuxingElement[str(value).upper()]
        except KeyError:
            raise InvalidGenerationConfig(f"Unknown element '{value}'") from None
    return element


# ════════════════════════════════════════════════════════════════════════════════
# DEADLINE / CANCELLATION
# ════════════════════════════════════════════════════════════════════════════════


@dataclass
class Deadline:
    """Optional timeout plus optional cancellation event, checked inside generation loops."""

    timeout: Optional[float] = None
    cancel_event: Optional[threading.Event] = None
    _started: float = field(default_factory=time.monotonic, init=False, repr=False)

    @classmethod
    def never(cls) -> "Deadline":
        return cls()

    @property
    def expired(self) -> bool:
        if self.cancel_event is not None and self.cancel_event.is_set():
            return True
        return self.timeout is not None and time.monotonic() - self._started >= self.timeout

    def check(self) -> None:
        if self.expired:
            raise GenerationCancelled(
                "Generation cancelled" if self.cancel_event is not None and self.cancel_event.is_set()
                else f"Generation exceeded its {self.timeout}s deadline"
            )


# ════════════════════════════════════════════════════════════════════════════════
# GENERATOR
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class _Engine:
    """Every collaborator built over one data set; published to readers as a single object."""

    data: NamingDataSet
    calculator: GridCalculator
    candidate_filter: CandidateFilter
    pinyin: PinyinService
    sancai_scorer: SancaiScorer
    wuxing_scorer: WuxingScorer
    phonetic_scorer: PhoneticScorer
    meaning_scorer: MeaningScorer
    social_scorer: SocialScorer

    @classmethod
    def build(cls, data: NamingDataSet, config: NamingConfig, pinyin: Optional[PinyinService] = None) -> "_Engine":
        calculator = GridCalculator(data, config)
        pinyin = pinyin or PinyinService.from_data_set(data)
        return cls(
            data=data,
            calculator=calculator,
            candidate_filter=CandidateFilter(data),
            pinyin=pinyin,
            sancai_scorer=SancaiScorer(calculator),
            wuxing_scorer=WuxingScorer(data),
            phonetic_scorer=PhoneticScorer(pinyin),
            meaning_scorer=MeaningScorer(data),
            social_scorer=SocialScorer(data),
        )


class NameGenerator:
    """Main generation engine with dependency injection of data, config and pinyin service."""

    def __init__(
        self,
        data: Optional[NamingDataSet] = None,
        config: Optional[NamingConfig] = None,
        loader: Optional[NamingDataLoader] = None,
        pinyin: Optional[PinyinService] = None,
    ):
        self._config = config or (loader.config if loader is not None else NamingConfig.create_default())
        self._loader = loader
        self._pinyin_override = pinyin
        self._wire_lock = threading.Lock()
        self._engine: Optional[_Engine] = None
        if data is not None:
            self._engine = _Engine.build(data, self._config, pinyin)

    def _ensure_ready(self) -> _Engine:
        """Pick up a finished load; never blocks on the loader and never triggers one."""
        engine = self._engine
        if engine is not None:
            return engine
        if self._loader is None:
            raise DataNotReadyError("NameGenerator has neither a data set nor a loader")
        data = self._loader.get_if_ready()
        with self._wire_lock:
            if self._engine is None:
                self._engine = _Engine.build(data, self._config, self._pinyin_override)
            return self._engine

    @property
    def calculator(self) -> GridCalculator:
        return self._ensure_ready().calculator

    # Core generation

    def generate(self, config: GenerationConfig, deadline: Optional[Deadline] = None) -> List[GeneratedName]:
        """
        Generate, rank and paginate names for a request.

        Raises:
            DataNotReadyError: the data set has not been loaded yet
            InvalidGenerationConfig: the request is malformed
            GenerationCancelled: the deadline expired inside the candidate loop
        """
        engine = self._ensure_ready()
        request = config.resolve(self._config)
        deadline = deadline or Deadline.never()
        start_time = time.perf_counter()

        family_strokes = engine.calculator.family_strokes(request.family_name, request.use_traditional)
        combinations = engine.calculator.best_combinations(family_strokes)
        common = engine.data.common_words(request.gender)
        logging.info(
            f"Generating for '{request.family_name}' ({family_strokes} strokes): {len(combinations)} combinations, "
            f"{len(common)} common {request.gender.value} characters, "
            f"elements {request.mid_element.symbol}{request.last_element.symbol}"
        )

        kept: List[GeneratedName] = []
        examined = 0
        for combination in combinations:
            deadline.check()
            mids = engine.candidate_filter.usable_candidates(
                combination.mid, request.mid_element, common, request.avoided_words, request.use_traditional
            )
            lasts = engine.candidate_filter.usable_candidates(
                combination.last, request.last_element, common, request.avoided_words, request.use_traditional
            )
            examined += CandidateFilter.valid_combination_count(mids, lasts)

            for mid_char in mids:
                for last_char in lasts:
                    deadline.check()
                    name = self._build_name(engine, request, mid_char, last_char)
                    if name.score >= request.score_threshold:
                        kept.append(name)

        if request.weights is not None:
            ordered = self._rank_weighted(engine, kept, request, deadline)
        else:
            ordered = sorted(kept, key=lambda n: n.score, reverse=True)

        page = ordered[request.offset : request.offset + request.limit]
        logging.info(
            f"Examined {examined} names, kept {len(kept)} (threshold {request.score_threshold}), "
            f"returning {len(page)} [offset={request.offset}, limit={request.limit}] "
            f"in {time.perf_counter() - start_time:.3f}s"
        )
        return page

    @staticmethod
    def _build_name(
        engine: _Engine, request: ResolvedGenerationConfig, mid_char: str, last_char: str
    ) -> GeneratedName:
        full_name = request.family_name + mid_char + last_char
        validation = engine.calculator.check_name(full_name, request.family_name, request.use_traditional)
        return GeneratedName(
            full_name=full_name,
            family_name=request.family_name,
            mid_char=mid_char,
            last_char=last_char,
            grids=validation.grids,
            sancai=validation.sancai,
            score=validation.score,
            explanation=validation.explanation,
        )

    def score_components(
        self, name: GeneratedName, preferences: Sequence[WuxingElement] = ()
    ) -> ScoreComponents:
        """All five dimension scores for a generated name."""
        return self._score_components(self._ensure_ready(), name, preferences)

    @staticmethod
    def _score_components(
        engine: _Engine, name: GeneratedName, preferences: Sequence[WuxingElement]
    ) -> ScoreComponents:
        try:
            wuxing = engine.wuxing_scorer.score(name.family_name, name.given_name, preferences).score
        except UnsupportedNameLength as e:
            logging.warning(f"{e}; using neutral score {NEUTRAL_WUXING_SCORE} for '{name.full_name}'")
            wuxing = NEUTRAL_WUXING_SCORE

        return ScoreComponents(
            sancai=name.score,
            wuxing=wuxing,
            sound=engine.phonetic_scorer.score(name.family_name, name.given_name).score,
            meaning=engine.meaning_scorer.score(name.mid_char, name.last_char).score,
            social=engine.social_scorer.score(name.mid_char, name.last_char).score,
        )

    def _rank_weighted(
        self, engine: _Engine, names: List[GeneratedName], request: ResolvedGenerationConfig, deadline: Deadline
    ) -> List[GeneratedName]:
        scored = []
        for name in names:
            deadline.check()
            components = self._score_components(engine, name, request.preferences)
            scored.append(replace(name, components=components))
        return [replace(r.item, weighted_score=r.weighted_score) for r in rank(scored, request.weights)]

    # Supplementary tools

    def check_name(self, full_name: str, use_traditional: bool = False) -> NameValidation:
        return self._ensure_ready().sancai_scorer.validate(full_name, use_traditional=use_traditional)

    def batch_check(self, names: Iterable[str]) -> Dict[str, BatchCheckResult]:
        """Numerology verdict of each name with simplified and traditional strokes."""
        calculator = self._ensure_ready().calculator
        results = {}
        for name in names:
            results[name] = BatchCheckResult(
                simplified=calculator.check_name(name, use_traditional=False),
                traditional=calculator.check_name(name, use_traditional=True),
            )
        return results

    def generate_nicknames(self, element: Union[WuxingElement, str]) -> List[str]:
        """'小' + each standard, female-common character of the element with few strokes."""
        data = self._ensure_ready().data
        element = _parse_element(element)
        common = data.common_words(Gender.FEMALE)
        nicknames = []
        for strokes in range(1, self._config.nickname_max_strokes):
            for char in data.characters_by_stroke_and_element(strokes, element):
                if data.is_standard_character(char) and char in common:
                    nicknames.append("小" + char)
        logging.info(f"Generated {len(nicknames)} nicknames for element {element.symbol}")
        return nicknames

    def filter_by_tone(self, names: Iterable[str], mid_tone: int, last_tone: int) -> ToneFilterResult:
        """Keep names of 3+ characters whose second and third characters carry the given tones."""
        pinyin = self._ensure_ready().pinyin
        kept: List[str] = []
        mids: Dict[str, None] = {}
        lasts: Dict[str, None] = {}
        for name in names:
            if len(name) < 3:
                continue
            mid_char, last_char = name[1], name[2]
            if pinyin.tone(mid_char) == mid_tone and pinyin.tone(last_char) == last_tone:
                kept.append(name)
                mids[mid_char] = None
                lasts[last_char] = None
        return ToneFilterResult(tuple(kept), tuple(mids), tuple(lasts))

    @staticmethod
    def random_select(names: Sequence[str], count: int = 10, rng: Optional[random.Random] = None) -> List[str]:
        """Sample with replacement; pass a seeded Random for reproducible picks."""
        if not names:
            return []
        rng = rng or random.Random()
        return [rng.choice(names) for _ in range(count)]

    def validate_characters(self, full_name: str) -> CharacterValidation:
        """Standard-table compliance with simplification suggestions."""
        data = self._ensure_ready().data
        invalid: List[str] = []
        suggestions: List[str] = []
        for char in full_name:
            if data.is_standard_character(char):
                continue
            invalid.append(char)
            simplified = data.to_simplified(char)
            if simplified and data.is_standard_character(simplified):
                suggestions.append(f'"{char}" → "{simplified}" (简化)')
        return CharacterValidation(not invalid, tuple(invalid), tuple(suggestions))

    @staticmethod
    def export_csv(names: Iterable[GeneratedName]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["姓名", "评分", "三才", "天格", "人格", "地格", "总格", "外格"])
        for name in names:
            g = name.grids
            writer.writerow(
                [name.full_name, name.score, name.sancai.combination, g.heaven, g.human, g.earth, g.total, g.outer]
            )
        return buffer.getvalue().rstrip("\n")

    def status(self) -> DataStatus:
        engine = self._engine
        if engine is not None:
            return engine.data.status()
        if self._loader is not None:
            return self._loader.status()
        return DataStatus(loaded=False)


# ════════════════════════════════════════════════════════════════════════════════
# PERFORMANCE TESTING
# ════════════════════════════════════════════════════════════════════════════════


def run_performance_test() -> None:
    """Time data loading and repeated generation over the bundled data."""
    logging.basicConfig(level=logging.WARNING)

    start_time = time.perf_counter()
    loader = NamingDataLoader()
    loader.get()
    load_time = time.perf_counter() - start_time
    print(f"Data loaded in {load_time:.3f}s: {loader.status()}")

    generator = NameGenerator(loader=loader)
    requests = [
        GenerationConfig(family_name=family, gender=gender, limit=20)
        for family in ("王", "李", "张", "刘", "陈", "林")
        for gender in ("male", "female")
    ]

    seen: Set[str] = set()
    start_time = time.perf_counter()
    for request in requests:
        for name in generator.generate(request):
            seen.add(name.full_name)
    gen_time = time.perf_counter() - start_time
    print(f"{len(requests)} requests in {gen_time:.3f}s ({gen_time / len(requests) * 1000:.1f} ms/request)")
    print(f"{len(seen)} distinct names returned")

    weighted = GenerationConfig(family_name="王", limit=20, weights=WeightConfig(25, 25, 20, 20, 10))
    start_time = time.perf_counter()
    names = generator.generate(weighted)
    print(f"Weighted ranking of {len(names)} names in {time.perf_counter() - start_time:.3f}s")
    loader.shutdown()


# CLI entry point
if __name__ == "__main__":
    run_performance_test()
