"""
Read-only naming data: dictionary, rule table, common-character corpora and standard table.

## Architecture

- **NamingDataSet**: immutable container answering every lookup the engine needs
  (strokes, element, stroke+element index, common words, Sancai rules, standard table)
- **DataInitializationService**: reads and validates the JSON sources, builds the data set
- **NamingDataLoader**: one-shot loader; concurrent first callers share a single in-flight
  future so the files are parsed once
- **PinyinService**: cache-backed Han → tone-marked pinyin conversion with dictionary overrides

Nothing here is a process-wide singleton. The composition root builds a loader (or a data
set directly) and passes it into the calculator, scorers and generator.

## Data files (``qiming/data/``)

- ``characters.json``: ``{char: {"strokes": {"simplified": n, "traditional": n},
  "wuxing": "水", "pinyin": "hǎi", "explanation": "..."}}``
- ``sancai_rules.json``: ``{"木-火-土": {"result": "大吉", "description": "..."}}``
- ``common_chars_{male,female}.json``: ``{"meta": {...}, "data": [{"char": "浩", "frequency": n}]}``
- ``standard_characters.json``: ``{"meta": {...}, "data": [...], "simplified": {trad: simp}}``
"""

from __future__ import annotations
import json
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

import pypinyin

from qiming.config import NamingConfig
from qiming.errors import DataInitializationError, DataNotReadyError
from qiming.naming_data import PINYIN_INITIALS, TONE_DESCRIPTIONS, TONE_MARKS, Gender, WuxingElement


# ════════════════════════════════════════════════════════════════════════════════
# RECORD TYPES
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CharacterRecord:
    """One dictionary entry."""

    char: str
    simplified_strokes: int
    traditional_strokes: Optional[int] = None
    element: Optional[WuxingElement] = None
    pinyin: Optional[str] = None
    explanation: str = ""

    def strokes(self, use_traditional: bool = False) -> int:
        if use_traditional and self.traditional_strokes:
            return self.traditional_strokes
        return self.simplified_strokes


@dataclass(frozen=True)
class SancaiRule:
    result: str
    description: str


@dataclass(frozen=True)
class DataStatus:
    """Record counts of a loaded data set."""

    loaded: bool
    characters: int = 0
    sancai_rules: int = 0
    common_male: int = 0
    common_female: int = 0
    standard_characters: int = 0


# ════════════════════════════════════════════════════════════════════════════════
# IMMUTABLE DATA SET
# ════════════════════════════════════════════════════════════════════════════════

StrokeIndexKey = Tuple[int, WuxingElement, bool]


@dataclass(frozen=True)
class NamingDataSet:
    """Immutable container for all naming lookups - safe to share across threads."""

    records: Mapping[str, CharacterRecord]
    sancai_rules: Mapping[str, SancaiRule]
    common_frequencies: Mapping[Gender, Mapping[str, int]]
    standard_characters: FrozenSet[str]
    simplified_map: Mapping[str, str]

    # (strokes, element, traditional) → characters in dictionary order
    stroke_index: Mapping[StrokeIndexKey, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    common_sets: Mapping[Gender, FrozenSet[str]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
        cls,
        records: Iterable[CharacterRecord],
        sancai_rules: Mapping[str, SancaiRule],
        common_male: Mapping[str, int],
        common_female: Mapping[str, int],
        standard_characters: Iterable[str],
        simplified_map: Optional[Mapping[str, str]] = None,
    ) -> "NamingDataSet":
        """Build the data set and its derived indexes, preserving record order."""
        record_map: Dict[str, CharacterRecord] = {}
        for record in records:
            record_map[record.char] = record

        index: Dict[StrokeIndexKey, List[str]] = {}
        for record in record_map.values():
            if record.element is None:
                continue
            index.setdefault((record.simplified_strokes, record.element, False), []).append(record.char)
            index.setdefault((record.strokes(True), record.element, True), []).append(record.char)

        frequencies = {
            Gender.MALE: MappingProxyType(dict(common_male)),
            Gender.FEMALE: MappingProxyType(dict(common_female)),
        }

        return cls(
            records=MappingProxyType(record_map),
            sancai_rules=MappingProxyType(dict(sancai_rules)),
            common_frequencies=MappingProxyType(frequencies),
            standard_characters=frozenset(standard_characters),
            simplified_map=MappingProxyType(dict(simplified_map or {})),
            stroke_index=MappingProxyType({key: tuple(chars) for key, chars in index.items()}),
            common_sets=MappingProxyType({gender: frozenset(freq) for gender, freq in frequencies.items()}),
        )

    # Lookups consumed by the engine

    def strokes_of(self, char: str, use_traditional: bool = False) -> Optional[int]:
        """Dictionary stroke count, or None when the character is unknown."""
        record = self.records.get(char)
        return record.strokes(use_traditional) if record else None

    def element_of(self, char: str) -> Optional[WuxingElement]:
        record = self.records.get(char)
        return record.element if record else None

    def characters_by_stroke_and_element(
        self, strokes: int, element: WuxingElement, use_traditional: bool = False
    ) -> Tuple[str, ...]:
        return self.stroke_index.get((strokes, element, use_traditional), ())

    def common_words(self, gender: Gender) -> FrozenSet[str]:
        return self.common_sets.get(gender, frozenset())

    def frequency_of(self, char: str, gender: Optional[Gender] = None) -> int:
        """Corpus frequency; without a gender the larger of the two corpora wins."""
        if gender is not None:
            return self.common_frequencies.get(gender, {}).get(char, 0)
        return max((freq.get(char, 0) for freq in self.common_frequencies.values()), default=0)

    def sancai_rule(self, key: str) -> Optional[SancaiRule]:
        return self.sancai_rules.get(key)

    def is_standard_character(self, char: str) -> bool:
        return char in self.standard_characters

    def explanation_of(self, char: str) -> Optional[str]:
        record = self.records.get(char)
        return record.explanation if record and record.explanation else None

    def pinyin_of(self, char: str) -> Optional[str]:
        record = self.records.get(char)
        return record.pinyin if record else None

    def to_simplified(self, char: str) -> Optional[str]:
        return self.simplified_map.get(char)

    def status(self) -> DataStatus:
        return DataStatus(
            loaded=True,
            characters=len(self.records),
            sancai_rules=len(self.sancai_rules),
            common_male=len(self.common_words(Gender.MALE)),
            common_female=len(self.common_words(Gender.FEMALE)),
            standard_characters=len(self.standard_characters),
        )


# ════════════════════════════════════════════════════════════════════════════════
# DATA INITIALIZATION SERVICE
# ════════════════════════════════════════════════════════════════════════════════


class DataInitializationService:
    """Service to read the bundled JSON sources into a NamingDataSet."""

    def __init__(self, config: NamingConfig):
        self._config = config

    def ensure_data_files_exist(self) -> None:
        missing = [name for name in self._config.required_files if not (self._config.data_dir / name).exists()]
        if missing:
            raise DataInitializationError(f"Missing data files in {self._config.data_dir}: {', '.join(missing)}")

    def initialize_data_set(self) -> NamingDataSet:
        """Read every source and build the immutable data set."""
        start_time = time.perf_counter()
        self.ensure_data_files_exist()

        records = self._build_character_records()
        rules = self._build_sancai_rules()
        common_male = self._build_common_words(self._config.common_male_file)
        common_female = self._build_common_words(self._config.common_female_file)
        standard, simplified_map = self._build_standard_characters()

        data = NamingDataSet.build(records, rules, common_male, common_female, standard, simplified_map)
        load_time = time.perf_counter() - start_time
        logging.info(
            f"Loaded {len(data.records)} characters, {len(data.sancai_rules)} Sancai rules, "
            f"{len(common_male)}/{len(common_female)} common male/female characters, "
            f"{len(data.standard_characters)} standard characters in {load_time:.3f}s"
        )
        return data

    def _read_json(self, filename: str) -> Any:
        path = self._config.data_dir / filename
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Failed to read {path}: {e}")
            raise DataInitializationError(f"Cannot read {path}: {e}") from e

    def _build_character_records(self) -> List[CharacterRecord]:
        raw = self._read_json(self._config.characters_file)
        if not isinstance(raw, dict):
            raise DataInitializationError(f"{self._config.characters_file}: expected an object keyed by character")

        records = []
        skipped = 0
        for char, entry in raw.items():
            try:
                strokes = entry["strokes"]
                simplified = int(strokes["simplified"])
                traditional = strokes.get("traditional")
            except (KeyError, TypeError, ValueError):
                skipped += 1
                continue

            element = WuxingElement.from_symbol(entry.get("wuxing", ""))
            records.append(
                CharacterRecord(
                    char=char,
                    simplified_strokes=simplified,
                    traditional_strokes=int(traditional) if traditional else None,
                    element=element,
                    pinyin=entry.get("pinyin") or None,
                    explanation=entry.get("explanation", ""),
                )
            )

        if skipped:
            logging.warning(f"Skipped {skipped} malformed entries in {self._config.characters_file}")
        return records

    def _build_sancai_rules(self) -> Dict[str, SancaiRule]:
        raw = self._read_json(self._config.sancai_rules_file)
        try:
            return {key: SancaiRule(rule["result"], rule.get("description", "")) for key, rule in raw.items()}
        except (AttributeError, KeyError, TypeError) as e:
            raise DataInitializationError(f"{self._config.sancai_rules_file}: malformed rule ({e})") from e

    def _build_common_words(self, filename: str) -> Dict[str, int]:
        raw = self._read_json(filename)
        items = raw.get("data") if isinstance(raw, dict) else None
        if not isinstance(items, list):
            raise DataInitializationError(f"{filename}: expected a 'data' list")
        return {item["char"]: int(item.get("frequency", 0)) for item in items if item.get("char")}

    def _build_standard_characters(self) -> Tuple[FrozenSet[str], Dict[str, str]]:
        raw = self._read_json(self._config.standard_characters_file)
        chars = raw.get("data") if isinstance(raw, dict) else None
        if not isinstance(chars, list):
            raise DataInitializationError(f"{self._config.standard_characters_file}: expected a 'data' list")
        return frozenset(chars), dict(raw.get("simplified", {}))


# ════════════════════════════════════════════════════════════════════════════════
# ONE-SHOT LOADER
# ════════════════════════════════════════════════════════════════════════════════


class NamingDataLoader:
    """
    Load the data set exactly once, asynchronously.

    `load_async()` hands every caller the same future while a load is in flight or after it
    succeeded. A failed load is re-raised to all waiters; `reset()` allows a retry.
    """

    def __init__(
        self,
        config: Optional[NamingConfig] = None,
        service: Optional[DataInitializationService] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self._config = config or NamingConfig.create_default()
        self._service = service or DataInitializationService(self._config)
        self._executor = executor
        self._lock = threading.Lock()
        self._future: Optional[Future] = None

    @property
    def config(self) -> NamingConfig:
        return self._config

    @property
    def is_ready(self) -> bool:
        future = self._future
        return future is not None and future.done() and not future.cancelled() and future.exception() is None

    def load_async(self) -> Future:
        with self._lock:
            if self._future is None:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="qiming-data")
                logging.info(f"Loading naming data from {self._config.data_dir}")
                self._future = self._executor.submit(self._service.initialize_data_set)
            return self._future

    def get(self, timeout: Optional[float] = None) -> NamingDataSet:
        """Block until the data set is available; triggers the load when needed."""
        return self.load_async().result(timeout=timeout)

    def get_if_ready(self) -> NamingDataSet:
        """Return the loaded data set without blocking."""
        if not self.is_ready:
            raise DataNotReadyError("Naming data has not finished loading")
        return self._future.result()

    def reset(self) -> None:
        """Forget a finished load (successful or failed) so the next call reloads."""
        with self._lock:
            if self._future is not None and not self._future.done():
                raise RuntimeError("Cannot reset while a load is in progress")
            self._future = None

    def status(self) -> DataStatus:
        if not self.is_ready:
            return DataStatus(loaded=False)
        return self._future.result().status()

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)


# ════════════════════════════════════════════════════════════════════════════════
# PINYIN SERVICE
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PinyinInfo:
    char: str
    pinyin: str
    tone: int
    initial: str
    rhyme: str

    @property
    def is_ping(self) -> bool:
        """Level tone (neutral, first, second) as opposed to oblique (third, fourth)."""
        return TONE_DESCRIPTIONS[self.tone][1] == "ping"

    @property
    def tone_name(self) -> str:
        return TONE_DESCRIPTIONS[self.tone][0]


def tone_of(syllable: str) -> int:
    """Tone 1-4 from the tone mark, 0 for the neutral tone."""
    for ch in syllable:
        marked = TONE_MARKS.get(ch)
        if marked:
            return marked[1]
    return 0


def strip_tone(syllable: str) -> str:
    return "".join(TONE_MARKS[ch][0] if ch in TONE_MARKS else ch for ch in syllable)


def initial_of(syllable: str) -> str:
    """Longest matching initial consonant, '' for zero-initial syllables."""
    plain = strip_tone(syllable).lower()
    for initial in PINYIN_INITIALS:
        if plain.startswith(initial):
            return initial
    return ""


@lru_cache(maxsize=32_768)
def _pypinyin_syllable(char: str) -> str:
    try:
        result = pypinyin.lazy_pinyin(char, style=pypinyin.Style.TONE)
        syllable = result[0] if result else ""
    except (AttributeError, ValueError, TypeError) as e:
        logging.warning(f"Pypinyin failed for '{char}': {e}")
        syllable = ""

    # pypinyin echoes non-Han input unchanged
    if syllable == char:
        return ""
    return syllable


class PinyinService:
    """Han → tone-marked pinyin: dictionary overrides first, then a bounded pypinyin cache."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self._overrides: Mapping[str, str] = MappingProxyType(dict(overrides or {}))

    @classmethod
    def from_data_set(cls, data: NamingDataSet) -> "PinyinService":
        overrides = {char: record.pinyin for char, record in data.records.items() if record.pinyin}
        return cls(overrides)

    @staticmethod
    def cache_info():
        return _pypinyin_syllable.cache_info()

    def pinyin_of(self, char: str) -> str:
        override = self._overrides.get(char)
        if override is not None:
            return override
        return _pypinyin_syllable(char)

    def analyze(self, char: str) -> PinyinInfo:
        syllable = self.pinyin_of(char)
        initial = initial_of(syllable)
        return PinyinInfo(
            char=char,
            pinyin=syllable,
            tone=tone_of(syllable),
            initial=initial,
            rhyme=strip_tone(syllable).lower()[len(initial) :],
        )

    def tone(self, char: str) -> int:
        return tone_of(self.pinyin_of(char))
