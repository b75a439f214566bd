from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Tuple

from qiming.naming_data import WuxingElement

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"


# ════════════════════════════════════════════════════════════════════════════════
# IMMUTABLE CONFIGURATION DATA
# ════════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class NamingConfig:
    """Immutable engine configuration - data locations and search/scoring constants."""

    # Data sources
    data_dir: Path
    characters_file: str
    sancai_rules_file: str
    common_male_file: str
    common_female_file: str
    standard_characters_file: str

    # Combination search range (inclusive) and accepted Sancai results
    min_single_strokes: int
    max_single_strokes: int
    selected_sancai: Tuple[str, ...]

    # Generation defaults
    threshold_score: int
    default_limit: int
    default_mid_element: WuxingElement
    default_last_element: WuxingElement
    nickname_max_strokes: int

    @classmethod
    def create_default(cls) -> "NamingConfig":
        return cls(
            data_dir=_PACKAGE_DATA_DIR,
            characters_file="characters.json",
            sancai_rules_file="sancai_rules.json",
            common_male_file="common_chars_male.json",
            common_female_file="common_chars_female.json",
            standard_characters_file="standard_characters.json",
            min_single_strokes=2,
            max_single_strokes=20,
            selected_sancai=("大吉", "中吉", "吉"),
            threshold_score=65,
            default_limit=5,
            default_mid_element=WuxingElement.WATER,
            default_last_element=WuxingElement.METAL,
            nickname_max_strokes=16,
        )

    @property
    def required_files(self) -> Tuple[str, ...]:
        return (
            self.characters_file,
            self.sancai_rules_file,
            self.common_male_file,
            self.common_female_file,
            self.standard_characters_file,
        )

    def with_data_dir(self, new_data_dir: Path) -> "NamingConfig":
        """Immutable update method."""
        return replace(self, data_dir=Path(new_data_dir))

    def with_stroke_range(self, min_strokes: int, max_strokes: int) -> "NamingConfig":
        if min_strokes < 1 or max_strokes < min_strokes:
            raise ValueError(f"Invalid stroke range [{min_strokes}, {max_strokes}]")
        return replace(self, min_single_strokes=min_strokes, max_single_strokes=max_strokes)

    def with_threshold(self, threshold_score: int) -> "NamingConfig":
        return replace(self, threshold_score=threshold_score)
