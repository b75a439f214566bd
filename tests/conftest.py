"""
Shared fixtures: a small in-memory data set with hand-checked numerology.

With the family name 王 (4 strokes) and the ``SANCAI_RULES`` below, the auspicious
stroke combinations are (2, 5), (3, 4) and (9, 2). Only (3, 4) has Water/Metal
candidates here: 子 (3, Water) with 书 and 心 (4, Metal).
"""

import sys
from pathlib import Path
from typing import Dict, List

import pytest

# Add the parent directory to path to import qiming
sys.path.insert(0, str(Path(__file__).parent.parent))

from qiming.config import NamingConfig
from qiming.data_service import CharacterRecord, NamingDataSet, PinyinService, SancaiRule
from qiming.naming_data import WuxingElement
from qiming.numerology import GridCalculator

W, F, E, M, S = (
    WuxingElement.WOOD,
    WuxingElement.FIRE,
    WuxingElement.EARTH,
    WuxingElement.METAL,
    WuxingElement.WATER,
)

# (char, simplified strokes, traditional strokes, element, pinyin, explanation)
CHARACTERS = [
    ("王", 4, 4, E, "wáng", "君主，首领"),
    ("欧", 8, 15, E, "ōu", "姓氏用字"),
    ("阳", 6, 17, E, "yáng", "太阳，光明"),
    ("子", 3, 3, S, "zǐ", "孩子，古代对男子的美称"),
    ("文", 4, 4, S, "wén", "文采，文雅"),
    ("洋", 9, 10, S, "yáng", "海洋，盛大"),
    ("泽", 8, 17, S, "zé", "恩泽，润泽"),
    ("书", 4, 10, M, "shū", "书籍，学问"),
    ("心", 4, 4, M, "xīn", "心灵，思想"),
    ("明", 8, 8, F, "míng", "光明，聪明"),
    ("林", 8, 8, W, "lín", "树林"),
]

COMMON_MALE = {"子": 900, "文": 800, "书": 700, "明": 600, "心": 300, "洋": 100, "泽": 90}
COMMON_FEMALE = {"心": 500, "明": 400, "文": 200, "书": 50}

# 泽 is deliberately absent
STANDARD = ["王", "欧", "阳", "子", "文", "洋", "书", "心", "明", "林"]
SIMPLIFIED_MAP = {"書": "书", "陽": "阳", "澤": "泽"}

SANCAI_RULES = {
    "土-土-金": SancaiRule("大吉", "三才相生，基础稳固"),
    "土-金-金": SancaiRule("大吉", "三才相生，成功顺利"),
    "土-火-木": SancaiRule("大吉", "三才相生，身心健康"),
    "土-金-木": SancaiRule("凶", "三才相克，多有阻碍"),
    "土-木-木": SancaiRule("凶", "三才相克，劳心费力"),
}


def build_records() -> List[CharacterRecord]:
    return [
        CharacterRecord(char, simp, trad, element, pinyin, explanation)
        for char, simp, trad, element, pinyin, explanation in CHARACTERS
    ]


def permissive_rules() -> Dict[str, SancaiRule]:
    """Every element triple rated 大吉, so only the number filters apply."""
    return {
        f"{h.symbol}-{p.symbol}-{e.symbol}": SancaiRule("大吉", "测试")
        for h in WuxingElement
        for p in WuxingElement
        for e in WuxingElement
    }


def build_data_set(rules=None) -> NamingDataSet:
    return NamingDataSet.build(
        records=build_records(),
        sancai_rules=SANCAI_RULES if rules is None else rules,
        common_male=COMMON_MALE,
        common_female=COMMON_FEMALE,
        standard_characters=STANDARD,
        simplified_map=SIMPLIFIED_MAP,
    )


@pytest.fixture(scope="session")
def data_set() -> NamingDataSet:
    return build_data_set()


@pytest.fixture(scope="session")
def permissive_data_set() -> NamingDataSet:
    return build_data_set(permissive_rules())


@pytest.fixture(scope="session")
def naming_config() -> NamingConfig:
    return NamingConfig.create_default()


@pytest.fixture(scope="session")
def calculator(data_set, naming_config) -> GridCalculator:
    return GridCalculator(data_set, naming_config)


@pytest.fixture(scope="session")
def pinyin(data_set) -> PinyinService:
    return PinyinService.from_data_set(data_set)
