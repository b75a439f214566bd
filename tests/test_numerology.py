"""
Tests for the Five Grids / Sancai numerology layer.

Grid arithmetic, number classification, the combination search (including the inclusive
2..20 boundaries and canonical ordering) and full-name validation.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from qiming.config import NamingConfig
from qiming.naming_data import BEST_NUM_SET, RESULT_UNKNOWN, NumberFortune, SancaiLevel, WuxingElement
from qiming.numerology import GridCalculation, GridCalculator, StrokeCombination, estimate_strokes, number_categories

# (family, mid, last) -> (heaven, human, earth, total, outer)
GRID_TEST_CASES = [
    ((4, 2, 5), (5, 6, 7, 11, 6)),
    ((4, 3, 4), (5, 7, 7, 11, 5)),
    ((14, 3, 4), (15, 17, 7, 21, 5)),
    ((1, 1, 1), (2, 2, 2, 3, 2)),
    ((4, 3, 0), (5, 7, 3, 7, 1)),
]

# number -> fortune, checked in precedence order 吉 > 次吉 > 凶 > 中性
FORTUNE_TEST_CASES = [
    (1, NumberFortune.GREAT_LUCK),
    (11, NumberFortune.GREAT_LUCK),
    (81, NumberFortune.GREAT_LUCK),
    (6, NumberFortune.SEMI_LUCKY),
    (17, NumberFortune.SEMI_LUCKY),
    (2, NumberFortune.UNLUCKY),
    (9, NumberFortune.UNLUCKY),
    (12, NumberFortune.UNLUCKY),
    (82, NumberFortune.NEUTRAL),
    (0, NumberFortune.NEUTRAL),
]

ELEMENT_TEST_CASES = [
    (1, WuxingElement.WOOD),
    (12, WuxingElement.WOOD),
    (3, WuxingElement.FIRE),
    (24, WuxingElement.FIRE),
    (5, WuxingElement.EARTH),
    (16, WuxingElement.EARTH),
    (7, WuxingElement.METAL),
    (18, WuxingElement.METAL),
    (9, WuxingElement.WATER),
    (20, WuxingElement.WATER),
]


def test_grid_arithmetic():
    """Test the five grid formulas."""
    passed = 0
    failed = 0

    for strokes, expected in GRID_TEST_CASES:
        grids = GridCalculator.grids(*strokes)
        result = (grids.heaven, grids.human, grids.earth, grids.total, grids.outer)
        if result == expected:
            passed += 1
        else:
            failed += 1
            print(f"FAILED: {strokes}: expected {expected}, got {result}")

    assert failed == 0, f"Grid tests: {failed} failures out of {len(GRID_TEST_CASES)} tests"
    print(f"Grid tests: {passed} passed, {failed} failed")


def test_outer_grid_identity():
    for family in range(1, 30):
        for mid in range(1, 25):
            for last in range(0, 25):
                grids = GridCalculation.from_strokes(family, mid, last)
                assert grids.outer == grids.total - grids.human + 1
                assert grids.outer == last + 1


def test_number_fortunes():
    for number, expected in FORTUNE_TEST_CASES:
        assert GridCalculator.evaluate_number(number) is expected, f"Failed for {number}"


def test_number_to_element_uses_last_digit():
    for number, expected in ELEMENT_TEST_CASES:
        assert WuxingElement.from_number(number) is expected, f"Failed for {number}"


def test_number_categories():
    assert number_categories(16) == ["吉祥运", "首领运", "财富运", "女德运", "双妻运", "温和运"]
    assert number_categories(9) == ["凶数运"]
    assert number_categories(82) == []


def test_best_num_set_excludes_every_bad_number():
    for number in (2, 4, 9, 10, 12, 14, 21, 23, 26, 28, 29, 33, 39):
        assert number not in BEST_NUM_SET
    for number in (5, 6, 7, 11, 13, 15, 16, 24, 32, 41):
        assert number in BEST_NUM_SET


def test_family_wang_combination_two_five(calculator):
    """王 (4 strokes) with (2, 5): all grids lucky and 土土金 is 大吉."""
    grids = calculator.grids(4, 2, 5)
    assert grids == GridCalculation(heaven=5, human=6, earth=7, total=11, outer=6)
    assert all(n in BEST_NUM_SET for n in grids.as_dict().values())

    sancai = calculator.sancai(grids)
    assert sancai.combination == "土土金"
    assert sancai.key == "土-土-金"
    assert sancai.level is SancaiLevel.GREAT_LUCK


def test_sancai_missing_rule_is_unknown(calculator):
    sancai = calculator.sancai(calculator.grids(4, 8, 8))
    assert sancai.level is SancaiLevel.UNKNOWN
    assert sancai.description == RESULT_UNKNOWN
    assert sancai.result is None


def test_best_combinations_canonical_order(calculator):
    combos = calculator.best_combinations(4)
    assert combos == [StrokeCombination(2, 5), StrokeCombination(3, 4), StrokeCombination(9, 2)]


def test_best_combinations_rejects_unlucky_sancai(calculator):
    # (4, 7) and (7, 4) pass every number filter but map to 凶 triples
    combos = calculator.best_combinations(4)
    assert StrokeCombination(4, 7) not in combos
    assert StrokeCombination(7, 4) not in combos


def test_best_combinations_include_range_boundaries(permissive_data_set, naming_config):
    calculator = GridCalculator(permissive_data_set, naming_config)
    combos = calculator.best_combinations(4)
    assert combos == [
        StrokeCombination(2, 5),
        StrokeCombination(3, 4),
        StrokeCombination(4, 7),
        StrokeCombination(7, 4),
        StrokeCombination(9, 2),
        StrokeCombination(14, 17),
        StrokeCombination(20, 17),
    ]

    narrowed = GridCalculator(permissive_data_set, naming_config.with_stroke_range(3, 19)).best_combinations(4)
    assert StrokeCombination(2, 5) not in narrowed
    assert StrokeCombination(9, 2) not in narrowed
    assert StrokeCombination(20, 17) not in narrowed
    assert StrokeCombination(3, 4) in narrowed


def test_best_combinations_every_accepted_grid_is_lucky(permissive_data_set, naming_config):
    calculator = GridCalculator(permissive_data_set, naming_config)
    for family in range(1, 30):
        for combo in calculator.best_combinations(family):
            grids = calculator.grids(family, combo.mid, combo.last)
            assert grids.human in BEST_NUM_SET
            assert grids.earth in BEST_NUM_SET
            assert grids.total in BEST_NUM_SET
            assert grids.outer in BEST_NUM_SET
            assert 2 <= combo.mid <= 20 and 2 <= combo.last <= 20


def test_invalid_stroke_range():
    with pytest.raises(ValueError):
        NamingConfig.create_default().with_stroke_range(10, 5)


def test_stroke_estimate_is_deterministic(calculator):
    for char in ("龘", "靐", "A", "é"):
        first = calculator.strokes_of(char)
        assert first == calculator.strokes_of(char) == estimate_strokes(char)

    assert 5 <= estimate_strokes("龘") <= 19
    assert 1 <= estimate_strokes("A") <= 20
    assert estimate_strokes("") == 0


def test_strokes_from_dictionary(calculator):
    assert calculator.strokes_of("书") == 4
    assert calculator.strokes_of("书", use_traditional=True) == 10
    assert calculator.family_strokes("欧阳") == 14
    assert calculator.family_strokes("欧阳", use_traditional=True) == 32


def test_check_name_perfect_score(calculator):
    result = calculator.check_name("王子书")
    assert result.is_valid
    assert result.score == 100
    assert result.issues == ()
    assert result.grids == GridCalculation(5, 7, 7, 11, 5)
    assert result.sancai.level is SancaiLevel.GREAT_LUCK

    lines = result.explanation.split("\n")
    assert lines[0] == "王子书-简体笔画计算："
    assert lines[1] == "天格：5 【大吉】"
    assert lines[5] == "外格：5 【大吉】"
    assert lines[6] == "土金金 大吉 三才相生，成功顺利"


def test_check_name_with_issues(calculator):
    # 王文林: earth 12 and outer 9 are unlucky, 土金木 is 凶
    result = calculator.check_name("王文林")
    assert result.score == 35
    assert not result.is_valid
    assert result.issues == ("地格12为凶数", "外格9为凶数", "三才配置不佳")
    assert "地格：12 【凶】" in result.explanation


def test_check_name_traditional_strokes(calculator):
    result = calculator.check_name("王子书", use_traditional=True)
    assert result.grids == GridCalculation(5, 7, 13, 17, 11)
    assert result.explanation.startswith("王子书-繁体笔画计算：")


def test_check_name_compound_surname(calculator):
    result = calculator.check_name("欧阳子书", family_name="欧阳")
    assert result.grids.heaven == 15
    assert result.grids.human == 17
    assert result.grids.earth == 7


def test_check_name_single_given_character(calculator):
    result = calculator.check_name("王子")
    assert result.grids == GridCalculation(5, 7, 3, 7, 1)


def test_check_name_length_bounds(calculator):
    for name in ("王", "", "王子书心明"):
        result = calculator.check_name(name)
        assert not result.is_valid
        assert result.score == 0
        assert result.issues == ("名字长度必须是2-4个字符",)
        assert result.explanation == "无效姓名"
        assert result.sancai is None


def test_batch_check(calculator):
    results = calculator.batch_check(["王子书", "王文林"])
    assert list(results) == ["王子书", "王文林"]
    assert results["王子书"].score == 100
    assert results["王文林"].score == 35
