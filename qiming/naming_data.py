# ═════════════════════════════════════════════════════════════════════════════════
# FIVE GRIDS (WUGE) NUMEROLOGY TABLES
# ═════════════════════════════════════════════════════════════════════════════════
#
# Grid numbers (heaven, human, earth, total, outer) are classified against three
# primary sets and eight auxiliary "character" sets:
# 1. PRIMARY: lucky / semi-lucky / unlucky, used for evaluation and filtering
# 2. AUXILIARY: descriptive categories only, never used for filtering
# 3. DERIVED: GOOD/BAD unions and BEST_NUM_SET (good numbers absent from every bad list)
#
# All structures are immutable (frozenset / tuple / MappingProxyType).
# ═════════════════════════════════════════════════════════════════════════════════

from enum import Enum
from types import MappingProxyType
from typing import Optional

# Primary classification

# 吉祥运暗示数 - health, happiness, reputation
SANCAI_JIXIANG = frozenset(
    {1, 3, 5, 7, 8, 11, 13, 15, 16, 18, 21, 23, 24, 25, 31, 32, 33, 35, 37, 39, 41, 45, 47, 48, 52, 57, 61, 63, 65,
     67, 68, 81}
)

# 次吉祥运暗示数 - some obstacles, still auspicious
SANCAI_XIAOJI = frozenset({6, 17, 26, 27, 29, 30, 38, 49, 51, 55, 58, 71, 73, 75})

# 凶数运暗示数 - adversity, illness, hardship
SANCAI_XIONG = frozenset(
    {2, 4, 9, 10, 12, 14, 19, 20, 22, 28, 34, 36, 40, 42, 43, 44, 46, 50, 53, 54, 56, 59, 60, 62, 64, 66, 69, 70,
     72, 74, 76, 77, 78, 79, 80}
)

# Auxiliary "character" sets (descriptive only)
SANCAI_WISE = frozenset({3, 13, 16, 21, 23, 29, 31, 37, 39, 41, 45, 47})  # 首领运
SANCAI_WEALTH = frozenset({15, 16, 24, 29, 32, 33, 41, 52})  # 财富运
SANCAI_ARTIST = frozenset({13, 14, 18, 26, 29, 33, 35, 38, 48})  # 艺能运
SANCAI_GOODWIFE = frozenset({5, 6, 11, 13, 15, 16, 24, 32, 35})  # 女德运
SANCAI_DEATH = frozenset({21, 23, 26, 28, 29, 33, 39})  # 女性孤寡运
SANCAI_ALONE = frozenset({4, 10, 12, 14, 22, 28, 34})  # 孤独运
SANCAI_MERRY = frozenset({5, 6, 15, 16, 32, 39, 41})  # 双妻运
SANCAI_STUBBORN = frozenset({7, 17, 18, 25, 27, 28, 37, 47})  # 刚情运
SANCAI_GENTLE = frozenset({5, 6, 11, 15, 16, 24, 31, 32, 35})  # 温和运

# Derived sets
GOOD_NUM_LIST = (
    SANCAI_JIXIANG,
    SANCAI_WISE,
    SANCAI_WEALTH,
    SANCAI_ARTIST,
    SANCAI_GOODWIFE,
    SANCAI_MERRY,
    SANCAI_GENTLE,
)
BAD_NUM_LIST = (SANCAI_XIONG, SANCAI_DEATH, SANCAI_ALONE)

GOOD_NUM_SET = frozenset().union(*GOOD_NUM_LIST)
BAD_NUM_SET = frozenset().union(*BAD_NUM_LIST)

# Filter set used by the combination search: good and never bad
BEST_NUM_SET = GOOD_NUM_SET - BAD_NUM_SET

# Ordered (label, set) pairs for descriptive categorisation
NUMBER_CATEGORIES = (
    ("吉祥运", SANCAI_JIXIANG),
    ("次吉祥运", SANCAI_XIAOJI),
    ("凶数运", SANCAI_XIONG),
    ("首领运", SANCAI_WISE),
    ("财富运", SANCAI_WEALTH),
    ("艺能运", SANCAI_ARTIST),
    ("女德运", SANCAI_GOODWIFE),
    ("女性孤寡运", SANCAI_DEATH),
    ("孤独运", SANCAI_ALONE),
    ("双妻运", SANCAI_MERRY),
    ("刚情运", SANCAI_STUBBORN),
    ("温和运", SANCAI_GENTLE),
)

RESULT_UNKNOWN = "结果未知"

# ═════════════════════════════════════════════════════════════════════════════════
# FIVE ELEMENTS (WUXING)
# ═════════════════════════════════════════════════════════════════════════════════

# Last decimal digit → element symbol
DIGIT_TO_WUXING = MappingProxyType(
    {
        1: "木",  # 甲乙木
        2: "木",
        3: "火",  # 丙丁火
        4: "火",
        5: "土",  # 戊己土
        6: "土",
        7: "金",  # 庚辛金
        8: "金",
        9: "水",  # 壬癸水
        0: "水",
    }
)

# Production cycle: first element produces the second
WUXING_PRODUCTION = frozenset({("木", "火"), ("火", "土"), ("土", "金"), ("金", "水"), ("水", "木")})

# Destruction cycle: first element overcomes the second
WUXING_DESTRUCTION = frozenset({("木", "土"), ("土", "水"), ("水", "火"), ("火", "金"), ("金", "木")})

# Used when the dictionary has no element for a character
DEFAULT_WUXING = "土"

# ═════════════════════════════════════════════════════════════════════════════════
# PHONETICS
# ═════════════════════════════════════════════════════════════════════════════════

# Longest first so "zh" wins over "z"
PINYIN_INITIALS = ("zh", "ch", "sh", "b", "p", "m", "f", "d", "t", "n", "l", "g", "k", "h", "j", "q", "x", "z", "c",
                   "s", "r", "y", "w")  # fmt: skip

TONE_MARKS = MappingProxyType(
    {
        "ā": ("a", 1), "á": ("a", 2), "ǎ": ("a", 3), "à": ("a", 4),
        "ē": ("e", 1), "é": ("e", 2), "ě": ("e", 3), "è": ("e", 4),
        "ī": ("i", 1), "í": ("i", 2), "ǐ": ("i", 3), "ì": ("i", 4),
        "ō": ("o", 1), "ó": ("o", 2), "ǒ": ("o", 3), "ò": ("o", 4),
        "ū": ("u", 1), "ú": ("u", 2), "ǔ": ("u", 3), "ù": ("u", 4),
        "ǖ": ("ü", 1), "ǘ": ("ü", 2), "ǚ": ("ü", 3), "ǜ": ("ü", 4),
    }
)  # fmt: skip

TONE_DESCRIPTIONS = MappingProxyType(
    {
        0: ("轻声", "ping"),
        1: ("一声(阴平)", "ping"),
        2: ("二声(阳平)", "ping"),
        3: ("三声(上声)", "ze"),
        4: ("四声(去声)", "ze"),
    }
)

# ═════════════════════════════════════════════════════════════════════════════════
# MEANING TABLES
# ═════════════════════════════════════════════════════════════════════════════════

# Each group contributes at most one bonus
POSITIVE_KEYWORD_GROUPS = (
    ("德", "仁", "义", "礼", "智", "信", "忠", "孝", "诚", "善"),  # virtue
    ("智", "慧", "明", "聪", "睿", "哲", "思", "学", "文", "博"),  # wisdom
    ("成", "功", "达", "胜", "优", "秀", "杰", "才", "能", "强"),  # success
    ("美", "好", "佳", "优", "雅", "清", "纯", "洁", "亮", "光"),  # beauty
    ("山", "水", "林", "花", "草", "阳", "月", "星", "云", "风"),  # nature
    ("春", "夏", "秋", "冬", "晨", "夕", "朝", "暮", "新", "永"),  # seasons
)

NEGATIVE_KEYWORD_GROUPS = (
    ("病", "痛", "苦", "难", "伤", "死", "亡", "败", "坏", "恶"),  # illness
    ("灾", "祸", "险", "危", "毒", "害", "破", "损", "失", "缺"),  # disaster
    ("愁", "悲", "哭", "泪", "怒", "恨", "怨", "忧", "惧", "惊"),  # sorrow
)

CULTURAL_KEYWORDS = ("诗", "书", "礼", "易", "春", "秋", "论", "语", "孟", "子")
CLASSICAL_PARTICLES = frozenset({"之", "者", "也", "其", "则", "以", "为", "有", "无", "是"})

CULTURAL_REFERENCES = MappingProxyType(
    {
        "浩然": '孟子"吾善养吾浩然之气"，正大刚直之意',
        "子轩": "轩辕黄帝之后代，寓意尊贵",
        "思源": '"饮水思源"，寓意不忘本源',
        "志远": '"志存高远"，寓意理想远大',
        "博文": '"博文约礼"，寓意学识渊博',
        "明德": '"明德惟馨"，寓意品德高尚',
        "慧心": '"心如明镜"，寓意智慧通达',
        "雅韵": "高雅的韵味，寓意气质不凡",
        "一鸣": '"一鸣惊人"，寓意才华出众',
        "文彬": '"文质彬彬"，寓意文雅有礼',
        "俊杰": '"人中俊杰"，寓意才能出众',
        "嘉诚": '"嘉言善行"，寓意诚实善良',
        "瑞祥": '"祥瑞之兆"，寓意吉祥如意',
    }
)

# ═════════════════════════════════════════════════════════════════════════════════
# SOCIAL TABLES
# ═════════════════════════════════════════════════════════════════════════════════

ERA_CLASSICAL = frozenset("文武德仁义礼智信忠孝贤良正明清")
ERA_MODERN = frozenset("浩轩宇涵博睿琪瑞嘉悦欣雨晨阳梦")
ERA_NEUTRAL = frozenset("华国家安康健平和福寿富贵荣昌盛")
ERA_OUTDATED = frozenset("建国军民工农兵学商红东西南北中")

# Characters carrying a specific historical imprint
ERA_SENSITIVE = frozenset("国军建红东文革")

UNIQUE_CHARACTERS = frozenset("琮瑾瑜昭妍茂辉康适琪")
OVERUSED_CHARACTERS = frozenset("小大一二三四五六七八九十")

# Given-name duplication levels
HIGH_DUPLICATION = frozenset({"浩然", "子轩", "雨涵", "欣怡", "嘉怡", "思涵", "梓涵", "宇轩", "博文", "雨萱"})
MEDIUM_DUPLICATION = frozenset({"志强", "小明", "小红", "小华", "小李", "小王", "小张", "小刘", "小陈", "小杨"})
LOW_DUPLICATION = frozenset({"琮琅", "瑾瑜", "昭华", "清妍", "雅惠", "温茂", "德辉", "弘深", "嘉志", "康适"})

# (minimum frequency, commonness score), descending
SOCIAL_FREQUENCY_STEPS = (
    (10000, 95),
    (5000, 90),
    (1000, 85),
    (500, 80),
    (200, 75),
    (100, 70),
    (50, 65),
    (20, 60),
    (10, 55),
    (5, 50),
    (1, 45),
)

MEANING_FREQUENCY_STEPS = (
    (1000, 90),
    (500, 80),
    (100, 70),
    (50, 60),
    (10, 50),
)

# ═════════════════════════════════════════════════════════════════════════════════
# CLOSED VOCABULARIES
# ═════════════════════════════════════════════════════════════════════════════════


class WuxingElement(Enum):
    """The five elements, valued by their Chinese symbol."""

    WOOD = "木"
    FIRE = "火"
    EARTH = "土"
    METAL = "金"
    WATER = "水"

    @classmethod
    def from_number(cls, number: int) -> "WuxingElement":
        """Element of a grid number, decided by its last decimal digit."""
        return cls(DIGIT_TO_WUXING[abs(number) % 10])

    @classmethod
    def from_symbol(cls, symbol: str) -> Optional["WuxingElement"]:
        try:
            return cls(symbol)
        except ValueError:
            return None

    @property
    def symbol(self) -> str:
        return self.value


class SancaiLevel(Enum):
    GREAT_LUCK = "大吉"
    MEDIUM_LUCK = "中吉"
    LUCK = "吉"
    UNLUCKY = "凶"
    GREAT_UNLUCKY = "大凶"
    UNKNOWN = "未知"

    @classmethod
    def from_result(cls, result: Optional[str]) -> "SancaiLevel":
        """Map the textual result of a rule-table entry to a level."""
        if not result:
            return cls.UNKNOWN
        for level in cls:
            if level.value == result:
                return level
        return cls.UNKNOWN

    @property
    def is_auspicious(self) -> bool:
        return self in (SancaiLevel.GREAT_LUCK, SancaiLevel.MEDIUM_LUCK, SancaiLevel.LUCK)


class NumberFortune(Enum):
    GREAT_LUCK = "大吉"
    SEMI_LUCKY = "次吉"
    UNLUCKY = "凶"
    NEUTRAL = "中性"


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def label(self) -> str:
        return "男" if self is Gender.MALE else "女"
