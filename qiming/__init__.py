from qiming.config import NamingConfig
from qiming.data_service import NamingDataLoader, NamingDataSet, PinyinService
from qiming.errors import (
    DataInitializationError,
    DataNotReadyError,
    GenerationCancelled,
    InvalidGenerationConfig,
    QimingError,
    UnsupportedNameLength,
)
from qiming.generator import Deadline, GeneratedName, GenerationConfig, NameGenerator
from qiming.naming_data import Gender, WuxingElement
from qiming.weighting import DEFAULT_WEIGHTS, ScoreComponents, WeightConfig

__version__ = "0.1.0"
