"""Exception hierarchy for the naming engine."""


class QimingError(Exception):
    """Base class for all naming engine errors."""


class DataInitializationError(QimingError):
    """A bundled data source is missing or malformed. Fatal at startup."""


class DataNotReadyError(QimingError):
    """Generation was requested before the data tables finished loading."""


class InvalidGenerationConfig(QimingError, ValueError):
    """The generation request itself is malformed (family name, gender, paging)."""


class UnsupportedNameLength(QimingError, ValueError):
    """The five-element scorer only understands two-character given names."""

    def __init__(self, given_name: str):
        super().__init__(f"Five-element analysis needs exactly 2 given-name characters, got {len(given_name)}")
        self.given_name = given_name


class GenerationCancelled(QimingError):
    """The deadline expired or the caller cancelled while candidates were being scored."""
