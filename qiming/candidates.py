from __future__ import annotations
from typing import AbstractSet, Iterable, List, Sequence

from qiming.data_service import NamingDataSet
from qiming.naming_data import WuxingElement


class CandidateFilter:
    """Character candidates by stroke count and element, narrowed to usable characters."""

    def __init__(self, data: NamingDataSet):
        self._data = data

    def candidates(self, stroke_count: int, element: WuxingElement, use_traditional: bool = False) -> List[str]:
        """Dictionary characters with the given strokes and element, in dictionary order."""
        return list(self._data.characters_by_stroke_and_element(stroke_count, element, use_traditional))

    @staticmethod
    def filter_usable(
        chars: Iterable[str],
        common_set: AbstractSet[str],
        avoid_set: AbstractSet[str],
        standard_set: AbstractSet[str],
    ) -> List[str]:
        """
        Keep characters that are standard, common for the gender and not avoided.

        The cheapest check (the usually tiny avoid set) runs first. Input order is preserved.
        """
        return [c for c in chars if c not in avoid_set and c in common_set and c in standard_set]

    def usable_candidates(
        self,
        stroke_count: int,
        element: WuxingElement,
        common_set: AbstractSet[str],
        avoid_set: AbstractSet[str],
        use_traditional: bool = False,
    ) -> List[str]:
        return self.filter_usable(
            self.candidates(stroke_count, element, use_traditional),
            common_set,
            avoid_set,
            self._data.standard_characters,
        )

    @staticmethod
    def valid_combination_count(mid_list: Sequence[str], last_list: Sequence[str]) -> int:
        """Capacity estimate for pagination and progress logging."""
        return len(mid_list) * len(last_list)
