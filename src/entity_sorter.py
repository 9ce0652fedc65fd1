"""Column sorting for the DXCC table, with click-to-sort state."""

import locale
import unicodedata
from dataclasses import dataclass
from typing import Callable, List

from dxcc_aggregator import EntityAggregate
from field_classifiers import BANDS, PLATFORMS, STATUS_RANK
from filter_config import FilterConfiguration
from filter_pipeline import FilterPipeline


TEXT_COLUMNS = ('name', 'continent')
NUMERIC_COLUMNS = ('id', 'qsos')
SORT_COLUMNS: List[str] = list(TEXT_COLUMNS) + list(NUMERIC_COLUMNS) + BANDS + PLATFORMS


@dataclass(frozen=True)
class SortState:
    """The active sort column and direction."""
    column: str = 'name'
    descending: bool = False

    def click(self, column: str) -> 'SortState':
        """Select a column: reverse it if already active, otherwise use its default direction."""
        EntitySorter.check_column(column)
        if column == self.column:
            return SortState(column, not self.descending)
        return SortState(column, EntitySorter.default_descending(column))


def _text_key(value: str) -> str:
    # accents fold onto their base letter, so "Åland" sorts with the A's
    decomposed = unicodedata.normalize('NFKD', value)
    folded = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return locale.strxfrm(folded.casefold())


class EntitySorter:
    @staticmethod
    def check_column(column: str) -> None:
        if column not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort column '{column}'. Choose from: {', '.join(SORT_COLUMNS)}")

    @staticmethod
    def default_descending(column: str) -> bool:
        """Bands, platforms and counts list the most present first; text and ids ascend."""
        return column not in TEXT_COLUMNS and column != 'id'

    @staticmethod
    def sort_key(column: str, filters: FilterConfiguration) -> Callable[[EntityAggregate], object]:
        EntitySorter.check_column(column)
        if column == 'name':
            return lambda a: _text_key(a.name)
        if column == 'continent':
            return lambda a: _text_key(a.continent)
        if column == 'id':
            return lambda a: a.entity_id
        if column == 'qsos':
            return lambda a: FilterPipeline.display_count(a, filters)
        if column in BANDS:
            return lambda a: STATUS_RANK[FilterPipeline.display_band_status(a, column, filters)]
        return lambda a: (FilterPipeline.display_platform(a, column, filters),
                          FilterPipeline.display_platform_count(a, column, filters))

    @staticmethod
    def sort(rows: List[EntityAggregate], state: SortState,
             filters: FilterConfiguration) -> List[EntityAggregate]:
        """
        Sort rows by the active column.

        Ties keep name order (then entity number), whatever the direction.
        """
        ordered = sorted(rows, key=lambda a: (_text_key(a.name), a.entity_id))
        return sorted(ordered, key=EntitySorter.sort_key(state.column, filters), reverse=state.descending)
