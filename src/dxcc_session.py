"""
Analysis session
================

Holds the state of one loaded logbook and recomputes the derived views
when filters or the sort column change:

1) Load text -> parsed records, full aggregate set, unfiltered statistics
   (computed once per load)
2) Pre-aggregation filters (mode, operator, dates) -> aggregate set,
   cached by the pre-filter values
3) Post-aggregation filters + sort -> rows, statistics, charts, cached by
   the full filter configuration and sort state

Every stage is a pure function of its inputs; the session only decides
which stages need to run again. Loading a new log discards everything.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from adif_parser import ADIFParser, Record
from csv_exporter import CSVExporter
from dxcc_aggregator import DXCCAggregator, EntityAggregate
from dxcc_entities import EntityLookupTable
from entity_sorter import EntitySorter, SortState
from filter_config import FilterConfiguration
from filter_pipeline import FilterPipeline
from metrics_analyzer import DXCCMetrics
from missing_entities import MissingEntityResolver


@dataclass
class AnalysisView:
    """Everything derived for one filter configuration and sort state."""
    filters: FilterConfiguration
    sort: SortState
    rows: List[EntityAggregate]
    statistics: Dict[str, Dict[str, Any]]
    charts: Dict[str, Any]
    data_quality: Dict[str, int]


class AnalysisSession:
    """One logbook loaded into memory, with cached filter/sort recomputation."""

    def __init__(self, lookup: Optional[EntityLookupTable] = None) -> None:
        self.lookup = lookup if lookup is not None else EntityLookupTable.builtin()
        self.filters = FilterConfiguration()
        self.sort_state = SortState()
        # counts full aggregation passes (used to check caching)
        self.aggregation_runs = 0
        self.clear()

    def clear(self) -> None:
        """Discard the loaded log and every derived result."""
        self.records: List[Record] = []
        self.data_quality: Dict[str, int] = ADIFParser.summarize([])
        self._all_aggregates: Dict[int, EntityAggregate] = {}
        self._unfiltered_stats = DXCCMetrics.calculate_statistics(
            [], missing=MissingEntityResolver.missing_count({}, self.lookup))
        self._pre_cache: Optional[Tuple[Tuple, Dict[int, EntityAggregate]]] = None
        self._view_cache: Optional[Tuple[Tuple, AnalysisView]] = None

    # ---------------- Loading ----------------
    def load_text(self, content: str) -> int:
        """Parse and analyze a logbook text; returns the number of records parsed."""
        return self.load_records(ADIFParser.parse_adif_text(content))

    def load_records(self, records: List[Record]) -> int:
        self.clear()
        self.records = list(records)
        self.data_quality = ADIFParser.summarize(self.records)
        self._all_aggregates = self._run_aggregation(None)
        self._unfiltered_stats = DXCCMetrics.calculate_statistics(
            self._all_aggregates.values(),
            missing=MissingEntityResolver.missing_count(self._all_aggregates, self.lookup),
        )
        return len(self.records)

    @property
    def has_data(self) -> bool:
        return bool(self._all_aggregates)

    # ---------------- Stages ----------------
    def _run_aggregation(self, filters: Optional[FilterConfiguration]) -> Dict[int, EntityAggregate]:
        self.aggregation_runs += 1
        return DXCCAggregator.aggregate(self.records, filters, self.lookup)

    def aggregates(self, filters: Optional[FilterConfiguration] = None) -> Dict[int, EntityAggregate]:
        """Aggregate set for the pre-aggregation part of the filters."""
        filters = filters or FilterConfiguration()
        if not filters.has_pre_filters():
            return self._all_aggregates
        key = filters.pre_key()
        if self._pre_cache is not None and self._pre_cache[0] == key:
            return self._pre_cache[1]
        aggregates = self._run_aggregation(filters)
        self._pre_cache = (key, aggregates)
        return aggregates

    def set_filters(self, filters: FilterConfiguration) -> AnalysisView:
        self.filters = filters
        return self.view()

    def set_sort(self, column: str, descending: Optional[bool] = None) -> AnalysisView:
        """Sort by a column, in its default direction unless one is given."""
        EntitySorter.check_column(column)
        if descending is None:
            descending = EntitySorter.default_descending(column)
        self.sort_state = SortState(column, descending)
        return self.view()

    def sort_by(self, column: str) -> AnalysisView:
        """Click a column header."""
        self.sort_state = self.sort_state.click(column)
        return self.view()

    def view(self, filters: Optional[FilterConfiguration] = None,
             sort: Optional[SortState] = None) -> AnalysisView:
        """
        Build (or reuse) the view for a filter configuration and sort state.

        Args:
            filters: Filters to apply; defaults to the session's current filters
            sort: Sort state; defaults to the session's current sort state

        Returns:
            AnalysisView with sorted rows, statistics at three scopes, charts
            and the parse diagnostics
        """
        filters = filters or self.filters
        sort = sort or self.sort_state
        key = (filters, sort)
        if self._view_cache is not None and self._view_cache[0] == key:
            return self._view_cache[1]

        aggregates = self.aggregates(filters)
        rows = EntitySorter.sort(FilterPipeline.apply(aggregates, filters, self.lookup), sort, filters)
        pre_stats = DXCCMetrics.calculate_statistics(
            aggregates.values(),
            missing=MissingEntityResolver.missing_count(aggregates, self.lookup),
        )
        filtered_stats = DXCCMetrics.calculate_statistics(
            rows, filters,
            missing=len(FilterPipeline.missing_rows(aggregates, filters, self.lookup)),
        )
        view = AnalysisView(
            filters=filters,
            sort=sort,
            rows=rows,
            statistics={
                'unfiltered': self._unfiltered_stats,
                'pre_filtered': pre_stats,
                'filtered': filtered_stats,
            },
            charts=DXCCMetrics.calculate_charts(rows, filters),
            data_quality=self.data_quality,
        )
        self._view_cache = (key, view)
        return view

    # ---------------- Output ----------------
    def export_csv(self, output_file: Optional[str] = None) -> str:
        """CSV of the complete current view; also written to `output_file` when given."""
        view = self.view()
        if output_file:
            CSVExporter.write_csv(view.rows, view.filters, output_file)
        return CSVExporter.format_csv(view.rows, view.filters)

    def summary_report(self) -> str:
        return DXCCMetrics.generate_summary_report(self.view())
