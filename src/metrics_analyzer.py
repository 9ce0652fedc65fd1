"""DXCC metrics: headline statistics, chart summaries and the text report."""

from typing import List, Dict, Any, Iterable, Optional

from dxcc_aggregator import EntityAggregate
from field_classifiers import BANDS, CONFIRMED, PLATFORMS, PLATFORM_LABELS, WORKED
from filter_config import FilterConfiguration, STATUS_LABELS
from filter_pipeline import FilterPipeline


CONTINENTS = ['AF', 'AN', 'AS', 'EU', 'NA', 'OC', 'SA']
UNKNOWN_CONTINENT = 'Unknown'


class DXCCMetrics:
    @staticmethod
    def calculate_statistics(aggregates: Iterable[EntityAggregate],
                             filters: Optional[FilterConfiguration] = None,
                             missing: int = 0) -> Dict[str, Any]:
        """
        Calculate the five headline counters for a set of aggregates.

        Missing-entity rows are skipped. Counts and confirmations are read
        through the display-adaptive accessors, so a band or platform filter
        narrows them the same way it narrows the table.

        Args:
            aggregates: Aggregates (or filtered rows) to count
            filters: Active filters; None counts everything
            missing: Missing-entity count for this scope

        Returns:
            Dictionary with total_qsos, worked, confirmed, missing and
            confirmation_rate (percent, one decimal)
        """
        filters = filters or FilterConfiguration()
        worked = 0
        confirmed = 0
        contacts = 0
        for aggregate in aggregates:
            if aggregate.missing:
                continue
            worked += 1
            contacts += FilterPipeline.display_count(aggregate, filters)
            if FilterPipeline.is_confirmed(aggregate, filters):
                confirmed += 1
        rate = round(100.0 * confirmed / worked, 1) if worked else 0.0
        return {
            'total_qsos': contacts,
            'worked': worked,
            'confirmed': confirmed,
            'missing': max(0, missing),
            'confirmation_rate': rate,
        }

    @staticmethod
    def _continent_key(aggregate: EntityAggregate) -> str:
        return aggregate.continent.upper() or UNKNOWN_CONTINENT

    @staticmethod
    def _ordered_continents(keys: Iterable[str]) -> List[str]:
        keys = set(keys)
        ordered = [c for c in CONTINENTS if c in keys]
        ordered += sorted(k for k in keys if k not in CONTINENTS and k != UNKNOWN_CONTINENT)
        if UNKNOWN_CONTINENT in keys:
            ordered.append(UNKNOWN_CONTINENT)
        return ordered

    @staticmethod
    def continent_summary(rows: List[EntityAggregate], filters: FilterConfiguration) -> List[Dict[str, Any]]:
        """Confirmed and worked-only entity counts per continent."""
        counts: Dict[str, Dict[str, int]] = {}
        for aggregate in rows:
            if aggregate.missing:
                continue
            entry = counts.setdefault(DXCCMetrics._continent_key(aggregate), {'confirmed': 0, 'worked': 0})
            if FilterPipeline.is_confirmed(aggregate, filters):
                entry['confirmed'] += 1
            else:
                entry['worked'] += 1
        return [
            {'continent': continent, 'confirmed': counts[continent]['confirmed'],
             'worked': counts[continent]['worked']}
            for continent in DXCCMetrics._ordered_continents(counts)
        ]

    @staticmethod
    def band_summary(rows: List[EntityAggregate], filters: FilterConfiguration) -> List[Dict[str, Any]]:
        """Confirmed and worked-only entity counts per band (only the selected band if one is set)."""
        summary = []
        for band in filters.considered_bands():
            confirmed = 0
            worked = 0
            for aggregate in rows:
                if aggregate.missing:
                    continue
                status = FilterPipeline.display_band_status(aggregate, band, filters)
                if status == CONFIRMED:
                    confirmed += 1
                elif status == WORKED:
                    worked += 1
            summary.append({'band': band, 'confirmed': confirmed, 'worked': worked})
        return summary

    @staticmethod
    def platform_summary(rows: List[EntityAggregate], filters: FilterConfiguration) -> List[Dict[str, Any]]:
        """Entities confirmed through each platform, band-aware."""
        summary = []
        for platform in PLATFORMS:
            confirmed = sum(
                1 for aggregate in rows
                if not aggregate.missing and FilterPipeline.display_platform(aggregate, platform, filters)
            )
            summary.append({'platform': platform, 'label': PLATFORM_LABELS[platform], 'confirmed': confirmed})
        return summary

    @staticmethod
    def band_continent_matrix(rows: List[EntityAggregate], filters: FilterConfiguration) -> Dict[str, Any]:
        """
        Cross-tabulate bands against continents.

        Each cell holds the confirmed and worked-only counts, their total,
        and an intensity in [0, 1] relative to the busiest cell.

        Returns:
            Dictionary with 'bands', 'max_total' and 'rows' (one per continent)
        """
        bands = filters.considered_bands()
        cells: Dict[str, Dict[str, Dict[str, int]]] = {}
        for aggregate in rows:
            if aggregate.missing:
                continue
            continent = DXCCMetrics._continent_key(aggregate)
            row = cells.setdefault(continent, {band: {'confirmed': 0, 'worked': 0} for band in bands})
            for band in bands:
                status = FilterPipeline.display_band_status(aggregate, band, filters)
                if status == CONFIRMED:
                    row[band]['confirmed'] += 1
                elif status == WORKED:
                    row[band]['worked'] += 1

        max_total = 0
        for row in cells.values():
            for cell in row.values():
                max_total = max(max_total, cell['confirmed'] + cell['worked'])

        matrix_rows = []
        for continent in DXCCMetrics._ordered_continents(cells):
            row_cells = []
            for band in bands:
                cell = cells[continent][band]
                total = cell['confirmed'] + cell['worked']
                row_cells.append({
                    'band': band,
                    'confirmed': cell['confirmed'],
                    'worked': cell['worked'],
                    'total': total,
                    'intensity': round(total / max_total, 3) if max_total else 0.0,
                })
            matrix_rows.append({'continent': continent, 'cells': row_cells})
        return {'bands': bands, 'max_total': max_total, 'rows': matrix_rows}

    @staticmethod
    def calculate_charts(rows: List[EntityAggregate], filters: FilterConfiguration) -> Dict[str, Any]:
        """All four chart summaries, computed from the filtered rows alone."""
        return {
            'continents': DXCCMetrics.continent_summary(rows, filters),
            'bands': DXCCMetrics.band_summary(rows, filters),
            'platforms': DXCCMetrics.platform_summary(rows, filters),
            'band_continent': DXCCMetrics.band_continent_matrix(rows, filters),
        }

    @staticmethod
    def _generate_statistics_section(view: Any) -> list:
        section = []
        section.append("")
        section.append("DXCC STATISTICS:")
        section.append("-" * 40)
        header = f" {'Scope':<14} {'QSOs':>7} {'Worked':>7} {'Conf':>6} {'Missing':>8} {'Rate':>7}"
        section.append(header)
        section.append(" " + "-" * (len(header) - 1))
        for label, key in (("Entire log", 'unfiltered'), ("Pre-filtered", 'pre_filtered'), ("Filtered", 'filtered')):
            stats = view.statistics[key]
            section.append(
                f" {label:<14} {stats['total_qsos']:>7} {stats['worked']:>7} {stats['confirmed']:>6} "
                f"{stats['missing']:>8} {stats['confirmation_rate']:>6.1f}%"
            )
        return section

    @staticmethod
    def _generate_data_quality_section(data_quality: Dict[str, int]) -> list:
        section = []
        section.append("")
        section.append("DATA QUALITY ANALYSIS:")
        section.append("-" * 40)
        section.append(f"Records parsed: {data_quality.get('total_records', 0)}")
        section.append(f"Records without a DXCC entity: {data_quality.get('missing_dxcc', 0)}")
        section.append(f"Records on unrecognized bands: {data_quality.get('unrecognized_band', 0)}")
        section.append(f"Records with unparseable QSO_DATE: {data_quality.get('unparseable_date', 0)}")
        return section

    @staticmethod
    def _generate_chart_sections(charts: Dict[str, Any]) -> list:
        section = []
        section.append("")
        section.append("ENTITIES BY CONTINENT:")
        section.append("-" * 40)
        for entry in charts['continents']:
            section.append(f" {entry['continent']:<8} confirmed {entry['confirmed']:>4}   worked {entry['worked']:>4}")

        section.append("")
        section.append("ENTITIES BY BAND:")
        section.append("-" * 40)
        for entry in charts['bands']:
            section.append(f" {entry['band']:<8} confirmed {entry['confirmed']:>4}   worked {entry['worked']:>4}")

        section.append("")
        section.append("CONFIRMATIONS BY PLATFORM:")
        section.append("-" * 40)
        for entry in charts['platforms']:
            section.append(f" {entry['label']:<8} {entry['confirmed']:>4} entities")

        matrix = charts['band_continent']
        section.append("")
        section.append("BAND x CONTINENT (confirmed/worked):")
        section.append("-" * 40)
        section.append(" " + f"{'':<8}" + "".join(f"{band:>8}" for band in matrix['bands']))
        for row in matrix['rows']:
            cells = "".join(f"{str(cell['confirmed']) + '/' + str(cell['worked']):>8}" for cell in row['cells'])
            section.append(f" {row['continent']:<8}{cells}")
        return section

    @staticmethod
    def generate_summary_report(view: Any, max_rows: int = 25) -> str:
        """
        Generate a text summary of an analysis view.

        Args:
            view: AnalysisView with filters, rows, statistics, charts and data_quality
            max_rows: Number of table rows to include

        Returns:
            Report text
        """
        filters = view.filters
        report = []
        report.append("=" * 60)
        report.append("DXCC ANALYSIS SUMMARY REPORT")
        report.append("=" * 60)
        summary = filters.summary()
        report.append(summary if summary else "Filters: none")
        report.append(f"View: {STATUS_LABELS[filters.status]} ({len(view.rows)} entities)")
        report.extend(DXCCMetrics._generate_statistics_section(view))
        report.extend(DXCCMetrics._generate_data_quality_section(view.data_quality))
        report.extend(DXCCMetrics._generate_chart_sections(view.charts))

        report.append("")
        report.append("ENTITIES:")
        report.append("-" * 40)
        header = f" {'DXCC':>5}  {'Entity':<28} {'Cont':<5} {'QSOs':>5}  " + " ".join(f"{b:>4}" for b in BANDS)
        report.append(header)
        for aggregate in view.rows[:max_rows]:
            statuses = " ".join(
                f"{FilterPipeline.display_band_status(aggregate, band, filters) or '.':>4}" for band in BANDS
            )
            report.append(
                f" {aggregate.entity_id:>5}  {aggregate.name[:28]:<28} {aggregate.continent:<5} "
                f"{FilterPipeline.display_count(aggregate, filters):>5}  {statuses}"
            )
        if len(view.rows) > max_rows:
            report.append(f" ... ({len(view.rows)} total, showing {max_rows})")
        report.append("")
        return "\n".join(report)
