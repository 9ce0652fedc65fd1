"""CSV export of the filtered, sorted DXCC table."""

import csv
import io
import os
from typing import List

from dxcc_aggregator import EntityAggregate
from field_classifiers import BANDS, PLATFORMS, PLATFORM_LABELS
from filter_config import FilterConfiguration
from filter_pipeline import FilterPipeline


HEADER: List[str] = (
    ['DXCC ID', 'Country', 'Retired', 'Continent', 'QSOs']
    + BANDS
    + [PLATFORM_LABELS[platform] for platform in PLATFORMS]
)


class CSVExporter:
    @staticmethod
    def row_values(aggregate: EntityAggregate, filters: FilterConfiguration) -> List[object]:
        """One table row, read through the display-adaptive accessors."""
        return (
            [aggregate.entity_id, aggregate.name, 'Yes' if aggregate.retired else 'No',
             aggregate.continent, FilterPipeline.display_count(aggregate, filters)]
            + [FilterPipeline.display_band_status(aggregate, band, filters) for band in BANDS]
            + ['Yes' if FilterPipeline.display_platform(aggregate, platform, filters) else 'No'
               for platform in PLATFORMS]
        )

    @staticmethod
    def format_csv(rows: List[EntityAggregate], filters: FilterConfiguration) -> str:
        """
        Render the complete filtered set as CSV text.

        The first line is the filter summary (empty when no filter is
        active), the second the column header, then one line per row.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        summary = filters.summary()
        writer.writerow([summary] if summary else [])
        writer.writerow(HEADER)
        for aggregate in rows:
            writer.writerow(CSVExporter.row_values(aggregate, filters))
        return buffer.getvalue()

    @staticmethod
    def write_csv(rows: List[EntityAggregate], filters: FilterConfiguration, output_file: str) -> None:
        """Write the CSV export to a file, creating its directory if needed."""
        output_dir = os.path.dirname(output_file)
        if output_dir and not os.path.exists(output_dir):
            os.makedirs(output_dir)
        with open(output_file, 'w', encoding='utf-8', newline='') as f:
            f.write(CSVExporter.format_csv(rows, filters))
