"""Post-aggregation filtering and display-adaptive field access.

The aggregates built by `DXCCAggregator` are never modified here. A
selected band and/or platform narrows the *meaning* of the QSO count, the
band statuses and the platform checkmarks shown for an aggregate; the
`display_*` accessors compute those narrowed values on demand.
"""

from typing import Dict, List, Optional

from dxcc_aggregator import EntityAggregate
from dxcc_entities import EntityLookupTable
from field_classifiers import CONFIRMED, NOT_WORKED, WORKED
from filter_config import (
    FilterConfiguration, STATUS_ALL_ENTITIES, STATUS_CONFIRMED,
    STATUS_NOT_WORKED, STATUS_WORKED,
)
from missing_entities import MissingEntityResolver


class FilterPipeline:
    """Filters the aggregate set and reads aggregates under the active filters."""

    # ---------------- Display-adaptive accessors ----------------
    @staticmethod
    def display_band_status(aggregate: EntityAggregate, band: str,
                            filters: FilterConfiguration) -> str:
        """
        Band status as shown under the active filters.

        With a platform selected, a band is Confirmed only if that platform
        confirmed a contact on it, Worked if the band has any contact, and
        blank otherwise. Worked is decided from the contact count, so a band
        without contacts can never show as Worked.
        """
        stats = aggregate.bands[band]
        platform = filters.platform_filter
        if platform is None:
            return stats.status
        if stats.platforms[platform].confirmed:
            return CONFIRMED
        if stats.contact_count > 0:
            return WORKED
        return NOT_WORKED

    @staticmethod
    def display_count(aggregate: EntityAggregate, filters: FilterConfiguration) -> int:
        """QSO count narrowed to the selected band and/or platform."""
        band = filters.band_filter
        platform = filters.platform_filter
        if band is not None and platform is not None:
            return aggregate.bands[band].platforms[platform].confirmed_count
        if band is not None:
            return aggregate.bands[band].contact_count
        if platform is not None:
            return aggregate.platforms[platform].confirmed_count
        return aggregate.total_contacts

    @staticmethod
    def display_platform(aggregate: EntityAggregate, platform: str,
                         filters: FilterConfiguration) -> bool:
        """Platform checkmark; with a band selected, only that band's confirmations count."""
        band = filters.band_filter
        if band is not None:
            return aggregate.bands[band].platforms[platform].confirmed
        return aggregate.platforms[platform].confirmed

    @staticmethod
    def display_platform_count(aggregate: EntityAggregate, platform: str,
                               filters: FilterConfiguration) -> int:
        band = filters.band_filter
        if band is not None:
            return aggregate.bands[band].platforms[platform].confirmed_count
        return aggregate.platforms[platform].confirmed_count

    @staticmethod
    def is_confirmed(aggregate: EntityAggregate, filters: FilterConfiguration) -> bool:
        """True when a band under consideration shows Confirmed."""
        return any(
            FilterPipeline.display_band_status(aggregate, band, filters) == CONFIRMED
            for band in filters.considered_bands()
        )

    @staticmethod
    def is_worked_only(aggregate: EntityAggregate, filters: FilterConfiguration) -> bool:
        """True when no band under consideration shows Confirmed but one shows Worked."""
        statuses = [
            FilterPipeline.display_band_status(aggregate, band, filters)
            for band in filters.considered_bands()
        ]
        return CONFIRMED not in statuses and WORKED in statuses

    # ---------------- Predicates ----------------
    @staticmethod
    def matches_search(aggregate: EntityAggregate, term: str) -> bool:
        """Case-insensitive substring match on the name, or substring of the entity number."""
        if not term:
            return True
        return term in aggregate.name.lower() or term in str(aggregate.entity_id)

    @staticmethod
    def matches_continent(aggregate: EntityAggregate, continent: Optional[str]) -> bool:
        return continent is None or aggregate.continent.upper() == continent

    @staticmethod
    def matches_band(aggregate: EntityAggregate, band: Optional[str]) -> bool:
        return band is None or aggregate.bands[band].status != NOT_WORKED

    @staticmethod
    def matches_platform(aggregate: EntityAggregate, filters: FilterConfiguration) -> bool:
        platform = filters.platform_filter
        return platform is None or FilterPipeline.display_platform(aggregate, platform, filters)

    @staticmethod
    def matches_status(aggregate: EntityAggregate, filters: FilterConfiguration) -> bool:
        if filters.status == STATUS_CONFIRMED:
            return FilterPipeline.is_confirmed(aggregate, filters)
        if filters.status == STATUS_WORKED:
            return FilterPipeline.is_worked_only(aggregate, filters)
        return True

    # ---------------- Pipeline ----------------
    @staticmethod
    def apply(aggregates: Dict[int, EntityAggregate],
              filters: FilterConfiguration,
              lookup: Optional[EntityLookupTable] = None) -> List[EntityAggregate]:
        """
        Apply the post-aggregation filters.

        The predicates are ANDed in order: search, continent, band presence,
        platform confirmation, status. "Not Worked" replaces the worked rows
        with missing-entity rows (search and continent still apply);
        "All Entities" returns both.

        Args:
            aggregates: Aggregate set from the pre-aggregation stage
            filters: Active filter configuration
            lookup: Entity table; without one no missing rows are produced

        Returns:
            Visible rows, unsorted
        """
        term = filters.search.strip().lower()
        continent = filters.continent_filter
        band = filters.band_filter

        rows: List[EntityAggregate] = []
        if filters.status != STATUS_NOT_WORKED:
            for aggregate in aggregates.values():
                if not FilterPipeline.matches_search(aggregate, term):
                    continue
                if not FilterPipeline.matches_continent(aggregate, continent):
                    continue
                if not FilterPipeline.matches_band(aggregate, band):
                    continue
                if not FilterPipeline.matches_platform(aggregate, filters):
                    continue
                if not FilterPipeline.matches_status(aggregate, filters):
                    continue
                rows.append(aggregate)

        if filters.status in (STATUS_NOT_WORKED, STATUS_ALL_ENTITIES):
            rows.extend(FilterPipeline.missing_rows(aggregates, filters, lookup))
        return rows

    @staticmethod
    def missing_rows(aggregates: Dict[int, EntityAggregate],
                     filters: FilterConfiguration,
                     lookup: Optional[EntityLookupTable]) -> List[EntityAggregate]:
        """Missing-entity rows for the selected band that pass the search and continent filters."""
        if lookup is None:
            return []
        term = filters.search.strip().lower()
        continent = filters.continent_filter
        return [
            missing for missing in MissingEntityResolver.missing(aggregates, lookup, filters.band_filter)
            if FilterPipeline.matches_search(missing, term)
            and FilterPipeline.matches_continent(missing, continent)
        ]
