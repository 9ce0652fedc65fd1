"""DXCC aggregation engine.

Folds parsed contact records into one `EntityAggregate` per DXCC entity,
holding per-band statuses and per-platform confirmation flags and counts.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from adif_parser import ADIFParser, Record
from dxcc_entities import DXCCEntity, EntityLookupTable
from field_classifiers import (
    BANDS, CONFIRMED, NOT_WORKED, PLATFORMS, WORKED,
    classify_mode, confirmed_platforms, is_confirmed, normalize_band, resolve_callsign,
)
from filter_config import ALL, FilterConfiguration


UNKNOWN_NAME = 'Unknown'


@dataclass
class PlatformStats:
    """Confirmation flag and confirmed-contact count for one platform."""
    confirmed: bool = False
    confirmed_count: int = 0


def _empty_platforms() -> Dict[str, PlatformStats]:
    return {platform: PlatformStats() for platform in PLATFORMS}


@dataclass
class BandStats:
    """Status, contact count and platform confirmations on one band."""
    status: str = NOT_WORKED
    contact_count: int = 0
    platforms: Dict[str, PlatformStats] = field(default_factory=_empty_platforms)


def _empty_bands() -> Dict[str, BandStats]:
    return {band: BandStats() for band in BANDS}


@dataclass
class EntityAggregate:
    """
    Everything the log says about one DXCC entity.

    `missing` marks a synthesized zero-activity row for an entity that has
    not been worked (or not on the selected band).
    """
    entity_id: int
    name: str
    continent: str
    retired: bool = False
    total_contacts: int = 0
    platforms: Dict[str, PlatformStats] = field(default_factory=_empty_platforms)
    bands: Dict[str, BandStats] = field(default_factory=_empty_bands)
    missing: bool = False

    def band_status(self, band: str) -> str:
        return self.bands[band].status

    def has_status(self, status: str, bands: Iterable[str]) -> bool:
        return any(self.bands[band].status == status for band in bands)

    def is_confirmed(self, bands: Iterable[str] = BANDS) -> bool:
        return self.has_status(CONFIRMED, bands)

    def band_contacts(self) -> int:
        return sum(stats.contact_count for stats in self.bands.values())

    def check(self) -> None:
        """
        Verify the stored invariants of this aggregate.

        Raises:
            ValueError: If a band status disagrees with its counts, a
                platform flag disagrees with its count, or the band
                contacts exceed the total
        """
        if self.band_contacts() > self.total_contacts:
            raise ValueError(f"DXCC {self.entity_id}: band contacts exceed total contacts")
        for platform, stats in self.platforms.items():
            if stats.confirmed != (stats.confirmed_count > 0):
                raise ValueError(f"DXCC {self.entity_id}: {platform} flag disagrees with its count")
        for band, stats in self.bands.items():
            confirmed_on_band = any(p.confirmed for p in stats.platforms.values())
            if stats.contact_count == 0:
                expected = NOT_WORKED
            elif confirmed_on_band:
                expected = CONFIRMED
            else:
                expected = WORKED
            if stats.status != expected:
                raise ValueError(
                    f"DXCC {self.entity_id}: {band} status '{stats.status}' should be '{expected}'")


class DXCCAggregator:
    """Builds the per-entity band/platform matrix from contact records."""

    @staticmethod
    def record_filter(filters: Optional[FilterConfiguration]) -> Callable[[Record], bool]:
        """
        Build the pre-aggregation predicate for a filter configuration.

        A record passes when its mode category matches, its logging
        callsign matches, and its QSO_DATE lies inside the date range. With
        a date range set, a record without a valid date never passes.
        """
        if filters is None:
            return lambda record: True
        mode = filters.mode
        operator = filters.operator.strip().upper()
        date_from = filters.date_from
        date_to = filters.date_to
        check_dates = filters.has_date_range()

        def passes(record: Record) -> bool:
            if mode != ALL and classify_mode(record.get('MODE')) != mode:
                return False
            if operator and resolve_callsign(record) != operator:
                return False
            if check_dates:
                qso_date = ADIFParser.parse_qso_date(record.get('QSO_DATE'))
                if qso_date is None:
                    return False
                if date_from is not None and qso_date < date_from:
                    return False
                if date_to is not None and qso_date > date_to:
                    return False
            return True

        return passes

    @staticmethod
    def pre_filter(records: List[Record], filters: Optional[FilterConfiguration]) -> List[Record]:
        """Return the records that pass the pre-aggregation filters."""
        if filters is None or not filters.has_pre_filters():
            return list(records)
        passes = DXCCAggregator.record_filter(filters)
        return [record for record in records if passes(record)]

    @staticmethod
    def new_aggregate(entity_id: int, record: Record,
                      lookup: Optional[EntityLookupTable]) -> EntityAggregate:
        """
        Start an empty aggregate for the first record seen of an entity.

        The name comes from the record first and the lookup table second;
        the continent comes from the lookup table first, since the table is
        more reliable than what logging programs write into CONT.
        """
        entity = lookup.lookup(entity_id) if lookup is not None else None
        name = record.get('COUNTRY') or (entity.name if entity else '') or UNKNOWN_NAME
        continent = (entity.continent if entity else '') or (record.get('CONT') or '').upper()
        return EntityAggregate(
            entity_id=entity_id,
            name=name,
            continent=continent,
            retired=entity.retired if entity else False,
        )

    @staticmethod
    def missing_aggregate(entity: DXCCEntity) -> EntityAggregate:
        """Synthesize a zero-activity row for an entity absent from the log."""
        return EntityAggregate(
            entity_id=entity.entity_id,
            name=entity.name or UNKNOWN_NAME,
            continent=entity.continent,
            retired=entity.retired,
            missing=True,
        )

    @staticmethod
    def add_record(aggregate: EntityAggregate, record: Record) -> None:
        """Fold one contact into an aggregate. Statuses and flags only ever move up."""
        aggregate.total_contacts += 1
        platforms = confirmed_platforms(record)
        for platform in platforms:
            stats = aggregate.platforms[platform]
            stats.confirmed = True
            stats.confirmed_count += 1

        band = normalize_band(record.get('BAND'))
        if band is None:
            return
        band_stats = aggregate.bands[band]
        band_stats.contact_count += 1
        for platform in platforms:
            stats = band_stats.platforms[platform]
            stats.confirmed = True
            stats.confirmed_count += 1
        if is_confirmed(record):
            band_stats.status = CONFIRMED
        elif band_stats.status == NOT_WORKED:
            band_stats.status = WORKED

    @staticmethod
    def aggregate(records: Iterable[Record],
                  filters: Optional[FilterConfiguration] = None,
                  lookup: Optional[EntityLookupTable] = None) -> Dict[int, EntityAggregate]:
        """
        Build one aggregate per DXCC entity in a single pass.

        Args:
            records: Parsed contact records
            filters: Only the pre-aggregation part (mode, operator, dates) is used
            lookup: Entity table used to resolve names, continents and retired flags

        Returns:
            Dictionary of DXCC entity number to aggregate
        """
        passes = DXCCAggregator.record_filter(filters)
        aggregates: Dict[int, EntityAggregate] = {}
        for record in records:
            entity_id = ADIFParser.grouping_key(record)
            if entity_id is None or not passes(record):
                continue
            aggregate = aggregates.get(entity_id)
            if aggregate is None:
                aggregate = DXCCAggregator.new_aggregate(entity_id, record, lookup)
                aggregates[entity_id] = aggregate
            DXCCAggregator.add_record(aggregate, record)
        return aggregates

    @staticmethod
    def total_contacts(aggregates: Dict[int, EntityAggregate]) -> int:
        return sum(aggregate.total_contacts for aggregate in aggregates.values())
