"""Tests for the DXCC aggregation engine."""

import itertools
import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dxcc_aggregator import DXCCAggregator, EntityAggregate, UNKNOWN_NAME
from dxcc_entities import EntityLookupTable
from field_classifiers import BANDS, CONFIRMED, NOT_WORKED, WORKED
from filter_config import FilterConfiguration


EXAMPLE_RECORDS = [
    {'DXCC': '291', 'BAND': '20m'},
    {'DXCC': '291', 'BAND': '20m', 'LOTW_QSL_RCVD': 'Y'},
    {'DXCC': '5', 'BAND': '40m'},
]

FILTER_RECORDS = [
    {'DXCC': '291', 'BAND': '20m', 'MODE': 'FT8', 'STATION_CALLSIGN': 'K1ABC', 'QSO_DATE': '20240110'},
    {'DXCC': '291', 'BAND': '40m', 'MODE': 'CW', 'OPERATOR': 'W2XYZ', 'QSO_DATE': '20240220'},
    {'DXCC': '5', 'BAND': '15m', 'MODE': 'USB', 'STATION_CALLSIGN': 'k1abc', 'QSO_DATE': '20240315'},
    {'DXCC': '230', 'BAND': '10m', 'MODE': 'CW', 'STATION_CALLSIGN': 'K1ABC', 'QSO_DATE': 'bad'},
]


def snapshot(aggregates):
    """Comparable view of an aggregate set."""
    return {
        key: (a.name, a.continent, a.total_contacts,
              {band: (s.status, s.contact_count) for band, s in a.bands.items()},
              {p: (s.confirmed, s.confirmed_count) for p, s in a.platforms.items()})
        for key, a in aggregates.items()
    }


class TestAggregate:
    """Test folding records into aggregates."""

    def test_example_log(self) -> None:
        """Test the three-record example."""
        aggregates = DXCCAggregator.aggregate(EXAMPLE_RECORDS, lookup=EntityLookupTable.builtin())
        assert set(aggregates) == {291, 5}
        usa = aggregates[291]
        assert usa.total_contacts == 2
        assert usa.band_status('20m') == CONFIRMED
        assert usa.bands['20m'].contact_count == 2
        assert usa.platforms['lotw'].confirmed
        assert usa.platforms['lotw'].confirmed_count == 1
        assert not usa.platforms['eqsl'].confirmed
        aland = aggregates[5]
        assert aland.total_contacts == 1
        assert aland.band_status('40m') == WORKED
        assert all(aland.band_status(b) == NOT_WORKED for b in BANDS if b != '40m')

    def test_totals_equal_keyed_records(self) -> None:
        """Test total contacts equal the records with a grouping key."""
        records = EXAMPLE_RECORDS + [{'BAND': '20m'}, {'DXCC': 'x', 'BAND': '20m'}, {'DXCC': '291', 'BAND': '2m'}]
        aggregates = DXCCAggregator.aggregate(records)
        assert DXCCAggregator.total_contacts(aggregates) == 4

    def test_unrecognized_band_counts_toward_total_only(self) -> None:
        """Test a contact on an unknown band has no band bucket."""
        aggregates = DXCCAggregator.aggregate([{'DXCC': '291', 'BAND': '2m', 'LOTW_QSL_RCVD': 'Y'}])
        usa = aggregates[291]
        assert usa.total_contacts == 1
        assert usa.band_contacts() == 0
        assert usa.platforms['lotw'].confirmed
        assert all(usa.band_status(b) == NOT_WORKED for b in BANDS)
        usa.check()

    def test_order_independent(self) -> None:
        """Test every permutation of the records yields the same aggregates."""
        records = EXAMPLE_RECORDS + [{'DXCC': '291', 'BAND': '20m', 'QSL_RCVD': 'N'}]
        expected = snapshot(DXCCAggregator.aggregate(records))
        for permutation in itertools.permutations(records):
            assert snapshot(DXCCAggregator.aggregate(list(permutation))) == expected

    def test_idempotent(self) -> None:
        """Test aggregating twice gives identical results."""
        first = DXCCAggregator.aggregate(FILTER_RECORDS)
        second = DXCCAggregator.aggregate(FILTER_RECORDS)
        assert first == second

    def test_confirmed_record_never_leaves_worked(self) -> None:
        """Test a confirmed contact always leaves its band Confirmed."""
        records = [{'DXCC': '291', 'BAND': '20m', 'QSL_RCVD': 'V'}, {'DXCC': '291', 'BAND': '20m'}]
        assert DXCCAggregator.aggregate(records)[291].band_status('20m') == CONFIRMED

    def test_upload_only_stays_worked(self) -> None:
        """Test a QRZ upload status alone leaves the band Worked."""
        aggregates = DXCCAggregator.aggregate([{'DXCC': '291', 'BAND': '20m', 'QRZCOM_QSO_UPLOAD_STATUS': 'Y'}])
        usa = aggregates[291]
        assert usa.band_status('20m') == WORKED
        assert not usa.platforms['qrz'].confirmed
        usa.check()

    def test_name_and_continent_resolution(self) -> None:
        """Test record name first, lookup continent first."""
        lookup = EntityLookupTable.builtin()
        records = [
            {'DXCC': '291', 'COUNTRY': 'United States', 'CONT': 'na', 'BAND': '20m'},
            {'DXCC': '5', 'BAND': '40m', 'CONT': 'AF'},
        ]
        aggregates = DXCCAggregator.aggregate(records, lookup=lookup)
        assert aggregates[291].name == 'United States'
        assert aggregates[5].name == 'Aland Islands'
        assert aggregates[5].continent == 'EU'

    def test_lookup_miss(self) -> None:
        """Test an entity unknown everywhere is still aggregated."""
        aggregates = DXCCAggregator.aggregate([{'DXCC': '999', 'BAND': '20m'}],
                                              lookup=EntityLookupTable.builtin())
        assert aggregates[999].name == UNKNOWN_NAME
        assert aggregates[999].continent == ''
        assert aggregates[999].total_contacts == 1

    def test_continent_from_record_when_lookup_misses(self) -> None:
        """Test the CONT field is the fallback continent."""
        aggregates = DXCCAggregator.aggregate([{'DXCC': '999', 'CONT': 'oc', 'COUNTRY': 'Somewhere'}])
        assert aggregates[999].continent == 'OC'
        assert aggregates[999].name == 'Somewhere'

    def test_retired_flag_from_lookup(self) -> None:
        """Test retired entities are marked."""
        aggregates = DXCCAggregator.aggregate([{'DXCC': '218', 'BAND': '20m'}],
                                              lookup=EntityLookupTable.builtin())
        assert aggregates[218].retired

    def test_empty_input(self) -> None:
        """Test no records give no aggregates."""
        assert DXCCAggregator.aggregate([]) == {}


class TestPreFilters:
    """Test pre-aggregation filters."""

    def test_mode_filter(self) -> None:
        """Test only the selected mode category is aggregated."""
        aggregates = DXCCAggregator.aggregate(FILTER_RECORDS, FilterConfiguration(mode='CW'))
        assert set(aggregates) == {291, 230}
        assert aggregates[291].total_contacts == 1
        assert aggregates[291].band_status('40m') == WORKED
        assert aggregates[291].band_status('20m') == NOT_WORKED

    def test_operator_filter(self) -> None:
        """Test the resolved callsign is compared case-insensitively."""
        aggregates = DXCCAggregator.aggregate(FILTER_RECORDS, FilterConfiguration(operator='k1abc'))
        assert set(aggregates) == {291, 5, 230}
        assert aggregates[291].total_contacts == 1
        aggregates = DXCCAggregator.aggregate(FILTER_RECORDS, FilterConfiguration(operator='W2XYZ'))
        assert set(aggregates) == {291}

    def test_date_range_inclusive(self) -> None:
        """Test both ends of the date range are inclusive."""
        filters = FilterConfiguration(date_from=date(2024, 1, 10), date_to=date(2024, 2, 20))
        aggregates = DXCCAggregator.aggregate(FILTER_RECORDS, filters)
        assert set(aggregates) == {291}
        assert aggregates[291].total_contacts == 2

    def test_unparseable_date_fails_closed(self) -> None:
        """Test a record with a bad date is excluded by any date range."""
        filters = FilterConfiguration(date_from=date(2000, 1, 1))
        assert 230 not in DXCCAggregator.aggregate(FILTER_RECORDS, filters)
        assert 230 in DXCCAggregator.aggregate(FILTER_RECORDS)

    def test_pre_filter_without_filters(self) -> None:
        """Test every record passes when no pre-filter is set."""
        filters = FilterConfiguration(status='confirmed', band='20m')
        assert DXCCAggregator.pre_filter(FILTER_RECORDS, filters) == FILTER_RECORDS


class TestAggregateCheck:
    """Test the aggregate invariant check."""

    def test_aggregates_pass_check(self) -> None:
        """Test engine output satisfies its invariants."""
        for aggregate in DXCCAggregator.aggregate(EXAMPLE_RECORDS + FILTER_RECORDS).values():
            aggregate.check()

    def test_worked_band_without_contacts(self) -> None:
        """Test a Worked status with zero contacts is rejected."""
        aggregate = EntityAggregate(entity_id=291, name='USA', continent='NA', total_contacts=1)
        aggregate.bands['40m'].status = WORKED
        with pytest.raises(ValueError):
            aggregate.check()

    def test_platform_flag_disagrees_with_count(self) -> None:
        """Test a platform flag without a confirmed count is rejected."""
        aggregate = EntityAggregate(entity_id=291, name='USA', continent='NA')
        aggregate.platforms['lotw'].confirmed = True
        with pytest.raises(ValueError):
            aggregate.check()

    def test_band_contacts_exceed_total(self) -> None:
        """Test band counts above the total are rejected."""
        aggregate = EntityAggregate(entity_id=291, name='USA', continent='NA')
        aggregate.bands['20m'].contact_count = 1
        aggregate.bands['20m'].status = WORKED
        with pytest.raises(ValueError):
            aggregate.check()
