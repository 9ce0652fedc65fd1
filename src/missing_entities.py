"""Missing DXCC entities: the active entities the log hasn't worked yet."""

from typing import Dict, List, Optional

from dxcc_aggregator import DXCCAggregator, EntityAggregate
from dxcc_entities import EntityLookupTable
from field_classifiers import NOT_WORKED


class MissingEntityResolver:
    """Computes the complement of the aggregate set against the lookup table."""

    @staticmethod
    def missing(aggregates: Dict[int, EntityAggregate],
                lookup: EntityLookupTable,
                band: Optional[str] = None) -> List[EntityAggregate]:
        """
        List the active entities not worked, as zero-activity rows.

        Without a band, an entity is missing when it has no aggregate at
        all. With a band, entities that were worked but have no contact on
        that band are missing too. Retired entities are never missing.

        Args:
            aggregates: Current aggregate set
            lookup: Entity lookup table
            band: Optional band the question is asked about

        Returns:
            Missing entities ordered by entity number
        """
        result = []
        for entity in lookup.all_active():
            aggregate = aggregates.get(entity.entity_id)
            if aggregate is None or (band is not None and aggregate.bands[band].status == NOT_WORKED):
                result.append(DXCCAggregator.missing_aggregate(entity))
        return result

    @staticmethod
    def missing_count(aggregates: Dict[int, EntityAggregate], lookup: EntityLookupTable) -> int:
        """
        Active entities left to work, never below zero.

        Contacts with retired or unknown entity numbers count as worked
        here, so the difference can go negative before clamping.
        """
        return max(0, lookup.active_count() - len(aggregates))
