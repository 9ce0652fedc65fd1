"""DXCC entity lookup table.

Maps a DXCC entity number to its canonical name, continent and retired
(deleted) flag. The built-in table covers the commonly worked entities;
a complete list can be loaded from a CSV file with `EntityLookupTable.from_csv`.
"""

import csv
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class DXCCEntity:
    """One row of the lookup table."""
    entity_id: int
    name: str
    continent: str
    retired: bool = False


# (entity number, name, continent, retired)
BUILTIN_ENTITIES = [
    (1, 'Canada', 'NA', False),
    (3, 'Afghanistan', 'AS', False),
    (5, 'Aland Islands', 'EU', False),
    (6, 'Alaska', 'NA', False),
    (7, 'Albania', 'EU', False),
    (12, 'Anguilla', 'NA', False),
    (14, 'Armenia', 'AS', False),
    (15, 'Asiatic Russia', 'AS', False),
    (21, 'Balearic Islands', 'EU', False),
    (27, 'Belarus', 'EU', False),
    (29, 'Canary Islands', 'AF', False),
    (32, 'Ceuta & Melilla', 'AF', False),
    (40, 'Crete', 'EU', False),
    (45, 'Dodecanese', 'EU', False),
    (50, 'Mexico', 'NA', False),
    (52, 'Estonia', 'EU', False),
    (54, 'European Russia', 'EU', False),
    (60, 'Bahamas', 'NA', False),
    (62, 'Barbados', 'NA', False),
    (63, 'French Guiana', 'SA', False),
    (64, 'Bermuda', 'NA', False),
    (65, 'British Virgin Islands', 'NA', False),
    (66, 'Belize', 'NA', False),
    (70, 'Cuba', 'NA', False),
    (72, 'Dominican Republic', 'NA', False),
    (74, 'El Salvador', 'NA', False),
    (75, 'Georgia', 'AS', False),
    (76, 'Guatemala', 'NA', False),
    (77, 'Grenada', 'NA', False),
    (78, 'Haiti', 'NA', False),
    (79, 'Guadeloupe', 'NA', False),
    (80, 'Honduras', 'NA', False),
    (82, 'Jamaica', 'NA', False),
    (84, 'Martinique', 'NA', False),
    (86, 'Nicaragua', 'NA', False),
    (88, 'Panama', 'NA', False),
    (89, 'Turks & Caicos Islands', 'NA', False),
    (90, 'Trinidad & Tobago', 'SA', False),
    (91, 'Aruba', 'SA', False),
    (94, 'Antigua & Barbuda', 'NA', False),
    (95, 'Dominica', 'NA', False),
    (96, 'Montserrat', 'NA', False),
    (97, 'St. Lucia', 'NA', False),
    (98, 'St. Vincent', 'NA', False),
    (100, 'Argentina', 'SA', False),
    (103, 'Guam', 'OC', False),
    (104, 'Bolivia', 'SA', False),
    (105, 'Guantanamo Bay', 'NA', False),
    (108, 'Brazil', 'SA', False),
    (110, 'Hawaii', 'OC', False),
    (112, 'Chile', 'SA', False),
    (116, 'Colombia', 'SA', False),
    (120, 'Ecuador', 'SA', False),
    (129, 'Guyana', 'SA', False),
    (130, 'Kazakhstan', 'AS', False),
    (132, 'Paraguay', 'SA', False),
    (135, 'Kyrgyzstan', 'AS', False),
    (136, 'Peru', 'SA', False),
    (137, 'Republic of Korea', 'AS', False),
    (140, 'Suriname', 'SA', False),
    (144, 'Uruguay', 'SA', False),
    (145, 'Latvia', 'EU', False),
    (146, 'Lithuania', 'EU', False),
    (148, 'Venezuela', 'SA', False),
    (149, 'Azores', 'EU', False),
    (150, 'Australia', 'OC', False),
    (170, 'New Zealand', 'OC', False),
    (179, 'Moldova', 'EU', False),
    (180, 'Mount Athos', 'EU', False),
    (202, 'Puerto Rico', 'NA', False),
    (203, 'Andorra', 'EU', False),
    (206, 'Austria', 'EU', False),
    (209, 'Belgium', 'EU', False),
    (212, 'Bulgaria', 'EU', False),
    (214, 'Corsica', 'EU', False),
    (215, 'Cyprus', 'AS', False),
    (218, 'Czechoslovakia', 'EU', True),
    (221, 'Denmark', 'EU', False),
    (222, 'Faroe Islands', 'EU', False),
    (223, 'England', 'EU', False),
    (224, 'Finland', 'EU', False),
    (225, 'Sardinia', 'EU', False),
    (227, 'France', 'EU', False),
    (229, 'German Democratic Republic', 'EU', True),
    (230, 'Fed. Rep. of Germany', 'EU', False),
    (236, 'Greece', 'EU', False),
    (237, 'Greenland', 'NA', False),
    (239, 'Hungary', 'EU', False),
    (242, 'Iceland', 'EU', False),
    (245, 'Ireland', 'EU', False),
    (248, 'Italy', 'EU', False),
    (251, 'Liechtenstein', 'EU', False),
    (254, 'Luxembourg', 'EU', False),
    (256, 'Madeira Islands', 'AF', False),
    (257, 'Malta', 'EU', False),
    (260, 'Monaco', 'EU', False),
    (263, 'Netherlands', 'EU', False),
    (265, 'Northern Ireland', 'EU', False),
    (266, 'Norway', 'EU', False),
    (269, 'Poland', 'EU', False),
    (272, 'Portugal', 'EU', False),
    (275, 'Romania', 'EU', False),
    (278, 'San Marino', 'EU', False),
    (279, 'Scotland', 'EU', False),
    (281, 'Spain', 'EU', False),
    (284, 'Sweden', 'EU', False),
    (287, 'Switzerland', 'EU', False),
    (288, 'Ukraine', 'EU', False),
    (291, 'United States of America', 'NA', False),
    (294, 'Wales', 'EU', False),
    (295, 'Vatican City', 'EU', False),
    (296, 'Serbia', 'EU', False),
    (318, 'China', 'AS', False),
    (324, 'India', 'AS', False),
    (327, 'Indonesia', 'OC', False),
    (330, 'Iran', 'AS', False),
    (333, 'Iraq', 'AS', False),
    (336, 'Israel', 'AS', False),
    (339, 'Japan', 'AS', False),
    (342, 'Jordan', 'AS', False),
    (348, 'Kuwait', 'AS', False),
    (354, 'Lebanon', 'AS', False),
    (363, 'Mongolia', 'AS', False),
    (370, 'United Arab Emirates', 'AS', False),
    (372, 'Pakistan', 'AS', False),
    (375, 'Philippines', 'OC', False),
    (376, 'Qatar', 'AS', False),
    (378, 'Saudi Arabia', 'AS', False),
    (381, 'Singapore', 'AS', False),
    (386, 'Taiwan', 'AS', False),
    (387, 'Thailand', 'AS', False),
    (390, 'Turkey', 'AS', False),
    (400, 'Algeria', 'AF', False),
    (446, 'Morocco', 'AF', False),
    (450, 'Nigeria', 'AF', False),
    (456, 'Senegal', 'AF', False),
    (462, 'South Africa', 'AF', False),
    (464, 'Namibia', 'AF', False),
    (474, 'Tunisia', 'AF', False),
    (478, 'Egypt', 'AF', False),
    (497, 'Croatia', 'EU', False),
    (499, 'Slovenia', 'EU', False),
    (501, 'Bosnia-Herzegovina', 'EU', False),
    (502, 'North Macedonia', 'EU', False),
    (503, 'Czech Republic', 'EU', False),
    (504, 'Slovak Republic', 'EU', False),
    (514, 'Montenegro', 'EU', False),
    (522, 'Republic of Kosovo', 'EU', False),
]


class EntityLookupTable:
    """Read-only lookup of DXCC entities by entity number."""

    def __init__(self, entities: Iterable[DXCCEntity]) -> None:
        self._entities: Dict[int, DXCCEntity] = {}
        for entity in entities:
            self._entities[entity.entity_id] = entity
        self._active: List[DXCCEntity] = [
            self._entities[key] for key in sorted(self._entities)
            if not self._entities[key].retired
        ]

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def lookup(self, entity_id: int) -> Optional[DXCCEntity]:
        """Return the entity for this number, or None if the table doesn't know it."""
        return self._entities.get(entity_id)

    def all_active(self) -> List[DXCCEntity]:
        """Return all non-retired entities, ordered by entity number."""
        return list(self._active)

    def active_count(self) -> int:
        return len(self._active)

    @classmethod
    def builtin(cls) -> 'EntityLookupTable':
        return cls(DXCCEntity(entity_id, name, continent, retired)
                   for entity_id, name, continent, retired in BUILTIN_ENTITIES)

    @classmethod
    def from_csv(cls, filename: str) -> 'EntityLookupTable':
        """
        Load a lookup table from a CSV file.

        The file needs the columns id, name, continent and retired. The
        retired column accepts yes/no, true/false or 1/0; rows with a
        non-numeric id are skipped.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If a required column is missing
        """
        entities = []
        with open(filename, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            columns = {name.strip().lower() for name in (reader.fieldnames or [])}
            missing = {'id', 'name', 'continent', 'retired'} - columns
            if missing:
                raise ValueError(f"Lookup file '{filename}' is missing columns: {', '.join(sorted(missing))}")
            for row in reader:
                row = {str(k).strip().lower(): (v or '').strip() for k, v in row.items() if k is not None}
                if not row['id'].isdecimal():
                    continue
                entities.append(DXCCEntity(
                    entity_id=int(row['id']),
                    name=row['name'],
                    continent=row['continent'].upper(),
                    retired=row['retired'].lower() in ('1', 'y', 'yes', 'true'),
                ))
        return cls(entities)
