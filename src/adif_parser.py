"""ADIF file parser for DXCC logbook analysis."""

import re
from datetime import date, datetime
from types import MappingProxyType
from typing import List, Dict, Mapping, Optional, Iterable

from field_classifiers import normalize_band


# <NAME:LENGTH[:TYPE]>VALUE -- VALUE runs up to the next '<' and is cut to LENGTH.
# No nested quantifiers, so matching stays linear on large logs.
ADIF_TAG_RE = re.compile(r'<([A-Za-z0-9_]+):(\d+)(?::[A-Za-z0-9]+)?>([^<]*)')
EOR_RE = re.compile(r'<eor>', re.IGNORECASE)
EOH_RE = re.compile(r'<eoh>', re.IGNORECASE)

GROUPING_KEY_FIELD = 'DXCC'

Record = Mapping[str, str]


class ADIFParser:
    """Tolerant parser for ADIF (Amateur Data Interchange Format) logbooks."""

    @staticmethod
    def parse_record(chunk: str) -> Dict[str, str]:
        """
        Extract the tagged fields of one record.

        Field names are upper-cased; values are truncated to their declared
        length and stripped. Tags that do not match the ADIF syntax are
        skipped.

        Args:
            chunk: Text of a single record, without the end-of-record marker

        Returns:
            Dictionary of field name to value (may be empty)
        """
        fields = {}
        for match in ADIF_TAG_RE.finditer(chunk):
            name, length, value = match.group(1), int(match.group(2)), match.group(3)
            if len(value) > length:
                value = value[:length]
            fields[name.upper()] = value.strip()
        return fields

    @staticmethod
    def parse_adif_text(content: str) -> List[Record]:
        """
        Parse raw ADIF text into a list of read-only records.

        A header ending in <EOH> is discarded, text after the last <EOR> is
        discarded, and records that yield no fields are dropped.

        Args:
            content: Raw logbook text

        Returns:
            List of immutable field mappings, in file order
        """
        if not content:
            return []
        header = EOH_RE.search(content)
        if header:
            content = content[header.end():]
        chunks = EOR_RE.split(content)
        records: List[Record] = []
        # the final chunk is whatever trails the last <EOR>
        for chunk in chunks[:-1]:
            fields = ADIFParser.parse_record(chunk)
            if fields:
                records.append(MappingProxyType(fields))
        return records

    @staticmethod
    def read_adif_file(filename: str) -> str:
        """
        Read the raw text of an ADIF file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            IOError: If there's an error reading the file
        """
        print(f"Reading {filename}")
        try:
            with open(filename, 'r', encoding='utf-8', errors='ignore') as f:
                return f.read()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise IOError(f"Failed to read {filename}: {e}")

    @staticmethod
    def parse_adi(filename: str) -> List[Record]:
        """
        Parse an ADIF file and extract its contact records.

        Args:
            filename: Path to the ADIF file

        Returns:
            List of records in file order

        Raises:
            FileNotFoundError: If the file doesn't exist
            IOError: If there's an error reading the file
        """
        records = ADIFParser.parse_adif_text(ADIFParser.read_adif_file(filename))
        print(f"Read {len(records)} QSO records from '{filename}'")
        return records

    @staticmethod
    def read_logbooks(filenames: Iterable[str]) -> List[Record]:
        """
        Parse several logbooks for a single analysis.

        Each file is parsed on its own, so an unterminated record at the end
        of one file is dropped instead of merging into the next file.

        Returns:
            Records of all files, in file order
        """
        records: List[Record] = []
        for filename in filenames:
            records.extend(ADIFParser.parse_adi(filename))
        return records

    @staticmethod
    def grouping_key(record: Record) -> Optional[int]:
        """Return the DXCC entity number of a record, or None when absent or invalid."""
        value = record.get(GROUPING_KEY_FIELD)
        if not value or not value.isdecimal():
            return None
        entity_id = int(value)
        return entity_id if entity_id > 0 else None

    @staticmethod
    def parse_qso_date(value: Optional[str]) -> Optional[date]:
        """Return the QSO_DATE as a date, or None unless it is a valid YYYYMMDD value."""
        if not value or len(value) != 8 or not value.isdecimal():
            return None
        try:
            return datetime.strptime(value, '%Y%m%d').date()
        except ValueError:
            return None

    @staticmethod
    def summarize(records: List[Record]) -> Dict[str, int]:
        """
        Count data quality issues in a parsed log.

        Returns:
            Dictionary with record totals and counts of records missing a
            DXCC key, logged on an unrecognized band, or carrying an
            unparseable QSO_DATE
        """
        missing_key = 0
        unknown_band = 0
        bad_date = 0
        for record in records:
            if ADIFParser.grouping_key(record) is None:
                missing_key += 1
            if normalize_band(record.get('BAND')) is None:
                unknown_band += 1
            if ADIFParser.parse_qso_date(record.get('QSO_DATE')) is None:
                bad_date += 1
        return {
            'total_records': len(records),
            'missing_dxcc': missing_key,
            'usable_records': len(records) - missing_key,
            'unrecognized_band': unknown_band,
            'unparseable_date': bad_date,
        }
