"""Field classifiers for DXCC logbook records.

Pure functions that derive the verification status and the operating-mode
category of a single contact record. The field lists and vocabularies are
plain data so they can be extended (or swapped in tests) without touching
the classification logic.
"""

from typing import Dict, List, Mapping, Optional, Tuple


# Supported bands, in display order
BANDS: List[str] = ['160m', '80m', '60m', '40m', '30m', '20m', '17m', '15m', '12m', '10m', '6m']

# Band status codes
CONFIRMED = 'C'
WORKED = 'W'
NOT_WORKED = ''

STATUS_RANK = {CONFIRMED: 2, WORKED: 1, NOT_WORKED: 0}

# Confirmation platforms, in display order, and the fields feeding each one.
# QRZ is fed by three alternate fields written by different logging programs.
PLATFORMS: List[str] = ['lotw', 'eqsl', 'qrz', 'paper']

PLATFORM_FIELDS: Dict[str, Tuple[str, ...]] = {
    'lotw': ('LOTW_QSL_RCVD',),
    'eqsl': ('EQSL_QSL_RCVD',),
    'qrz': ('QRZCOM_QSL_RCVD', 'QRZ_QSL_RCVD', 'QRZCOM_QSO_DOWNLOAD_STATUS'),
    'paper': ('QSL_RCVD',),
}

PLATFORM_LABELS: Dict[str, str] = {
    'lotw': 'LOTW',
    'eqsl': 'eQSL',
    'qrz': 'QRZ',
    'paper': 'Paper',
}

CONFIRMATION_FIELDS: Tuple[str, ...] = tuple(
    field for platform in PLATFORMS for field in PLATFORM_FIELDS[platform]
)

# Signals that the QSO was uploaded to QRZ, not that the other side confirmed it
UPLOAD_ONLY_FIELD = 'QRZCOM_QSO_UPLOAD_STATUS'

CONFIRMED_VALUES = ('Y', 'V')

# Mode categories
MODE_SSB = 'SSB'
MODE_CW = 'CW'
MODE_DIGITAL = 'Digital'
MODE_UNKNOWN = 'Unknown'

MODE_CATEGORIES: List[str] = [MODE_SSB, MODE_CW, MODE_DIGITAL]

DIGITAL_MODES: Tuple[str, ...] = (
    'FT8', 'FT4', 'JT65', 'JT9', 'JT4', 'Q65', 'MSK144', 'WSPR', 'JS8', 'FST4',
    'RTTY', 'PSK31', 'PSK63', 'PSK125', 'PSK', 'BPSK', 'QPSK', 'MFSK', 'OLIVIA',
    'CONTESTIA', 'HELL', 'THOR', 'THROB', 'DOMINO', 'MT63', 'PACKET', 'PACTOR',
    'SSTV', 'FSK441', 'VARA', 'ARDOP',
)
CW_MODES: Tuple[str, ...] = ('CW',)
SSB_MODES: Tuple[str, ...] = ('SSB', 'USB', 'LSB', 'AM')

# Checked in order: most specific vocabulary first
MODE_VOCABULARIES: List[Tuple[str, Tuple[str, ...]]] = [
    (MODE_DIGITAL, DIGITAL_MODES),
    (MODE_CW, CW_MODES),
    (MODE_SSB, SSB_MODES),
]


def _build_mode_table(vocabularies: List[Tuple[str, Tuple[str, ...]]]) -> Dict[str, str]:
    table: Dict[str, str] = {}
    for category, tokens in vocabularies:
        for token in tokens:
            # first vocabulary to claim a token wins
            table.setdefault(token.upper(), category)
    return table


MODE_TABLE: Dict[str, str] = _build_mode_table(MODE_VOCABULARIES)

# Fields holding the logging station's callsign, in priority order
CALLSIGN_FIELDS: Tuple[str, ...] = ('STATION_CALLSIGN', 'OPERATOR')


def _is_yes(value: Optional[str]) -> bool:
    return bool(value) and value.strip().upper() in CONFIRMED_VALUES


def is_confirmed(record: Mapping[str, str],
                 fields: Tuple[str, ...] = CONFIRMATION_FIELDS) -> bool:
    """
    Return True if any confirmation field of the record is Y or V.

    The QRZ upload status field is never part of the field list: an upload
    is a submission, not an independent confirmation.
    """
    return any(_is_yes(record.get(field)) for field in fields)


def confirmed_platforms(record: Mapping[str, str],
                        platform_fields: Dict[str, Tuple[str, ...]] = PLATFORM_FIELDS) -> List[str]:
    """Return the platforms, in display order, that confirmed this record."""
    return [
        platform for platform, fields in platform_fields.items()
        if any(_is_yes(record.get(field)) for field in fields)
    ]


def classify_mode(mode_text: Optional[str], table: Dict[str, str] = MODE_TABLE) -> str:
    """
    Classify an ADIF MODE value into SSB, CW, Digital or Unknown.

    Matching is case-insensitive and only looks at the first word, so
    qualified values such as "FT8 (MFSK)" still classify.

    Args:
        mode_text: Raw MODE field value (may be None or empty)
        table: Token to category lookup table

    Returns:
        Mode category name
    """
    if not mode_text:
        return MODE_UNKNOWN
    parts = mode_text.split()
    if not parts:
        return MODE_UNKNOWN
    return table.get(parts[0].upper(), MODE_UNKNOWN)


def normalize_band(band: Optional[str]) -> Optional[str]:
    """Return the canonical band name, or None for an unrecognized band."""
    if not band:
        return None
    normalized = band.strip().lower()
    return normalized if normalized in BANDS else None


def resolve_callsign(record: Mapping[str, str],
                     fields: Tuple[str, ...] = CALLSIGN_FIELDS) -> str:
    """Return the logging callsign (first non-empty source field), upper-cased."""
    for field in fields:
        value = record.get(field)
        if value and value.strip():
            return value.strip().upper()
    return ''
