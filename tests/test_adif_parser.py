"""Tests for ADIF parser functionality."""

import os
import sys
import tempfile
from datetime import date
from pathlib import Path

import adif_io
import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from adif_parser import ADIFParser


SAMPLE_LOG = """Exported for DXCC analysis
<ADIF_VER:5>3.1.4
<PROGRAMID:7>TESTLOG
<EOH>
<CALL:4>W1AW <QSO_DATE:8>20240101 <BAND:3>20m <MODE:3>FT8 <DXCC:3>291 <LOTW_QSL_RCVD:1>Y <EOR>
<CALL:6>OH0XYZ <QSO_DATE:8>20240102 <BAND:3>40m <MODE:2>CW <DXCC:1>5 <EOR>
<CALL:4>K2AB <QSO_DATE:8>20240103 <BAND:3>15m <MODE:3>SSB <DXCC:3>291 <QSL_RCVD:1>N <EOR>
"""


def write_temp_log(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.adi') as f:
        f.write(content)
        return f.name


class TestParseRecord:
    """Test parsing of single records."""

    def test_values_truncated_to_declared_length(self) -> None:
        """Test adjacent tags without delimiters don't bleed into each other."""
        records = ADIFParser.parse_adif_text("<MODE:3>FT8<BAND:3>20m<DXCC:3>291<EOR>")
        assert len(records) == 1
        assert records[0]['MODE'] == 'FT8'
        assert records[0]['BAND'] == '20m'
        assert records[0]['DXCC'] == '291'

    def test_overlong_value_is_cut(self) -> None:
        """Test a value longer than its length is truncated."""
        record = ADIFParser.parse_record("<CALL:4>K1ABCXYZ")
        assert record == {'CALL': 'K1AB'}

    def test_field_names_upper_cased_and_values_stripped(self) -> None:
        """Test field name canonicalization and whitespace trimming."""
        record = ADIFParser.parse_record("<call:6> K1AB  <Band:4>20m ")
        assert record == {'CALL': 'K1AB', 'BAND': '20m'}

    def test_type_indicator_accepted(self) -> None:
        """Test tags carrying a data type indicator."""
        record = ADIFParser.parse_record("<QSO_DATE:8:D>20240101")
        assert record == {'QSO_DATE': '20240101'}

    def test_malformed_tag_skipped(self) -> None:
        """Test a tag without a length is absent while the others survive."""
        record = ADIFParser.parse_record("<CALL>K1AB<BAND:3>20m<MODE:x>CW")
        assert record == {'BAND': '20m'}


class TestParseText:
    """Test splitting raw text into records."""

    def test_header_discarded(self) -> None:
        """Test fields before <EOH> never reach a record."""
        records = ADIFParser.parse_adif_text("Header <ADIF_VER:5>3.1.4<EOH>\n<CALL:4>K1AB<EOR>")
        assert len(records) == 1
        assert 'ADIF_VER' not in records[0]

    def test_empty_records_dropped(self) -> None:
        """Test chunks yielding no fields are dropped silently."""
        records = ADIFParser.parse_adif_text("<EOR>\n<EOR><CALL:4>K1AB<EOR>garbage<EOR>")
        assert len(records) == 1
        assert records[0]['CALL'] == 'K1AB'

    def test_text_after_last_eor_discarded(self) -> None:
        """Test an unterminated trailing record is not used."""
        records = ADIFParser.parse_adif_text("<CALL:4>K1AB<EOR><CALL:4>K2CD")
        assert [r['CALL'] for r in records] == ['K1AB']

    def test_end_of_record_case_insensitive(self) -> None:
        """Test lower- and mixed-case markers."""
        records = ADIFParser.parse_adif_text("<call:4>K1AB<eor><CALL:4>K2CD<Eor>")
        assert [r['CALL'] for r in records] == ['K1AB', 'K2CD']

    def test_empty_input(self) -> None:
        """Test empty text yields no records."""
        assert ADIFParser.parse_adif_text("") == []

    def test_records_are_read_only(self) -> None:
        """Test parsed records cannot be modified."""
        records = ADIFParser.parse_adif_text("<CALL:4>K1AB<EOR>")
        with pytest.raises(TypeError):
            records[0]['CALL'] = 'K9ZZ'

    def test_matches_adif_io_on_well_formed_log(self) -> None:
        """Test the tolerant parser agrees with adif_io on a clean log."""
        qsos, _ = adif_io.read_from_string(SAMPLE_LOG)
        records = ADIFParser.parse_adif_text(SAMPLE_LOG)
        assert len(records) == len(qsos) == 3
        for record, qso in zip(records, qsos):
            for name in ('CALL', 'BAND', 'MODE', 'DXCC', 'QSO_DATE'):
                assert record[name] == qso[name]


class TestFileLoading:
    """Test reading logbook files."""

    def test_parse_adi(self) -> None:
        """Test parsing a logbook file."""
        temp_file = write_temp_log(SAMPLE_LOG)
        try:
            records = ADIFParser.parse_adi(temp_file)
            assert len(records) == 3
            assert records[1]['DXCC'] == '5'
        finally:
            os.unlink(temp_file)

    def test_file_not_found(self) -> None:
        """Test file not found error."""
        with pytest.raises(FileNotFoundError):
            ADIFParser.parse_adi("nonexistent_file.adi")

    def test_parse_empty_file(self) -> None:
        """Test parsing empty ADIF file."""
        temp_file = write_temp_log("")
        try:
            assert ADIFParser.parse_adi(temp_file) == []
        finally:
            os.unlink(temp_file)

    def test_read_logbooks_concatenates_files(self) -> None:
        """Test several logs with their own headers load as one."""
        first = write_temp_log(SAMPLE_LOG)
        second = write_temp_log("Second log <EOH>\n<CALL:4>DL1A<DXCC:3>230<EOR>\n")
        try:
            records = ADIFParser.read_logbooks([first, second])
            assert len(records) == 4
            assert records[-1]['DXCC'] == '230'
            assert all('PROGRAMID' not in r for r in records)
        finally:
            os.unlink(first)
            os.unlink(second)

    def test_unterminated_record_stays_in_its_file(self) -> None:
        """Test a trailing record without <EOR> doesn't merge into the next file."""
        first = write_temp_log("<DXCC:3>291<BAND:3>20m<EOR>\n<DXCC:1>5<BAND:3>40m<LOTW_QSL_RCVD:1>Y")
        second = write_temp_log("<EOH>\n<CALL:4>W1AW<BAND:3>15m<EOR>\n")
        try:
            records = ADIFParser.read_logbooks([first, second])
            assert [dict(r) for r in records] == [
                {'DXCC': '291', 'BAND': '20m'},
                {'CALL': 'W1AW', 'BAND': '15m'},
            ]
            assert all(ADIFParser.grouping_key(r) != 5 for r in records)
        finally:
            os.unlink(first)
            os.unlink(second)


class TestFieldHelpers:
    """Test grouping key, date parsing and diagnostics."""

    def test_grouping_key(self) -> None:
        """Test valid and invalid DXCC values."""
        assert ADIFParser.grouping_key({'DXCC': '291'}) == 291
        assert ADIFParser.grouping_key({'DXCC': '0'}) is None
        assert ADIFParser.grouping_key({'DXCC': '-5'}) is None
        assert ADIFParser.grouping_key({'DXCC': 'USA'}) is None
        assert ADIFParser.grouping_key({'DXCC': ''}) is None
        assert ADIFParser.grouping_key({'CALL': 'K1AB'}) is None

    def test_parse_qso_date(self) -> None:
        """Test YYYYMMDD dates and the values rejected."""
        assert ADIFParser.parse_qso_date('20240229') == date(2024, 2, 29)
        assert ADIFParser.parse_qso_date('20230229') is None
        assert ADIFParser.parse_qso_date('2024-01-01') is None
        assert ADIFParser.parse_qso_date('202401') is None
        assert ADIFParser.parse_qso_date(None) is None

    def test_summarize(self) -> None:
        """Test data quality counters."""
        records = ADIFParser.parse_adif_text(
            "<DXCC:3>291<BAND:3>20m<QSO_DATE:8>20240101<EOR>"
            "<DXCC:3>291<BAND:2>2m<QSO_DATE:8>20241301<EOR>"
            "<CALL:4>K1AB<BAND:3>40m<QSO_DATE:8>20240105<EOR>"
        )
        summary = ADIFParser.summarize(records)
        assert summary == {
            'total_records': 3,
            'missing_dxcc': 1,
            'usable_records': 2,
            'unrecognized_band': 1,
            'unparseable_date': 1,
        }
