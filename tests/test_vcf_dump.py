"""
CLI tests for vcf_dump.py.

Tests cover:
- Rendering records and contacts
- Exit status counting failed files
- Error handling for invalid inputs
"""

import io
import logging

import pytest

import vcf_dump
from vcardparse.core import UnterminatedPropertyHeader, parse_property
from tests.samples import crlf


def run_main(*argv):
    with pytest.raises(SystemExit) as exc_info:
        vcf_dump.main(list(argv))

    return exc_info.value.code


class TestFormatting:
    """Tests for the text rendering helpers."""

    def test_format_record(self):
        """Group, name, parameters and values are all shown."""
        record = parse_property('item1.tel;type=cell;x-a=1:+1 555,ext')

        assert vcf_dump.format_record(record) == 'item1.TEL;TYPE=cell;X-A=1: +1 555 | ext'

    def test_dump_stream(self, betty_card):
        """Every card is written with its properties."""
        output = io.StringIO()

        assert vcf_dump.dump_stream(io.StringIO(betty_card * 2), output) == 2
        assert output.getvalue().splitlines() == [
            'card 1 (lines 1-5)',
            '  FN: Hello Betty',
            '  EMAIL;TYPE=INTERNET: hello.betty@gmail.com',
            'card 2 (lines 6-10)',
            '  FN: Hello Betty',
            '  EMAIL;TYPE=INTERNET: hello.betty@gmail.com',
        ]

    def test_dump_stream_contacts(self, full_card):
        """The contact view shows the names."""
        output = io.StringIO()
        vcf_dump.dump_stream(io.StringIO(full_card), output, contacts=True)

        assert output.getvalue().splitlines() == [
            'card 1 (lines 1-11)',
            '  full name: Hello Betty',
            '  family name: Hello',
            '  given name: Betty',
        ]

    def test_dump_stream_broken_card_writes_nothing(self, betty_card):
        """Cards before a broken one are not written."""
        output = io.StringIO()
        text = betty_card * 2 + crlf('BEGIN:VCARD', 'VERSION:3.0', 'NOTE', 'END:VCARD')

        with pytest.raises(UnterminatedPropertyHeader):
            vcf_dump.dump_stream(io.StringIO(text), output)

        assert output.getvalue() == ''

    def test_dump_stream_lf(self):
        """LF terminated text is read with the LF terminator."""
        output = io.StringIO()
        text = 'BEGIN:VCARD\nVERSION:3.0\nNOTE:abc\n def\nEND:VCARD\n'

        vcf_dump.dump_stream(io.StringIO(text), output, newline='\n')

        assert '  NOTE: abcdef' in output.getvalue().splitlines()


class TestMain:
    """Tests for command line runs."""

    def test_dump_file_to_stdout(self, write_vcf, full_card, capsys):
        """A valid file is dumped and the exit status is zero."""
        path = write_vcf(full_card)

        assert run_main('-i', str(path)) == 0

        out = capsys.readouterr().out
        assert 'card 1 (lines 1-11)' in out
        assert '  ITEM1.TEL' not in out
        assert '  item1.TEL;TYPE=CELL;TYPE=PREF: +1 (123) 112-123' in out

    def test_output_file(self, write_vcf, betty_card, tmp_path):
        """The -o option writes to a file."""
        path = write_vcf(betty_card)
        output_path = tmp_path / 'out.txt'

        assert run_main('-i', str(path), '-o', str(output_path)) == 0
        assert output_path.read_text(encoding='utf-8').startswith('card 1 (lines 1-5)\n')

    def test_wildcard_input(self, write_vcf, betty_card, tmp_path, capsys):
        """Wildcards pick up every matching file."""
        write_vcf(betty_card, 'a.vcf')
        write_vcf(betty_card, 'b.vcf')

        assert run_main('-i', str(tmp_path / '*.vcf')) == 0
        assert capsys.readouterr().out.count('card 1 ') == 2

    def test_parse_error_counted(self, write_vcf, betty_card, caplog, capsys):
        """A broken file is logged and counted, others still dumped."""
        good = write_vcf(betty_card, 'good.vcf')
        bad = write_vcf(crlf('BEGIN:VCARD', 'VERSION:3.0', 'END:VCARD'), 'bad.vcf')

        with caplog.at_level(logging.ERROR, logger='vcf_dump'):
            assert run_main('-i', str(good), '-i', str(bad)) == 1

        assert 'line 3: no properties between VERSION and END' in caplog.text
        assert 'FN: Hello Betty' in capsys.readouterr().out

    def test_lf_option(self, write_vcf, capsys):
        """The --lf option reads LF terminated files."""
        path = write_vcf('BEGIN:VCARD\nVERSION:3.0\nFN:x\nEND:VCARD\n')

        assert run_main('-i', str(path), '--lf') == 0
        assert '  FN: x' in capsys.readouterr().out

    def test_crlf_file_without_lf_option(self, write_vcf):
        """LF files fail with the default terminator."""
        path = write_vcf('BEGIN:VCARD\nVERSION:3.0\nFN:x\nEND:VCARD\n')

        assert run_main('-i', str(path)) == 1

    def test_missing_input(self, tmp_path, capsys):
        """A literal path that does not exist stops the run."""
        assert run_main('-i', str(tmp_path / 'missing.vcf')) == -1
        assert 'does not exist' in capsys.readouterr().err

    def test_directory_input(self, tmp_path, capsys):
        """A literal directory is rejected."""
        assert run_main('-i', str(tmp_path)) == -1
        assert 'is not a file' in capsys.readouterr().err

    def test_no_matches(self, tmp_path):
        """A wildcard matching nothing exits cleanly."""
        assert run_main('-i', str(tmp_path / '*.vcf')) == 0
