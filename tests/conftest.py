"""
Pytest configuration and shared fixtures for vcardparse tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.samples import BETTY_CARD, FULL_CARD  # noqa: E402


@pytest.fixture
def betty_card() -> str:
    """The two property card used across parser and CLI tests."""
    return BETTY_CARD


@pytest.fixture
def full_card() -> str:
    """A card with folding, grouping, structured values and free text."""
    return FULL_CARD


@pytest.fixture
def write_vcf(tmp_path):
    """Write card text to a .vcf file byte for byte and return its path."""

    def _write(text, name='contacts.vcf'):
        path = tmp_path / name
        path.write_bytes(text.encode('utf-8'))
        return path

    return _write
