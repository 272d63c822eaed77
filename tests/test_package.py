"""
Tests for package metadata.
"""

import re

import abacus_toolkit


def test_version_when_imported_then_dotted_release():
    assert re.fullmatch(r"\d+\.\d+\.\d+", abacus_toolkit.__version__)
