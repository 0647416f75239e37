"""Tests for the two error handling styles used across mtsfv.

The synchronous API raises; the concurrent engine never raises for a bad
input and reports it as a failed Outcome instead.
"""

import pytest

from mtsfv.common import ChecksumError
from mtsfv.verifier.api import checksum_file
from mtsfv.verifier.task import Outcome, verify_one

EXPECTED_CATEGORIES = {
    'permission', 'not_found', 'io', 'cancelled', 'worker_failure', 'unknown'
}


class TestErrorHandlingPatterns:
    """Exception-based API versus Outcome-based engine."""

    def test_sync_api_raises(self, tmp_path):
        nonexistent_file = tmp_path / "nonexistent.txt"

        with pytest.raises(ChecksumError):
            checksum_file(nonexistent_file)

    def test_engine_returns_outcome(self, tmp_path):
        nonexistent_file = tmp_path / "nonexistent.txt"

        result = verify_one(str(nonexistent_file), nonexistent_file)

        assert isinstance(result, Outcome)
        assert result.ok is False
        assert result.error is not None
        assert result.checksum is None
        assert result.category in EXPECTED_CATEGORIES

    def test_success_case_structure(self, tmp_path):
        test_file = tmp_path / "test.txt"
        test_file.write_text("Hello World")

        result = verify_one(str(test_file), test_file)

        assert result.ok is True
        assert result.error is None
        assert result.category is None
        assert result.checksum == checksum_file(test_file)
