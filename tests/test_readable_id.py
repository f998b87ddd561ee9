import datetime

import pytest

from salonbook.errors import ValidationError
from salonbook.utils.readable_id import format_readable_id


@pytest.mark.utils
class TestReadableId:
    """Test the human-facing appointment code."""

    def test_format_readable_id(self):
        """Test prefix, date part and padded number."""
        code = format_readable_id("abc123", 7, datetime.date(2024, 3, 5))

        assert code == "ABC-240305-007"

    def test_number_wider_than_padding(self):
        """Test numbers above 999 keep all their digits."""
        code = format_readable_id("abc123", 1234, datetime.date(2024, 3, 5))

        assert code == "ABC-240305-1234"

    def test_uuid_salon_id(self):
        """Test a uuid salon id only contributes its first three characters."""
        code = format_readable_id(
            "9f1c2e4a-0000-4000-8000-000000000000", 42, datetime.date(2025, 12, 31)
        )

        assert code == "9F1-251231-042"

    def test_salon_id_too_short(self):
        """Test a salon id with fewer than three characters is rejected."""
        with pytest.raises(ValidationError):
            format_readable_id("ab", 1, datetime.date(2024, 3, 5))
