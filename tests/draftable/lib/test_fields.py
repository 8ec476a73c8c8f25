"""
Tests for the field helpers.
"""
from datetime import datetime, timedelta, timezone

import pytest
from django.core.exceptions import ValidationError

from draftable.lib.fields import validate_utc_datetime
from draftable.lib.test_utils import TestCase
from test_utils.houses.models import House


class ManualDateTimeFieldTestCase(TestCase):
    """
    Timestamps have to be passed in, and have to be UTC.
    """

    def test_utc_accepted(self) -> None:
        validate_utc_datetime(datetime(2024, 3, 1, tzinfo=timezone.utc))

    def test_other_timezone_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_utc_datetime(datetime(2024, 3, 1, tzinfo=timezone(timedelta(hours=-5))))

    def test_model_validation(self) -> None:
        house = House(
            address="A",
            created=datetime(2024, 3, 1),
            updated=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        with pytest.raises(ValidationError) as excinfo:
            house.full_clean()

        assert "created" in excinfo.value.message_dict
        assert "updated" not in excinfo.value.message_dict
