"""
Convenience functions to make consistent field conventions easier.

Every draftable model carries the same self-referencing ``approved_version``
column, and timestamps that are set by the caller rather than by the database.
Declaring them through these helpers keeps the column definitions identical
across apps.
"""
from __future__ import annotations

from datetime import datetime, timezone

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _


def validate_utc_datetime(dt: datetime):
    """
    Reject datetimes that are not explicitly in UTC.
    """
    if dt.tzinfo != timezone.utc:
        raise ValidationError(
            _("The timezone for %(datetime)s is not UTC."),
            params={"datetime": dt},
        )


def draft_reference_field() -> models.OneToOneField:
    """
    Nullable link from a draft row to the approved row it was copied from.

    A row with this field set *is* a draft; a row with it unset is live. The
    one-to-one constraint is what guarantees that a live row never has more
    than one draft, even if two processes try to create one at the same time.

    Deleting a live row deletes its draft along with it. The reverse accessor
    is ``draft``, so ``live_row.draft`` returns the draft row (or raises
    ``DoesNotExist`` if there is none).
    """
    return models.OneToOneField(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        editable=False,
        related_name="draft",
    )


def manual_date_time_field(**kwargs) -> models.DateTimeField:
    """
    DateTimeField that does not auto-generate values.

    The datetimes entered for this field *must be UTC* or it will raise a
    ValidationError.

    A publish touches many rows in one transaction. Passing the time in from
    the caller means every row changed by the same publish carries exactly the
    same timestamp, which makes it easy to see what changed together.
    """
    final_kwargs = {
        "auto_now": False,
        "auto_now_add": False,
        "null": False,
        "validators": [
            validate_utc_datetime,
        ],
    }
    final_kwargs.update(kwargs)

    return models.DateTimeField(**final_kwargs)
