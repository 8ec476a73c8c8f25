"""
Models used only by the Draftable test suite.

A House has Rooms (drafted and published with the House) and Permits (not part
of draft editing). A Room has a FlooringStyle (singular, deep-copied into a
draft) plus Closets and TrimStyles (plural). The remaining models each exercise
one edge of the workflow.
"""
from uuid import uuid4

from django.db import models

from draftable.apps.drafts.models import DraftableModelMixin
from draftable.lib.fields import manual_date_time_field


class House(DraftableModelMixin):
    address = models.CharField(max_length=255)
    inspection_notes = models.TextField(null=True, blank=True)
    created = manual_date_time_field()
    updated = manual_date_time_field()

    def __str__(self):
        return f"House {self.address}"


class FlooringStyle(models.Model):
    name = models.CharField(max_length=100)

    def __str__(self):
        return self.name


class Room(DraftableModelMixin):
    house = models.ForeignKey(House, on_delete=models.CASCADE, related_name="rooms")
    name = models.CharField(max_length=100)
    flooring_style = models.ForeignKey(
        FlooringStyle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="rooms",
    )
    updated = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Room {self.name}"


class Closet(DraftableModelMixin):
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="closets")
    shape = models.CharField(max_length=50, blank=True)


class TrimStyle(models.Model):
    """
    Plural child without an approved_version field of its own.
    """
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="trim_styles")
    style = models.CharField(max_length=50, blank=True)


class ElectricalOutlet(models.Model):
    """
    Room relation that is not part of draft editing.
    """
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="electrical_outlets")


class Permit(models.Model):
    """
    House relation that is not part of draft editing.
    """
    house = models.ForeignKey(House, on_delete=models.CASCADE, related_name="permits")
    number = models.CharField(max_length=20)


class Garage(DraftableModelMixin):
    """
    Registered with a policy that never requires approval.
    """
    label = models.CharField(max_length=100)


class Listing(DraftableModelMixin):
    """
    Registered to nullify a required field, so its drafts can never be saved.
    """
    title = models.CharField(max_length=100)


class Apartment(models.Model):
    """
    Has no approved_version field at all.
    """
    unit = models.CharField(max_length=10)


class ParkingPad(models.Model):
    surface = models.CharField(max_length=50)


class Carport(DraftableModelMixin):
    """
    Singular relation through a OneToOneField, so a pad belongs to one row.
    """
    pad = models.OneToOneField(ParkingPad, on_delete=models.CASCADE, related_name="carport")
    label = models.CharField(max_length=100)


class Badge(DraftableModelMixin):
    """
    Has a unique key with a default, so every copy gets a key of its own.
    """
    code = models.UUIDField(default=uuid4, unique=True, editable=False)
    name = models.CharField(max_length=100)
