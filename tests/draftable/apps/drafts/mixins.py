"""
Shared test data for the drafts app tests.
"""
from __future__ import annotations

from datetime import datetime, timezone

from draftable.apps.drafts.catalog import DraftableModelRegistry
from test_utils.houses.models import (
    Closet,
    ElectricalOutlet,
    FlooringStyle,
    House,
    Permit,
    Room,
    TrimStyle,
)


class HouseDataMixin:
    """
    Builds one live House with a furnished Room and a Permit.
    """
    now: datetime
    house: House
    room: Room
    flooring: FlooringStyle
    closet: Closet
    trim: TrimStyle
    outlet: ElectricalOutlet
    permit: Permit

    def setUp(self) -> None:
        super().setUp()
        self.now = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.house = House.objects.create(
            address="A",
            inspection_notes="Leaky roof",
            created=self.now,
            updated=self.now,
        )
        self.flooring = FlooringStyle.objects.create(name="Oak")
        self.room = Room.objects.create(
            house=self.house,
            name="Kitchen",
            flooring_style=self.flooring,
        )
        self.closet = Closet.objects.create(room=self.room, shape="square")
        self.trim = TrimStyle.objects.create(room=self.room, style="colonial")
        self.outlet = ElectricalOutlet.objects.create(room=self.room)
        self.permit = Permit.objects.create(house=self.house, number="P-1")

    def keep_catalog_entry(self, model_cls) -> None:
        """
        Put back whatever is registered for ``model_cls`` when the test ends.
        """
        entry = DraftableModelRegistry.get_entry(model_cls)
        self.addCleanup(  # type: ignore[attr-defined]
            DraftableModelRegistry._entries.__setitem__,  # pylint: disable=protected-access
            model_cls,
            entry,
        )
