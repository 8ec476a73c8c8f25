"""
Tests of the relation catalog and draft policies.
"""
import ddt  # type: ignore[import]
import pytest
from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings

from draftable.apps.drafts import api as drafts_api
from draftable.apps.drafts.catalog import (
    DEFAULT_POLICY,
    Cardinality,
    DraftableModelRegistry,
    DraftRelation,
    has_concrete_field,
    has_version_field,
    is_regenerated_on_copy,
)
from draftable.lib.test_utils import TestCase
from test_utils.houses.models import (
    Apartment,
    Badge,
    Closet,
    FlooringStyle,
    Garage,
    House,
    Permit,
    Room,
    TrimStyle,
)

from .mixins import HouseDataMixin


class CatalogEntryTestCase(TestCase):
    """
    Test what the test app registers at startup.
    """

    def test_house_entry(self) -> None:
        entry = drafts_api.get_catalog_entry(House)

        assert entry is not None
        assert entry.model is House
        assert entry.relations == (
            DraftRelation("rooms", Cardinality.PLURAL, "house", Room),
        )
        assert entry.nullify == ("inspection_notes",)
        assert entry.policy is DEFAULT_POLICY
        assert entry.duplicator is None

    def test_room_entry_keeps_order(self) -> None:
        entry = drafts_api.get_catalog_entry(Room)

        assert entry is not None
        assert [relation.name for relation in entry.relations] == ["flooring_style", "closets", "trim_styles"]
        assert entry.singular_relations == [
            DraftRelation("flooring_style", Cardinality.SINGULAR, "flooring_style_id", FlooringStyle),
        ]
        assert entry.plural_relations == [
            DraftRelation("closets", Cardinality.PLURAL, "room", Closet),
            DraftRelation("trim_styles", Cardinality.PLURAL, "room", TrimStyle),
        ]

    def test_unregistered_model(self) -> None:
        assert drafts_api.get_catalog_entry(Permit) is None
        assert not DraftableModelRegistry.is_registered(Permit)
        assert DraftableModelRegistry.get_policy(Permit) is DEFAULT_POLICY

    def test_field_helpers(self) -> None:
        assert has_version_field(House)
        assert not has_version_field(Apartment)
        assert has_concrete_field(Room, "updated")
        assert not has_concrete_field(Closet, "updated")
        # Reverse relations aren't columns.
        assert not has_concrete_field(House, "rooms")
        assert is_regenerated_on_copy(Badge._meta.get_field("code"))
        assert not is_regenerated_on_copy(Badge._meta.get_field("id"))
        assert not is_regenerated_on_copy(Badge._meta.get_field("name"))


@ddt.ddt
class RegistrationTestCase(HouseDataMixin, TestCase):
    """
    Test registering models with the catalog.
    """

    def test_register_replaces_entry(self) -> None:
        self.keep_catalog_entry(Room)

        entry = drafts_api.register_draftable_model(Room, ["house"])

        assert drafts_api.get_catalog_entry(Room) is entry
        assert entry.relations == (
            DraftRelation("house", Cardinality.SINGULAR, "house_id", House),
        )

    def test_unregister(self) -> None:
        self.keep_catalog_entry(Closet)

        DraftableModelRegistry.unregister(Closet)

        assert not DraftableModelRegistry.is_registered(Closet)

    @ddt.data(
        "no_such_relation",  # Unknown name
        "address",  # Not a relation
        "draft",  # Reverse one-to-one
    )
    def test_bad_relation(self, relation_name) -> None:
        entry = drafts_api.get_catalog_entry(House)

        with pytest.raises(ImproperlyConfigured):
            drafts_api.register_draftable_model(House, [relation_name])

        # The previous registration is still in place.
        assert drafts_api.get_catalog_entry(House) is entry

    def test_bad_nullify(self) -> None:
        with pytest.raises(ImproperlyConfigured):
            drafts_api.register_draftable_model(House, nullify=["rooms"])

    def test_model_without_version_field(self) -> None:
        with pytest.raises(ImproperlyConfigured):
            drafts_api.register_draftable_model(Apartment)
        assert not DraftableModelRegistry.is_registered(Apartment)


class DraftPolicyTestCase(HouseDataMixin, TestCase):
    """
    Test the default policy.
    """

    def test_default_requires_approval(self) -> None:
        assert drafts_api.requires_approval(self.house)
        assert drafts_api.requires_approval(self.permit)
        assert not drafts_api.requires_approval(Garage(label="Carport"))

    def test_default_approvable_fields(self) -> None:
        fields = drafts_api.approvable_fields(self.house)

        assert "created" not in fields
        assert {"address", "inspection_notes", "updated"} <= fields
        # Both spellings of ForeignKey fields are included.
        assert {"flooring_style", "flooring_style_id", "house", "house_id"} <= drafts_api.approvable_fields(self.room)
        # Keys that every copy regenerates stay with their row.
        badge_fields = drafts_api.approvable_fields(Badge(name="Gold"))
        assert "name" in badge_fields
        assert "code" not in badge_fields

    @override_settings(DRAFTABLE={"CREATED_FIELD": "updated"})
    def test_created_field_setting(self) -> None:
        fields = drafts_api.approvable_fields(self.house)

        assert "created" in fields
        assert "updated" not in fields
