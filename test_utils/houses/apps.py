"""
houses Django application initialization (test-only).
"""

from django.apps import AppConfig

from draftable.apps.drafts.catalog import DraftPolicy


class NoApprovalPolicy(DraftPolicy):
    """
    Edits go straight to the live record.
    """

    def requires_approval(self, record) -> bool:
        return False


class HousesConfig(AppConfig):
    """
    Configuration for the houses test application.
    """

    name = "test_utils.houses"
    verbose_name = "Draftable test houses"
    default_auto_field = "django.db.models.BigAutoField"
    label = "houses"

    def ready(self):
        """
        Register the draftable test models.
        """
        from draftable.api.drafts import register_draftable_model  # pylint: disable=import-outside-toplevel

        from .models import Badge, Carport, Closet, Garage, House, Listing, Room  # pylint: disable=import-outside-toplevel

        register_draftable_model(House, ["rooms"], nullify=["inspection_notes"])
        register_draftable_model(Room, ["flooring_style", "closets", "trim_styles"])
        register_draftable_model(Closet)
        register_draftable_model(Garage, policy=NoApprovalPolicy())
        register_draftable_model(Listing, nullify=["title"])
        register_draftable_model(Carport, ["pad"])
        register_draftable_model(Badge)
