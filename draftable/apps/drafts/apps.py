"""
drafts Django application initialization.
"""

from django.apps import AppConfig
from django.core.signals import setting_changed


class DraftsConfig(AppConfig):
    """
    Configuration for the drafts Django application.
    """

    name = "draftable.apps.drafts"
    verbose_name = "Draftable > Drafts"
    default_auto_field = "django.db.models.BigAutoField"
    label = "draftable_drafts"

    def ready(self):
        """
        Drop cached DRAFTABLE settings whenever they are overridden.
        """
        from .conf import reload_settings  # pylint: disable=import-outside-toplevel

        setting_changed.connect(reload_settings, dispatch_uid="draftable_reload_settings")
