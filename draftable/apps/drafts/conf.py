"""
Settings for the drafts app.

Host projects configure the app with a single ``DRAFTABLE`` dict in their Django
settings, for example::

    DRAFTABLE = {
        # Never copied from a draft onto the live record by the default policy.
        "CREATED_FIELD": "created",
        # Set to the publish time on plural children re-linked to the live
        # record, for child models that have this field.
        "UPDATED_FIELD": "updated",
    }

Missing keys fall back to ``DEFAULTS``.
"""
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from draftable.lib.cache import clear_lru_caches, lru_cache

DEFAULTS = {
    "CREATED_FIELD": "created",
    "UPDATED_FIELD": "updated",
}


@lru_cache(maxsize=None)
def get_setting(name: str) -> str:
    """
    Return the configured value for ``name`` in the DRAFTABLE settings dict.
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown DRAFTABLE setting: {name}")

    overrides = getattr(settings, "DRAFTABLE", None) or {}
    if not isinstance(overrides, dict):
        raise ImproperlyConfigured("The DRAFTABLE setting must be a dict.")

    return overrides.get(name, DEFAULTS[name])


def reload_settings(*args, setting=None, **kwargs):  # pylint: disable=unused-argument
    """
    ``setting_changed`` receiver: forget cached values when DRAFTABLE changes.
    """
    if setting == "DRAFTABLE":
        clear_lru_caches()
