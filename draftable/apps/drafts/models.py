"""
The data models here are intended to be mixed into other apps' models to give
them a draft/publish workflow:

* A live (approved) row may have at most one draft row of the same model.
* The draft is a structural copy of the live row, including copies of its
  singular related rows and its plural children.
* Publishing copies the draft's fields back onto the live row, moves the
  draft's children over to the live row, and deletes the draft.

This app does not define any concrete tables of its own. Each draftable model
gets an ``approved_version`` column in its own table.
"""
from __future__ import annotations

from django.db import models

from draftable.lib.fields import draft_reference_field

from .catalog import DraftableModelRegistry


class DraftableQuerySet(models.QuerySet):
    """
    QuerySet that can tell live rows apart from drafts.
    """

    def approved(self) -> DraftableQuerySet:
        """
        Only live (approved) rows.
        """
        return self.filter(approved_version__isnull=True)

    def drafts(self) -> DraftableQuerySet:
        """
        Only draft rows.
        """
        return self.filter(approved_version__isnull=False)


class DraftableModelMixin(models.Model):
    """
    Convenience mixin for models that have drafts.

    Mixing this in adds the ``approved_version`` field and shortcut methods for
    the functions in this app's ``api`` module. You still have to register the
    model with ``api.register_draftable_model`` (see its docstring) if the
    model has relations that should be copied into drafts, or if it needs a
    non-default ``DraftPolicy``.

    Caching Warning
    ---------------
    Publishing deletes the draft and updates the live row in the database. The
    instances you were holding before the publish are not refreshed, so use the
    live record returned by ``publish_draft()`` instead of an old reference.
    """
    objects = DraftableQuerySet.as_manager()

    approved_version = draft_reference_field()

    class Meta:
        abstract = True

    def requires_approval(self) -> bool:
        return DraftableModelRegistry.get_policy(type(self)).requires_approval(self)

    def approvable_fields(self) -> set[str]:
        return DraftableModelRegistry.get_policy(type(self)).approvable_fields(self)

    def is_draft(self) -> bool:
        return self.approved_version_id is not None

    def has_draft(self) -> bool:
        from . import api  # pylint: disable=import-outside-toplevel
        return api.has_draft(self)

    def get_draft(self):
        from . import api  # pylint: disable=import-outside-toplevel
        return api.get_draft(self)

    def get_approved_version(self):
        from . import api  # pylint: disable=import-outside-toplevel
        return api.get_approved_version(self)

    def editable_version(self):
        from . import api  # pylint: disable=import-outside-toplevel
        return api.editable_version(self)

    def publish_draft(self, published_at=None):
        from . import api  # pylint: disable=import-outside-toplevel
        return api.publish_draft(self, published_at=published_at)
