"""
This is the public API for the draft/publish workflow.

This is the single ``api`` module that code outside of the
``draftable.apps.*`` package should import from. It re-exports the public
functions of the drafts app's api.py, along with the types callers need to
register models and handle errors.
"""
# These wildcard imports are okay because these api modules declare __all__.
# pylint: disable=wildcard-import
from ..apps.drafts.api import *
from ..apps.drafts.catalog import Cardinality, DraftCatalogEntry, DraftPolicy, DraftRelation
from ..apps.drafts.exceptions import (
    DraftCreationError,
    DraftError,
    MissingVersionFieldError,
    PublishValidationError,
)
from ..apps.drafts.models import DraftableModelMixin, DraftableQuerySet
