"""
Drafts API (warning: UNSTABLE, in progress API)

Please look at the models.py file for more information about how drafts are
stored, and catalog.py for how draftable models are registered.

Typical use::

    # In your AppConfig.ready()
    register_draftable_model(House, ["rooms"])

    # When someone starts editing
    draft = editable_version(house)
    draft.address = "12 New Street"
    draft.save()

    # When the changes are approved
    house = publish_draft(draft)
"""
from __future__ import annotations

from datetime import datetime, timezone
from logging import getLogger
from typing import Callable, Iterable, TypeVar

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import IntegrityError
from django.db.models import Model, QuerySet
from django.db.transaction import atomic
from django.utils.translation import gettext as _

from .catalog import (
    VERSION_FIELD,
    DraftableModelRegistry,
    DraftCatalogEntry,
    DraftPolicy,
    has_concrete_field,
    has_version_field,
)
from .conf import get_setting
from .duplication import duplicate_record
from .exceptions import DraftCreationError, MissingVersionFieldError, PublishValidationError

# Most functions here hand back an instance of the same model they were given.
RecordModel = TypeVar('RecordModel', bound=Model)

# The public API that will be re-exported by draftable.api.drafts is listed in
# the __all__ entries below. Internal helper functions that are private to this
# module should start with an underscore. If a function does not start with an
# underscore AND it is not in __all__, that function is considered to be
# callable only by other apps in the draftable package.
__all__ = [
    "register_draftable_model",
    "get_catalog_entry",
    "requires_approval",
    "approvable_fields",
    "is_draft",
    "has_draft",
    "get_draft",
    "get_approved_version",
    "editable_version",
    "publish_draft",
]


log = getLogger(__name__)


def register_draftable_model(
    model_cls: type[Model],
    relations: Iterable[str] = (),
    *,
    policy: DraftPolicy | None = None,
    duplicator: Callable | None = None,
    nullify: Iterable[str] = (),
) -> DraftCatalogEntry:
    """
    Register a model for the draft workflow.

    Call this from your app's ``AppConfig.ready()``, e.g.::

        def ready(self):
            from draftable.api.drafts import register_draftable_model
            from .models import House, Room

            register_draftable_model(House, ["rooms"], nullify=["inspection_notes"])
            register_draftable_model(Room, ["flooring_style", "closets"])

    ``relations`` lists, in order, the relations that are copied into a draft
    and published back. Each name is either a ForeignKey/OneToOneField on the
    model (a singular relation: the related row is deep-copied into the draft)
    or the related name of a ForeignKey on a child model (a plural relation:
    the children are copied into the draft and replace the live children on
    publish). Relations not listed here are left alone.

    ``policy`` customizes whether approval is required and which fields are
    published (see ``DraftPolicy``). ``duplicator`` replaces
    ``duplicate_record`` as the function that builds and saves the draft copy;
    it is called as ``duplicator(record, approved_version=record)``.
    ``nullify`` names fields that are reset to None on the draft copy.

    Errors that can be raised:

    * django.core.exceptions.ImproperlyConfigured
    """
    return DraftableModelRegistry.register(
        model_cls,
        relations,
        policy=policy,
        duplicator=duplicator,
        nullify=nullify,
    )


def get_catalog_entry(model_cls: type[Model], /) -> DraftCatalogEntry | None:
    """
    Return what was registered for ``model_cls``, or None.
    """
    return DraftableModelRegistry.get_entry(model_cls)


def requires_approval(record: Model, /) -> bool:
    """
    Do changes to this record go through a draft?

    Models that were never registered use the default policy, which always
    requires approval.
    """
    return DraftableModelRegistry.get_policy(type(record)).requires_approval(record)


def approvable_fields(record: Model, /) -> set[str]:
    """
    Field names that the record's policy allows to be published from a draft.
    """
    return set(DraftableModelRegistry.get_policy(type(record)).approvable_fields(record))


def is_draft(record: Model, /) -> bool:
    """
    Is this record a draft of some other record?

    Errors that can be raised:

    * draftable.apps.drafts.exceptions.MissingVersionFieldError
    """
    _check_version_field(record)
    return getattr(record, f"{VERSION_FIELD}_id") is not None


def has_draft(record: Model, /) -> bool:
    """
    Does some other record claim to be a draft of this one?

    Errors that can be raised:

    * draftable.apps.drafts.exceptions.MissingVersionFieldError
    """
    _check_version_field(record)
    return _draft_qset(record).exists()


def get_draft(record: RecordModel, /) -> RecordModel | None:
    """
    Return the existing draft of ``record``, or None.

    This never creates a draft. Use ``editable_version`` for that.
    """
    _check_version_field(record)
    return _draft_qset(record).first()


def get_approved_version(record: RecordModel, /) -> RecordModel:
    """
    Return the live record that ``record`` is a draft of, or ``record`` itself.

    This works on live records too (they are their own approved version). A
    draft whose live record cannot be found is treated as live.
    """
    if not has_version_field(type(record)):
        return record
    if getattr(record, f"{VERSION_FIELD}_id") is None:
        return record
    try:
        approved = getattr(record, VERSION_FIELD)
    except ObjectDoesNotExist:
        log.warning(
            "%s %s points at a missing approved version; treating it as live.",
            record._meta.label,
            record.pk,
        )
        return record
    return approved or record


def editable_version(record: RecordModel, /) -> RecordModel:
    """
    Return the record that edits should be made to.

    If the record's changes don't require approval, that's the live record.
    Otherwise it is the draft, which is created if it doesn't exist yet.
    Calling this on a draft returns the draft itself.

    Errors that can be raised:

    * draftable.apps.drafts.exceptions.MissingVersionFieldError
    * draftable.apps.drafts.exceptions.DraftCreationError
    """
    if not requires_approval(record):
        return get_approved_version(record)
    if is_draft(record):
        return record
    return get_draft(record) or create_draft(record)


def create_draft(record: RecordModel, /) -> RecordModel:
    """
    Create (or return the existing) draft of a live record.

    Don't call this from outside the draftable package; use
    ``editable_version`` instead.

    The copy is built by the registered duplicator (``duplicate_record`` by
    default) inside a savepoint, so a failure leaves no partial copies behind.
    The one-to-one constraint on ``approved_version`` means that if another
    process creates a draft of the same record at the same moment, our insert
    fails. In that case the other process's draft is returned.

    Errors that can be raised:

    * draftable.apps.drafts.exceptions.MissingVersionFieldError
    * draftable.apps.drafts.exceptions.DraftCreationError
    """
    if is_draft(record):
        raise DraftCreationError(record, [_("Drafts of drafts are not supported.")])

    existing_draft = get_draft(record)
    if existing_draft is not None:
        return existing_draft

    entry = DraftableModelRegistry.get_entry(type(record))
    duplicator = entry.duplicator if entry and entry.duplicator else duplicate_record

    try:
        with atomic():
            draft = duplicator(record, approved_version=record)
    except (IntegrityError, ValidationError) as exc:
        existing_draft = get_draft(record)
        if existing_draft is not None:
            log.warning(
                "Draft of %s %s was created concurrently; using draft %s.",
                record._meta.label,
                record.pk,
                existing_draft.pk,
            )
            return existing_draft
        messages = exc.messages if isinstance(exc, ValidationError) else [str(exc)]
        raise DraftCreationError(record, messages) from exc

    log.info("Created draft %s of %s %s.", draft.pk, record._meta.label, record.pk)
    return draft


def publish_draft(record: RecordModel, /, published_at: datetime | None = None) -> RecordModel:
    """
    Publish the draft of ``record`` onto its live record and delete the draft.

    ``record`` may be either the live record or its draft. The steps, all in
    one transaction:

    1. For each plural relation in the catalog, the live record's children are
       deleted, and the draft's children are moved over to the live record.
       This is a full replace: live children that the draft doesn't have are
       gone afterwards.
    2. The draft is deleted, which frees any unique values (a one-to-one
       target, for instance) that the live record is about to take over.
    3. Every approvable field of the draft is copied onto the live record,
       which is then validated and saved. ForeignKey columns are ordinary
       fields here, so this also re-points singular relations at the draft's
       copies.

    Nothing happens (and the live record is returned as-is) if the live record
    doesn't require approval, or if there is no draft to publish. A draft that
    was never created is not created by this call. A draft whose live record
    can't be loaded is treated as live, so nothing happens in that case either.

    Returns a freshly fetched copy of the live record. THE DRAFT IS DESTROYED
    IN THIS PROCESS. Call ``editable_version`` again to start a new draft.

    Errors that can be raised:

    * draftable.apps.drafts.exceptions.MissingVersionFieldError
    * draftable.apps.drafts.exceptions.PublishValidationError
    * django.db.DatabaseError (and subclasses), unchanged
    """
    live = get_approved_version(record)
    if not requires_approval(live):
        log.debug("%s %s does not require approval; nothing to publish.", live._meta.label, live.pk)
        return live

    draft = record if is_draft(record) else get_draft(live)
    if draft is None or not is_draft(draft) or draft.pk == live.pk:
        log.debug("%s %s has no draft; nothing to publish.", live._meta.label, live.pk)
        return live

    if published_at is None:
        published_at = datetime.now(tz=timezone.utc)

    # Work on our own copy of the live row so that a failed publish can't leave
    # the caller holding a half-merged instance.
    live = _refetch(live)
    draft_pk = draft.pk
    entry = DraftableModelRegistry.get_entry(type(live))

    with atomic():
        if entry:
            _replace_plural_relations(live, draft, entry, published_at)
        _destroy_draft(draft)
        _save_approved_changes(live, draft)

    log.info("Published draft %s onto %s %s.", draft_pk, live._meta.label, live.pk)
    return _refetch(live)


def _check_version_field(record: Model) -> None:
    if not has_version_field(type(record)):
        raise MissingVersionFieldError(type(record))


def _draft_qset(record: Model) -> QuerySet:
    """
    QuerySet of the rows that are drafts of ``record``.
    """
    manager = type(record)._base_manager
    if record.pk is None:
        return manager.none()
    return manager.filter(**{f"{VERSION_FIELD}_id": record.pk})


def _refetch(record: RecordModel) -> RecordModel:
    return type(record)._base_manager.get(pk=record.pk)


def _usable_approvable_fields(live: Model) -> set[str]:
    """
    The live record's approvable fields, minus anything that must never be
    copied from a draft: the primary key(s) and ``approved_version``.
    """
    excluded = set()
    for field in live._meta.concrete_fields:
        if field.primary_key or field.name == VERSION_FIELD:
            excluded.update({field.name, field.attname})
    return approvable_fields(live) - excluded


def _save_approved_changes(live: Model, draft: Model) -> None:
    """
    Copy approvable field values from the draft and save the live record.
    """
    usable_fields = _usable_approvable_fields(live)
    for field in draft._meta.concrete_fields:
        if field.name in usable_fields or field.attname in usable_fields:
            setattr(live, field.attname, getattr(draft, field.attname))

    try:
        live.full_clean()
    except ValidationError as exc:
        raise PublishValidationError(live, exc) from exc
    live.save()


def _replace_plural_relations(
    live: Model,
    draft: Model,
    entry: DraftCatalogEntry,
    published_at: datetime,
) -> None:
    """
    Replace the live record's children with the draft's, relation by relation.
    """
    updated_field = get_setting("UPDATED_FIELD")
    for relation in entry.plural_relations:
        child_manager = relation.related_model._base_manager

        # The live children must be gone before the draft's children are
        # pointed at the live record, or we'd delete those too.
        child_manager.filter(**{relation.foreign_key: live}).delete()

        updates = {relation.foreign_key: live}
        if has_version_field(relation.related_model):
            updates[VERSION_FIELD] = None
        if has_concrete_field(relation.related_model, updated_field):
            updates[updated_field] = published_at
        child_manager.filter(**{relation.foreign_key: draft}).update(**updates)


def _destroy_draft(draft: Model) -> None:
    # By now the draft owns no plural children, so nothing of value cascades.
    # Deleting through a QuerySet leaves the caller's instance (and its pk)
    # alone.
    type(draft)._base_manager.filter(pk=draft.pk).delete()
