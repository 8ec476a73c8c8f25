"""
Default duplication of a live record into a draft.

``duplicate_record`` copies one row and, following the relation catalog, the
rows it owns:

* SINGULAR relations get independent copies of their targets, so edits to a
  draft's related rows never touch the live row's related rows.
* PLURAL relations get a copy of every child, pointing at the new parent. The
  child copies have their own ``approved_version`` left empty, because at
  publish time they are handed over to the live record wholesale rather than
  merged into the live children.

Models reached through a relation are copied using their own catalog entry, so
a Room copied as part of a House draft brings along copies of its closets.
Models that are not registered are copied field-by-field with no relations.
"""
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.db import IntegrityError, models
from django.db.transaction import atomic

from .catalog import VERSION_FIELD, DraftableModelRegistry, has_version_field, is_regenerated_on_copy


def duplicate_record(
    record: models.Model,
    *,
    approved_version: models.Model | None = None,
    overrides: dict[str, Any] | None = None,
) -> models.Model:
    """
    Save and return a copy of ``record`` along with copies of what it owns.

    ``approved_version`` is stored on the copy if its model has that field.
    ``overrides`` are assigned to the copy right before it is saved, which is
    how children get pointed at their copied parent.

    The copy is saved without calling ``full_clean()``: drafts are allowed to be
    invalid while they are being edited. If the database rejects the copy, a
    ``ValidationError`` is raised with the copy's field validation messages
    (or the database error's message, if the fields look valid).
    """
    model_cls = type(record)
    entry = DraftableModelRegistry.get_entry(model_cls)

    copy = _copy_fields(record)
    if has_version_field(model_cls):
        setattr(copy, VERSION_FIELD, approved_version)
    if entry:
        for field_name in entry.nullify:
            setattr(copy, model_cls._meta.get_field(field_name).attname, None)
        for relation in entry.singular_relations:
            target = getattr(record, relation.name)
            if target is not None:
                setattr(copy, relation.name, duplicate_record(target))
    for name, value in (overrides or {}).items():
        setattr(copy, name, value)

    _save_copy(copy)

    if entry:
        for relation in entry.plural_relations:
            children = relation.related_model._base_manager \
                                             .filter(**{relation.foreign_key: record}) \
                                             .order_by("pk")
            for child in children:
                duplicate_record(child, overrides={relation.foreign_key: copy})

    return copy


def _copy_fields(record: models.Model) -> models.Model:
    """
    Unsaved instance of the same model with the same concrete field values.

    Primary keys (including multi-table inheritance parent links) are left
    unset. Unique fields that have a default, like a UUID, get a fresh default
    value instead of the original's.
    """
    model_cls = type(record)
    copy = model_cls()
    for field in model_cls._meta.concrete_fields:
        if field.primary_key:
            continue
        if is_regenerated_on_copy(field):
            setattr(copy, field.attname, field.get_default())
            continue
        setattr(copy, field.attname, getattr(record, field.attname))
    return copy


def _save_copy(copy: models.Model) -> None:
    try:
        # Savepoint, so that we can still run validation queries afterwards.
        with atomic():
            copy.save(force_insert=True)
    except IntegrityError as exc:
        raise _validation_error_for(copy, exc) from exc


def _validation_error_for(copy: models.Model, exc: IntegrityError) -> ValidationError:
    """
    Explain why a copy could not be saved, in terms of its fields if possible.
    """
    try:
        copy.clean_fields()
    except ValidationError as validation_error:
        return validation_error
    return ValidationError(str(exc))
