"""
The relation catalog: which models have drafts, and how they are structured.

The publishing code never inspects model classes on its own. Everything it
needs to know about a draftable model is registered here once, at startup,
usually from the host app's ``AppConfig.ready()``:

* The ordered relations that take part in draft editing. Each one is resolved
  against the model's ``_meta`` at registration time and stored as a
  ``DraftRelation`` with its cardinality and linkage key.
* The ``DraftPolicy`` that decides whether changes need approval and which
  fields get copied on publish.
* The function used to duplicate a live record into a draft.
* Fields that are reset to ``None`` on the draft copy.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from logging import getLogger
from typing import Callable, Iterable

from django.core.exceptions import FieldDoesNotExist, ImproperlyConfigured
from django.db import models

from .conf import get_setting

log = getLogger(__name__)

# Name of the self-referencing field that marks a row as a draft.
VERSION_FIELD = "approved_version"


class Cardinality(Enum):
    """
    How many related rows a relation points to.
    """
    SINGULAR = "singular"
    PLURAL = "plural"


@dataclass(frozen=True)
class DraftRelation:
    """
    One relation of a draftable model, resolved from the model's ``_meta``.

    For a SINGULAR relation (a ForeignKey or OneToOneField declared on the
    model), ``foreign_key`` is the attname on the model itself, e.g.
    ``flooring_style_id``. Copying that attribute re-points the relation.

    For a PLURAL relation (the reverse side of a ForeignKey declared on the
    child model), ``foreign_key`` is the name of the child's field pointing
    back at the parent, e.g. ``house``.
    """
    name: str
    cardinality: Cardinality
    foreign_key: str
    related_model: type[models.Model]

    @property
    def is_plural(self) -> bool:
        return self.cardinality == Cardinality.PLURAL


class DraftPolicy:
    """
    Per-model decisions about the draft workflow.

    Subclass this and pass an instance to ``register_draftable_model`` to
    customize behavior for a model. The default requires approval for every
    change and publishes every concrete field except the created timestamp.
    """

    def requires_approval(self, record: models.Model) -> bool:  # pylint: disable=unused-argument
        """
        Should edits to ``record`` go through a draft?

        If this returns False, ``editable_version`` hands back the live record
        and publishing is a no-op.
        """
        return True

    def approvable_fields(self, record: models.Model) -> set[str]:
        """
        Names of the fields copied from the draft onto the live record.

        Both the field name and its attname are included (``flooring_style``
        and ``flooring_style_id``), so overrides can use either spelling. The
        primary key and ``approved_version`` are always removed afterwards, no
        matter what this returns.
        """
        created_field = get_setting("CREATED_FIELD")
        field_names: set[str] = set()
        for field in record._meta.concrete_fields:
            if field.name == created_field or is_regenerated_on_copy(field):
                continue
            field_names.update({field.name, field.attname})
        return field_names


DEFAULT_POLICY = DraftPolicy()


@dataclass(frozen=True)
class DraftCatalogEntry:
    """
    Everything registered for one draftable model.
    """
    model: type[models.Model]
    relations: tuple[DraftRelation, ...]
    policy: DraftPolicy
    duplicator: Callable | None = None
    nullify: tuple[str, ...] = ()

    @property
    def singular_relations(self) -> list[DraftRelation]:
        return [relation for relation in self.relations if not relation.is_plural]

    @property
    def plural_relations(self) -> list[DraftRelation]:
        return [relation for relation in self.relations if relation.is_plural]


def has_version_field(model_cls: type[models.Model]) -> bool:
    """
    Does this model have the ``approved_version`` field drafts depend on?
    """
    try:
        model_cls._meta.get_field(VERSION_FIELD)
    except FieldDoesNotExist:
        return False
    return True


def has_concrete_field(model_cls: type[models.Model], name: str) -> bool:
    try:
        field = model_cls._meta.get_field(name)
    except FieldDoesNotExist:
        return False
    return field.concrete


def is_regenerated_on_copy(field: models.Field) -> bool:
    """
    Does a draft copy get a fresh value for this field instead of the original's?

    That's the case for unique fields with a default, like a UUID key. Such a
    value identifies the row, so it is never published back onto the live row.
    """
    return field.unique and not field.primary_key and field.has_default()


def _resolve_relation(model_cls: type[models.Model], name: str) -> DraftRelation:
    """
    Turn a relation name into a DraftRelation using the model's _meta.
    """
    try:
        field = model_cls._meta.get_field(name)
    except FieldDoesNotExist as exc:
        raise ImproperlyConfigured(
            f"{model_cls.__name__} has no relation named '{name}'"
        ) from exc

    if not field.is_relation:
        raise ImproperlyConfigured(
            f"{model_cls.__name__}.{name} is not a relation"
        )

    # Reverse side of a ForeignKey declared on the child model.
    if field.one_to_many:
        return DraftRelation(
            name=name,
            cardinality=Cardinality.PLURAL,
            foreign_key=field.field.name,
            related_model=field.related_model,
        )

    # ForeignKey or OneToOneField declared on this model.
    if (field.many_to_one or field.one_to_one) and field.concrete:
        return DraftRelation(
            name=name,
            cardinality=Cardinality.SINGULAR,
            foreign_key=field.attname,
            related_model=field.related_model,
        )

    raise ImproperlyConfigured(
        f"{model_cls.__name__}.{name} is not supported for drafts: only "
        "ForeignKey/OneToOneField fields and reverse ForeignKey relations are."
    )


class DraftableModelRegistry:
    """
    This class tracks models that take part in the draft workflow.
    """

    _entries: dict[type[models.Model], DraftCatalogEntry] = {}

    @classmethod
    def register(
        cls,
        model_cls: type[models.Model],
        relations: Iterable[str] = (),
        *,
        policy: DraftPolicy | None = None,
        duplicator: Callable | None = None,
        nullify: Iterable[str] = (),
    ) -> DraftCatalogEntry:
        """
        Register a draftable model and resolve its relations.

        If you want to call this from another app, please use the
        ``register_draftable_model`` function in this app's ``api`` module
        instead.

        Registering the same model again replaces its previous entry.
        """
        if not has_version_field(model_cls):
            raise ImproperlyConfigured(
                f"{model_cls.__name__} must have an '{VERSION_FIELD}' field "
                "(inherit from DraftableModelMixin)"
            )

        nullify = tuple(nullify)
        for field_name in nullify:
            if not has_concrete_field(model_cls, field_name):
                raise ImproperlyConfigured(
                    f"{model_cls.__name__} has no field named '{field_name}' to nullify"
                )

        entry = DraftCatalogEntry(
            model=model_cls,
            relations=tuple(_resolve_relation(model_cls, name) for name in relations),
            policy=policy or DEFAULT_POLICY,
            duplicator=duplicator,
            nullify=nullify,
        )
        cls._entries[model_cls] = entry
        log.debug(
            "Registered draftable model %s with relations %s",
            model_cls._meta.label,
            [relation.name for relation in entry.relations],
        )
        return entry

    @classmethod
    def get_entry(cls, model_cls: type[models.Model]) -> DraftCatalogEntry | None:
        return cls._entries.get(model_cls)

    @classmethod
    def get_policy(cls, model_cls: type[models.Model]) -> DraftPolicy:
        entry = cls._entries.get(model_cls)
        return entry.policy if entry else DEFAULT_POLICY

    @classmethod
    def is_registered(cls, model_cls: type[models.Model]) -> bool:
        return model_cls in cls._entries

    @classmethod
    def unregister(cls, model_cls: type[models.Model]) -> None:
        cls._entries.pop(model_cls, None)
