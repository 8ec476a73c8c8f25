"""
Exceptions raised by the drafts app.

Database errors (``IntegrityError``, ``OperationalError``, ...) are never
wrapped: they propagate unchanged and the surrounding ``atomic()`` block rolls
the whole operation back.
"""
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _


class DraftError(Exception):
    """
    Base exception for draft lifecycle errors
    """

    def __init__(self, message: str = ""):
        super().__init__()
        self.message = message

    def __str__(self):
        return str(self.message)

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)})"


class MissingVersionFieldError(DraftError):
    """
    The model has no ``approved_version`` field, so it cannot have drafts.

    This is a configuration error. Retrying will not help.
    """

    def __init__(self, model_cls: type, **kargs):
        super().__init__(**kargs)
        self.model_cls = model_cls
        self.message = _(
            "{model} has no 'approved_version' field. Mix in DraftableModelMixin to use drafts."
        ).format(model=model_cls.__name__)


class DraftCreationError(DraftError):
    """
    A draft copy of a live record could not be persisted.

    ``messages`` holds the validation messages of the copy that failed to save.
    """

    def __init__(self, record, messages: list[str] | None = None, **kargs):
        super().__init__(**kargs)
        self.record = record
        self.messages = list(messages or [])
        self.message = _("Could not create a draft of {record}: {messages}").format(
            record=record,
            messages="; ".join(self.messages),
        )


class PublishValidationError(DraftError):
    """
    The live record did not validate after the draft's fields were merged in.

    The publish transaction was rolled back, so the live record, the draft, and
    all of their children are exactly as they were before the publish.
    """

    def __init__(self, record, validation_error: ValidationError, **kargs):
        super().__init__(**kargs)
        self.record = record
        self.validation_error = validation_error
        self.message = _("Could not publish changes to {record}: {messages}").format(
            record=record,
            messages="; ".join(validation_error.messages),
        )

    @property
    def message_dict(self) -> dict[str, list[str]]:
        if hasattr(self.validation_error, "error_dict"):
            return self.validation_error.message_dict
        return {}
