"""
Form state for the PixelMind screen.

The module has two layers:

- pure transition functions, one per event, each taking a FormState and
  returning a new one;
- FormStateStore, which holds the current FormState, applies transitions
  and notifies subscribers.

Keeping the transitions pure means the whole state machine can be tested
without a UI or a network.
"""
import math
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from ai.exceptions.pixelmind_exceptions import FieldValueError, UnknownFieldError
from ai.models.schema_types import (
    FieldValue,
    FormField,
    FormState,
    GenerationStatus,
    Model,
    ModelsStatus,
    Schema,
    SchemaProperty,
    SchemaStatus,
)
from utils.error_handler import SanitizedError
from utils.logging_config import get_logger

logger = get_logger(__name__)

NUMERIC_TYPES = ("number", "integer")
TRUE_WORDS = ("true", "1", "yes", "on")
FALSE_WORDS = ("false", "0", "no", "off")

Listener = Callable[[FormState], None]


def default_input_values(schema: Optional[Schema]) -> Dict[str, Any]:
    """Initial field values for a schema: declared defaults only."""
    if schema is None:
        return {}
    return {
        name: prop.default
        for name, prop in schema.properties.items()
        if prop.has_default
    }


def is_filled(value: Any) -> bool:
    return value is not None and value != ""


def is_form_valid(state: FormState) -> bool:
    """A model is selected, its schema is loaded and every required field is filled."""
    if not state.selected_model_id or state.schema is None:
        return False
    return all(is_filled(state.values.get(name)) for name in state.schema.required)


def coerce_field_input(name: str, prop: SchemaProperty, raw: str) -> FieldValue:
    """
    Turn text typed into a form control into a value of the declared type.

    An empty string stays empty so that a cleared required field fails
    validation instead of becoming 0.
    """
    if prop.type not in NUMERIC_TYPES and prop.type != "boolean":
        return raw

    text = raw.strip()
    if text == "":
        return ""

    if prop.type == "number":
        try:
            number = float(text)
        except ValueError:
            raise FieldValueError(name, raw, "number") from None
        # nan, inf and overflowing literals cannot be sent as JSON
        if not math.isfinite(number):
            raise FieldValueError(name, raw, "number")
        return number

    if prop.type == "integer":
        try:
            return int(text)
        except ValueError:
            raise FieldValueError(name, raw, "integer") from None

    lowered = text.lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False
    raise FieldValueError(name, raw, "boolean")


def _display_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def form_fields(state: FormState) -> List[FormField]:
    """Render descriptors for the current schema, in declaration order."""
    if state.schema is None:
        return []
    required = set(state.schema.required)
    return [
        FormField(
            name=name,
            control="number" if prop.type in NUMERIC_TYPES else "text",
            required=name in required,
            display_value=_display_value(state.values.get(name)),
            description=prop.description,
            minimum=prop.minimum,
            maximum=prop.maximum,
        )
        for name, prop in state.schema.properties.items()
    ]


# Transitions

def _with_error(state: FormState, error: SanitizedError, **changes) -> FormState:
    return replace(state, error=error.user_message, error_kind=error.kind, **changes)


def models_requested(state: FormState) -> FormState:
    return replace(state, models_status=ModelsStatus.LOADING)


def models_loaded(state: FormState, models: Sequence[Model]) -> FormState:
    return replace(state, models=tuple(models), models_status=ModelsStatus.LOADED)


def models_failed(state: FormState, error: SanitizedError) -> FormState:
    return _with_error(state, error, models_status=ModelsStatus.FAILED)


def model_selected(state: FormState, model_id: str) -> FormState:
    """Start over for a new selection; nothing from the previous model survives."""
    return replace(
        state,
        selected_model_id=model_id,
        schema=None,
        values={},
        schema_status=SchemaStatus.LOADING if model_id else SchemaStatus.IDLE,
        result_image_ref=None,
        error=None,
        error_kind=None,
        selection_epoch=state.selection_epoch + 1,
    )


def schema_resolved(state: FormState, schema: Schema) -> FormState:
    return replace(
        state,
        schema=schema,
        values=default_input_values(schema),
        schema_status=SchemaStatus.RESOLVED,
    )


def schema_not_found(state: FormState, error: SanitizedError) -> FormState:
    return _with_error(state, error, schema=None, values={}, schema_status=SchemaStatus.NOT_FOUND)


def schema_failed(state: FormState, error: SanitizedError) -> FormState:
    return _with_error(state, error, schema=None, values={}, schema_status=SchemaStatus.FAILED)


def value_set(state: FormState, name: str, value: Any) -> FormState:
    if state.schema is None or name not in state.schema.properties:
        raise UnknownFieldError(name)
    values = dict(state.values)
    values[name] = value
    return replace(state, values=values)


def validation_failed(state: FormState, error: SanitizedError) -> FormState:
    return _with_error(state, error)


def submission_started(state: FormState) -> FormState:
    return replace(
        state,
        generation_status=GenerationStatus.SUBMITTING,
        error=None,
        error_kind=None,
        result_image_ref=None,
    )


def submission_succeeded(state: FormState, image_ref: str) -> FormState:
    return replace(state, generation_status=GenerationStatus.SUCCEEDED, result_image_ref=image_ref)


def submission_failed(state: FormState, error: SanitizedError) -> FormState:
    return _with_error(state, error, generation_status=GenerationStatus.FAILED)


def submission_discarded(state: FormState) -> FormState:
    """The selection changed while generating; release the lock, keep nothing."""
    return replace(state, generation_status=GenerationStatus.IDLE)


def download_failed(state: FormState, error: SanitizedError) -> FormState:
    return _with_error(state, error)


class FormStateStore:
    """Holds the current FormState and applies transitions to it."""

    def __init__(self, initial: Optional[FormState] = None):
        self._state = initial or FormState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> FormState:
        return self._state

    def apply(self, transition: Callable[..., FormState], *args) -> FormState:
        new_state = transition(self._state, *args)
        self._state = new_state
        logger.debug(f"{transition.__name__}: models={new_state.models_status.value} "
                     f"schema={new_state.schema_status.value} "
                     f"generation={new_state.generation_status.value}")
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"State listener {listener!r} failed: {e}")
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with every new state. Returns a function that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_value(self, name: str, value: Any) -> FormState:
        """Set one field, leaving the others untouched."""
        return self.apply(value_set, name, value)

    def set_field_input(self, name: str, raw: str) -> FormState:
        """Set one field from raw control text, coerced by its declared type."""
        schema = self._state.schema
        if schema is None or name not in schema.properties:
            raise UnknownFieldError(name)
        return self.set_value(name, coerce_field_input(name, schema.properties[name], raw))

    def is_form_valid(self) -> bool:
        return is_form_valid(self._state)

    def form_fields(self) -> List[FormField]:
        return form_fields(self._state)
