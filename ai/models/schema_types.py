"""Data definitions shared by the PixelMind client: models, schemas and form state"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from utils.error_handler import ErrorKind

# A value entered through the form, after coercion by declared type
FieldValue = Union[str, int, float, bool]


class Model(BaseModel, frozen=True, coerce_numbers_to_str=True):
    """A selectable generation backend"""
    id: str
    name: str


class SchemaProperty(BaseModel):
    """One input field declared by a model's schema"""
    type: str = "string"
    description: Optional[str] = None
    default: Optional[Any] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def has_default(self) -> bool:
        # An explicit "default": null still counts as declared
        return "default" in self.model_fields_set


class SchemaInput(BaseModel):
    properties: Dict[str, SchemaProperty] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


class Schema(BaseModel):
    """The declared shape of inputs a model accepts"""
    input: SchemaInput = Field(default_factory=SchemaInput)

    @property
    def properties(self) -> Dict[str, SchemaProperty]:
        return self.input.properties

    @property
    def required(self) -> List[str]:
        return self.input.required


class ModelsStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class SchemaStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class GenerationStatus(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class FormState:
    """Everything the form screen shows, as one immutable value.

    New states are produced by the transition functions in ai.form_state;
    nothing mutates a FormState in place.
    """
    models: Tuple[Model, ...] = ()
    selected_model_id: str = ""
    schema: Optional[Schema] = None
    values: Dict[str, Any] = field(default_factory=dict)
    models_status: ModelsStatus = ModelsStatus.IDLE
    schema_status: SchemaStatus = SchemaStatus.IDLE
    generation_status: GenerationStatus = GenerationStatus.IDLE
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    result_image_ref: Optional[str] = None
    # Bumped on every model selection; lets late responses detect they are stale
    selection_epoch: int = 0

    @property
    def models_loading(self) -> bool:
        return self.models_status is ModelsStatus.LOADING

    @property
    def schema_loading(self) -> bool:
        return self.schema_status is SchemaStatus.LOADING

    @property
    def submitting(self) -> bool:
        return self.generation_status is GenerationStatus.SUBMITTING


@dataclass(frozen=True)
class FormField:
    """What a widget needs to render one schema property"""
    name: str
    control: str
    required: bool
    display_value: str
    description: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
