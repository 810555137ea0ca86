"""
Client state machine for the PixelMind form screen.

Wires the catalog, schema resolver, form store, generation controller and
downloader together and exposes one method per user event.
"""

from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from ai.catalog import CatalogClient
from ai.exceptions.pixelmind_exceptions import DownloadError
from ai.form_state import FormStateStore, download_failed, model_selected
from ai.generation import GenerationController
from ai.models.schema_types import FormField, FormState, Model, ModelsStatus, Schema, SchemaStatus
from ai.schema_resolver import SchemaResolver
from media.image_downloader import ImageDownloader
from utils.error_handler import ErrorKind, handle_error
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Schema outcomes after which re-selecting the same model fetches again
RETRYABLE_SCHEMA_STATUSES = (SchemaStatus.NOT_FOUND, SchemaStatus.FAILED)


class GenerationOrchestrator:
    """
    One instance per screen.

    Events: mount, select_model, set_value / set_field_input, submit and
    download_result. All of them run on the same event loop, so state only
    changes between awaits.
    """

    def __init__(self, client, store: Optional[FormStateStore] = None,
                 downloader: Optional[ImageDownloader] = None):
        """Initialize the orchestrator around an AsyncPixelMindClient (or compatible)."""
        self.client = client
        self.store = store or FormStateStore()
        self.catalog = CatalogClient(client, self.store)
        self.schema_resolver = SchemaResolver(client, self.store)
        self.generation = GenerationController(client, self.store)
        self.downloader = downloader or ImageDownloader(client)

    @property
    def state(self) -> FormState:
        return self.store.state

    def subscribe(self, listener: Callable[[FormState], None]) -> Callable[[], None]:
        return self.store.subscribe(listener)

    async def mount(self) -> Optional[List[Model]]:
        """Load the model list. Only the first call fetches."""
        if self.state.models_status is not ModelsStatus.IDLE:
            logger.debug(f"Already mounted (models {self.state.models_status.value})")
            return list(self.state.models) if self.state.models_status is ModelsStatus.LOADED else None
        return await self.catalog.load_models()

    async def select_model(self, model_id: str) -> Optional[Schema]:
        """
        Switch the form to model_id and load its schema.

        Everything tied to the previous model is reset first. Selecting the
        model that is already selected does nothing, unless its schema was
        not found or failed to load, in which case it is fetched again.
        Selecting "" clears the form.
        """
        state = self.state
        if (model_id and model_id == state.selected_model_id
                and state.schema_status not in RETRYABLE_SCHEMA_STATUSES):
            logger.debug(f"{model_id} is already selected")
            return state.schema

        logger.info(f"🔀 Selected model {model_id or '(none)'}")
        self.store.apply(model_selected, model_id)
        if not model_id:
            return None
        return await self.schema_resolver.load_schema(model_id)

    def set_value(self, name: str, value: Any) -> FormState:
        return self.store.set_value(name, value)

    def set_field_input(self, name: str, raw: str) -> FormState:
        return self.store.set_field_input(name, raw)

    def is_form_valid(self) -> bool:
        return self.store.is_form_valid()

    @property
    def can_submit(self) -> bool:
        """Whether the submit control should be enabled"""
        return not self.state.submitting and self.store.is_form_valid()

    def form_fields(self) -> List[FormField]:
        return self.store.form_fields()

    async def submit(self) -> Optional[str]:
        return await self.generation.submit()

    async def download_result(self, destination: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """Save the current result image. Does nothing when there is no result."""
        image_ref = self.state.result_image_ref
        if not image_ref:
            logger.debug("No generated image to download")
            return None
        try:
            return await self.downloader.download(image_ref, destination)
        except DownloadError as e:
            error = handle_error(e, ErrorKind.DOWNLOAD_FAILURE, {"operation": "download"})
            self.store.apply(download_failed, error)
            return None
