"""Loads the list of models the user can pick from"""
from typing import List, Optional

from ai.exceptions.pixelmind_exceptions import ModelListError
from ai.form_state import FormStateStore, models_failed, models_loaded, models_requested
from ai.models.schema_types import Model
from utils.error_handler import ErrorKind, handle_error
from utils.logging_config import get_logger

logger = get_logger(__name__)


class CatalogClient:
    def __init__(self, client, store: FormStateStore):
        self.client = client
        self.store = store

    async def load_models(self) -> Optional[List[Model]]:
        """
        Fetch the model list into the store.

        Returns the models, or None if the request failed (the error is in
        the store). Failures are not retried.
        """
        self.store.apply(models_requested)
        try:
            models = await self.client.list_models()
        except Exception as e:
            # Unexpected errors still end the load as a failure
            if not isinstance(e, ModelListError):
                logger.exception("Unexpected error while loading models")
            error = handle_error(e, ErrorKind.MODEL_LIST_FAILURE, {"operation": "list_models"})
            self.store.apply(models_failed, error)
            return None

        logger.info(f"📚 Loaded {len(models)} models")
        self.store.apply(models_loaded, models)
        return models
