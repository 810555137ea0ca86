"""Resolves the input schema of the selected model, ignoring stale responses"""
from typing import Optional

from ai.exceptions.pixelmind_exceptions import SchemaFetchError
from ai.form_state import FormStateStore, schema_failed, schema_not_found, schema_resolved
from ai.models.schema_types import Schema
from utils.error_handler import ErrorKind, handle_error
from utils.logging_config import get_logger

logger = get_logger(__name__)


class SchemaResolver:
    """
    Fetches schemas and writes them into the store.

    Each call to load_schema takes a new token. When the response arrives it
    is applied only if no newer call has started and the model is still the
    selected one; otherwise it is dropped. This is what keeps a slow response
    for model A from overwriting the form after the user switched to B.
    """

    def __init__(self, client, store: FormStateStore):
        self.client = client
        self.store = store
        self._latest_token = 0

    def _is_current(self, token: int, model_id: str) -> bool:
        return token == self._latest_token and self.store.state.selected_model_id == model_id

    async def load_schema(self, model_id: str) -> Optional[Schema]:
        """
        Fetch the schema for model_id.

        Returns the schema if it was applied to the store, None otherwise
        (stale, not found or failed).
        """
        self._latest_token += 1
        token = self._latest_token

        try:
            schema = await self.client.get_schema(model_id)
        except Exception as e:
            if not isinstance(e, SchemaFetchError):
                logger.exception(f"Unexpected error while loading the schema for {model_id}")
            if not self._is_current(token, model_id):
                logger.debug(f"Dropping failed schema response for {model_id} (token {token} is stale)")
                return None
            error = handle_error(e, ErrorKind.SCHEMA_FETCH_FAILURE,
                                 {"operation": "get_schema", "model": model_id})
            self.store.apply(schema_failed, error)
            return None

        if not self._is_current(token, model_id):
            logger.debug(f"Dropping schema response for {model_id} (token {token} is stale)")
            return None

        if schema is None:
            error = handle_error(None, ErrorKind.SCHEMA_NOT_FOUND, {"model": model_id})
            self.store.apply(schema_not_found, error)
            return None

        logger.info(f"🧩 Schema for {model_id}: {len(schema.properties)} fields, "
                    f"{len(schema.required)} required")
        self.store.apply(schema_resolved, schema)
        return schema
