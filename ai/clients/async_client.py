"""Async client for the PixelMind API with Pydantic models"""
import json
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import ValidationError

from ai.exceptions.pixelmind_exceptions import (
    APIError,
    DownloadError,
    GenerationError,
    ModelListError,
    SchemaFetchError,
)
from ai.models.schema_types import Model, Schema
from config import (
    PIXELMIND_API_BASE_URL,
    PIXELMIND_CATALOG_TIMEOUT,
    PIXELMIND_SCHEMA_TIMEOUT,
    PIXELMIND_IMAGE_TIMEOUT,
    MODELS_ENDPOINT,
    SCHEMA_ENDPOINT,
    IMAGE_ENDPOINT,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _is_transient_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class AsyncPixelMindClient:
    """Thin wrapper over the three PixelMind endpoints.

    Every method either returns parsed data or raises an APIError subclass;
    httpx exceptions never leak out.
    """

    def __init__(self, base_url: str = PIXELMIND_API_BASE_URL,
                 catalog_timeout: float = PIXELMIND_CATALOG_TIMEOUT,
                 schema_timeout: float = PIXELMIND_SCHEMA_TIMEOUT,
                 image_timeout: float = PIXELMIND_IMAGE_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.catalog_timeout = catalog_timeout
        self.schema_timeout = schema_timeout
        self.image_timeout = image_timeout

        # HTTP client
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=catalog_timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _send(self, error_cls: Type[APIError], method: str, url: str,
                    timeout: float, **kwargs) -> httpx.Response:
        """Send a request and translate every transport failure into error_cls"""
        try:
            response = await self._client.request(method, url, timeout=timeout, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            logger.warning(f"⏱️ {method} {url} timed out after {timeout}s")
            raise error_cls(f"Request timed out: {e}", transient=True) from e
        except httpx.ConnectError as e:
            logger.warning(f"🔌 {method} {url} could not connect - is the API running at {self.base_url}?")
            raise error_cls(f"Connection error: {e}", transient=True) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise error_cls(
                f"HTTP {status}: {e.response.text}",
                status_code=status,
                transient=_is_transient_status(status),
            ) from e
        except httpx.RequestError as e:
            raise error_cls(f"Request error: {e}") from e
        except httpx.InvalidURL as e:
            # Not a RequestError; raised before anything is sent
            raise error_cls(f"Invalid URL {url!r}: {e}") from e

    @staticmethod
    def _json_body(response: httpx.Response, error_cls: Type[APIError]) -> Any:
        if not response.content.strip():
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise error_cls(f"Invalid JSON in response: {e}", status_code=response.status_code) from e

    async def list_models(self) -> List[Model]:
        """List available image models"""
        response = await self._send(ModelListError, "GET", MODELS_ENDPOINT, self.catalog_timeout)
        data = self._json_body(response, ModelListError)
        if not isinstance(data, list):
            raise ModelListError(f"Expected a list of models, got {type(data).__name__}")
        try:
            return [Model.model_validate(item) for item in data]
        except ValidationError as e:
            raise ModelListError(f"Malformed model entry: {e}") from e

    async def get_schema(self, model_id: str) -> Optional[Schema]:
        """
        Fetch the input schema of a model.

        Returns None when the API has no schema for the model (null or empty body).
        """
        response = await self._send(
            SchemaFetchError, "GET", SCHEMA_ENDPOINT, self.schema_timeout,
            params={"model": model_id},
        )
        data = self._json_body(response, SchemaFetchError)
        if not data:
            return None
        try:
            return Schema.model_validate(data)
        except ValidationError as e:
            raise SchemaFetchError(f"Malformed schema for {model_id}: {e}") from e

    async def generate_image(self, model_id: str, values: Dict[str, Any]) -> str:
        """
        Submit a generation request and return the opaque image reference.

        The body carries the model id plus one top-level key per field value.
        """
        payload = {"model": model_id}
        payload.update(values)

        logger.debug(f"📤 Sending generation request for {model_id} with fields {sorted(values)}")
        response = await self._send(
            GenerationError, "POST", IMAGE_ENDPOINT, self.image_timeout, json=payload,
        )

        image_ref = response.text.strip()
        # Some backends JSON-encode the string
        if image_ref.startswith('"'):
            try:
                decoded = json.loads(image_ref)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, str):
                image_ref = decoded.strip()

        if not image_ref:
            raise GenerationError("Generation returned an empty image reference",
                                  status_code=response.status_code)
        return image_ref

    async def fetch_image(self, image_ref: str) -> bytes:
        """Download the bytes behind an image reference (absolute or API-relative URL)"""
        response = await self._send(DownloadError, "GET", image_ref, self.image_timeout)
        return response.content
