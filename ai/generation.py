"""Validates the form and submits generation requests"""
import asyncio
from typing import Optional

from ai.exceptions.pixelmind_exceptions import GenerationError
from ai.form_state import (
    FormStateStore,
    submission_discarded,
    submission_failed,
    submission_started,
    submission_succeeded,
    validation_failed,
)
from utils.error_handler import ErrorKind, handle_error
from utils.logging_config import get_logger

logger = get_logger(__name__)


class GenerationController:
    def __init__(self, client, store: FormStateStore):
        self.client = client
        self.store = store

    async def submit(self) -> Optional[str]:
        """
        Submit the current form.

        Returns the image reference on success, None otherwise. Only one
        submission can be in flight; calls made meanwhile do nothing.
        """
        state = self.store.state
        if state.submitting:
            logger.debug("Submission already in flight, ignoring submit")
            return None

        if not self.store.is_form_valid():
            error = handle_error(None, ErrorKind.VALIDATION_FAILURE,
                                 {"model": state.selected_model_id})
            self.store.apply(validation_failed, error)
            return None

        model_id = state.selected_model_id
        values = dict(state.values)
        epoch = state.selection_epoch
        self.store.apply(submission_started)

        try:
            image_ref = await self.client.generate_image(model_id, values)
        except asyncio.CancelledError:
            self.store.apply(submission_discarded)
            raise
        except Exception as e:
            # Unexpected errors still surface as a generation failure
            if not isinstance(e, GenerationError):
                logger.exception(f"Unexpected error while generating with {model_id}")
            if self.store.state.selection_epoch != epoch:
                logger.debug(f"Generation for {model_id} failed after the selection changed")
                self.store.apply(submission_discarded)
                return None
            error = handle_error(e, ErrorKind.GENERATION_FAILURE,
                                 {"operation": "generate_image", "model": model_id})
            self.store.apply(submission_failed, error)
            return None

        if self.store.state.selection_epoch != epoch:
            logger.info(f"🗑️ Discarding image for {model_id}, selection changed while generating")
            self.store.apply(submission_discarded)
            return None

        logger.info(f"🎨 Image generated with {model_id}")
        self.store.apply(submission_succeeded, image_ref)
        return image_ref
