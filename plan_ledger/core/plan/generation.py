"""
Billed generation flow.

Wraps a generation provider call so that usage is only billed after the
provider delivered a result. Provider failures are logged and surfaced as
GenerationFailedError; nothing is recorded on the plan in that case.

Usage:
    billed = BilledGeneration(recorder, provider)
    result = await billed.generate_video(context, prompt="a cat surfing", model_id="gen2")
"""

import logging
from typing import List, Optional, Protocol

from pydantic import BaseModel

from .entries import BillingContext
from .exceptions import GenerationFailedError, InvalidGenerationRequestError
from .expenses import ExpenseRecorder
from .schemas import Expense, ExpenseType

logger = logging.getLogger(__name__)


class VideoModel(BaseModel):
    """Video generation model offered to users."""
    id: str
    name: str


class VideoResult(BaseModel):
    """Result returned by a video provider."""
    url: str
    duration: int  # milliseconds


class VideoProvider(Protocol):
    """Upstream video generation provider."""

    async def generate_video(self, prompt: str, model: VideoModel) -> VideoResult:
        ...


class BilledVideo(BaseModel):
    """Generated video together with the expense it was billed as."""
    prompt: str
    model: VideoModel
    result: VideoResult
    expense: Optional[Expense] = None  # None when the payer has no plan


DEFAULT_VIDEO_MODELS: List[VideoModel] = [
    VideoModel(id="zeroscope", name="Zeroscope"),
    VideoModel(id="gen2", name="Gen-2"),
]


class BilledGeneration:
    """Runs generation requests and bills them on success."""

    def __init__(
        self,
        recorder: ExpenseRecorder,
        video_provider: VideoProvider,
        video_models: Optional[List[VideoModel]] = None,
    ):
        self._recorder = recorder
        self._ledger = recorder.ledger
        self._video_provider = video_provider
        self._video_models = video_models or DEFAULT_VIDEO_MODELS

    def find_video_model(self, model_id: Optional[str]) -> VideoModel:
        """
        Look up a video model, falling back to the configured default.

        Raises:
            InvalidGenerationRequestError: If the model is unknown
        """
        model_id = model_id or self._ledger.settings.default_video_model

        for model in self._video_models:
            if model.id == model_id:
                return model

        raise InvalidGenerationRequestError(
            "You specified an invalid video generation model",
            details={"model": model_id},
        )

    async def generate_video(
        self,
        context: BillingContext,
        prompt: str,
        model_id: Optional[str] = None,
    ) -> BilledVideo:
        """
        Generate a video and bill it to the resolved entry.

        Args:
            context: Acting user and optional guild
            prompt: Text prompt
            model_id: Video model to use (default from settings)

        Returns:
            BilledVideo with the provider result and the recorded expense

        Raises:
            InvalidGenerationRequestError: Prompt too long or unknown model
            GenerationFailedError: The provider call failed
        """
        max_length = self._ledger.settings.max_video_prompt_length
        if len(prompt) > max_length:
            raise InvalidGenerationRequestError(
                f"The specified prompt is **too long**, it can't be longer than **{max_length}** characters",
                details={"length": len(prompt), "max_length": max_length},
            )

        model = self.find_video_model(model_id)

        try:
            result = await self._video_provider.generate_video(prompt, model)
        except Exception as e:
            logger.exception(f"Failed to generate video for user {context.user.id} with {model.id}: {e}")
            raise GenerationFailedError(
                ExpenseType.VIDEO.value,
                "It seems like we encountered an error while trying to generate the video for you.",
            ) from e

        expense = await self._recorder.expense_for_video(context, result.duration, model.id)
        logger.info(
            f"Generated {result.duration / 1000:.1f}s video for user {context.user.id} "
            f"with {model.id} (billed={expense is not None})"
        )

        return BilledVideo(prompt=prompt, model=model, result=result, expense=expense)


__all__ = [
    "VideoModel",
    "VideoResult",
    "VideoProvider",
    "BilledVideo",
    "BilledGeneration",
    "DEFAULT_VIDEO_MODELS",
]
