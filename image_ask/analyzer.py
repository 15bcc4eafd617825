"""AnalysisOrchestrator — validates input, calls the backend, never raises."""
import logging
from typing import Optional

from image_ask.constants import (
    ERR_MISSING_INPUT,
    ERR_READ_FAILED,
    MSG_ANALYSIS_FAILED,
    MSG_ANALYSIS_OK,
    MSG_ERR_ANALYSIS_FAILED,
    MSG_ERR_BAD_IMAGE,
    MSG_ERR_MISSING_INPUT,
    MSG_ERR_READ_FILE,
    MSG_ERR_UNPARSEABLE_RESPONSE,
)
from image_ask.errors import (
    AnalysisError,
    EncodingError,
    ResponseShapeError,
    ValidationError,
)
from image_ask.models import AnalysisRequest, AnalysisResponse, Answer, Failure, UploadedImage
from image_ask.vision.client import VisionClient

logger = logging.getLogger(__name__)


# ── pure helpers ──────────────────────────────────────────────────────────────


def build_request(question: Optional[str], image: Optional[UploadedImage]) -> AnalysisRequest:
    """Enforce the submittable invariant: a question and an encoded image."""
    match (question, image):
        case (str() as q, UploadedImage(media_type=str() as mt)) if q.strip() and mt:
            return AnalysisRequest(question=q, image=image)
        case _:
            raise ValidationError(ERR_MISSING_INPUT)


def user_message(error: AnalysisError) -> str:
    match error:
        case ValidationError():
            return MSG_ERR_MISSING_INPUT
        case ResponseShapeError():
            return MSG_ERR_UNPARSEABLE_RESPONSE
        case EncodingError(message=m) if m == ERR_READ_FAILED:
            return MSG_ERR_READ_FILE
        case EncodingError():
            return MSG_ERR_BAD_IMAGE
        case _:
            return MSG_ERR_ANALYSIS_FAILED % error.message


def to_failure(error: AnalysisError) -> Failure:
    return Failure(kind=error.kind, message=user_message(error), detail=error.message)


# ── orchestrator ──────────────────────────────────────────────────────────────


class AnalysisOrchestrator:
    """Turns (question, image) into an Answer or a classified Failure.

    At most one analysis is expected in flight; preventing re-entry is the
    caller's job (see AnalysisSession.can_submit).
    """

    def __init__(self, vision_client: VisionClient) -> None:
        self._vision_client = vision_client

    async def analyze(
        self, question: Optional[str], image: Optional[UploadedImage]
    ) -> AnalysisResponse:
        try:
            request = build_request(question, image)
        except ValidationError as exc:
            return to_failure(exc)
        return await self.submit(request)

    async def quick_action(
        self, question: str, image: Optional[UploadedImage]
    ) -> AnalysisResponse:
        """Same as analyze, with a canned question chosen by the caller."""
        return await self.analyze(question, image)

    async def submit(self, request: AnalysisRequest) -> AnalysisResponse:
        try:
            text = await self._vision_client.analyze(request.question, request.image)
        except AnalysisError as exc:
            logger.error(MSG_ANALYSIS_FAILED, exc.kind, exc.message)
            return to_failure(exc)
        logger.info(MSG_ANALYSIS_OK, len(text))
        return Answer(text=text)
