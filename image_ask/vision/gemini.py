"""GeminiVisionClient — Google Gemini generateContent backend."""
import logging
from typing import Any

from image_ask.config import Config
from image_ask.constants import (
    ERR_UNEXPECTED_RESPONSE,
    GEMINI_API_KEY_HEADER,
    MSG_SHAPE_MISMATCH,
    USER_ROLE,
)
from image_ask.errors import ResponseShapeError
from image_ask.models import AnalysisRequest, UploadedImage
from image_ask.request_client import RetryingRequestClient
from image_ask.vision.client import VisionClient

logger = logging.getLogger(__name__)


def build_payload(request: AnalysisRequest) -> dict[str, Any]:
    """One user turn: question text first, then the inline image."""
    return {
        "contents": [
            {
                "role": USER_ROLE,
                "parts": [
                    {"text": request.question},
                    {
                        "inlineData": {
                            "mimeType": request.image.media_type,
                            "data": request.image.encoded_data,
                        }
                    },
                ],
            }
        ]
    }


def extract_answer(body: Any) -> str:
    """candidates[0].content.parts[0].text, or ResponseShapeError."""
    match body:
        case {"candidates": [{"content": {"parts": [{"text": str() as text}, *_]}}, *_]} if text:
            return text
        case _:
            logger.warning(MSG_SHAPE_MISMATCH, body)
            raise ResponseShapeError(ERR_UNEXPECTED_RESPONSE)


class GeminiVisionClient(VisionClient):

    def __init__(self, config: Config, request_client: RetryingRequestClient) -> None:
        self._config = config
        self._request_client = request_client

    async def analyze(self, question: str, image: UploadedImage) -> str:
        body = await self._request_client.send(
            self._config.endpoint,
            build_payload(AnalysisRequest(question=question, image=image)),
            max_attempts=self._config.max_attempts,
            base_delay_ms=self._config.base_delay_ms,
            headers={GEMINI_API_KEY_HEADER: self._config.gemini_api_key},
        )
        return extract_answer(body)
