"""VisionClient — abstract base for image question-answering backends."""
from abc import ABC, abstractmethod

from image_ask.models import UploadedImage


class VisionClient(ABC):
    @abstractmethod
    async def analyze(self, question: str, image: UploadedImage) -> str:
        """Ask `question` about `image` and return the answer text. Raises AnalysisError on failure."""
        ...
