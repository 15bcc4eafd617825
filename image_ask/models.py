from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedImage:
    media_type: str
    encoded_data: str


@dataclass(frozen=True)
class AnalysisRequest:
    question: str
    image: UploadedImage


@dataclass(frozen=True)
class Answer:
    text: str


@dataclass(frozen=True)
class Failure:
    kind: str
    message: str
    detail: str = ""


AnalysisResponse = Answer | Failure
