"""AnalysisSession — explicit state machine the presentation layer renders from."""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from image_ask.analyzer import AnalysisOrchestrator, build_request, to_failure
from image_ask.encoder import FileHandle, encode_image
from image_ask.errors import EncodingError, ValidationError
from image_ask.models import Answer, Failure, UploadedImage


class Phase(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionState:
    phase: Phase = Phase.IDLE
    question: str = ""
    image: Optional[UploadedImage] = None
    answer: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.phase is Phase.IN_FLIGHT

    @property
    def can_submit(self) -> bool:
        return self.image is not None and bool(self.question.strip()) and not self.is_loading


OnChange = Callable[[SessionState], None]


class AnalysisSession:
    """Holds one SessionState and publishes every transition to `on_change`.

    Submissions are not queued or rejected while one is in flight; a UI should
    disable its controls using `state.can_submit`.
    """

    def __init__(
        self, orchestrator: AnalysisOrchestrator, on_change: Optional[OnChange] = None
    ) -> None:
        self._orchestrator = orchestrator
        self._on_change = on_change
        self._state = SessionState()
        self._selection = 0

    @property
    def state(self) -> SessionState:
        return self._state

    def _set(self, **changes) -> SessionState:
        self._state = replace(self._state, **changes)
        if self._on_change is not None:
            self._on_change(self._state)
        return self._state

    def set_question(self, text: str) -> SessionState:
        return self._set(question=text)

    async def select_file(self, handle: FileHandle) -> SessionState:
        # Stale image/result/error must be gone before the read is awaited.
        self._selection += 1
        selection = self._selection
        self._set(phase=Phase.IDLE, image=None, answer=None, error=None, error_kind=None)
        try:
            image = await encode_image(handle)
        except EncodingError as exc:
            failure = to_failure(exc)
            changes = dict(error=failure.message, error_kind=failure.kind)
        else:
            changes = dict(image=image)
        match selection == self._selection:
            case True:
                return self._set(**changes)
            case False:
                # a newer file was selected while this one was being read
                return self._state

    async def submit(self) -> SessionState:
        self._set(phase=Phase.VALIDATING)
        try:
            request = build_request(self._state.question, self._state.image)
        except ValidationError as exc:
            failure = to_failure(exc)
            self._set(phase=Phase.INVALID, error=failure.message, error_kind=failure.kind)
            return self._set(phase=Phase.IDLE)

        self._set(phase=Phase.IN_FLIGHT, answer=None, error=None, error_kind=None)
        response = await self._orchestrator.submit(request)
        match response:
            case Answer(text=text):
                self._set(phase=Phase.SUCCESS, answer=text)
            case Failure(kind=kind, message=message):
                self._set(phase=Phase.FAILED, error=message, error_kind=kind)
        return self._set(phase=Phase.IDLE)

    async def quick_action(self, prompt: str) -> SessionState:
        """Show `prompt` as the current question, then submit it."""
        self.set_question(prompt)
        return await self.submit()
