"""Wiring — Config → RetryingRequestClient → GeminiVisionClient → AnalysisSession."""
import logging
from typing import Optional

from rich.logging import RichHandler

from image_ask.analyzer import AnalysisOrchestrator
from image_ask.config import Config
from image_ask.request_client import RetryingRequestClient
from image_ask.session import AnalysisSession, OnChange
from image_ask.vision.gemini import GeminiVisionClient


def setup_logging(level: str, handler: Optional[logging.Handler] = None) -> None:
    """Route every image_ask logger through one root handler (RichHandler by default).

    Unknown level names fall back to INFO; earlier root handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler or RichHandler(rich_tracebacks=True, show_path=False))


def create_orchestrator(config: Config) -> AnalysisOrchestrator:
    request_client = RetryingRequestClient(timeout=config.request_timeout)
    return AnalysisOrchestrator(GeminiVisionClient(config, request_client))


def create_session(
    config: Optional[Config] = None, on_change: Optional[OnChange] = None
) -> AnalysisSession:
    """Build a ready-to-use session; loads Config from the environment when omitted."""
    config = config or Config.from_env()
    setup_logging(config.log_level)
    return AnalysisSession(create_orchestrator(config), on_change=on_change)
