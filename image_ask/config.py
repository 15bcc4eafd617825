from dataclasses import dataclass
import os

import httpx
from dotenv import load_dotenv

from image_ask.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_GEMINI_API_BASE,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_REQUEST_TIMEOUT,
    ERR_BAD_API_BASE,
    GEMINI_ENDPOINT_TEMPLATE,
)


@dataclass(frozen=True)
class Config:
    gemini_api_key: str
    gemini_model: str
    api_base_url: str
    log_level: str
    max_attempts: int
    base_delay_ms: int
    request_timeout: float

    @property
    def endpoint(self) -> str:
        return GEMINI_ENDPOINT_TEMPLATE % (self.api_base_url.rstrip("/"), self.gemini_model)

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        api_key = os.getenv("GEMINI_API_KEY")
        model = os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        api_base = os.getenv("GEMINI_API_BASE") or DEFAULT_GEMINI_API_BASE
        log_level = os.getenv("LOG_LEVEL", "INFO")
        max_attempts = os.getenv("MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))
        base_delay_ms = os.getenv("BASE_DELAY_MS", str(DEFAULT_BASE_DELAY_MS))
        request_timeout = os.getenv("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))

        return cls._validate(
            gemini_api_key=api_key,
            gemini_model=model,
            api_base_url=api_base,
            log_level=log_level,
            max_attempts=int(max_attempts),
            base_delay_ms=int(base_delay_ms),
            request_timeout=float(request_timeout),
        )

    @staticmethod
    def _validate(
        gemini_api_key: str | None,
        gemini_model: str,
        api_base_url: str,
        log_level: str,
        max_attempts: int,
        base_delay_ms: int,
        request_timeout: float,
    ) -> "Config":
        match gemini_api_key:
            case None | "":
                raise ValueError("GEMINI_API_KEY must be set in .env")
            case _:
                pass

        match _parse_base_url(api_base_url):
            case httpx.URL(scheme="http" | "https", host=str() as host) if host:
                pass
            case _:
                raise ValueError(ERR_BAD_API_BASE)

        match max_attempts:
            case n if n < 1:
                raise ValueError("MAX_ATTEMPTS must be at least 1")
            case _:
                pass

        match base_delay_ms:
            case n if n < 0:
                raise ValueError("BASE_DELAY_MS must not be negative")
            case _:
                pass

        return Config(
            gemini_api_key=gemini_api_key,
            gemini_model=gemini_model,
            api_base_url=api_base_url,
            log_level=log_level,
            max_attempts=max_attempts,
            base_delay_ms=base_delay_ms,
            request_timeout=request_timeout,
        )


def _parse_base_url(raw: str) -> httpx.URL | None:
    try:
        return httpx.URL(raw)
    except httpx.InvalidURL:
        return None
