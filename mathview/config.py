"""Constants and environment-driven settings."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

# Plot domain
X_MIN = -10.0
X_MAX = 10.0

# Sampling
DEFAULT_SAMPLES = 400
MIN_SAMPLES = 2
MAX_SAMPLES = 2000
ROUND_DIGITS = 4

# Integration
DEFAULT_SEGMENTS = 1000
DEFAULT_INT_A = -1.0
DEFAULT_INT_B = 1.0
RESULT_DIGITS = 6

DEFAULT_FORMULA = "sin(x) + 0.5 * x"

XAI_BASE_URL = "https://api.x.ai/v1"


@dataclass(frozen=True)
class LLMSettings:
    provider: str
    api_key: str
    model: str
    base_url: Optional[str] = None
    timeout: float = 20.0


def load_llm_settings(environ=None):
    """Return LLMSettings for the configured provider, or None when no key is set.

    xAI wins when both keys are present.
    """
    env = os.environ if environ is None else environ
    timeout = float(env.get("MATHVIEW_LLM_TIMEOUT", "20") or "20")

    xai_key = (env.get("XAI_API_KEY") or "").strip()
    if xai_key:
        return LLMSettings(
            provider="xai",
            api_key=xai_key,
            model=(env.get("MATHVIEW_XAI_MODEL") or "grok-2-latest").strip(),
            base_url=XAI_BASE_URL,
            timeout=timeout,
        )

    openai_key = (env.get("OPENAI_API_KEY") or "").strip()
    if openai_key:
        return LLMSettings(
            provider="openai",
            api_key=openai_key,
            model=(env.get("MATHVIEW_OPENAI_MODEL") or "gpt-4o-mini").strip(),
            timeout=timeout,
        )
    return None


def configure_logging(level=None):
    level = level or os.getenv("MATHVIEW_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
