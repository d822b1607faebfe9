"""Optional rewrite of informal formulas through an OpenAI-compatible model.

A normalizer is any callable taking the raw formula and returning a
NormalizationResult. Without a configured key the passthrough normalizer is
used, which is a normal condition and not an error.
"""

import logging
import re
from dataclasses import dataclass

import openai

from mathview import config

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "\n".join([
    "You convert math formulas into expressions that sympy can parse.",
    "Rules:",
    "- Use x as the independent variable.",
    "- Use standard function names (sin, cos, tan, log, exp, sqrt, abs, pow, ...).",
    "- Write powers with ^ or pow(a, b) and make multiplication explicit.",
    "- Return only the final expression. No extra text.",
    "- Examples: x^2 + 3x -> x^2 + 3*x,   sen(x) -> sin(x),   ln(x) -> log(x)",
])

USER_PROMPT = "Convert to a single expression in x, returning only the expression:\n{formula}"

NO_KEY_NOTE = "No AI key configured. Using the original formula."

FENCE_RE = re.compile(r"^```[\s\S]*?\n|```$")


@dataclass(frozen=True)
class NormalizationResult:
    expression: str
    used_ai: bool
    note: str = ""


def passthrough(raw_formula, note=NO_KEY_NOTE):
    return NormalizationResult(raw_formula, False, note)


def strip_code_fences(text):
    return FENCE_RE.sub("", text.strip()).strip()


class LLMNormalizer:
    """Normalize formulas with a chat-completions client."""

    def __init__(self, client, model, name="AI"):
        self.client = client
        self.model = model
        self.name = name

    def __call__(self, raw_formula):
        if not raw_formula or not raw_formula.strip():
            return passthrough(raw_formula, note="Empty formula.")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": USER_PROMPT.format(formula=raw_formula)},
                ],
                temperature=0,
            )
        except openai.OpenAIError as exc:
            logger.warning("%s normalization call failed: %s", self.name, exc)
            return passthrough(raw_formula, note=f"{self.name} call failed. Using the original formula.")

        try:
            text = response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError):
            text = ""
        cleaned = strip_code_fences(text)
        if not cleaned:
            logger.warning("%s returned an empty normalization for %r", self.name, raw_formula)
            return passthrough(raw_formula, note=f"Empty {self.name} response. Using the original formula.")

        logger.info("Normalized %r -> %r", raw_formula, cleaned)
        return NormalizationResult(cleaned, True)


def build_normalizer(settings=None):
    """Build the normalizer for the configured provider, or passthrough."""
    if settings is None:
        settings = config.load_llm_settings()
    if settings is None:
        return passthrough

    client = openai.OpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
    )
    name = "Grok" if settings.provider == "xai" else "OpenAI"
    return LLMNormalizer(client, settings.model, name=name)
