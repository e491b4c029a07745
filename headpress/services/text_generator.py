# headpress/services/text_generator.py
"""
Optional AI assist for slugs and excerpts.

Endpoints never call a generator directly: ``resolve_slug`` and
``resolve_excerpt`` wrap it and fall back to the deterministic algorithms
whenever the generator is missing, fails, or answers with something unusable.
"""
import html
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from headpress.core.config import Settings
from headpress.utils.slug import MIN_SLUG_LENGTH, slugify

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 150

_TAGS = re.compile(r'<[^>]+>')
_WHITESPACE = re.compile(r'\s+')


class TextGenerator(ABC):
    """Generative text capability; returning None means "no suggestion"."""

    @abstractmethod
    def generate_slug(self, title: str) -> Optional[str]:
        ...

    @abstractmethod
    def generate_excerpt(self, title: str, content: str) -> Optional[str]:
        ...


class NullTextGenerator(TextGenerator):
    def generate_slug(self, title: str) -> Optional[str]:
        return None

    def generate_excerpt(self, title: str, content: str) -> Optional[str]:
        return None


class ChatCompletionTextGenerator(TextGenerator):
    """
    Talks to an OpenAI-compatible `/chat/completions` endpoint (OpenRouter,
    OpenAI, a local gateway...). Every failure is logged and reported as None.
    """

    def __init__(self, api_url: str, api_key: str, model: str,
                 timeout: float = 15.0, transport: Optional[httpx.BaseTransport] = None):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def _complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> Optional[str]:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": 0.3,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
            return data["choices"][0]["message"]["content"].strip()
        except httpx.HTTPError as e:
            logger.warning(f"AI assist request failed: {e}")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.warning(f"AI assist returned an unexpected body: {e}")
        return None

    def generate_slug(self, title: str) -> Optional[str]:
        return self._complete(
            "You write URL slugs. Reply with a short English slug using only "
            "lowercase letters, digits and hyphens. No explanation.",
            f"Title: {title}",
            max_tokens=30,
        )

    def generate_excerpt(self, title: str, content: str) -> Optional[str]:
        return self._complete(
            "You summarize blog posts. Reply with a single plain-text sentence "
            f"of at most {EXCERPT_LENGTH} characters. No markup.",
            f"Title: {title}\n\n{strip_markup(content)[:4000]}",
            max_tokens=120,
        )


def build_text_generator(settings: Settings) -> TextGenerator:
    if settings.AI_API_KEY:
        return ChatCompletionTextGenerator(
            api_url=settings.AI_API_URL,
            api_key=settings.AI_API_KEY,
            model=settings.AI_MODEL,
            timeout=settings.AI_TIMEOUT_SECONDS,
        )
    return NullTextGenerator()


def strip_markup(content: str) -> str:
    text = html.unescape(_TAGS.sub(' ', content or ''))
    return _WHITESPACE.sub(' ', text).strip()


def summarize(content: str, length: int = EXCERPT_LENGTH) -> str:
    """Plain-text excerpt cut on a word boundary."""
    text = strip_markup(content)
    if len(text) <= length:
        return text
    cut = text[:length].rsplit(' ', 1)[0] or text[:length]
    return cut.rstrip(' ,;:.') + '...'


def _ask(call, *args) -> Optional[str]:
    try:
        return call(*args)
    except Exception:
        logger.exception("AI assist generator raised; using the deterministic fallback")
        return None


def resolve_slug(title: str, generator: TextGenerator, fallback: str = "post") -> str:
    suggestion = slugify(_ask(generator.generate_slug, title))
    if len(suggestion) >= MIN_SLUG_LENGTH:
        return suggestion
    return slugify(title) or fallback


def resolve_excerpt(title: str, content: str, generator: TextGenerator) -> str:
    suggestion = _ask(generator.generate_excerpt, title, content)
    if suggestion and suggestion.strip():
        return strip_markup(suggestion)
    return summarize(content)
