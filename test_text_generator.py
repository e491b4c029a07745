# test_text_generator.py
from unittest import mock

import httpx
import pytest

from headpress.services.text_generator import (
    ChatCompletionTextGenerator,
    NullTextGenerator,
    resolve_excerpt,
    resolve_slug,
    summarize,
)
from headpress.utils.slug import slugify


@pytest.mark.parametrize("text, expected", [
    ("Hello World", "hello-world"),
    ("  Hello,   World!  ", "hello-world"),
    ("snake_case and-dashes", "snake-case-and-dashes"),
    ("--Leading and trailing--", "leading-and-trailing"),
    ("Café crème", "caf-crme"),
    ("", ""),
    (None, ""),
])
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_resolve_slug_uses_generator_suggestion():
    generator = mock.Mock()
    generator.generate_slug.return_value = "A Readable Slug"
    assert resolve_slug("Título", generator) == "a-readable-slug"


@pytest.mark.parametrize("suggestion", [None, "", "x", "!!"])
def test_resolve_slug_falls_back_on_short_output(suggestion):
    generator = mock.Mock()
    generator.generate_slug.return_value = suggestion
    assert resolve_slug("Hello World", generator) == "hello-world"


def test_resolve_slug_falls_back_when_generator_raises():
    generator = mock.Mock()
    generator.generate_slug.side_effect = RuntimeError("boom")
    assert resolve_slug("Hello World", generator) == "hello-world"


def test_resolve_slug_uses_fallback_name_for_empty_title():
    assert resolve_slug("???", NullTextGenerator(), fallback="page") == "page"


def test_summarize_strips_markup_and_cuts_on_word_boundary():
    content = "<p>" + "word " * 60 + "</p>"
    excerpt = summarize(content)
    assert excerpt.endswith("...")
    assert len(excerpt) <= 153
    assert "<" not in excerpt
    assert summarize("<b>Short</b>   text") == "Short text"


def test_resolve_excerpt_fallback():
    generator = mock.Mock()
    generator.generate_excerpt.side_effect = RuntimeError("boom")
    assert resolve_excerpt("T", "<p>Body text</p>", generator) == "Body text"
    assert resolve_excerpt("T", "<p>Body text</p>", NullTextGenerator()) == "Body text"


def _chat_generator(handler):
    return ChatCompletionTextGenerator(
        api_url="https://ai.example.com/v1/chat/completions",
        api_key="key",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )


def test_chat_generator_reads_first_choice():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": " my-slug \n"}}]})

    generator = _chat_generator(handler)
    assert generator.generate_slug("My Title") == "my-slug"
    assert seen[0].headers["authorization"] == "Bearer key"


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "down"}),
    httpx.Response(200, json={"choices": []}),
    httpx.Response(200, content=b"not json"),
])
def test_chat_generator_failures_return_none(response):
    generator = _chat_generator(lambda request: response)
    assert generator.generate_excerpt("Title", "Body") is None


def test_chat_generator_network_error_returns_none():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    assert _chat_generator(handler).generate_slug("Title") is None
