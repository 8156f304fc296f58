"""Shared test fixtures for the furigana_player test suite.

WHY: Several test modules need the same sample subtitles, the same
stand-ins for the analyzer and furigana converter, and a dictionary
service that answers from a fixed table without touching the network.

HOW: Fake collaborators are small classes with the call shapes the
annotator expects. The dictionary service is an httpx.MockTransport
whose handler answers from GLOSSARY and records every request.

RULES:
- No test reaches a real network service
- Reading-layer markup follows the converter's output shape:
  <ruby>base<rp>(</rp><rt>reading</rt><rp>)</rp></ruby>
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence

import httpx
import pytest

from furigana_player.adapters.furigana import ruby_markup
from furigana_player.api import DictionaryClient, GlossResolver
from furigana_player.core.annotator import Annotator
from furigana_player.core.ir import Token


SAMPLE_SRT = (
    "1\n"
    "00:00:01,000 --> 00:00:02,500\n"
    "東京に行く\n"
    "\n"
    "2\n"
    "00:00:03,000 --> 00:00:05,000\n"
    "日本語を\n"
    "勉強する\n"
    "\n"
    "3\n"
    "00:00:06,000 --> 00:00:07,000\n"
    "   \n"
    "\n"
    "4\n"
    "00:00:08,000 --> 00:00:09,500\n"
    "勉強\n"
)

READINGS: Dict[str, str] = {
    "東京": "とうきょう",
    "行": "い",
    "日本語": "にほんご",
    "勉強": "べんきょう",
    "東京都": "とうきょうと",
}

GLOSSARY: Dict[str, List[dict]] = {
    "東京": [{"word": "東京", "meaning": "Tokyo", "hiragana": "とうきょう"}],
    "行く": [{"word": "行く", "meaning": "to go", "hiragana": "いく"}],
    "日本語": [{"word": "日本語", "meaning": "Japanese language", "hiragana": "にほんご"}],
    "勉強": [{"word": "勉強", "meaning": "study", "hiragana": "べんきょう"}],
}


class FakeConverter:
    """Wraps every known base from READINGS in ruby markup, longest first."""

    def __init__(self, readings: Optional[Dict[str, str]] = None, fail: bool = False) -> None:
        self.readings = readings if readings is not None else READINGS
        self.fail = fail
        self.calls: List[str] = []

    def convert(self, text: str, mode: str = "furigana", to: str = "hiragana") -> str:
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("converter unavailable")
        out = ""
        i = 0
        bases = sorted(self.readings, key=len, reverse=True)
        while i < len(text):
            for base in bases:
                if text.startswith(base, i):
                    out += ruby_markup(base, self.readings[base])
                    i += len(base)
                    break
            else:
                out += text[i]
                i += 1
        return out


class FakeAnalyzer:
    """Returns a fixed token list per input text."""

    def __init__(self, tokens: Optional[Dict[str, Sequence[Token]]] = None, fail: bool = False) -> None:
        self.tokens = tokens or {}
        self.fail = fail

    def parse(self, text: str) -> Sequence[Token]:
        if self.fail:
            raise RuntimeError("analyzer unavailable")
        return list(self.tokens.get(text, []))


SAMPLE_TOKENS: Dict[str, List[Token]] = {
    "東京に行く": [
        Token("東京", "とうきょう", "名詞"),
        Token("に", "に", "助詞"),
        Token("行く", "いく", "動詞"),
    ],
    "日本語を 勉強する": [
        Token("日本語", "にほんご", "名詞"),
        Token("を", "を", "助詞"),
        Token(" ", "", "空白"),
        Token("勉強", "べんきょう", "名詞"),
        Token("する", "する", "動詞"),
    ],
}


class DictionaryService:
    """In-memory dictionary service for httpx.MockTransport.

    ``inflected`` / ``direct`` / ``partial`` map a query to its matches;
    unknown queries return an empty match list. ``status`` forces every
    response to that status code.
    """

    def __init__(
        self,
        inflected: Optional[Dict[str, List[dict]]] = None,
        direct: Optional[Dict[str, List[dict]]] = None,
        partial: Optional[Dict[str, List[dict]]] = None,
        status: int = 200,
    ) -> None:
        self.tables = {
            "/search/inflected": inflected if inflected is not None else GLOSSARY,
            "/search": direct or {},
            "/search/partial": partial or {},
        }
        self.status = status
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, text="service unavailable")
        table = self.tables.get(request.url.path)
        if table is None:
            return httpx.Response(404, text="not found")
        query = request.url.params.get("q", "")
        return httpx.Response(200, json={"matches": table.get(query, [])})

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _run_with_resolver(
    service: DictionaryService,
    body: Callable,
    **resolver_kwargs,
):
    """Run ``await body(resolver)`` with a resolver backed by ``service``."""

    async def _main():
        async with DictionaryClient(base_url="http://dict.test", transport=service.transport()) as client:
            resolver = GlossResolver(client, **resolver_kwargs)
            return await body(resolver)

    return asyncio.run(_main())


@pytest.fixture
def sample_srt() -> str:
    return SAMPLE_SRT


@pytest.fixture
def fake_converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def fake_analyzer() -> FakeAnalyzer:
    return FakeAnalyzer(SAMPLE_TOKENS)


@pytest.fixture
def dictionary_service() -> DictionaryService:
    return DictionaryService()


class StaticResolver:
    """Resolver stand-in that glosses from GLOSSARY without HTTP."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def annotate_words(self, words):
        resolved = []
        for word in words:
            self.calls.append(word.word)
            matches = GLOSSARY.get(word.word)
            meaning = matches[0]["meaning"] if matches else "No definition found"
            resolved.append(replace(word, meaning=meaning))
        return resolved


@pytest.fixture
def static_resolver() -> StaticResolver:
    return StaticResolver()


@pytest.fixture
def annotator(fake_analyzer, fake_converter, static_resolver) -> Annotator:
    return Annotator(analyzer=fake_analyzer, converter=fake_converter, resolver=static_resolver)


@pytest.fixture
def failing_converter() -> FakeConverter:
    return FakeConverter(fail=True)


@pytest.fixture
def failing_analyzer() -> FakeAnalyzer:
    return FakeAnalyzer(fail=True)


@pytest.fixture
def make_service() -> Callable[..., DictionaryService]:
    """Factory for a DictionaryService with custom tables or status."""
    return DictionaryService


@pytest.fixture
def resolve_with() -> Callable:
    """``resolve_with(service, body, **kwargs)`` runs ``await body(resolver)``."""
    return _run_with_resolver
