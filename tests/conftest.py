from __future__ import annotations

import os
from dataclasses import replace

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from fastapi.testclient import TestClient

from config import ServiceSettings
from core import BaseLLMClient, LLMConfig
from main import create_app


class StubTranslationClient:
    """Replays scripted completions; an Exception entry is raised instead."""

    def __init__(self, *completions):
        self.completions = list(completions)
        self.calls = []
        self.closed = False

    async def complete(self, api_key, model, prompt_spec, source_text):
        self.calls.append(
            {
                "api_key": api_key,
                "model": model,
                "prompt_spec": prompt_spec,
                "source_text": source_text,
            }
        )
        index = min(len(self.calls), len(self.completions)) - 1
        item = self.completions[index]
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


@pytest.fixture
def settings() -> ServiceSettings:
    return ServiceSettings(api_key="test-key", client_token="secret", model="gpt-4o-mini")


@pytest.fixture
def chat_llm_client() -> BaseLLMClient:
    return BaseLLMClient(LLMConfig(task_name="chat"))


@pytest.fixture
def make_client(settings, chat_llm_client):
    def _make(stub: StubTranslationClient, **overrides) -> TestClient:
        app_settings = replace(settings, **overrides)
        app = create_app(app_settings, translation_client=stub, chat_llm_client=chat_llm_client)
        return TestClient(app)

    return _make


AUTH = {"Authorization": "Bearer secret"}
