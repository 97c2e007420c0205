"""Shared fixtures: shipped configuration files and a scripted LLM client."""
import os
import sys
import threading

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import pytest

from services.config_loader import load_profile, load_prompt_config
from services.llm_client import LLMResponse, LLMError, LLMClientError

CONFIG_DIR = os.path.join(os.path.dirname(__file__), '..', 'configs')

# Prompt fragments that identify which component is calling
CLASSIFY = "classify the sender"
DETECT_PRIMARY = "language detection specialist"
DETECT_CONTEXTUAL = "contextual language analysis"
FIT = "Evaluate how well this job opportunity fits"
STRATEGY = "expert conversation strategist"
COMPOSE = "Write your reply addressing"
VALIDATE = "Review this reply to a recruiter"


def make_response(text: str, model: str = "llama-3.1-8b-instant") -> LLMResponse:
    return LLMResponse(text=text, tokens_input=100, tokens_output=20, latency_ms=5, model_used=model)


def llm_error(code: str = "API_ERROR") -> LLMClientError:
    return LLMClientError(LLMError(code=code, message=f"{code} during test", details={}))


class ScriptedLLM:
    """
    Stand-in for LLMClient that answers by prompt content.

    ``on(marker, *replies)`` registers replies for prompts containing
    ``marker``; replies are used in order and the last one repeats. A reply
    that is an exception is raised instead of returned.
    """

    def __init__(self):
        self.rules = []
        self.calls = []
        self._lock = threading.Lock()

    def on(self, marker, *replies):
        self.rules.append([marker, list(replies)])
        return self

    def generate(self, model, prompt, max_tokens=500, temperature=0.7, json_mode=False):
        with self._lock:
            self.calls.append({
                "model": model,
                "prompt": prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "json_mode": json_mode,
            })
            for marker, replies in self.rules:
                if marker in prompt:
                    reply = replies.pop(0) if len(replies) > 1 else replies[0]
                    break
            else:
                raise AssertionError(f"Unexpected prompt: {prompt[:120]!r}")

        if isinstance(reply, Exception):
            raise reply
        return make_response(reply, model)

    def calls_for(self, marker):
        return [call for call in self.calls if marker in call["prompt"]]


@pytest.fixture
def scripted_llm():
    return ScriptedLLM()


@pytest.fixture
def profile():
    return load_profile(os.path.join(CONFIG_DIR, 'profile.example.yaml'))


@pytest.fixture
def prompt_config():
    return load_prompt_config(os.path.join(CONFIG_DIR, 'prompts.yaml'))
