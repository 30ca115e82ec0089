from datetime import date

from google.genai import errors

import naming
from models import Product

TODAY = date(2026, 10, 16)
PARTS = [("Ryzen 9", "CPU"), ("RTX 4080", "GPU")]


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    def generate_content(self, *, model, contents):
        self.calls.append((model, contents))
        if self.exc is not None:
            raise self.exc
        return FakeResponse(self.text)


class FakeClient:
    def __init__(self, text=None, exc=None):
        self.models = FakeModels(text, exc)


def test_no_key_uses_offline_name(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    client = FakeClient("Unused")
    assert naming.suggest_pc_name(PARTS, client=client, today=TODAY) == "Custom Build 2026-10-16"
    assert client.models.calls == []


def test_key_from_environment(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "abc")
    assert naming.get_api_key() == "abc"
    monkeypatch.setenv("GEMINI_API_KEY", "xyz")
    assert naming.get_api_key() == "xyz"


def test_suggestion_is_cleaned(monkeypatch):
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    client = FakeClient('  "Aegis Fury"\n')

    name = naming.suggest_pc_name(PARTS, api_key="k", client=client, today=TODAY)

    assert name == "Aegis Fury"
    model, prompt = client.models.calls[0]
    assert model == naming.DEFAULT_MODEL
    assert "- Ryzen 9 (CPU)" in prompt
    assert "- RTX 4080 (GPU)" in prompt


def test_model_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    client = FakeClient("Nova Prime")
    naming.suggest_pc_name(PARTS, api_key="k", client=client, today=TODAY)
    assert client.models.calls[0][0] == "gemini-2.5-pro"


def test_api_error_falls_back():
    exc = errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}})
    client = FakeClient(exc=exc)
    assert naming.suggest_pc_name(PARTS, api_key="k", client=client, today=TODAY) == "Pro Build 2026-10-16"


def test_transport_error_falls_back():
    client = FakeClient(exc=ConnectionError("offline"))
    assert naming.suggest_pc_name(PARTS, api_key="k", client=client, today=TODAY) == "Pro Build 2026-10-16"


def test_missing_or_empty_answer_falls_back():
    missing = FakeClient(None)
    empty = FakeClient('""')
    assert naming.suggest_pc_name(PARTS, api_key="k", client=missing, today=TODAY) == "Pro Build 2026-10-16"
    assert naming.suggest_pc_name(PARTS, api_key="k", client=empty, today=TODAY) == "Pro Build 2026-10-16"


def test_build_prompt_accepts_products():
    p = Product(id="p1", name="850W Gold", category="PSU", price=120)
    assert "- 850W Gold (PSU)" in naming.build_prompt([p])
