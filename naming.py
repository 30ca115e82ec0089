"""
Build name suggestions from a hosted language model (Gemini, via google-genai).

The API key is read from GEMINI_API_KEY (or API_KEY). Without a key, or when
the request fails, a date based name is returned instead so the builder always
gets something usable.
"""
from __future__ import annotations

import logging
import os
from datetime import date
from typing import Iterable, Optional, Sequence, Tuple, Union

from google import genai
from google.genai import errors, types

from models import Product
from utils import today_str

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
REQUEST_TIMEOUT_MS = 15_000

PROMPT = """Based on the following list of high-end computer components, generate a single, cool, and marketable name for the finished PC build.
The name should be short, memorable, and evoke a sense of power, speed, or advanced technology.
Do not add any explanation or preamble. Only return the name itself.

Components:
{components}

Example Names: "Aegis Fury", "Nova Prime", "Cerberus X", "Odyssey One", "Vortex Titan"
"""

ComponentLike = Union[Product, Tuple[str, str]]


def get_api_key() -> str:
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or ""


def offline_name(today: Optional[date] = None) -> str:
    return f"Custom Build {today_str(today)}"


def fallback_name(today: Optional[date] = None) -> str:
    return f"Pro Build {today_str(today)}"


def _pairs(components: Iterable[ComponentLike]) -> Sequence[Tuple[str, str]]:
    out = []
    for c in components:
        if isinstance(c, Product):
            out.append((c.name, c.category))
        else:
            name, category = c
            out.append((str(name), str(category)))
    return out


def build_prompt(components: Iterable[ComponentLike]) -> str:
    lines = "\n".join(f"- {name} ({category})" for name, category in _pairs(components))
    return PROMPT.format(components=lines)


def _client(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key, http_options=types.HttpOptions(timeout=REQUEST_TIMEOUT_MS))


def suggest_pc_name(
    components: Iterable[ComponentLike],
    *,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    client: Optional[genai.Client] = None,
    today: Optional[date] = None,
) -> str:
    key = api_key if api_key is not None else get_api_key()
    if not key:
        logger.info("no Gemini API key configured; using offline name")
        return offline_name(today)

    model = model or os.getenv("GEMINI_MODEL") or DEFAULT_MODEL

    try:
        client = client or _client(key)
        resp = client.models.generate_content(model=model, contents=build_prompt(components))
        text = resp.text or ""
    except errors.APIError as e:
        logger.error("Error generating PC name with Gemini: %s", e)
        return fallback_name(today)
    except Exception as e:
        # transport failures surface from the SDK's http layer
        logger.error("Gemini request failed: %s", e)
        return fallback_name(today)

    name = text.replace('"', "").strip()
    if not name:
        logger.warning("Gemini returned an empty name")
        return fallback_name(today)
    return name
