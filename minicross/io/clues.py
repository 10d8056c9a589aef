"""Clue generation interfaces."""

from __future__ import annotations

import json
import os
import re
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Protocol

from ..utils.logger import get_logger
from .gemini_client import GeminiClient


LOGGER = get_logger(__name__)


@dataclass
class ClueRequest:
    slot_id: str
    word: str
    direction: str
    length: int


class ClueGenerator(Protocol):
    def generate(self, requests: List[ClueRequest]) -> Dict[str, str]:
        """Return mapping from slot_id to clue text."""


BUILTIN_DEFINITIONS: Dict[str, str] = {
    # 3 letters
    "cat": "Feline pet",
    "dog": "Canine companion",
    "sun": "Solar body",
    "car": "Motor vehicle",
    "run": "Sprint or jog",
    "eat": "Consume food",
    "sea": "Large body of water",
    "sky": "Heavens above",
    "red": "Color of roses",
    "big": "Large in size",
    # 4 letters
    "love": "Deep affection",
    "home": "Where the heart is",
    "book": "Reading material",
    "tree": "Oak or maple",
    "fire": "Burning flame",
    "moon": "Lunar body",
    "bird": "Feathered flyer",
    "fish": "Aquatic animal",
    "hand": "Body part with fingers",
    "word": "Unit of language",
    # 5 letters
    "house": "Dwelling place",
    "water": "H2O",
    "music": "Melodic sounds",
    "heart": "Organ that pumps blood",
    "light": "Illumination",
    "world": "Planet Earth",
    "money": "Currency",
    "happy": "Joyful feeling",
    "dance": "Rhythmic movement",
    "smile": "Happy expression",
}


def fallback_clue(word: str) -> str:
    """Deterministic clue used whenever no generated clue is available."""

    return BUILTIN_DEFINITIONS.get(word.lower(), f"{len(word)}-letter word")


class TemplateClueGenerator:
    """Simple fallback clue writer."""

    def generate(self, requests: List[ClueRequest]) -> Dict[str, str]:
        return {req.slot_id: fallback_clue(req.word) for req in requests}


class GeminiClueGenerator:
    """LLM clue generator using Gemini."""

    CLUE_RULES = (
        "You are writing clues for a 5x5 mini crossword in the style of the "
        "NYT Mini. Mandatory rules for EVERY clue:\n"
        "1. Keep the clue short, at most 8 words.\n"
        "2. Use everyday vocabulary and a direct definition, synonym or "
        "fill-in-the-blank.\n"
        "3. Do NOT include the answer word or an obvious fragment of it.\n"
        "4. Match the tense and number of the answer.\n"
        "Respond as a JSON list [{{slot_id, clue}}] with no extra text."
    )

    def __init__(
        self,
        model_name: str = "gemini-2.5-flash",
        api_key_env: str = "GEMINI_API_KEY",
        model_env: str = "GEMINI_MODEL",
        gemini_client: Optional[GeminiClient] = None,
    ) -> None:
        self.model_name = os.environ.get(model_env, model_name)
        self.api_key_env = api_key_env
        self.model_env = model_env
        self._client = gemini_client

    def generate(self, requests: List[ClueRequest]) -> Dict[str, str]:
        prompt = self._render_prompt(requests)
        client = self._client or GeminiClient(
            model_name=self.model_name,
            api_key_env=self.api_key_env,
            model_env=self.model_env,
        )
        self._client = client
        response_text = client.generate_text(prompt)
        return self._parse_response(response_text)

    @classmethod
    def _render_prompt(cls, requests: List[ClueRequest]) -> str:
        payload = [asdict(request) for request in requests]
        return f"{cls.CLUE_RULES}\nRequests: {json.dumps(payload, ensure_ascii=False)}"

    @staticmethod
    def _parse_response(text: str) -> Dict[str, str]:
        if not text:
            return {}
        # Gemini often wraps JSON in a markdown fence
        fenced = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
        if fenced:
            text = fenced.group(1)
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            LOGGER.warning("Gemini clue payload not JSON; falling back to empty")
            return {}
        if not isinstance(data, list):
            LOGGER.warning("Gemini clue payload is not a list; falling back to empty")
            return {}
        result: Dict[str, str] = {}
        for entry in data:
            if not isinstance(entry, dict):
                continue
            slot_id = entry.get("slot_id")
            clue = entry.get("clue")
            if slot_id and clue:
                result[slot_id] = str(clue).strip()
        return result


def resolve_clues(
    generator: Optional[ClueGenerator],
    requests: List[ClueRequest],
) -> Dict[str, str]:
    """Ask ``generator`` for clues, filling every gap with :func:`fallback_clue`.

    Any error raised by the generator is logged and replaced by fallback
    clues for every request.
    """

    generated: Dict[str, str] = {}
    if generator is not None and requests:
        try:
            generated = generator.generate(requests) or {}
        except Exception as exc:  # clue service is best effort
            LOGGER.warning("Clue generation failed, using fallback clues: %s", exc)
            generated = {}

    clues: Dict[str, str] = {}
    missing = 0
    for request in requests:
        text = generated.get(request.slot_id)
        if not text:
            text = fallback_clue(request.word)
            missing += 1
        clues[request.slot_id] = text
    if generator is not None and missing:
        LOGGER.info("Used fallback clues for %d of %d entries", missing, len(requests))
    return clues
