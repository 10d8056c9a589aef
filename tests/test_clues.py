import json
import os
import unittest
from unittest.mock import MagicMock, patch

import requests

from minicross.io.clues import (
    ClueRequest,
    GeminiClueGenerator,
    TemplateClueGenerator,
    fallback_clue,
    resolve_clues,
)
from minicross.io.gemini_client import GeminiAPIError, GeminiClient


REQUESTS = [
    ClueRequest(slot_id="1A", word="cat", direction="across", length=3),
    ClueRequest(slot_id="1D", word="cow", direction="down", length=3),
]


class TemplateClueTests(unittest.TestCase):
    def test_builtin_definitions_and_length_fallback(self) -> None:
        self.assertEqual(fallback_clue("cat"), "Feline pet")
        self.assertEqual(fallback_clue("WATER"), "H2O")
        self.assertEqual(fallback_clue("cow"), "3-letter word")
        clues = TemplateClueGenerator().generate(REQUESTS)
        self.assertEqual(clues, {"1A": "Feline pet", "1D": "3-letter word"})


class GeminiClueTests(unittest.TestCase):
    def test_generate_uses_client_and_parses_json(self) -> None:
        client = MagicMock()
        client.generate_text.return_value = json.dumps(
            [{"slot_id": "1A", "clue": " Purring pet "}, {"slot_id": "1D", "clue": ""}]
        )
        generator = GeminiClueGenerator(gemini_client=client)
        self.assertEqual(generator.generate(REQUESTS), {"1A": "Purring pet"})
        prompt = client.generate_text.call_args[0][0]
        self.assertIn('"slot_id": "1A"', prompt)
        self.assertIn("mini crossword", prompt)

    def test_parse_response_handles_fences_and_garbage(self) -> None:
        fenced = '```json\n[{"slot_id": "1D", "clue": "Dairy animal"}]\n```'
        self.assertEqual(GeminiClueGenerator._parse_response(fenced), {"1D": "Dairy animal"})
        self.assertEqual(GeminiClueGenerator._parse_response("not json"), {})
        self.assertEqual(GeminiClueGenerator._parse_response('{"slot_id": "1A"}'), {})
        self.assertEqual(GeminiClueGenerator._parse_response(""), {})

    def test_model_name_from_environment(self) -> None:
        with patch.dict(os.environ, {"GEMINI_MODEL": "gemini-test"}):
            self.assertEqual(GeminiClueGenerator().model_name, "gemini-test")


class ResolveClueTests(unittest.TestCase):
    def test_fills_missing_entries(self) -> None:
        generator = MagicMock()
        generator.generate.return_value = {"1D": "Moo maker"}
        self.assertEqual(resolve_clues(generator, REQUESTS), {"1A": "Feline pet", "1D": "Moo maker"})

    def test_generator_errors_fall_back(self) -> None:
        generator = MagicMock()
        generator.generate.side_effect = GeminiAPIError("boom")
        self.assertEqual(resolve_clues(generator, REQUESTS), {"1A": "Feline pet", "1D": "3-letter word"})

    def test_no_generator_uses_fallback(self) -> None:
        self.assertEqual(resolve_clues(None, REQUESTS)["1A"], "Feline pet")


class GeminiClientTests(unittest.TestCase):
    def test_missing_api_key_raises(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(GeminiAPIError):
                GeminiClient()

    def test_generate_text_returns_first_candidate(self) -> None:
        session = MagicMock()
        response = MagicMock()
        response.json.return_value = {
            "candidates": [{"content": {"parts": [{"text": "[]"}]}}]
        }
        session.post.return_value = response
        with patch.dict(os.environ, {"GEMINI_API_KEY": "secret"}, clear=True):
            client = GeminiClient(session=session)
            self.assertEqual(client.generate_text("prompt"), "[]")
        kwargs = session.post.call_args[1]
        self.assertEqual(kwargs["params"], {"key": "secret"})
        self.assertEqual(kwargs["json"]["generationConfig"], {"responseMimeType": "application/json"})

    def test_request_failures_are_wrapped(self) -> None:
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")
        with patch.dict(os.environ, {"GEMINI_API_KEY": "secret"}, clear=True):
            client = GeminiClient(session=session)
            with self.assertRaises(GeminiAPIError):
                client.generate_text("prompt")

    def test_empty_candidates_raise(self) -> None:
        session = MagicMock()
        session.post.return_value.json.return_value = {"candidates": []}
        with patch.dict(os.environ, {"GEMINI_API_KEY": "secret"}, clear=True):
            with self.assertRaises(GeminiAPIError):
                GeminiClient(session=session).generate_text("prompt")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
