import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from minicross.cli import main
from minicross.engine.generator import GenerationResult

WORDS = "cap;60\nore;50\nten;40\ncot;30\nare;20\npen;10\n"


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmpdir = Path(self._tmp.name)
        self.wordlist = self.tmpdir / "words.txt"
        self.wordlist.write_text(WORDS, encoding="utf-8")

    def run_cli(self, *argv: str):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(["--log-level", "ERROR", *argv])
        return code, buffer.getvalue()

    def test_list_masks(self) -> None:
        code, output = self.run_cli("--list-masks")
        self.assertEqual(code, 0)
        self.assertIn("t1   Open Grid", output)
        self.assertIn("c15", output)

    def test_search_writes_matches(self) -> None:
        target = self.tmpdir / "matches.txt"
        code, _ = self.run_cli("--dictionary", str(self.wordlist), "--search", "C??", "--output", str(target))
        self.assertEqual(code, 0)
        self.assertEqual(target.read_text(encoding="utf-8"), "cap\t60\ncot\t30\n")

    def test_stats(self) -> None:
        code, output = self.run_cli("--dictionary", str(self.wordlist), "--stats")
        self.assertEqual(code, 0)
        self.assertIn("Total words:   6", output)

    def test_generation_failure_returns_error_code(self) -> None:
        code, output = self.run_cli(
            "--dictionary", str(self.wordlist), "--seed", "1", "--max-attempts", "2"
        )
        self.assertEqual(code, 1)
        self.assertEqual(output, "")

    def test_missing_dictionary_returns_error_code(self) -> None:
        code, _ = self.run_cli("--dictionary", str(self.tmpdir / "absent.txt"), "--stats")
        self.assertEqual(code, 1)

    def test_generate_json_for_open_grid(self) -> None:
        words = ["abcde", "fghij", "klmno", "pqrst", "uvwxy",
                 "afkpu", "bglqv", "chmrw", "dinsx", "ejoty"]
        self.wordlist.write_text("".join(f"{w};{100 - i}\n" for i, w in enumerate(words)), encoding="utf-8")
        code, output = self.run_cli(
            "--dictionary", str(self.wordlist), "--seed", "42", "--mask", "t1", "--clues", "none"
        )
        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(len(payload["across"]) + len(payload["down"]), 10)
        self.assertEqual(payload["meta"]["mask_id"], "t1")
        self.assertEqual(payload["meta"]["seed"], 42)
        self.assertTrue(all(entry["clue"] is None for entry in payload["across"]))
        self.assertTrue(all(entry["answer"] == entry["pattern"].upper() for entry in payload["down"]))
        self.assertTrue(all(letter.isupper() for row in payload["grid"] for letter in row))

    def test_empty_generation_result_returns_error_code(self) -> None:
        empty = GenerationResult(puzzle=None, seed=9, attempts=0, elapsed_ms=0.0)
        with patch("minicross.cli.PuzzleGenerator.generate", return_value=empty):
            code, output = self.run_cli("--dictionary", str(self.wordlist), "--seed", "9")
        self.assertEqual(code, 1)
        self.assertEqual(output, "")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
