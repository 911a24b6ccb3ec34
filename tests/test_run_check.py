import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from mcq_check.scripts.run_check import main
from mcq_check.utils.data_loader import write_text_files

QUESTION_ID = "9b2f1c6e-2d4a-4f8b-a1c3-5e7d9f0b1a2c"

RECORDS = [
    {
        "question_id": QUESTION_ID,
        "specification": "$x+1$",
        "options": json.dumps([
            {"id": 1, "content": "A", "correct": True, "order": 0},
            {"id": 1, "content": "A", "correct": False, "order": 1},
        ]),
    },
    {
        "question_id": "5d1e2f3a-4b5c-4d6e-8f7a-9b0c1d2e3f4a",
        "specification": "Broken",
        "options": "not json",
    },
]


class TestRunCheckCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.input = self.tmp / "in.json"
        self.output = self.tmp / "out" / "clean.json"
        self.report = self.tmp / "out" / "report.json"

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            main(list(argv))
        return stdout.getvalue()

    def _paths(self):
        return (
            "--input", str(self.input),
            "--output", str(self.output),
            "--report", str(self.report),
            "--workers", "1",
        )

    def test_successful_run_writes_both_files(self):
        self.input.write_text(json.dumps(RECORDS), encoding="utf-8")

        printed = self._run(*self._paths())

        cleaned = json.loads(self.output.read_text(encoding="utf-8"))
        report = json.loads(self.report.read_text(encoding="utf-8"))
        self.assertEqual(len(cleaned), 1)
        self.assertEqual(cleaned[0]["options"][1]["content"], "A (Option 2)")
        self.assertEqual(report["totalQuestions"], 2)
        self.assertEqual(report["fixedQuestions"], 1)
        self.assertEqual(report["removedQuestions"], 1)
        self.assertIn("Valid questions:   1", printed)

    def test_missing_argument_exits_before_processing(self):
        self.input.write_text(json.dumps(RECORDS), encoding="utf-8")

        with self.assertRaises(SystemExit) as ctx:
            self._run("--input", str(self.input), "--output", str(self.output))

        self.assertNotEqual(ctx.exception.code, 0)
        self.assertFalse(self.output.exists())

    def test_invalid_input_exits_without_output(self):
        self.input.write_text("{not json", encoding="utf-8")

        with self.assertRaises(SystemExit) as ctx:
            self._run(*self._paths())

        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(self.output.exists())
        self.assertFalse(self.report.exists())

    def test_missing_input_file_exits_with_error(self):
        with self.assertRaises(SystemExit) as ctx:
            self._run(*self._paths())
        self.assertEqual(ctx.exception.code, 1)

    def test_non_array_input_is_an_error(self):
        self.input.write_text(json.dumps({"question_id": QUESTION_ID}), encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            self._run(*self._paths())
        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(self.output.exists())

    def test_unwritable_report_leaves_no_output(self):
        self.input.write_text(json.dumps(RECORDS), encoding="utf-8")
        blocker = self.tmp / "blocker"
        blocker.write_text("", encoding="utf-8")
        self.report = blocker / "report.json"

        with self.assertRaises(SystemExit) as ctx:
            self._run(*self._paths())

        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(self.output.exists())
        self.assertEqual(list(self.output.parent.iterdir()), [])


class TestWriteTextFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_writes_every_document(self):
        first, second = self.tmp / "a.json", self.tmp / "nested" / "b.json"

        write_text_files([("[]", first), ("{}", second)])

        self.assertEqual(first.read_text(encoding="utf-8"), "[]")
        self.assertEqual(second.read_text(encoding="utf-8"), "{}")
        self.assertEqual(sorted(p.name for p in self.tmp.iterdir()), ["a.json", "nested"])

    def test_failed_move_removes_already_placed_documents(self):
        first = self.tmp / "a.json"
        occupied = self.tmp / "b.json"
        occupied.mkdir()
        (occupied / "keep").write_text("x", encoding="utf-8")

        with self.assertRaises(OSError):
            write_text_files([("[]", first), ("{}", occupied)])

        self.assertFalse(first.exists())
        self.assertEqual(sorted(p.name for p in self.tmp.iterdir()), ["b.json"])


if __name__ == "__main__":
    unittest.main()
