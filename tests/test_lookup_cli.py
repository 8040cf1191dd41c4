import json
import shutil
import subprocess
import sys
import unittest
from pathlib import Path


class LookupCliTest(unittest.TestCase):
    root = Path(__file__).resolve().parents[1]

    def _run(self, *args):
        cmd = [sys.executable, str(self.root / "scripts" / "run_lookup.py"), *args]
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode not in (0, 1, 2):
            print("STDOUT:\n", result.stdout)
            print("STDERR:\n", result.stderr)
        return result

    def test_lookup_outputs_exist(self):
        out_dir = self.root / "outputs" / "test_lookup_fairport"
        if out_dir.exists():
            shutil.rmtree(out_dir)

        result = self._run(
            "--data", str(self.root / "data" / "tug_requirements.csv"),
            "--location", "fairport",
            "--loa", "120",
            "--operation", "berthing",
            "--out", str(out_dir),
        )
        self.assertEqual(result.returncode, 0)
        self.assertIn("Tugs required (berthing): 2", result.stdout)

        self.assertTrue((out_dir / "run.log").exists())
        payload = json.loads((out_dir / "result.json").read_text(encoding="utf-8"))
        self.assertEqual(payload["outcome"], "match")
        self.assertEqual(payload["result"]["tugs_required"], 2)
        self.assertEqual(payload["result"]["raw_tugs"], 1.5)
        self.assertEqual(payload["result"]["band_label"], "100–149.99 m")

    def test_no_match_exit_code(self):
        result = self._run("--location", "Fairport", "--loa", "400")
        self.assertEqual(result.returncode, 1)
        self.assertIn("No matching LOA band", result.stdout)

    def test_validation_error_exit_code(self):
        result = self._run("--location", "Atlantis", "--loa", "100")
        self.assertEqual(result.returncode, 2)
        self.assertIn("Unknown location", result.stdout)

        result = self._run("--location", "Fairport", "--loa", "long")
        self.assertEqual(result.returncode, 2)
        self.assertIn("Enter a valid LOA (m).", result.stdout)


if __name__ == "__main__":
    unittest.main()
