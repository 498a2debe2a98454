"""Tests for CLI entrypoint wiring."""

from __future__ import annotations

import contextlib
import io
import tempfile
from pathlib import Path
import unittest
from unittest.mock import patch

from cozy_event.__main__ import main
from cozy_event.benchmark import BenchmarkResult


class MainEntrypointTests(unittest.TestCase):
    """Validate top-level main() behavior."""

    def test_version_flag_prints_version(self) -> None:
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.assertEqual(main(["--version"]), 0)
        self.assertTrue(stdout.getvalue().startswith("cozyevent "))

    def test_no_command_prints_help(self) -> None:
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.assertEqual(main([]), 0)
        self.assertIn("bench", stdout.getvalue())

    def test_bench_runs_selected_scenarios_with_config_defaults(self) -> None:
        stdout = io.StringIO()
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                "[benchmark]\nlisteners = 3\niterations = 7\n", encoding="utf-8"
            )
            with patch("cozy_event.__main__.configure_logging") as logging_mock, patch(
                "cozy_event.__main__.run_benchmarks",
                return_value=[BenchmarkResult("emit", 3, 7, 0.001)],
            ) as run_mock, contextlib.redirect_stdout(stdout):
                code = main(
                    ["--config", str(config_path), "bench", "--scenario", "emit"]
                )

        self.assertEqual(code, 0)
        logging_mock.assert_called_once()
        run_mock.assert_called_once_with(["emit"], 3, 7)
        self.assertIn("emit", stdout.getvalue())

    def test_bench_cli_overrides_config(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "missing.toml"
            with patch("cozy_event.__main__.configure_logging"), patch(
                "cozy_event.__main__.run_benchmarks", return_value=[]
            ) as run_mock:
                main(
                    [
                        "--config",
                        str(config_path),
                        "bench",
                        "--listeners",
                        "2",
                        "--iterations",
                        "9",
                    ]
                )
        scenarios, listeners, iterations = run_mock.call_args.args
        self.assertEqual((listeners, iterations), (2, 9))
        self.assertEqual(len(scenarios), 4)


if __name__ == "__main__":
    unittest.main()
