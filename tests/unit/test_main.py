# tests/unit/test_main.py - v2
"""Tests for main.py - CLI parser and commands."""

from __future__ import annotations

import json
import logging

import pytest

from capprobe.main import _build_parser, main
from tests.conftest import write_script

TOOL = """\
if [ "$1" = "--version" ]; then echo "tool 1.2.0"; exit 0; fi
if [ "$1" = "features" ] && [ "$3" = "--json" ]; then echo '["output_schema"]'; exit 0; fi
exit 1
"""


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger("capprobe")
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def tool(tmp_path):
    return write_script(tmp_path, "tool", TOOL)


class TestParser:
    def test_probe(self):
        args = _build_parser().parse_args(
            ["probe", "/bin/tool", "--policy", "refresh", "--feature", "a", "--feature", "b"],
        )
        assert args.command == "probe"
        assert args.policy == "refresh"
        assert args.features == ["a", "b"]

    def test_invalid_policy(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["probe", "/bin/tool", "--policy", "sometimes"])

    def test_cache_requires_subcommand(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["cache"])

    def test_cache_show(self):
        args = _build_parser().parse_args(["--cache-root", "/tmp/c", "cache", "show", "/bin/tool"])
        assert args.cache_command == "show"
        assert str(args.cache_root) == "/tmp/c"

    def test_advisory(self):
        args = _build_parser().parse_args(["advisory", "/bin/tool", "--stable", "1.0.0"])
        assert args.stable == "1.0.0"
        assert args.beta is None

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--version"])
        assert "capprobe" in capsys.readouterr().out


class TestMain:
    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_probe_prints_snapshot(self, tool, tmp_path, capsys):
        code = main([
            "--cache-root", str(tmp_path / "cache"),
            "probe", str(tool), "--feature", "output_schema", "--feature", "add_dir",
        ])
        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["snapshot"]["version"]["semantic"] == [1, 2, 0]
        assert payload["guards"]["output_schema"]["state"] == "supported"
        assert payload["guards"]["add_dir"]["state"] == "unsupported"

    def test_cache_roundtrip(self, tool, tmp_path, capsys):
        root = str(tmp_path / "cache")
        assert main(["--cache-root", root, "probe", str(tool)]) == 0
        capsys.readouterr()

        assert main(["--cache-root", root, "cache", "list"]) == 0
        assert "1 cached binary" in capsys.readouterr().out

        assert main(["--cache-root", root, "cache", "show", str(tool)]) == 0
        assert json.loads(capsys.readouterr().out)["key"] == str(tool.resolve())

        assert main(["--cache-root", root, "cache", "remove", str(tool)]) == 0
        assert main(["--cache-root", root, "cache", "remove", str(tool)]) == 1
        assert main(["--cache-root", root, "cache", "clear"]) == 0

    def test_advisory(self, tool, tmp_path, capsys):
        code = main([
            "--cache-root", str(tmp_path / "cache"), "advisory", str(tool), "--stable", "1.3.0",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "update_available" in out
        assert "1.3.0 (stable)" in out

    def test_bad_overrides_file_fails(self, tool, tmp_path):
        code = main([
            "--cache-root", str(tmp_path / "cache"),
            "probe", str(tool), "--overrides", str(tmp_path / "missing.json"),
        ])
        assert code == 1
