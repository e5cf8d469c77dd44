"""Tests for the bencodec command-line interface."""

from __future__ import annotations

import contextlib
import hashlib
import io
import json
import os
import sys
import tempfile
import unittest
from typing import List, Tuple
from unittest import mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bencodec import __version__
from bencodec._cli import main

_INFO_RAW = b"d6:lengthi5e4:name5:a.iso12:piece lengthi4e6:pieces20:" + b"\x07" * 20 + b"e"
_TORRENT = b"d8:announce8:http://x4:info" + _INFO_RAW + b"e"


class _CliCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def write(self, data: bytes) -> str:
        path = os.path.join(self._tmp.name, "input.bin")
        with open(path, "wb") as f:
            f.write(data)
        return path

    def run_cli(self, argv: List[str]) -> Tuple[int, bytes, str]:
        """Run main(argv); return (exit status, stdout bytes, stderr text)."""
        raw_out = io.BytesIO()
        out = io.TextIOWrapper(raw_out, encoding="utf-8")
        err = io.StringIO()
        status = 0
        with mock.patch("sys.stdout", out), contextlib.redirect_stderr(err):
            try:
                main(argv)
            except SystemExit as e:
                status = e.code if isinstance(e.code, int) else 1
            out.flush()
        return status, raw_out.getvalue(), err.getvalue()


class TestVersion(_CliCase):
    def test_version(self):
        status, out, _ = self.run_cli(["version"])
        self.assertEqual(status, 0)
        self.assertEqual(out.decode().strip(), "bencodec {}".format(__version__))

    def test_no_command(self):
        status, _, _ = self.run_cli([])
        self.assertEqual(status, 1)


class TestDecodeCommand(_CliCase):
    def test_prints_json(self):
        path = self.write(b"d3:fooli1ei2ee3:bin2:\xff\x00e")
        status, out, _ = self.run_cli(["decode", "-i", path])
        self.assertEqual(status, 0)
        self.assertEqual(json.loads(out.decode()),
                         {"bin": {"hex": "ff00"}, "foo": [1, 2]})

    def test_error_exit_status(self):
        path = self.write(b"i03e")
        status, _, err = self.run_cli(["decode", "-i", path])
        self.assertEqual(status, 2)
        self.assertIn("ERR_LEADING_ZERO", err)
        self.assertIn("offset 0", err)

    def test_max_depth_flag(self):
        path = self.write(b"llee")
        status, _, err = self.run_cli(["decode", "-i", path, "--max-depth", "1"])
        self.assertEqual(status, 2)
        self.assertIn("ERR_NESTING_TOO_DEEP", err)

    def test_max_depth_from_environment(self):
        path = self.write(b"llee")
        with mock.patch.dict(os.environ, {"BENCODEC_MAX_DEPTH": "1"}):
            status, _, err = self.run_cli(["decode", "-i", path])
        self.assertEqual(status, 2)
        self.assertIn("ERR_NESTING_TOO_DEEP", err)

    def test_negative_max_depth_flag(self):
        path = self.write(b"i1e")
        status, out, err = self.run_cli(["decode", "-i", path, "--max-depth", "-1"])
        self.assertEqual(status, 2)
        self.assertEqual(out, b"")
        self.assertIn("--max-depth", err)

    def test_negative_max_depth_environment_ignored(self):
        path = self.write(b"llee")
        with mock.patch.dict(os.environ, {"BENCODEC_MAX_DEPTH": "-1"}):
            status, out, _ = self.run_cli(["decode", "-i", path])
        self.assertEqual(status, 0)
        self.assertEqual(json.loads(out.decode()), [[]])

    def test_missing_file(self):
        status, _, err = self.run_cli(
            ["decode", "-i", os.path.join(self._tmp.name, "nope.torrent")])
        self.assertEqual(status, 2)
        self.assertIn("cannot read input", err)


class TestCanonCommand(_CliCase):
    def test_writes_canonical_bytes(self):
        path = self.write(b"d3:fooi42e3:bar4:spame")
        status, out, _ = self.run_cli(["canon", "-i", path])
        self.assertEqual(status, 0)
        self.assertEqual(out, b"d3:bar4:spam3:fooi42ee")

    def test_check_canonical(self):
        path = self.write(b"d3:bar4:spam3:fooi42ee")
        status, out, _ = self.run_cli(["canon", "-i", path, "--check"])
        self.assertEqual(status, 0)
        self.assertEqual(out.decode().strip(), "canonical")

    def test_check_not_canonical(self):
        path = self.write(b"d3:fooi42e3:bar4:spame")
        status, out, _ = self.run_cli(["canon", "-i", path, "--check"])
        self.assertEqual(status, 1)
        self.assertEqual(out.decode().strip(), "not canonical")


class TestInfoCommand(_CliCase):
    def test_summary(self):
        path = self.write(_TORRENT)
        status, out, _ = self.run_cli(["info", "-i", path, "--strict"])
        self.assertEqual(status, 0)
        text = out.decode()
        self.assertIn("announce:     http://x", text)
        self.assertIn("name:         a.iso", text)
        self.assertIn("pieces:       1", text)
        self.assertIn(hashlib.sha1(_INFO_RAW).hexdigest(), text)

    def test_strict_missing_field(self):
        path = self.write(b"d4:infod4:name1:a12:piece lengthi1e6:pieces0:ee")
        status, _, err = self.run_cli(["info", "-i", path, "--strict"])
        self.assertEqual(status, 2)
        self.assertIn("ERR_MISSING_REQUIRED_FIELD", err)


if __name__ == "__main__":
    unittest.main()
