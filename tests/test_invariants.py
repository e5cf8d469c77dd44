"""Determinism invariants over randomly generated value trees.

Seeded, so failures reproduce.  Tune with environment variables:

    BENCODEC_SEED=1337 BENCODEC_TRIALS=500 python -m pytest tests/test_invariants.py
"""

from __future__ import annotations

import os
import random
import sys
import unittest
from typing import List as TList, Tuple

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bencodec import (
    INT64_MAX,
    INT64_MIN,
    Dict,
    Int,
    List,
    Str,
    Value,
    canonicalize,
    encode,
    from_plain,
    is_canonical,
    loads,
    to_plain,
)

SEED = int(os.environ.get("BENCODEC_SEED", "1337"))
TRIALS = int(os.environ.get("BENCODEC_TRIALS", "300"))
MAX_GEN_DEPTH = 5
MAX_KEYS = 6
MAX_LIST = 6
MAX_BYTES = 24


class _Gen:
    def __init__(self, seed: int) -> None:
        self.rng = random.Random(seed)

    def rand_bytes(self) -> bytes:
        n = self.rng.randint(0, MAX_BYTES)
        return bytes(self.rng.getrandbits(8) for _ in range(n))

    def rand_int(self) -> int:
        r = self.rng.random()
        if r < 0.1:
            return self.rng.choice([0, INT64_MIN, INT64_MAX, -1, 1])
        if r < 0.6:
            return self.rng.randint(-1000, 1000)
        return self.rng.randint(INT64_MIN, INT64_MAX)

    def scalar(self) -> Value:
        if self.rng.random() < 0.5:
            return Str(self.rand_bytes())
        return Int(self.rand_int())

    def value(self, depth: int = 0) -> Value:
        if depth >= MAX_GEN_DEPTH:
            return self.scalar()
        r = self.rng.random()
        if r < 0.35:
            n = self.rng.randint(0, MAX_KEYS)
            keys = list(dict.fromkeys(self.rand_bytes() for _ in range(n)))
            return Dict((k, self.value(depth + 1)) for k in keys)
        if r < 0.65:
            n = self.rng.randint(0, MAX_LIST)
            return List(self.value(depth + 1) for _ in range(n))
        return self.scalar()

    def shuffled_encoding(self, value: Value) -> bytes:
        """Valid bencode for value with dict entries in random order."""
        if isinstance(value, Dict):
            entries: TList[Tuple[bytes, Value]] = list(value.items())
            self.rng.shuffle(entries)
            body = b"".join(encode(Str(k)) + self.shuffled_encoding(v) for k, v in entries)
            return b"d" + body + b"e"
        if isinstance(value, List):
            return b"l" + b"".join(self.shuffled_encoding(v) for v in value) + b"e"
        return encode(value)


class TestInvariants(unittest.TestCase):
    def setUp(self) -> None:
        self.gen = _Gen(SEED)

    def test_round_trip(self):
        for trial in range(TRIALS):
            v = self.gen.value()
            with self.subTest(trial=trial):
                self.assertEqual(loads(encode(v)), v)

    def test_encoding_is_stable(self):
        for trial in range(TRIALS):
            v = self.gen.value()
            with self.subTest(trial=trial):
                self.assertEqual(encode(v), encode(v))
                self.assertTrue(is_canonical(encode(v)))

    def test_key_order_independence(self):
        """Reordered input decodes equal and re-encodes to the canonical bytes."""
        for trial in range(TRIALS):
            v = self.gen.value()
            shuffled = self.gen.shuffled_encoding(v)
            with self.subTest(trial=trial):
                self.assertEqual(loads(shuffled), v)
                self.assertEqual(canonicalize(shuffled), encode(v))

    def test_plain_projection_round_trip(self):
        for trial in range(TRIALS):
            v = self.gen.value()
            with self.subTest(trial=trial):
                self.assertEqual(from_plain(to_plain(v)), v)


if __name__ == "__main__":
    unittest.main()
