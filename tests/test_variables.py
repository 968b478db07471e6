import os
import tempfile
import textwrap
import unittest

from payloadsmith.lib.config import Config
from payloadsmith.lib.numbers import parse_hex
from payloadsmith.lib.variables import VariableStore


class TestVariableStore(unittest.TestCase):
    def test_get(self):
        store = VariableStore({"default": "hello"})
        self.assertEqual(store.get("default"), "hello")
        self.assertIsNone(store.get("missing"))
        self.assertIn("default", store)
        self.assertEqual(len(store), 1)
        self.assertEqual(list(store), ["default"])

    def test_snapshot(self):
        values = {"default": "hello"}
        store = VariableStore(values)
        values["default"] = "changed"
        self.assertEqual(store.get("default"), "hello")

    def test_layered(self):
        base = VariableStore({"a": "1", "b": "2"})
        top = base.layered({"b": "3"})
        self.assertEqual(top.get("a"), "1")
        self.assertEqual(top.get("b"), "3")
        self.assertEqual(base.get("b"), "2")

    def test_empty(self):
        self.assertEqual(len(VariableStore()), 0)


class TestVariableStoreFromConfig(unittest.TestCase):
    def setUp(self):
        fd, path = tempfile.mkstemp(prefix="payloadsmith_", suffix=".cfg")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(textwrap.dedent(
                """
                    [texts]
                    default = Hello world!

                    [bins]
                    default = 48656c6c6f
                    odd = 52f
                """
            ).lstrip())
        self.path = path
        Config.load(self.path)

    def tearDown(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass

    def test_texts(self):
        store = VariableStore.from_config("texts")
        self.assertEqual(store.get("default"), "Hello world!")

    def test_bins(self):
        store = VariableStore.from_config("bins", parse_hex)
        self.assertEqual(store.get("default"), b"Hello")
        self.assertEqual(store.get("odd"), b"\x52")
