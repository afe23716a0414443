"""
Tests for the binder helpers.

This module verifies:
- Semantic guarantees of the `Unset` sentinel (singleton identity, falsy
  semantics, union participation, pickling and finality).
- Ordinal wording used in fault messages.
- Flag-name derivation helpers.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from flagbind.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.unset, UnsetType())
        self.assertIs(Unset, self.unset)

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, "")

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnion(self) -> None:
        """
        The sentinel participates in PEP 604 unions on both sides.
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, Unset | str)
        self.assertNotIsInstance(3, str | Unset)

    def testCopyAndPickle(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testThreadSafety(self) -> None:
        """
        Concurrent construction yields a single identity.
        """
        seen = set()
        lock = Lock()

        def worker():
            for _ in range(100):
                with lock:
                    seen.add(id(UnsetType()))

        threads = [Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(seen, {id(Unset)})

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA
                pass

    def testNullify(self) -> None:
        self.assertIsNone(nullify(Unset))
        self.assertEqual(nullify(Unset, "fallback"), "fallback")
        self.assertEqual(nullify("", "fallback"), "")


class HelpersTest(TestCase):
    """Ordinal wording and flag-name derivation."""

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")

    def testSplitNames(self):
        self.assertEqual(split_names("level,l"), ["level", "l"])
        self.assertEqual(split_names(" --level , -l ,"), ["level", "l"])
        self.assertEqual(split_names(", ,"), [])

    def testLowerFirst(self):
        self.assertEqual(lower_first("Port"), "port")
        self.assertEqual(lower_first("dryRun"), "dryRun")
        self.assertEqual(lower_first(""), "")


if __name__ == '__main__':
    unittest.main()
