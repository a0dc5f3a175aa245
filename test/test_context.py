"""
Context carrier tests (values, flags inheritance, cancellation).
"""

from __future__ import annotations

import gc
import unittest
from threading import Thread
from unittest import TestCase

from switchyard import Context, FlagSet, PROGRAM_NAME
from switchyard.context import Key


class TestContext(TestCase):

    def testValuesResolveThroughParents(self):
        token = Key("token")
        root = Context({PROGRAM_NAME: "ship"})
        child = root.derive({token: "abc"})
        self.assertEqual(child[PROGRAM_NAME], "ship")
        self.assertEqual(child[token], "abc")
        self.assertNotIn(token, root)
        self.assertIsNone(root.get(token))
        with self.assertRaises(KeyError):
            root[token]

    def testKeysCompareByIdentity(self):
        context = Context({Key("same"): 1})
        self.assertNotIn(Key("same"), context)

    def testFlagsAreInherited(self):
        flags = FlagSet("global")
        root = Context((), flags)
        self.assertIs(root.derive().flags, flags)
        self.assertIsInstance(Context().flags, FlagSet)
        derived = flags.derive("sync")
        self.assertIs(root.derive((), derived).flags, derived)

    def testCancelCascadesToChildren(self):
        root = Context()
        child = root.derive()
        grandchild = child.derive()
        root.cancel()
        self.assertTrue(child.cancelled)
        self.assertTrue(grandchild.cancelled)

    def testChildCancellationLeavesParent(self):
        root = Context()
        child = root.derive()
        child.cancel()
        self.assertTrue(child.cancelled)
        self.assertFalse(root.cancelled)

    def testDerivedFromCancelledStartsCancelled(self):
        root = Context()
        root.cancel()
        self.assertTrue(root.derive().cancelled)

    def testChildrenAreHeldWeakly(self):
        root = Context()
        kept = root.derive()
        for _ in range(100):
            root.derive()
        gc.collect()
        self.assertEqual(root.children, (kept,))
        root.cancel()
        self.assertTrue(kept.cancelled)

    def testWait(self):
        context = Context()
        self.assertFalse(context.wait(0.01))
        worker = Thread(target=context.cancel)
        worker.start()
        self.assertTrue(context.wait(5))
        worker.join()

    def testRejectsForeignParents(self):
        with self.assertRaises(TypeError):
            Context(parent=object())
        with self.assertRaises(TypeError):
            Context((), {"debug": True})


if __name__ == "__main__":
    unittest.main()
