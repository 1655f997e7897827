import unittest

from lambdacalc.lang.error import InvalidRegistration
from lambdacalc.lang.keywords import BOOTSTRAP, KeywordTable
from lambdacalc.lang.numerical import cnumber


class KeywordTableTestCase(unittest.TestCase):

    def setUp(self):
        self.table = KeywordTable()

    def test_register(self):
        self.assertEqual("λx.x", self.table.register("I", "λx.x"))
        self.assertEqual("λx.x", self.table.resolve("I"))
        self.assertEqual([("I", "λx.x")], self.table.iterate())

        # surrounding whitespace is not part of the name or the definition
        self.assertEqual("λx.λy.x", self.table.register("  K ", "  λx.λy.x\t"))
        self.assertEqual("λx.λy.x", self.table.resolve("K"))

        self.assertIn("K", self.table)
        self.assertEqual(["I", "K"], list(self.table))

    def test_register_returns_expansion(self):
        self.table.register("I", "λx.x")
        self.table.register("K", "λx.λy.x")

        cases = {
            "K I": "(λx.λy.x) (λx.x)",
            "λy.K y": "λy.(λx.λy_1.x) y",
            "2": "λf.λx.f (f x)",
            "I unknown": "(λx.x) unknown",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.table.register("T", case), case)

        # recursive definitions stay finite
        self.assertEqual("λx.r x", self.table.register("r", "λx.r x"))

    def test_update(self):
        self.table.register("a", "λx.x")
        self.table.register("b", "λy.y")
        self.table.register("a", "λx.λy.x")

        self.assertEqual([("a", "λx.λy.x"), ("b", "λy.y")], self.table.iterate())
        self.assertEqual(2, len(self.table))

    def test_reject(self):
        should_fail = [
            ("x", "x"),          # self-alias
            ("  k ", "k"),
            ("", "λx.x"),        # empty
            ("   ", "λx.x"),
            ("k", ""),
            ("k", "  "),
            ("k", "()"),
            ("2x", "λx.x"),      # not a keyword name
            ("a b", "λx.x"),
            ("λ", "λx.x"),
            ("(a", "λx.x"),
            ("k", "λx."),        # not a λ-term
            ("k", "λx.x)"),
            ("big", "256"),      # numeral limit
        ]
        for name, definition in should_fail:
            self.assertEqual("", self.table.register(name, definition), (name, definition))
            self.assertRaises(InvalidRegistration, self.table.register, name, definition, strict=True)

        self.assertEqual([], self.table.iterate())
        self.assertIsNone(self.table.resolve("x"))

    def test_reject_keeps_entry(self):
        self.table.register("k", "λx.x")
        self.assertEqual("", self.table.register("k", "λx."))
        self.assertEqual("", self.table.register("k", "k"))
        self.assertEqual([("k", "λx.x")], self.table.iterate())

    def test_reject_deep_nesting(self):
        deep = "(" * 1500 + "x"
        self.assertEqual("", self.table.register("k", deep))
        self.assertRaises(InvalidRegistration, self.table.register, "k", deep, strict=True)
        self.assertIsNone(self.table.resolve("k"))

    def test_operators(self):
        self.table.register("succ", "λn.λf.λx.f (n f x)")
        self.assertEqual("λn.λf.λx.f (n f x)", self.table.register("++", "succ"))
        self.assertEqual("succ", self.table.resolve("++"))

    def test_remove(self):
        self.table.remove("a")  # removing a keyword that does not exist does nothing
        self.assertEqual([], self.table.iterate())

        for name in ("a", "b", "c"):
            self.table.register(name, "λx.x")

        self.table.remove("b")
        self.assertIsNone(self.table.resolve("b"))
        self.assertEqual(["a", "c"], [name for name, __ in self.table.iterate()])

        self.table.remove(" a ")
        self.table.remove("a")
        self.assertEqual([("c", "λx.x")], self.table.iterate())

    def test_dangling_reference(self):
        self.table.register("b", "λx.x")
        self.table.register("a", "b")
        self.table.remove("b")

        self.assertEqual("b", self.table.resolve("a"))
        self.assertFalse(self.table.expandable("b"))

    def test_term(self):
        self.table.register("I", "λx.x")

        self.assertTrue(self.table.term("3").alpha_equals(cnumber(3)))
        self.assertIsNone(self.table.term("unknown"))

        first = self.table.term("I")
        first.nodes[1] = first.nodes[0]
        self.assertEqual("λx.x", self.table.term("I").expr)

        self.table.register("I", "λy.y")
        self.assertEqual("λy.y", self.table.term("I").expr)

    def test_term_cache_eviction(self):
        self.table.register("I", "λx.x")
        self.table.register("J", "λx.x")
        self.table.term("I")

        self.table.remove("I")
        self.assertIn("λx.x", self.table._trees)  # still used by J

        self.table.register("J", "λy.y")
        self.assertNotIn("λx.x", self.table._trees)

        self.table.term("J")
        self.table.remove("J")
        self.assertEqual({}, self.table._trees)

    def test_snapshot(self):
        self.table.register("a", "λx.x")
        snapshot = self.table.iterate()
        self.table.register("b", "λx.x")
        self.assertEqual([("a", "λx.x")], snapshot)

    def test_bootstrapped(self):
        table = KeywordTable.bootstrapped()
        self.assertEqual([name for name, __ in BOOTSTRAP], list(table))
        self.assertEqual(BOOTSTRAP, table.iterate())
        self.assertEqual("λx.λy.x", table.resolve("true"))
        self.assertEqual("succ", table.resolve("++"))


if __name__ == '__main__':
    unittest.main()
