import unittest

from lambdacalc.lang.error import GenericException, NumeralLimit
from lambdacalc.lang.numerical import cnumber, number, numberify
from lambdacalc.pure.lexical import LambdaTerm


class NumericalTestCase(unittest.TestCase):

    def test_cnumber(self):
        should_fail = [-2, 0.3, 4.0, "x", "-1"]
        for case in should_fail:
            self.assertRaises(GenericException, cnumber, case)

        self.assertRaises(NumeralLimit, cnumber, 256)
        self.assertEqual("255", number(cnumber(255)))

        should_pass = {0: "λf.λx.x", 1: "λf.λx.f x", 3: "λf.λx.f (f (f x))", "2": "λf.λx.f (f x)"}
        for case, result in should_pass.items():
            self.assertEqual(result, cnumber(case).expr)

    def test_number(self):
        should_fail = ["λf.λx.f f", "λf.λx.x f x", "λx.λx.x", "λf.λx.y", "λf.f", "x"]
        for case in should_fail:
            self.assertIsNone(number(LambdaTerm.generate_tree(case)), case)

        should_pass = {3: "λf.λx.f (f (f x))", 0: "λf.λx.x", 1: "λa.λb.a b"}
        for result, case in should_pass.items():
            self.assertEqual(str(result), number(LambdaTerm.generate_tree(case)), case)

    def test_numberify(self):
        cases = {
            "λf.λx.f x": "1",
            "a (λf.λx.x) (λs.λz.s (s z))": "a 0 2",
            "λx.x": "λx.x",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, numberify(LambdaTerm.generate_tree(case)).expr, case)


if __name__ == '__main__':
    unittest.main()
