import io
import unittest
from contextlib import redirect_stdout

from lambdacalc.lang.error import ErrorHandler, GenericException, NoNormalForm, ReductionLimit, UnparseableExpression


class GenericExceptionTestCase(unittest.TestCase):

    def test_message(self):
        error = UnparseableExpression("unexpected '{}'", ")", start=3)
        self.assertEqual("unexpected ')'", error.plain)
        self.assertEqual("syntax error: unexpected ')'", str(error))
        self.assertEqual(3, error.start)
        self.assertEqual(1, error.end)

        self.assertEqual("error: oops", str(GenericException("oops")))
        self.assertEqual("", GenericException("oops").expr)

    def test_kinds(self):
        cases = {
            UnparseableExpression: "syntax error",
            NoNormalForm: "reduction error",
            ReductionLimit: "internal error",
        }
        for cls, kind in cases.items():
            self.assertTrue(str(cls("x")).startswith(kind))
            self.assertTrue(issubclass(cls, GenericException))


class ErrorHandlerTestCase(unittest.TestCase):

    def test_fatal(self):
        with redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(SystemExit):
                with ErrorHandler():
                    raise NoNormalForm("'{}' has no normal form", "ω ω")
        self.assertIn("reduction error", out.getvalue())

    def test_not_fatal(self):
        with redirect_stdout(io.StringIO()) as out:
            with ErrorHandler(fatal=False):
                raise UnparseableExpression("invalid name '{}'", "é")
        self.assertIn("syntax error", out.getvalue())

    def test_recursion_error(self):
        with redirect_stdout(io.StringIO()) as out:
            with ErrorHandler(fatal=False):
                raise RecursionError()
        self.assertIn("internal error", out.getvalue())

    def test_unknown_error(self):
        with redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(KeyError):
                with ErrorHandler(fatal=False):
                    raise KeyError("x")
        self.assertIn("unknown error", out.getvalue())

    def test_traceback(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("script.lc")
        handler.register_line("script.lc", "λx.", 4)

        with redirect_stdout(io.StringIO()) as out:
            with handler:
                raise UnparseableExpression("incomplete λ-term '{}'", "λx.")
        self.assertIn("line 4", out.getvalue())
        self.assertEqual((None, None), handler.traceback["script.lc"])

    def test_diagnose(self):
        error = UnparseableExpression("unexpected '{}'", "x . y", start=2, end=3)
        diagnosis = ErrorHandler.diagnose(error)
        self.assertIn("^", diagnosis)
        self.assertEqual(2, len(diagnosis.splitlines()))

    def test_warn(self):
        handler = ErrorHandler(fatal=False)
        with redirect_stdout(io.StringIO()) as out:
            handler.warn("'{}' is not a keyword", "++")
        self.assertIn("warning", out.getvalue())

    def test_register_step(self):
        with redirect_stdout(io.StringIO()) as out:
            ErrorHandler(verbose=False).register_step("β", "x")
        self.assertEqual("", out.getvalue())

        with redirect_stdout(io.StringIO()) as out:
            ErrorHandler(verbose=True).register_step("β", "λx.x")
        self.assertIn("β", out.getvalue())
        self.assertIn("λx.x", out.getvalue())


if __name__ == '__main__':
    unittest.main()
