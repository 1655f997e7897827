import io
import unittest
from contextlib import redirect_stdout

from lambdacalc.lang.error import ErrorHandler
from lambdacalc.lang.session import Session
from lambdacalc.lang.shell import Shell


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, cmd_line=True))

    def run_line(self, line):
        with redirect_stdout(io.StringIO()) as out:
            self.shell.onecmd(line)
        return out.getvalue()

    def test_statements(self):
        self.assertEqual("", self.run_line("I := λx.x"))
        self.assertEqual("y\n", self.run_line("I y"))

    def test_continuation(self):
        self.assertEqual("", self.run_line("(λx.x"))
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)

        self.assertEqual("λx.x w\n", self.run_line("w)"))
        self.assertEqual(self.shell._tmp_prompt, self.shell.prompt)

    def test_commands(self):
        self.assertIn("is_eq", self.run_line("keywords"))
        self.assertEqual("λx.λy.x\n", self.run_line("expand true"))

        self.run_line("remove true")
        self.assertNotIn("true", self.shell.sess.table)
        self.assertIn("not a keyword", self.run_line("expand true"))

    def test_command_names_as_keywords(self):
        self.shell.sess.create_or_update("expand", "λx.x")

        # a line starting with a command name runs the command
        self.assertEqual("λx.x\n", self.run_line("expand expand"))
        self.assertEqual("y\n", self.run_line("(expand) y"))

        self.assertIn("parentheses", self.run_line("help"))


if __name__ == '__main__':
    unittest.main()
