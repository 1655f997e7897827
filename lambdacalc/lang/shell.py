"""Handles interactive/command-line mode for the lambda calculator. Uses cmd as backend."""

import cmd

from termcolor import colored


class Shell(cmd.Cmd):
    """Lambda calculator shell."""
    intro = "Lambda calculator :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if self._tmp_line:
                line = f"{self._tmp_line} {line}"
            line, add_to_prev = self.sess.preprocess_line(line, self.line_num, False)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                try:
                    self.sess.add(line, self.line_num)
                except ValueError:
                    return  # if line is empty, terminate

                self.sess.run()

                while self.sess.results:
                    print(self.sess.pop())

    def do_keywords(self, arg):
        """Lists every keyword and its definition."""
        print(self.sess.view.render())

    def do_expand(self, arg):
        """Shows the definition of a keyword with every nested keyword expanded."""
        with self.sess.error_handler:
            definition = self.sess.table.resolve(arg.strip())
            if definition is None:
                print(colored(f"'{arg.strip()}' is not a keyword", attrs=["dark"]))
            else:
                print(self.sess.table.expand(definition, arg.strip()))

    def do_remove(self, arg):
        """Removes a keyword. Same as '#remove KEYWORD'."""
        self.sess.remove(arg)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lambda calculator!\n\n"
              "Lambda calculus is a Turing-complete language created by Alonzo Church. Type a \n"
              "λ-term (or use '\\' for 'λ') and it will be reduced to its normal form. Numbers are \n"
              "Church numerals, and keywords are shorthand for longer λ-terms.\n\n"
              "Try it out by typing 'I := λx.x'. This will bind the λ-term 'λx.x' to the \n"
              "keyword 'I'. Next, try typing 'I y'. This will apply 'I' to 'y', giving 'y' as \n"
              "the result. 'keywords' lists every keyword, 'expand I' shows its definition and \n"
              "'remove I' (or '#remove I') deletes it.\n\n"
              "A line starting with 'keywords', 'expand', 'remove', 'help' or 'exit' runs that command. To apply a \n"
              "keyword with one of those names, wrap it in parentheses: '(expand) x'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
