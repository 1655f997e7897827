"""Session control for the lambda calculator. A session owns one keyword table and its view, and runs statements from
the command line or from a script file strictly in the order they were given.
"""

from lambdacalc.lang.error import GenericException, ReductionLimit
from lambdacalc.lang.keywords import KeywordTable
from lambdacalc.lang.lexical import Grammar
from lambdacalc.lang.numerical import numberify
from lambdacalc.lang.view import KeywordView
from lambdacalc.pure.lexical import NormalOrderReducer


def normal_form(expression, table, numbers=False, max_steps=None, error_handler=None):
    """Reduces expression to normal form, expanding free identifiers with table. Returns the reduced tree. Raises a
    GenericException if expression cannot be parsed or reduced.
    """
    reducer = NormalOrderReducer(expression, expand=table.term, expandable=table.expandable, max_steps=max_steps)
    reducer.beta_reduce(error_handler)

    if numbers:
        return numberify(reducer.tree)
    return reducer.tree


def simplify(expression, table, numbers=False, max_steps=None):
    """Returns the normal form of expression as text. Errors are returned as their message instead of raised, and an
    empty expression gives an empty result.
    """
    if not expression.strip():
        return ""

    try:
        return normal_form(expression, table, numbers, max_steps).expr
    except GenericException as error:
        return str(error)
    except RecursionError:
        return str(ReductionLimit("beta normal form might exist, but maximum recursion depth exceeded"))


class Session:
    """Governs a calculator session, with control over its keywords."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, table=None, bootstrap=True, numbers=False, max_steps=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.numbers = numbers    # whether or not Church numerals are outputted as numbers
        self.max_steps = max_steps

        if table is None:
            table = KeywordTable.bootstrapped() if bootstrap else KeywordTable()
        self.table = table
        self.view = KeywordView()
        self.view.reconcile(self.table.iterate())

        self.pending = []  # list of (line num, Grammar) to run, in order
        self.results = []  # outputs of ExecStmts that were run

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            exprs = []
            add_to_prev = False

            try:
                with open(path, "r", encoding="utf-8") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, exprs)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr in exprs:
                self.add(*expr)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Preprocesses a line from a file or command-line. In command-line mode, exprs can be ignored (used to keep
        track of file's exprs), but the second value returned will indicate whether a line continuation is necessary,
        i.e. whether there are more '(' than ')'. Returns updated value of line and add_to_prev.
        """
        if ";;" in line:
            line = line[:line.index(";;")]  # get rid of comments

        line = Grammar.preprocess(line)
        if exprs is not None:
            if add_to_prev and exprs:
                prev, prev_num = exprs.pop()
                line = f"{prev} {line.strip()}"
                exprs.append((line, prev_num))
            elif line.strip():
                exprs.append((line, line_num))

        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num):
        """Adds a statement to the current session. Statements are run in order when run is called."""
        if not expr.strip():
            raise ValueError("expr cannot be empty")

        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised
        self.pending.append((line_num, Grammar.infer(expr)))
        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs this session's pending statements in order. Will raise any errors that are encountered."""
        while self.pending:
            line_num, stmt = self.pending.pop(0)
            self.error_handler.register_line(self.path, str(stmt), line_num)

            result = stmt.run(self)
            if result is not None:
                self.results.append(result)

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Returns and forgets the oldest result."""
        return self.results.pop(0)

    def create_or_update(self, name, expression, strict=False):
        """Registers keyword name and updates the view. Returns the expanded definition, or an empty string if the
        registration was rejected (raises InvalidRegistration instead if strict).
        """
        expanded = self.table.register(name, expression, strict)
        if expanded:
            name = name.strip()
            self.view.upsert(name, self.table.resolve(name))
        return expanded

    def remove(self, name):
        """Removes keyword name and its row in the view. Never fails."""
        self.table.remove(name)
        self.view.delete(name.strip())

    def simplify(self, expression):
        """Returns the normal form of expression as text, or the error message if it cannot be reduced."""
        return simplify(expression, self.table, self.numbers, self.max_steps)

    def execute(self, expression):
        """Returns the normal form of expression as text. Errors are raised. Identifiers that can never be variables
        but are not keywords are reported as warnings.
        """
        tree = normal_form(expression, self.table, False, self.max_steps, self.error_handler)

        for name in sorted(tree.free_names()):
            if not name[0].isalpha():  # operators
                self.error_handler.warn("'{}' is not a defined keyword", name, diagnosis=False)

        if self.numbers:
            tree = numberify(tree)
        return tree.expr
