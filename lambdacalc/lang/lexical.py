"""Lexical analysis for calculator scripts and the shell, a shallow wrapper around pure lambda calculus and the keyword
table. Note that this module does not provide input file parsing, but rather tokenization of single statements.

All grammar can be loosely defined as follows:

```
<named_func>  ::= <keyword> ":=" <λ-term>   ; creates or updates a keyword (see lang/keywords.py)
<remove_stmt> ::= "#remove " <keyword>      ; removes a keyword, does nothing if it does not exist
<exec_stmt>   ::= <λ-term>                  ; reduced to normal form and outputted

<comment>     ::= ";;" <char>*
```

Comments are handled in session.py: there is no dedicated Grammar class for comments.
"""

from abc import abstractmethod, ABC

from lambdacalc.lang.error import GenericException, UnparseableExpression


class Grammar(ABC):
    """Superclass representing any statement."""

    def __init__(self, expr, original_expr=None):
        """Assumes check_grammar has been run."""
        if original_expr is None:
            original_expr = Grammar.preprocess(expr)

        self.expr = Grammar.preprocess(expr)
        self.original_expr = original_expr  # used for errors messages
        self._cls = type(self).__name__

    @staticmethod
    @abstractmethod
    def check_grammar(expr, original_expr):
        """This method should check expr's top-level grammar and return whether or not it is valid. It should also
        raise an UnparseableExpression if expr's top-level grammar is similar to the accepted grammar but
        syntactically invalid. original_expr is used for error messages.
        """

    @abstractmethod
    def run(self, session):
        """Applies this statement to session. Returns the text to output, or None."""

    @staticmethod
    def preprocess(expr):
        """Removes trailing whitespace."""
        return expr.rstrip()

    @classmethod
    def infer(cls, expr, original_expr=None):
        """Infers the type of expr and returns an object of the correct grammar subclass. Subclasses are tried in the
        order they are defined.
        """
        original_expr = original_expr if original_expr else expr
        for subclass in cls.__subclasses__():
            if subclass.check_grammar(expr, original_expr):
                return subclass(expr, original_expr)

        raise GenericException("'{}' is not a valid statement", original_expr)

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr

    def __eq__(self, other):
        return isinstance(other, type(self)) and other.expr == self.expr

    def __hash__(self):
        return hash(self.expr)


class RemoveStmt(Grammar):
    """#remove statement. See docstrings for grammar."""

    def __init__(self, expr, original_expr=None):
        super().__init__(expr, original_expr)

        __, self.name = self.expr.split(maxsplit=1)

    @staticmethod
    def check_grammar(expr, original_expr):
        expr = Grammar.preprocess(expr).strip()

        if not expr.startswith("#"):
            return False

        directive, *args = expr.split()
        if directive != "#remove":
            raise UnparseableExpression("'{}' is not a known directive", original_expr, end=len(directive))
        elif len(args) != 1:
            raise UnparseableExpression("#remove expects a single KEYWORD", original_expr)

        return True

    def run(self, session):
        session.remove(self.name)


class NamedFunc(Grammar):
    """NamedFuncs represent keyword statements: <KEYWORD> := <λ-term>."""

    def __init__(self, expr, original_expr=None):
        super().__init__(expr, original_expr)

        self.name, self.term = (part.strip() for part in self.expr.split(":="))

    @staticmethod
    def check_grammar(expr, original_expr):
        expr = Grammar.preprocess(expr)

        eq = expr.find(":=")
        if eq == -1:
            return False
        elif eq != expr.rfind(":="):
            start = expr.rfind(":=")
            raise UnparseableExpression("'{}' contains illegal reserved ':='", original_expr, start=start,
                                        end=start + 2)

        return True

    def run(self, session):
        session.create_or_update(self.name, self.term, strict=True)

    def __repr__(self):
        return f"{self._cls}(name='{self.name}', term='{self.term}')"


class ExecStmt(Grammar):
    """λ-term to be reduced to normal form."""

    @staticmethod
    def check_grammar(expr, original_expr):
        return bool(expr.strip())

    def run(self, session):
        return session.execute(self.expr)
