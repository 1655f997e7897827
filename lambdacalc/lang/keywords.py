"""Keyword (shorthand) table: the authoritative name -> definition mapping consulted by the reduction engine.

Definitions are stored as source text, in insertion order, and may reference other keywords (or themselves): they are
only expanded when reduction reaches them, so a keyword that was removed or redefined affects every definition that
mentions it. Validation happens on registration:

```
<keyword>    ::= [a-zA-Z] [a-zA-Z0-9_]*      ; same as a variable name
               | [+-*/%^&|!?<>=]+            ; operator, e.g. ++ or --
<definition> ::= <λ-term>                    ; must parse to a non-empty term, must differ from <keyword>
```

The table raises no change notifications: whoever shows it to a user (see lang/view.py) reconciles after each call.
"""

from dataclasses import dataclass
import re

from lambdacalc.lang.error import GenericException, InvalidRegistration
from lambdacalc.lang.numerical import cnumber
from lambdacalc.pure.lexical import LambdaTerm, Variable

# registration order matters: later definitions reference earlier ones
BOOTSTRAP = [
    ("true", "λx.λy.x"),
    ("false", "λx.λy.y"),
    ("not", "λp.p false true"),
    ("and", "λp.λq.p q p"),
    ("or", "λp.λq.p p q"),

    ("null", "λf.λx.x"),
    ("succ", "λn.λf.λx.f (n f x)"),
    ("pred", "λn.λf.λx.n (λg.λh.h (g f)) (λu.x) (λu.u)"),

    ("add", "λm.λn.m succ n"),
    ("sub", "λm.λn.n pred m"),
    ("mul", "λm.λn.m (add n) null"),
    ("pow", "λb.λe.e b"),

    ("is_null", "λn.n (λx.false) true"),
    ("is_ge", "λm.λn.is_null (sub n m)"),
    ("is_le", "λm.λn.is_null (sub m n)"),
    ("is_eq", "λm.λn.and (is_ge m n) (is_ge n m)"),

    ("++", "succ"),
    ("--", "pred"),
]


@dataclass
class KeywordEntry:
    name: str
    definition: str


class KeywordTable:
    """Governs the keywords of a session. Every read and write of the mapping goes through this class."""
    NAME = re.compile(r"\A(?:[a-zA-Z]\w*|[+\-*/%^&|!?<>=]+)\Z")
    NUMBER = re.compile(r"\A[0-9]+\Z")

    def __init__(self):
        self._entries = {}  # dict of name: KeywordEntry, insertion-ordered
        self._trees = {}    # dict of definition: parsed LambdaTerm, shared by every keyword with that definition

    @classmethod
    def bootstrapped(cls):
        """Returns a new table holding the bootstrap keywords."""
        table = cls()
        table.bootstrap()
        return table

    def bootstrap(self):
        """Registers the bootstrap keywords in order. They are always valid, so any rejection is raised."""
        for name, definition in BOOTSTRAP:
            self.register(name, definition, strict=True)

    def validate(self, name, definition):
        """Returns the expanded form of definition if name/definition can be registered. Otherwise raises
        InvalidRegistration. Does not modify the table.
        """
        if not name:
            raise InvalidRegistration("keyword name cannot be empty", diagnosis=False)
        elif name == definition:
            raise InvalidRegistration("'{}' cannot be defined as itself", name, diagnosis=False)
        elif not KeywordTable.NAME.match(name):
            raise InvalidRegistration("'{}' is not a valid keyword", name)

        try:
            return self.expand(definition, name)
        except GenericException as error:
            raise InvalidRegistration("'{}' cannot be defined as '{}' ({})", (name, definition, error.plain),
                                      diagnosis=False) from error
        except RecursionError as error:
            raise InvalidRegistration("'{}' cannot be defined: definition is nested too deeply", name,
                                      diagnosis=False) from error

    def register(self, name, definition, strict=False):
        """Creates or updates keyword name. Returns the expanded definition on success. On rejection, returns an empty
        string, or raises InvalidRegistration if strict. A rejected registration has no effect.
        """
        name = name.strip()
        definition = definition.strip()

        try:
            expanded = self.validate(name, definition)
        except InvalidRegistration:
            if strict:
                raise
            return ""

        if name in self._entries:
            old = self._entries[name].definition
            self._entries[name].definition = definition  # keeps position in iteration order
            self._evict(old)
        else:
            self._entries[name] = KeywordEntry(name, definition)
        return expanded

    def remove(self, name):
        """Deletes keyword name. Removing a keyword that does not exist does nothing."""
        entry = self._entries.pop(name.strip(), None)
        if entry is not None:
            self._evict(entry.definition)

    def _evict(self, definition):
        """Drops the parsed tree of definition unless another keyword still uses it."""
        if all(entry.definition != definition for entry in self._entries.values()):
            self._trees.pop(definition, None)

    def resolve(self, name):
        """Returns the definition of keyword name, or None if name isn't a keyword."""
        entry = self._entries.get(name)
        return entry.definition if entry is not None else None

    def iterate(self):
        """Returns a snapshot of (name, definition) pairs in insertion order."""
        return [(entry.name, entry.definition) for entry in self._entries.values()]

    def expandable(self, name):
        """Whether or not term(name) returns a tree."""
        return name in self._entries or bool(KeywordTable.NUMBER.match(name))

    def term(self, name):
        """Returns a fresh tree for free identifier name: the parsed definition of a keyword, or a Church numeral for
        a number. Returns None for any other name. Used by NormalOrderReducer for δ-steps.
        """
        if KeywordTable.NUMBER.match(name):
            return cnumber(name)

        definition = self.resolve(name)
        if definition is None:
            return None

        if definition not in self._trees:
            self._trees[definition] = LambdaTerm.generate_tree(definition)
        return self._trees[definition].clone()

    def expand(self, definition, name=None):
        """Returns definition with every keyword and number inlined, recursively. A keyword that is already being
        expanded (name included) is left as is, so recursive definitions expand to a finite term.
        """
        tree = LambdaTerm.generate_tree(definition)
        active = frozenset() if name is None else frozenset([name])
        return self._inline(tree, active).disambiguate().expr

    def _inline(self, node, active):
        if isinstance(node, Variable):
            if not node.free or node.name in active:
                return node

            term = self.term(node.name)
            if term is None:
                return node
            return self._inline(term, active | {node.name})

        node.nodes = [self._inline(sub_node, active) for sub_node in node.nodes]
        return node

    def __contains__(self, name):
        return name in self._entries

    def __iter__(self):
        return iter(list(self._entries))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(self._entries)})"
