"""Pure lambda calculus syntax tree generation, parsing and normal-order reduction.

The `pure` directory knows nothing about keywords or numerals: free identifiers are left to an `expand` callable given
to NormalOrderReducer (see lambdacalc/lang/keywords.py).

Formally, pure lambda calculus can be defined as

```
<λ-term> ::= <name>                     ; "variable"
                                        ; - bound if an enclosing abstraction declares it, free otherwise
                                        ; - free names may also be numerals (0-9) or operators (+-*/%^&|!?<>=)
           | "λ" <name> "." <λ-term>    ; "abstraction"
                                        ; - one variable per λ: λx.λy.M, never λxy.M
                                        ; - abstraction bodies are greedy: λx.x y = λx.(x y) != (λx.x) (y)
           | <λ-term> <λ-term>          ; "application"
                                        ; - associating by left: a b c d = (((a b) c) d)
```

"\\" may be typed instead of "λ". Parentheses left open at the end of an expression are closed implicitly.

Sources: https://plato.stanford.edu/entries/lambda-calculus/#Com,
         http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

from abc import abstractmethod, ABC
import re

from lambdacalc.lang.error import NoNormalForm, ReductionLimit, UnparseableExpression


class PureGrammar(ABC):
    """Superclass that represents any node of a pure lambda calculus syntax tree."""
    TOKEN = re.compile(r"[()λ\\.]|[0-9]+|[+\-*/%^&|!?<>=]+|[A-Za-z_][A-Za-z0-9_]*|\S")
    NAME = re.compile(r"\A[a-zA-Z]\w*\Z")
    FREE_NAME = re.compile(r"\A(?:[a-zA-Z]\w*|[0-9]+|[+\-*/%^&|!?<>=]+)\Z")
    SUFFIX = re.compile(r"_[0-9]+\Z")

    @property
    @abstractmethod
    def expr(self):
        """Canonical text of this node."""

    @property
    @abstractmethod
    def tokenizable(self):
        """Whether or not this object has child nodes."""

    def display(self, indents=0):
        """Recursively displays PureGrammar tree with readable format.

        Format:
        <PureGrammar>(expr='<expr>', nodes=[
            <PureGrammar>(expr='<expr>', nodes=[
                ...
                <PureGrammar>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self.expr}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{type(self).__name__}('{self.expr}')"

    def __eq__(self, other):
        return isinstance(other, type(self)) and self.expr == other.expr

    def __hash__(self):
        return hash(self.expr)


class Parser:
    """Recursive descent parser turning source text into a LambdaTerm tree. Positions are kept for error messages."""

    def __init__(self, original_expr):
        self.original_expr = original_expr
        self.tokens = [(match.group(), match.start()) for match in PureGrammar.TOKEN.finditer(original_expr)]
        self.pos = 0
        self.scope = []  # names bound by the enclosing abstractions, innermost last

    def parse(self):
        if not self.tokens:
            raise UnparseableExpression("λ-term cannot be empty", self.original_expr, diagnosis=False)

        term = self.parse_sequence()
        if self.pos < len(self.tokens):
            __, start = self.tokens[self.pos]
            msg = "'{}' has closing parenthesis without matching open parenthesis"
            raise UnparseableExpression(msg, self.original_expr, start=start, end=start + 1)
        return term

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else (None, len(self.original_expr))

    def advance(self):
        token = self.peek()
        self.pos += 1
        return token

    def error(self, msg, token, start):
        raise UnparseableExpression(msg, (self.original_expr, token), start=start, end=start + len(token))

    def parse_sequence(self):
        """Parses applications up to a closing parenthesis or the end of input. Returns None if nothing was found."""
        term = None
        while True:
            token, start = self.peek()
            if token is None or token == ")":
                return term

            if token == "(":
                self.advance()
                node = self.parse_sequence()
                if node is None:
                    raise UnparseableExpression("'{}' contains an empty λ-term", self.original_expr, start=start)
                if self.peek()[0] == ")":
                    self.advance()
            elif token in ("λ", "\\"):
                node = self.parse_abstraction()
            elif token == ".":
                self.error("'{}' has unexpected '{}' character", token, start)
            elif PureGrammar.FREE_NAME.match(token):
                self.advance()
                node = Variable(token, free=token not in self.scope)
            else:
                self.error("'{}' contains invalid name '{}'", token, start)

            term = node if term is None else Application(term, node)

    def parse_abstraction(self):
        __, bind = self.advance()

        token, start = self.advance()
        if token is None:
            raise UnparseableExpression("'{}' has incomplete λ-abstraction at the end of the expression",
                                        self.original_expr, start=bind, end=bind + 1)
        if not PureGrammar.NAME.match(token):
            self.error("'{}' has invalid variable name '{}'", token, start)

        decl, decl_start = self.advance()
        if decl != ".":
            if decl is None:
                raise UnparseableExpression("'{}' has incomplete λ-abstraction at the end of the expression",
                                            self.original_expr, start=bind, end=start + len(token))
            self.error("'{}' expected '.' but found '{}'", decl, decl_start)

        self.scope.append(token)
        body = self.parse_sequence()
        self.scope.pop()

        if body is None:
            raise UnparseableExpression("'{}' contains an illegal abstraction body", self.original_expr,
                                        start=bind, end=decl_start + 1)
        return Abstraction(Variable(token), body)


class LambdaTerm(PureGrammar):
    """Represents a valid λ-term: variable, abstraction, or application. Also abstractly defines functionality that
    will allow a syntax tree to be reduced.
    """

    @abstractmethod
    def sub(self, var, new_term, unbound=None):
        """Given a redex (λvar.M) new_term, this method returns substitution of all free occurences of var with
        new_term. Bound variables of M that would capture a variable of new_term are renamed first. Nodes of self
        may be reused in the result, but new_term is always copied. unbound is new_term.unbound(), computed once per
        substitution.
        """

    @abstractmethod
    def clone(self):
        """Deep copy of this tree."""

    @abstractmethod
    def alpha_equals(self, other, mapping=None, other_mapping=None):
        """Whether or not two LambdaTerms are alpha-equivalent. mapping maps bound names of self to the bound names of
        other that are declared by the corresponding abstraction, other_mapping is the reverse.
        """

    @abstractmethod
    def is_redex(self, expandable=None):
        """Whether or not this node can be reduced in one step: a β-redex, or a free name that expandable accepts."""

    @classmethod
    def generate_tree(cls, expr):
        """Converts expr to a LambdaTerm tree, raises UnparseableExpression if expr is not a valid λ-term."""
        return Parser(expr).parse()

    def walk(self):
        """Yields every node of this tree, parents first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.nodes))

    def names(self):
        """Every variable name used in this tree, bound or free."""
        return {node.expr for node in self.walk() if isinstance(node, Variable)}

    def free_names(self):
        """Free (global) identifiers in this tree: keyword names, numerals, or unresolved names."""
        return {node.expr for node in self.walk() if isinstance(node, Variable) and node.free}

    def unbound(self):
        """Names of bound variables that are not declared inside this tree, i.e. references to outer abstractions."""
        return self._unbound(frozenset())

    def _unbound(self, declared):
        result = set()
        for node in self.nodes:
            result |= node._unbound(declared)
        return result

    def signature(self):
        """Prefix notation of this tree that, unlike expr, tells free identifiers apart from bound variables."""
        tokens = []
        for node in self.walk():
            if isinstance(node, Variable):
                tokens.append(f"${node.name}" if node.free else node.name)
            else:
                tokens.append("λ" if isinstance(node, Abstraction) else "@")
        return " ".join(tokens)

    def depth(self):
        """Height of this tree."""
        return 1 + max((node.depth() for node in self.nodes), default=0)

    def left_outer_redex(self, expandable=None):
        """Returns the leftmost outermost redex and the index path to it, or (None, None) if self is in normal form."""

        def find_outer_redex(tree, path):
            if tree.is_redex(expandable):
                return tree, path
            for idx, node in enumerate(tree.nodes):
                if isinstance(tree, Abstraction) and idx == 0:
                    continue  # bound variable of an abstraction
                result = find_outer_redex(node, path + [idx])
                if result:
                    return result

        return find_outer_redex(self, []) or (None, None)

    def get(self, idxs):
        """Gets node at positions specified by idxs. idxs=[] will return self."""
        if not idxs:
            return self

        this, *others = idxs
        return self.nodes[this].get(others)

    def set(self, idxs, node):
        """Sets node at positions specified by idxs. idxs=[] will raise an error."""
        if not idxs:
            raise ValueError("idxs cannot be empty")

        this, *others = idxs
        if not others:
            self.nodes[this] = node
        else:
            self.nodes[this].set(others, node)

    def disambiguate(self):
        """Renames bound variables for display: a binder that shadows an active binder or that clashes with a free
        identifier of its body becomes name_1, name_2, ..., every other binder gets its plain name back.
        """
        return self._disambiguate(frozenset())

    def _disambiguate(self, scope):
        self.nodes = [node._disambiguate(scope) for node in self.nodes]
        return self

    def __str__(self):
        return self.display()


class Variable(LambdaTerm):
    """Variable in lambda calculus. Bound variables refer to the nearest enclosing abstraction with the same name, free
    variables are global identifiers that are never captured by an abstraction.
    """

    def __init__(self, name, free=False):
        self.name = name
        self.free = free
        self.nodes = []

    @property
    def expr(self):
        return self.name

    @property
    def tokenizable(self):
        return False

    def sub(self, var, new_term, unbound=None):
        if not self.free and self.name == var:
            return new_term.clone()
        return self

    def clone(self):
        return Variable(self.name, self.free)

    def alpha_equals(self, other, mapping=None, other_mapping=None):
        if mapping is None:
            mapping = {}
        if other_mapping is None:
            other_mapping = {}

        if not isinstance(other, type(self)) or self.free != other.free:
            return False
        if self.free:
            return self.name == other.name

        if self.name in mapping or other.name in other_mapping:
            return mapping.get(self.name) == other.name and other_mapping.get(other.name) == self.name
        return self.name == other.name

    def is_redex(self, expandable=None):
        return self.free and expandable is not None and expandable(self.name)

    def _unbound(self, declared):
        if self.free or self.name in declared:
            return set()
        return {self.name}

    @classmethod
    def fresh(cls, name, used):
        """Returns a bound Variable like name (same base, numeric suffix) whose name isn't in used."""
        base = PureGrammar.SUFFIX.sub("", name)
        idx = 1
        while f"{base}_{idx}" in used:
            idx += 1
        return cls(f"{base}_{idx}")

    def __repr__(self):
        return f"{type(self).__name__}('{self.name}'{', free=True' if self.free else ''})"


class Abstraction(LambdaTerm):
    """Abstraction: the basic datatype in lambda calculus."""

    def __init__(self, arg, body):
        self.nodes = [arg, body]

    @property
    def expr(self):
        arg, body = self.nodes
        return f"λ{arg.expr}.{body.expr}"

    @property
    def tokenizable(self):
        return True

    def sub(self, var, new_term, unbound=None):
        arg, body = self.nodes
        if arg.name == var:
            return self

        if unbound is None:
            unbound = new_term.unbound()
        if arg.name in unbound:
            if var not in body.unbound():
                return self

            new_arg = Variable.fresh(arg.name, body.names() | new_term.names() | {var})
            body = body.sub(arg.name, new_arg)
            arg = new_arg

        self.nodes = [arg, body.sub(var, new_term, unbound)]
        return self

    def clone(self):
        arg, body = self.nodes
        return Abstraction(arg.clone(), body.clone())

    def alpha_equals(self, other, mapping=None, other_mapping=None):
        if mapping is None:
            mapping = {}
        if other_mapping is None:
            other_mapping = {}

        if not isinstance(other, type(self)):
            return False

        arg, body = self.nodes
        other_arg, other_body = other.nodes

        mapping = {**mapping, arg.name: other_arg.name}
        other_mapping = {**other_mapping, other_arg.name: arg.name}

        return body.alpha_equals(other_body, mapping, other_mapping)

    def is_redex(self, expandable=None):
        return False

    def _unbound(self, declared):
        arg, body = self.nodes
        return body._unbound(declared | {arg.name})

    def _disambiguate(self, scope):
        arg, body = self.nodes

        name = PureGrammar.SUFFIX.sub("", arg.name)
        clashes = scope | body.free_names()
        if name in clashes:
            name = Variable.fresh(name, clashes | (body.names() - {arg.name})).name

        if name != arg.name:
            # outer names are in scope, so renaming to a name outside of it cannot capture anything
            body = body.sub(arg.name, Variable(name))
            arg = Variable(name)

        self.nodes = [arg, body._disambiguate(scope | {name})]
        return self


class Application(LambdaTerm):
    """Application of one λ-term to another."""

    def __init__(self, left, right):
        self.nodes = [left, right]

    @property
    def expr(self):
        left, right = self.nodes

        expr = f"({left.expr})" if isinstance(left, Abstraction) else left.expr
        if right.tokenizable:
            return f"{expr} ({right.expr})"
        return f"{expr} {right.expr}"

    @property
    def tokenizable(self):
        return True

    def sub(self, var, new_term, unbound=None):
        if unbound is None:
            unbound = new_term.unbound()
        self.nodes = [node.sub(var, new_term, unbound) for node in self.nodes]
        return self

    def clone(self):
        left, right = self.nodes
        return Application(left.clone(), right.clone())

    def alpha_equals(self, other, mapping=None, other_mapping=None):
        if mapping is None:
            mapping = {}
        if other_mapping is None:
            other_mapping = {}

        if not isinstance(other, type(self)):
            return False

        for node, other_node in zip(self.nodes, other.nodes):
            if not node.alpha_equals(other_node, mapping, other_mapping):
                return False
        return True

    def is_redex(self, expandable=None):
        """Applications whose left child is an Abstraction are β-redexes."""
        return isinstance(self.nodes[0], Abstraction)


class NormalOrderReducer:
    """Implements normal-order beta reduction of a syntax tree. Free names accepted by expandable are replaced by the
    tree that expand returns for them (δ-steps), lazily, when reduction reaches them.
    """
    MAX_STEPS = 10000
    MAX_DEPTH = 512

    def __init__(self, expr, expand=None, expandable=None, max_steps=None):
        self.original_expr = expr
        self.tree = LambdaTerm.generate_tree(expr)

        self.expand = expand  # name -> fresh LambdaTerm, called only for names that expandable accepts
        self.expandable = expandable if expand is not None else None
        self.max_steps = max_steps if max_steps is not None else NormalOrderReducer.MAX_STEPS

        self.steps = 0

    def step(self):
        """Performs a single reduction step. Returns the rule that was applied, or None if self.tree is in normal
        form.
        """
        redex, redex_path = self.tree.left_outer_redex(self.expandable)
        if redex_path is None:
            return None

        if isinstance(redex, Variable):
            self.set(redex_path, self.expand(redex.name))
            return "δ"

        abstraction, new_term = redex.nodes
        arg, body = abstraction.nodes
        self.set(redex_path, body.sub(arg.name, new_term))
        return "β"

    def beta_reduce(self, error_handler=None):
        """In-place normal-order beta reduction of self.tree. error_handler is the current session's error handler.
        Raises NoNormalForm if a term repeats itself and ReductionLimit if a limit is reached.
        """
        seen = {self.tree.signature()}

        verbose = error_handler is not None and error_handler.verbose

        rule = self.step()
        while rule is not None:
            self.steps += 1
            if verbose:
                error_handler.register_step(rule, self.tree.expr)

            signature = self.tree.signature()
            if signature in seen:
                # normal-order reduction is deterministic, so a repeated term repeats forever
                raise NoNormalForm("'{}' does not have a beta-normal form", self.original_expr)
            seen.add(signature)

            if self.steps >= self.max_steps:
                msg = "'{}' was not reduced after {} steps"
                raise ReductionLimit(msg, (self.original_expr, str(self.max_steps)))
            if self.tree.depth() > NormalOrderReducer.MAX_DEPTH:
                raise ReductionLimit("'{}' reached the maximum size limit", self.original_expr)

            rule = self.step()

        self.tree = self.tree.disambiguate()
        if verbose:
            error_handler.register_step("α", self.tree.expr)

    def set(self, idxs, node):
        """Sets self.tree with node at position specified by idxs. An empty list will replace self.tree with node."""
        try:
            self.tree.set(idxs, node)
        except ValueError:
            self.tree = node

    def __repr__(self):
        return repr(self.tree)

    def __str__(self):
        return self.tree.display()
