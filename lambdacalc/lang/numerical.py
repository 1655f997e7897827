"""Natural numbers encoded as Church numerals. Note that operations are not implemented here (see the bootstrap
keywords in lang/keywords.py) and that numerals are built out of pure lambda calculus terms, thus keeping everything
pure as possible.

Source: https://en.wikipedia.org/wiki/Church_encoding#Calculation_with_Church_numerals
"""

from lambdacalc.lang.error import GenericException, NumeralLimit
from lambdacalc.pure.lexical import Abstraction, Application, Variable

MAX_NUMBER = 255


def cnumber(num):
    """Returns num as a lambda calculus tree (cnum = Church numeral). num may be an int or a string of digits."""
    try:
        assert not isinstance(num, (float, bool))
        num = int(num)
        assert num >= 0
    except (AssertionError, ValueError):
        raise GenericException("expected natural number, got '{}'", str(num), internal=True)

    if num > MAX_NUMBER:
        raise NumeralLimit("{} is greater than maximum integer limit ({})", (str(num), str(MAX_NUMBER)),
                           diagnosis=False)

    body = Variable("x")
    for __ in range(num):
        body = Application(Variable("f"), body)

    return Abstraction(Variable("f"), Abstraction(Variable("x"), body))


def number(cnum):
    """Returns str(number) given LambdaTerm cnum. If cnum isn't a Church numeral, returns None."""
    try:
        assert isinstance(cnum, Abstraction)
        first_arg, first_body = cnum.nodes

        assert isinstance(first_body, Abstraction)
        second_arg, nth_body = first_body.nodes

        assert first_arg.name != second_arg.name
    except AssertionError:
        return None

    num = 0
    while isinstance(nth_body, Application):
        var, nth_body = nth_body.nodes
        if not isinstance(var, Variable) or var.free or var.name != first_arg.name:
            return None

        num += 1

    if isinstance(nth_body, Variable) and not nth_body.free and nth_body.name == second_arg.name:
        return str(num)
    return None


def numberify(tree):
    """Returns tree with every Church numeral replaced by its decimal number."""
    num = number(tree)
    if num is not None:
        return Variable(num, free=True)

    tree.nodes = [numberify(node) for node in tree.nodes]
    return tree
