"""Message expression language — the ``${...}`` part of message templates.

A small, side-effect free language evaluated against the interpolation
parameters. Nothing here calls ``eval``: expressions are tokenized, parsed
into nested tuples and walked.

Grammar (lowest to highest precedence):
    ternary     := or ('?' ternary ':' ternary)?
    or          := and (('||' | 'or') and)*
    and         := not (('&&' | 'and') not)*
    not         := ('!' | 'not') not | comparison
    comparison  := additive (('==' | '!=' | '<' | '<=' | '>' | '>=' |
                              'eq' | 'ne' | 'lt' | 'le' | 'gt' | 'ge') additive)?
    additive    := term (('+' | '-') term)*
    term        := unary (('*' | '/' | '%') unary)*
    unary       := ('-' | 'empty') unary | postfix
    postfix     := primary ('.' NAME ('(' args ')')? | '[' ternary ']')*
    primary     := NUMBER | STRING | 'true' | 'false' | 'null' | NAME | '(' ternary ')'

Method calls are only allowed on objects that list the method in
``__expression_methods__``. Attribute access never reaches names starting
with an underscore.
"""

import re
from collections.abc import Mapping, Sized
from decimal import Decimal
from typing import Any

from formguard.exceptions import ExpressionError

_TOKEN = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<op>==|!=|<=|>=|&&|\|\||[-+*/%<>!?:.()\[\],])
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)

_WORD_OPERATORS = {
    "and": "&&", "or": "||", "not": "!",
    "eq": "==", "ne": "!=", "lt": "<", "le": "<=", "gt": ">", "ge": ">=",
    "empty": "empty",
}
_CONSTANTS = {"true": True, "false": False, "null": None}
_COMPARISONS = {"==", "!=", "<", "<=", ">", ">="}


def tokenize(source: str) -> list[tuple[str, Any]]:
    tokens = []
    position = 0
    while position < len(source):
        match = _TOKEN.match(source, position)
        if match is None:
            raise ExpressionError(f"Unexpected character {source[position]!r} in expression '{source}'")
        position = match.end()
        kind = match.lastgroup
        text = match.group(kind)
        if kind == "ws":
            continue
        if kind == "number":
            value = Decimal(text) if ("." in text or "e" in text.lower()) else int(text)
            tokens.append(("literal", value))
        elif kind == "string":
            tokens.append(("literal", re.sub(r"\\(.)", r"\1", text[1:-1])))
        elif kind == "name" and text in _WORD_OPERATORS:
            tokens.append(("op", _WORD_OPERATORS[text]))
        elif kind == "name" and text in _CONSTANTS:
            tokens.append(("literal", _CONSTANTS[text]))
        else:
            tokens.append((kind, text))
    tokens.append(("end", None))
    return tokens


class _Parser:
    """Recursive descent parser producing ('node', ...) tuples."""

    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.index = 0

    # ── Token helpers ──

    def _peek(self) -> tuple[str, Any]:
        return self.tokens[self.index]

    def _accept(self, *ops: str):
        kind, value = self._peek()
        if kind == "op" and value in ops:
            self.index += 1
            return value
        return None

    def _expect(self, op: str) -> None:
        if self._accept(op) is None:
            raise ExpressionError(f"Expected '{op}' in expression '{self.source}'")

    # ── Grammar ──

    def parse(self):
        node = self._ternary()
        if self._peek()[0] != "end":
            raise ExpressionError(f"Unexpected token {self._peek()[1]!r} in expression '{self.source}'")
        return node

    def _ternary(self):
        condition = self._or()
        if self._accept("?"):
            when_true = self._ternary()
            self._expect(":")
            when_false = self._ternary()
            return ("ternary", condition, when_true, when_false)
        return condition

    def _or(self):
        node = self._and()
        while self._accept("||"):
            node = ("or", node, self._and())
        return node

    def _and(self):
        node = self._not()
        while self._accept("&&"):
            node = ("and", node, self._not())
        return node

    def _not(self):
        if self._accept("!"):
            return ("not", self._not())
        return self._comparison()

    def _comparison(self):
        node = self._additive()
        op = self._accept(*_COMPARISONS)
        if op:
            node = ("compare", op, node, self._additive())
        return node

    def _additive(self):
        node = self._term()
        while True:
            op = self._accept("+", "-")
            if not op:
                return node
            node = ("binary", op, node, self._term())

    def _term(self):
        node = self._unary()
        while True:
            op = self._accept("*", "/", "%")
            if not op:
                return node
            node = ("binary", op, node, self._unary())

    def _unary(self):
        if self._accept("-"):
            return ("negate", self._unary())
        if self._accept("empty"):
            return ("empty", self._unary())
        return self._postfix()

    def _postfix(self):
        node = self._primary()
        while True:
            if self._accept("."):
                kind, name = self._peek()
                if kind != "name":
                    raise ExpressionError(f"Expected a name after '.' in expression '{self.source}'")
                self.index += 1
                if self._accept("("):
                    node = ("call", node, name, self._arguments())
                else:
                    node = ("attribute", node, name)
            elif self._accept("["):
                key = self._ternary()
                self._expect("]")
                node = ("index", node, key)
            else:
                return node

    def _arguments(self) -> tuple:
        args = []
        if self._accept(")"):
            return ()
        while True:
            args.append(self._ternary())
            if self._accept(")"):
                return tuple(args)
            self._expect(",")

    def _primary(self):
        kind, value = self._peek()
        if kind == "literal":
            self.index += 1
            return ("literal", value)
        if kind == "name":
            self.index += 1
            return ("name", value)
        if self._accept("("):
            node = self._ternary()
            self._expect(")")
            return node
        raise ExpressionError(f"Unexpected token {value!r} in expression '{self.source}'")


def parse(source: str):
    """Parse an expression into a tree. Raises ExpressionError."""
    return _Parser(source).parse()


# ── Evaluation ──


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _number(value: Any):
    if isinstance(value, bool) or value is None:
        raise ExpressionError(f"Expected a number, got {value!r}")
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, (int, Decimal)):
        return value
    if isinstance(value, str):
        try:
            return Decimal(value)
        except ArithmeticError:
            pass
    raise ExpressionError(f"Expected a number, got {value!r}")


def _comparable(left: Any, right: Any) -> tuple:
    """Numbers compare numerically, also against numeric strings."""
    numeric = (int, float, Decimal)
    if any(isinstance(v, numeric) and not isinstance(v, bool) for v in (left, right)):
        try:
            return _number(left), _number(right)
        except ExpressionError:
            pass
    return left, right


def _compare(op: str, left: Any, right: Any) -> bool:
    left, right = _comparable(left, right)
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    if left is None or right is None:
        raise ExpressionError(f"Cannot order null values with '{op}'")
    try:
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right
    except TypeError:
        raise ExpressionError(f"Cannot compare {left!r} {op} {right!r}") from None


def _arithmetic(op: str, left: Any, right: Any) -> Any:
    if op == "+" and (isinstance(left, str) or isinstance(right, str)):
        return render_value(left) + render_value(right)
    left, right = _number(left), _number(right)
    if isinstance(left, Decimal) or isinstance(right, Decimal):
        left, right = Decimal(left), Decimal(right)
    try:
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if isinstance(left, int) and isinstance(right, int) and left % right == 0:
                return left // right
            return Decimal(left) / Decimal(right)
        return left % right
    except ArithmeticError as e:
        raise ExpressionError(f"Arithmetic error in {left!r} {op} {right!r}: {e}") from None


def _attribute(target: Any, name: str) -> Any:
    if name.startswith("_"):
        raise ExpressionError(f"Access to '{name}' is not allowed")
    if isinstance(target, Mapping):
        return target.get(name)
    if target is None:
        raise ExpressionError(f"Cannot read '{name}' of null")
    try:
        return getattr(target, name)
    except AttributeError:
        raise ExpressionError(f"{type(target).__name__} has no attribute '{name}'") from None


def _index(target: Any, key: Any) -> Any:
    if target is None:
        raise ExpressionError("Cannot index null")
    try:
        return target[key]
    except (KeyError, IndexError, TypeError) as e:
        raise ExpressionError(f"Cannot index {type(target).__name__} with {key!r}: {e}") from None


def _call(target: Any, name: str, args: list) -> Any:
    allowed = getattr(type(target), "__expression_methods__", frozenset())
    if name not in allowed:
        raise ExpressionError(f"Method '{name}' is not callable from messages")
    try:
        return getattr(target, name)(*args)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise ExpressionError(f"Bad arguments for '{name}': {e}") from None


def evaluate(node, params: Mapping[str, Any]) -> Any:
    """Evaluate a parsed tree against the given parameters."""
    tag = node[0]

    if tag == "literal":
        return node[1]
    if tag == "name":
        if node[1] not in params:
            raise ExpressionError(f"Unknown name '{node[1]}'")
        return params[node[1]]
    if tag == "ternary":
        branch = node[2] if _truthy(evaluate(node[1], params)) else node[3]
        return evaluate(branch, params)
    if tag == "or":
        return _truthy(evaluate(node[1], params)) or _truthy(evaluate(node[2], params))
    if tag == "and":
        return _truthy(evaluate(node[1], params)) and _truthy(evaluate(node[2], params))
    if tag == "not":
        return not _truthy(evaluate(node[1], params))
    if tag == "empty":
        return _is_empty(evaluate(node[1], params))
    if tag == "negate":
        return -_number(evaluate(node[1], params))
    if tag == "compare":
        return _compare(node[1], evaluate(node[2], params), evaluate(node[3], params))
    if tag == "binary":
        return _arithmetic(node[1], evaluate(node[2], params), evaluate(node[3], params))
    if tag == "attribute":
        return _attribute(evaluate(node[1], params), node[2])
    if tag == "index":
        return _index(evaluate(node[1], params), evaluate(node[2], params))
    if tag == "call":
        target = evaluate(node[1], params)
        return _call(target, node[2], [evaluate(arg, params) for arg in node[3]])

    raise ExpressionError(f"Unknown expression node '{tag}'")


def render_value(value: Any) -> str:
    """Text form of a value inside messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
