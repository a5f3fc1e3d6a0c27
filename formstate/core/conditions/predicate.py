"""
Predicate language for hidden/disabled conditions.

A predicate is a small boolean expression over row values, referenced by tag:

    "$country == 'US' and $age >= 18"
    "${first name} != nil"
    "!$accepted || $plan IN ['free', 'trial']"

Predicates are translated to a restricted Python expression, parsed with
``ast.parse`` and checked against a whitelist of node types. They are then
evaluated by walking the tree (no ``eval``), which keeps them pure and lets
comparisons stay total over partial data: a missing row reads as ``None`` and
ordering ``None`` (or otherwise incompatible values) evaluates to False.
"""

import ast
import functools
import logging
import operator
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple

from formstate.core.exceptions import PredicateEvaluationError, PredicateSyntaxError

logger = logging.getLogger(__name__)


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    | \$\{(?P<braced>[^}]+)\}
    | \$(?P<var>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<word>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<op>&&|\|\||==|!=|<>|<=|>=|=|<|>|!|\+|-|\*|/|%|\(|\)|\[|\]|,)
    """,
    re.VERBOSE,
)

# Case-insensitive keywords and the Python spelling they translate to
_KEYWORDS = {
    'and': 'and',
    'or': 'or',
    'not': 'not',
    'in': 'in',
    'is': 'is',
    'true': 'True',
    'yes': 'True',
    'false': 'False',
    'no': 'False',
    'nil': 'None',
    'null': 'None',
    'none': 'None',
}

_OPERATOR_ALIASES = {
    '&&': 'and',
    '||': 'or',
    '!': 'not',
    '=': '==',
    '<>': '!=',
}

_ALLOWED_NODES = (
    ast.Expression, ast.Load,
    ast.BoolOp, ast.And, ast.Or,
    ast.UnaryOp, ast.Not, ast.USub, ast.UAdd,
    ast.BinOp, ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod,
    ast.Compare, ast.Eq, ast.NotEq, ast.Lt, ast.LtE, ast.Gt, ast.GtE,
    ast.In, ast.NotIn, ast.Is, ast.IsNot,
    ast.Name, ast.Constant, ast.List, ast.Tuple,
)

_ORDERING = {
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

_ARITHMETIC = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
}


def _tag_placeholder(index: int) -> str:
    return f"_tag{index}"


def _translate(expression: str) -> Tuple[str, Dict[str, str]]:
    """Translate predicate syntax to Python source.

    Returns:
        (python_source, placeholder -> tag mapping)
    """
    pieces: List[str] = []
    placeholders: Dict[str, str] = {}  # tag -> placeholder
    position = 0

    while position < len(expression):
        match = _TOKEN_RE.match(expression, position)
        if match is None:
            raise PredicateSyntaxError(
                expression,
                f"unexpected character {expression[position]!r}",
                offset=position + 1,
            )
        position = match.end()
        kind = match.lastgroup

        if kind == 'ws':
            continue
        if kind in ('var', 'braced'):
            tag = match.group(kind).strip() if kind == 'braced' else match.group(kind)
            if tag not in placeholders:
                placeholders[tag] = _tag_placeholder(len(placeholders))
            pieces.append(placeholders[tag])
        elif kind == 'word':
            word = match.group(kind)
            keyword = _KEYWORDS.get(word.lower())
            if keyword is None:
                raise PredicateSyntaxError(
                    expression,
                    f"unknown identifier '{word}' (reference rows as ${word})",
                    offset=match.start() + 1,
                )
            pieces.append(keyword)
        elif kind == 'op':
            op = match.group(kind)
            pieces.append(_OPERATOR_ALIASES.get(op, op))
        else:
            pieces.append(match.group(kind))

    return " ".join(pieces), {name: tag for tag, name in placeholders.items()}


def _check_whitelist(expression: str, tree: ast.AST, placeholders: Mapping[str, str]) -> None:
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise PredicateSyntaxError(
                expression,
                f"unsupported construct '{type(node).__name__}'",
                offset=getattr(node, 'col_offset', 0),
            )
        if isinstance(node, ast.Name) and node.id not in placeholders:
            raise PredicateSyntaxError(expression, f"unknown name '{node.id}'")


@dataclass(frozen=True)
class PredicateProgram:
    """
    A compiled predicate.

    Attributes:
        expression: Predicate source as written
        source: Translated Python expression
        placeholders: Placeholder name -> row tag
        referenced_tags: Every tag the predicate reads
    """

    expression: str
    source: str
    placeholders: Mapping[str, str] = field(compare=False)
    referenced_tags: FrozenSet[str]
    tree: ast.Expression = field(compare=False, repr=False)

    def evaluate(self, values: Mapping[str, Any], strict: bool = False) -> bool:
        """Evaluate against a tag -> value snapshot (missing tags read as None)."""
        env = {name: values.get(tag) for name, tag in self.placeholders.items()}
        return bool(_Evaluator(self.expression, env, strict).visit(self.tree.body))


@functools.lru_cache(maxsize=256)
def compile_predicate(expression: str) -> PredicateProgram:
    """
    Compile a predicate expression.

    Args:
        expression: Predicate source

    Returns:
        PredicateProgram ready for evaluation

    Raises:
        PredicateSyntaxError: If the expression is empty, malformed or uses
            anything outside the predicate language
    """
    if not isinstance(expression, str) or not expression.strip():
        raise PredicateSyntaxError(str(expression), "empty predicate")

    source, placeholders = _translate(expression)
    try:
        tree = ast.parse(source, mode='eval')
    except SyntaxError as e:
        raise PredicateSyntaxError(expression, e.msg) from e

    _check_whitelist(expression, tree, placeholders)
    logger.debug(f"Compiled predicate {expression!r} -> {source!r}")

    return PredicateProgram(
        expression=expression,
        source=source,
        placeholders=placeholders,
        referenced_tags=frozenset(placeholders.values()),
        tree=tree,
    )


class _Evaluator:
    """Tree-walking evaluator for whitelisted predicate nodes."""

    def __init__(self, expression: str, env: Mapping[str, Any], strict: bool):
        self.expression = expression
        self.env = env
        self.strict = strict

    def _incompatible(self, message: str, default):
        if self.strict:
            raise PredicateEvaluationError(self.expression, message)
        return default

    def visit(self, node: ast.AST) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}")
        return method(node)

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> Any:
        return self.env.get(node.id)

    def visit_List(self, node: ast.List) -> Any:
        return [self.visit(elt) for elt in node.elts]

    def visit_Tuple(self, node: ast.Tuple) -> Any:
        return tuple(self.visit(elt) for elt in node.elts)

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        result = None
        for value_node in node.values:
            result = self.visit(value_node)
            if isinstance(node.op, ast.And) and not result:
                return result
            if isinstance(node.op, ast.Or) and result:
                return result
        return result

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        operand = self.visit(node.operand)
        if isinstance(node.op, ast.Not):
            return not operand
        if operand is None:
            return None
        try:
            return -operand if isinstance(node.op, ast.USub) else +operand
        except TypeError:
            return self._incompatible(f"cannot negate {operand!r}", None)

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        left = self.visit(node.left)
        right = self.visit(node.right)
        if left is None or right is None:
            return self._incompatible("arithmetic on a missing value", None)
        try:
            return _ARITHMETIC[type(node.op)](left, right)
        except (TypeError, ZeroDivisionError) as e:
            return self._incompatible(f"arithmetic failed: {e}", None)

    def visit_Compare(self, node: ast.Compare) -> bool:
        left = self.visit(node.left)
        for op, comparator in zip(node.ops, node.comparators):
            right = self.visit(comparator)
            if not self._compare(op, left, right):
                return False
            left = right
        return True

    def _compare(self, op: ast.cmpop, left: Any, right: Any) -> bool:
        if isinstance(op, ast.Eq):
            return left == right
        if isinstance(op, ast.NotEq):
            return left != right
        if isinstance(op, ast.Is):
            return left is right
        if isinstance(op, ast.IsNot):
            return left is not right
        if isinstance(op, (ast.In, ast.NotIn)):
            try:
                contained = left in right
            except TypeError:
                return self._incompatible(f"{right!r} is not a container", False)
            return contained if isinstance(op, ast.In) else not contained

        if left is None or right is None:
            return self._incompatible(f"cannot order {left!r} and {right!r}", False)
        try:
            return bool(_ORDERING[type(op)](left, right))
        except TypeError:
            return self._incompatible(f"cannot order {left!r} and {right!r}", False)
