"""Occurrence counting over a single function's syntax tree.

The walker visits every statement, expression and pattern reachable from a
function definition and feeds two counters:

* ``names``: identifier occurrences that resolve to a binding made inside the
  function (parameters, assignment targets, imports, nested definitions, ...)
* ``literals``: basic literal tokens keyed by their exact source text

Names are counted per function, not per block: two variables with the same
name in unrelated nested blocks share one counter.

Every node kind of the ``ast`` module is either handled by an explicit
``visit_<Kind>`` method or listed in ``LEAF_NODE_KINDS``.
``unhandled_node_kinds()`` reports the kinds that are neither, so a new
Python release adding a node kind shows up as a failing test instead of a
silent undercount.
"""

from __future__ import annotations

import ast
import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "LEAF_NODE_KINDS",
    "Occurrences",
    "OccurrenceWalker",
    "resolve_bindings",
    "unhandled_node_kinds",
]

logger = logging.getLogger("varcleaner.walker")

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef

# Node kinds with nothing worth counting below them.
# Global/Nonlocal name externally declared symbols, MatchSingleton holds
# True/False/None only.
LEAF_NODE_KINDS = frozenset(
    {
        "Pass",
        "Break",
        "Continue",
        "Global",
        "Nonlocal",
        "MatchSingleton",
    }
)

# Constant values that are keywords rather than literal tokens
_KEYWORD_CONSTANTS = (bool, type(None), type(Ellipsis))


@dataclass
class Occurrences:
    """Name and literal occurrence counts of one function.

    Both counters keep first-occurrence order, so iterating over them is
    deterministic for a given tree.
    """

    names: Counter[str] = field(default_factory=Counter)
    literals: Counter[str] = field(default_factory=Counter)


_SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)


def resolve_bindings(function: FunctionNode) -> frozenset[str]:
    """Collect the names bound inside ``function``.

    A ``global`` or ``nonlocal`` statement only removes a name from the scope
    it appears in. Bindings of nested functions, lambdas and classes are
    included after their own declarations are applied.

    Args:
        function: Function definition node

    Returns:
        Names bound by parameters, assignments, imports, nested definitions,
        exception handlers, match captures and type parameters, without the
        names the declaring scope marks ``global`` or ``nonlocal``
    """
    return frozenset(_scope_bindings(function))


def _scope_bindings(scope: ast.AST) -> set[str]:
    bound: set[str] = set()
    external: set[str] = set()
    nested: set[str] = set()

    stack = list(ast.iter_child_nodes(scope))
    while stack:
        node = stack.pop()
        if isinstance(node, _SCOPE_NODES):
            if not isinstance(node, ast.Lambda):
                bound.add(node.name)
            nested |= _scope_bindings(node)
            continue
        if isinstance(node, ast.arg):
            bound.add(node.arg)
        elif isinstance(node, ast.Name):
            if isinstance(node.ctx, ast.Store | ast.Del):
                bound.add(node.id)
        elif isinstance(node, ast.ExceptHandler):
            if node.name:
                bound.add(node.name)
        elif isinstance(node, ast.alias):
            name = _alias_binding(node)
            if name is not None:
                bound.add(name)
        elif isinstance(node, ast.MatchAs | ast.MatchStar):
            if node.name:
                bound.add(node.name)
        elif isinstance(node, ast.MatchMapping):
            if node.rest:
                bound.add(node.rest)
        elif isinstance(node, ast.Global | ast.Nonlocal):
            external.update(node.names)
        elif _is_type_param(node):
            bound.add(node.name)
        stack.extend(ast.iter_child_nodes(node))

    return (bound - external) | nested


def _declared_globals(scope: ast.AST) -> set[str]:
    """Return the names ``scope`` itself declares ``global``."""
    names: set[str] = set()
    stack = list(ast.iter_child_nodes(scope))
    while stack:
        node = stack.pop()
        if isinstance(node, ast.Global):
            names.update(node.names)
        elif not isinstance(node, _SCOPE_NODES):
            stack.extend(ast.iter_child_nodes(node))
    return names


def _alias_binding(node: ast.alias) -> str | None:
    """Return the local name an import alias binds (None for ``*``)."""
    if node.name == "*":
        return None
    if node.asname:
        return node.asname
    return node.name.split(".")[0]


def _is_type_param(node: ast.AST) -> bool:
    # ast.type_param only exists on Python 3.12+
    type_param = getattr(ast, "type_param", None)
    return type_param is not None and isinstance(node, type_param)


def unhandled_node_kinds() -> list[str]:
    """Return node kinds that have neither a visit method nor a leaf entry.

    Returns:
        Sorted kind names; empty when the dispatch covers the running
        interpreter's ``ast`` module completely
    """
    families: list[type[ast.AST]] = [
        ast.stmt,
        ast.expr,
        ast.pattern,
        ast.excepthandler,
    ]
    type_param = getattr(ast, "type_param", None)
    if type_param is not None:
        families.append(type_param)

    missing = set()
    for family in families:
        for kind in family.__subclasses__():
            name = kind.__name__
            if name in LEAF_NODE_KINDS:
                continue
            if not hasattr(OccurrenceWalker, f"visit_{name}"):
                missing.add(name)
    return sorted(missing)


class OccurrenceWalker(ast.NodeVisitor):
    """Depth-first, pre-order counter of identifier and literal occurrences.

    Children are visited left to right in source order. A node kind without a
    ``visit_<Kind>`` method is treated as a leaf.
    """

    def __init__(self, bindings: Iterable[str], source: str | None = None) -> None:
        """Initialize the walker.

        Args:
            bindings: Names that count as resolved local bindings
            source: Source code the tree was parsed from, used for literal text
        """
        self.bindings = frozenset(bindings)
        self.source = source
        # Names a nested scope declares global refer to module symbols there
        self.hidden: frozenset[str] = frozenset()
        self.occurrences = Occurrences()

    @classmethod
    def count(cls, function: FunctionNode, source: str | None = None) -> Occurrences:
        """Resolve bindings of ``function`` and count its occurrences.

        Args:
            function: Function definition node
            source: Source code the tree was parsed from

        Returns:
            Populated occurrence counters
        """
        walker = cls(resolve_bindings(function), source)
        walker.walk_function(function)
        return walker.occurrences

    def walk_function(self, node: FunctionNode) -> None:
        """Walk a function entered at declaration level.

        The function's own name and decorators belong to the enclosing scope
        and are skipped; signature annotations, defaults and the body are
        walked.
        """
        self._visit_function_parts(node)

    # -- counting -----------------------------------------------------------

    def _count_name(self, name: str | None) -> None:
        if name is not None and name in self.bindings and name not in self.hidden:
            self.occurrences.names[name] += 1

    def _count_literal(self, node: ast.Constant) -> None:
        self.occurrences.literals[self._literal_text(node)] += 1

    def _literal_text(self, node: ast.Constant) -> str:
        """Return the exact source spelling of a literal."""
        if self.source is not None:
            try:
                segment = ast.get_source_segment(self.source, node)
            except (ValueError, TypeError):  # pragma: no cover
                segment = None
            if segment:
                return segment
        return repr(node.value)

    # -- traversal helpers --------------------------------------------------

    def generic_visit(self, node: ast.AST) -> None:
        """Leaf handling for kinds without a visit method."""
        kind = type(node).__name__
        if kind not in LEAF_NODE_KINDS:
            logger.debug("No dispatch entry for node kind %s, not descending", kind)

    def _visit_all(self, nodes: Iterable[ast.AST | None]) -> None:
        for node in nodes:
            if node is not None:
                self.visit(node)

    def _visit_optional(self, node: ast.AST | None) -> None:
        if node is not None:
            self.visit(node)

    def _visit_type_params(self, node: ast.AST) -> None:
        # type_params exists on Python 3.12+
        self._visit_all(getattr(node, "type_params", ()))

    def _visit_function_parts(self, node: FunctionNode) -> None:
        self._visit_type_params(node)
        self.visit(node.args)
        self._visit_optional(node.returns)
        self._visit_all(node.body)

    def _visit_nested_scope(self, node: ast.AST, visit: Callable[[], None]) -> None:
        enclosing = self.hidden
        self.hidden = enclosing | _declared_globals(node)
        try:
            visit()
        finally:
            self.hidden = enclosing

    def _visit_string_parts(self, values: Iterable[ast.expr]) -> None:
        # Fixed fragments of f-strings and t-strings are not literal tokens
        for value in values:
            if not isinstance(value, ast.Constant):
                self.visit(value)

    # -- statements ---------------------------------------------------------

    def visit_FunctionDef(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        """Nested function: its name is a local binding of the outer one."""
        self._visit_all(node.decorator_list)
        self._count_name(node.name)
        self._visit_nested_scope(node, lambda: self._visit_function_parts(node))

    visit_AsyncFunctionDef = visit_FunctionDef  # noqa: N815

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self._visit_all(node.decorator_list)
        self._count_name(node.name)
        self._visit_type_params(node)
        self._visit_all(node.bases)
        self._visit_all(node.keywords)
        self._visit_nested_scope(node, lambda: self._visit_all(node.body))

    def visit_Return(self, node: ast.Return) -> None:
        self._visit_optional(node.value)

    def visit_Delete(self, node: ast.Delete) -> None:
        self._visit_all(node.targets)

    def visit_Assign(self, node: ast.Assign) -> None:
        self._visit_all(node.targets)
        self.visit(node.value)

    def visit_TypeAlias(self, node: Any) -> None:
        self.visit(node.name)
        self._visit_type_params(node)
        self.visit(node.value)

    def visit_AugAssign(self, node: ast.AugAssign) -> None:
        self.visit(node.target)
        self.visit(node.value)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        self.visit(node.target)
        self.visit(node.annotation)
        self._visit_optional(node.value)

    def visit_For(self, node: ast.For | ast.AsyncFor) -> None:
        self.visit(node.target)
        self.visit(node.iter)
        self._visit_all(node.body)
        self._visit_all(node.orelse)

    visit_AsyncFor = visit_For  # noqa: N815

    def visit_While(self, node: ast.While) -> None:
        self.visit(node.test)
        self._visit_all(node.body)
        self._visit_all(node.orelse)

    def visit_If(self, node: ast.If) -> None:
        self.visit(node.test)
        self._visit_all(node.body)
        self._visit_all(node.orelse)

    def visit_With(self, node: ast.With | ast.AsyncWith) -> None:
        self._visit_all(node.items)
        self._visit_all(node.body)

    visit_AsyncWith = visit_With  # noqa: N815

    def visit_withitem(self, node: ast.withitem) -> None:
        self.visit(node.context_expr)
        self._visit_optional(node.optional_vars)

    def visit_Match(self, node: ast.Match) -> None:
        self.visit(node.subject)
        self._visit_all(node.cases)

    def visit_match_case(self, node: ast.match_case) -> None:
        self.visit(node.pattern)
        self._visit_optional(node.guard)
        self._visit_all(node.body)

    def visit_Raise(self, node: ast.Raise) -> None:
        self._visit_optional(node.exc)
        self._visit_optional(node.cause)

    def visit_Try(self, node: ast.Try | ast.TryStar) -> None:
        self._visit_all(node.body)
        self._visit_all(node.handlers)
        self._visit_all(node.orelse)
        self._visit_all(node.finalbody)

    visit_TryStar = visit_Try  # noqa: N815

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        self._visit_optional(node.type)
        self._count_name(node.name)
        self._visit_all(node.body)

    def visit_Assert(self, node: ast.Assert) -> None:
        self.visit(node.test)
        self._visit_optional(node.msg)

    def visit_Import(self, node: ast.Import | ast.ImportFrom) -> None:
        self._visit_all(node.names)

    visit_ImportFrom = visit_Import  # noqa: N815

    def visit_alias(self, node: ast.alias) -> None:
        self._count_name(_alias_binding(node))

    def visit_Expr(self, node: ast.Expr) -> None:
        self.visit(node.value)

    # -- expressions --------------------------------------------------------

    def visit_BoolOp(self, node: ast.BoolOp) -> None:
        self._visit_all(node.values)

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        self.visit(node.target)
        self.visit(node.value)

    def visit_BinOp(self, node: ast.BinOp) -> None:
        self.visit(node.left)
        self.visit(node.right)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> None:
        self.visit(node.operand)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self.visit(node.args)
        self.visit(node.body)

    def visit_IfExp(self, node: ast.IfExp) -> None:
        self.visit(node.body)
        self.visit(node.test)
        self.visit(node.orelse)

    def visit_Dict(self, node: ast.Dict) -> None:
        # A None key marks a ``**mapping`` entry
        for key, value in zip(node.keys, node.values, strict=True):
            self._visit_optional(key)
            self.visit(value)

    def visit_Set(self, node: ast.Set) -> None:
        self._visit_all(node.elts)

    def visit_ListComp(self, node: ast.ListComp | ast.SetComp | ast.GeneratorExp) -> None:
        self.visit(node.elt)
        self._visit_all(node.generators)

    visit_SetComp = visit_ListComp  # noqa: N815
    visit_GeneratorExp = visit_ListComp  # noqa: N815

    def visit_DictComp(self, node: ast.DictComp) -> None:
        self.visit(node.key)
        self.visit(node.value)
        self._visit_all(node.generators)

    def visit_comprehension(self, node: ast.comprehension) -> None:
        self.visit(node.target)
        self.visit(node.iter)
        self._visit_all(node.ifs)

    def visit_Await(self, node: ast.Await) -> None:
        self.visit(node.value)

    def visit_Yield(self, node: ast.Yield) -> None:
        self._visit_optional(node.value)

    def visit_YieldFrom(self, node: ast.YieldFrom) -> None:
        self.visit(node.value)

    def visit_Compare(self, node: ast.Compare) -> None:
        self.visit(node.left)
        self._visit_all(node.comparators)

    def visit_Call(self, node: ast.Call) -> None:
        self.visit(node.func)
        self._visit_all(node.args)
        self._visit_all(node.keywords)

    def visit_keyword(self, node: ast.keyword) -> None:
        # keyword.arg is a parameter name of the callee, never a local binding
        self.visit(node.value)

    def visit_FormattedValue(self, node: ast.FormattedValue) -> None:
        self.visit(node.value)
        self._visit_optional(node.format_spec)

    def visit_Interpolation(self, node: Any) -> None:
        self.visit(node.value)
        self._visit_optional(node.format_spec)

    def visit_JoinedStr(self, node: ast.JoinedStr) -> None:
        self._visit_string_parts(node.values)

    def visit_TemplateStr(self, node: Any) -> None:
        self._visit_string_parts(node.values)

    def visit_Constant(self, node: ast.Constant) -> None:
        if isinstance(node.value, _KEYWORD_CONSTANTS):
            return
        self._count_literal(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        # node.attr is a field name, only the object expression can resolve
        self.visit(node.value)

    def visit_Subscript(self, node: ast.Subscript) -> None:
        self.visit(node.value)
        self.visit(node.slice)

    def visit_Starred(self, node: ast.Starred) -> None:
        self.visit(node.value)

    def visit_Name(self, node: ast.Name) -> None:
        self._count_name(node.id)

    def visit_List(self, node: ast.List | ast.Tuple) -> None:
        self._visit_all(node.elts)

    visit_Tuple = visit_List  # noqa: N815

    def visit_Slice(self, node: ast.Slice) -> None:
        self._visit_optional(node.lower)
        self._visit_optional(node.upper)
        self._visit_optional(node.step)

    # -- signatures ---------------------------------------------------------

    def visit_arguments(self, node: ast.arguments) -> None:
        """Walk parameters in source order with their defaults.

        Parameter names are declarations and are not counted; only their
        annotations and default values are walked.
        """
        positional = [*node.posonlyargs, *node.args]
        first_default = len(positional) - len(node.defaults)
        for index, arg in enumerate(positional):
            self.visit(arg)
            if index >= first_default:
                self.visit(node.defaults[index - first_default])
        self._visit_optional(node.vararg)
        for arg, default in zip(node.kwonlyargs, node.kw_defaults, strict=True):
            self.visit(arg)
            self._visit_optional(default)
        self._visit_optional(node.kwarg)

    def visit_arg(self, node: ast.arg) -> None:
        self._visit_optional(node.annotation)

    def visit_TypeVar(self, node: Any) -> None:
        self._count_name(node.name)
        self._visit_optional(node.bound)
        self._visit_optional(getattr(node, "default_value", None))

    def visit_ParamSpec(self, node: Any) -> None:
        self._count_name(node.name)
        self._visit_optional(getattr(node, "default_value", None))

    visit_TypeVarTuple = visit_ParamSpec  # noqa: N815

    # -- match patterns -----------------------------------------------------

    def visit_MatchValue(self, node: ast.MatchValue) -> None:
        self.visit(node.value)

    def visit_MatchSequence(self, node: ast.MatchSequence) -> None:
        self._visit_all(node.patterns)

    def visit_MatchMapping(self, node: ast.MatchMapping) -> None:
        for key, pattern in zip(node.keys, node.patterns, strict=True):
            self.visit(key)
            self.visit(pattern)
        self._count_name(node.rest)

    def visit_MatchClass(self, node: ast.MatchClass) -> None:
        # kwd_attrs are attribute names of the matched class
        self.visit(node.cls)
        self._visit_all(node.patterns)
        self._visit_all(node.kwd_patterns)

    def visit_MatchStar(self, node: ast.MatchStar) -> None:
        self._count_name(node.name)

    def visit_MatchAs(self, node: ast.MatchAs) -> None:
        self._visit_optional(node.pattern)
        self._count_name(node.name)

    def visit_MatchOr(self, node: ast.MatchOr) -> None:
        self._visit_all(node.patterns)
