"""Static analysis of the variables a template needs.

The analysis covers the template's closure: the template itself and every
template it reaches through ``include``, ``extends``, ``import`` and
``from ... import``. A variable is required when it is referenced somewhere
in the closure and its base identifier (the part before any ``.`` or ``[``)
is never assigned anywhere in the closure.

Known limitation: macro parameters are not treated as definitions, so names
referenced inside macro bodies can be reported even when they are
parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from jinja2 import nodes

from ..core.models import BUILTIN_VARIABLES_IDENT
from ..errors import IdNotFoundError
from .context import Context
from .templates import FileTemplate, Template

logger = logging.getLogger(__name__)

# Names defined implicitly inside a for loop body.
_LOOP_NAMES = ("loop",)


@dataclass
class TemplateSymbols:
    """Names found in one template."""

    references: set[str] = field(default_factory=set)
    definitions: set[str] = field(default_factory=set)
    calls: set[str] = field(default_factory=set)
    # (template id, whether a missing template is an error)
    dependencies: list[tuple[str, bool]] = field(default_factory=list)


class SymbolCollector:
    """Walk a parsed template, recording references, definitions and dependencies.

    Every node kind is handled explicitly. Kinds not listed here are treated
    as opaque and reported with a warning.
    """

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        self.symbols = TemplateSymbols()

    def collect(self, tree: nodes.Template) -> TemplateSymbols:
        self.visit_body(tree.body)
        return self.symbols

    def visit_body(self, body: list[nodes.Node]) -> None:
        for node in body:
            self.visit_stmt(node)

    def visit_stmt(self, node: nodes.Node) -> None:
        s = self.symbols

        if isinstance(node, nodes.Output):
            for child in node.nodes:
                self.visit_expr(child)
        elif isinstance(node, nodes.Assign):
            self.visit_expr(node.node)
            self.define(node.target)
        elif isinstance(node, nodes.AssignBlock):
            self.visit_body(node.body)
            if node.filter is not None:
                self.visit_expr(node.filter)
            self.define(node.target)
        elif isinstance(node, (nodes.Include, nodes.Extends)):
            required = not getattr(node, "ignore_missing", False)
            self.add_dependency(node.template, required)
        elif isinstance(node, nodes.Import):
            self.add_dependency(node.template, True)
            s.definitions.add(node.target)
        elif isinstance(node, nodes.FromImport):
            self.add_dependency(node.template, True)
            for name in node.names:
                s.definitions.add(name[1] if isinstance(name, tuple) else name)
        elif isinstance(node, nodes.If):
            self.visit_expr(node.test)
            self.visit_body(node.body)
            for branch in node.elif_:
                self.visit_stmt(branch)
            self.visit_body(node.else_)
        elif isinstance(node, nodes.For):
            self.visit_expr(node.iter)
            self.define(node.target)
            s.definitions.update(_LOOP_NAMES)
            if node.test is not None:
                self.visit_expr(node.test)
            self.visit_body(node.body)
            self.visit_body(node.else_)
        elif isinstance(node, nodes.Macro):
            for default in node.defaults:
                self.visit_expr(default)
            self.visit_body(node.body)
        elif isinstance(node, nodes.CallBlock):
            self.visit_expr(node.call)
            self.visit_body(node.body)
        elif isinstance(node, nodes.FilterBlock):
            self.visit_expr(node.filter)
            self.visit_body(node.body)
        elif isinstance(node, nodes.Block):
            self.visit_body(node.body)
        elif isinstance(node, nodes.With):
            for value in node.values:
                self.visit_expr(value)
            for target in node.targets:
                self.define(target)
            self.visit_body(node.body)
        elif isinstance(node, (nodes.Scope, nodes.ScopedEvalContextModifier)):
            self.visit_body(node.body)
        elif isinstance(node, nodes.ExprStmt):
            self.visit_expr(node.node)
        elif isinstance(node, (nodes.Continue, nodes.Break, nodes.EvalContextModifier)):
            pass
        else:
            logger.warning(
                f"Unhandled {type(node).__name__} node in {self.template_id!r}, "
                "variables inside it are not checked"
            )

    def visit_expr(self, node: nodes.Node | None) -> None:
        if node is None:
            return
        s = self.symbols

        if isinstance(node, nodes.Name):
            s.references.add(node.name)
        elif isinstance(node, (nodes.Getattr, nodes.Getitem)):
            # only the base of foo.bar / foo[0] is a variable
            self.visit_expr(node.node)
            if isinstance(node, nodes.Getitem):
                self.visit_expr(node.arg)
        elif isinstance(node, nodes.Call):
            if isinstance(node.node, nodes.Name):
                s.calls.add(node.node.name)
            else:
                self.visit_expr(node.node)
            self.visit_arguments(node)
        elif isinstance(node, (nodes.Filter, nodes.Test)):
            self.visit_expr(node.node)
            self.visit_arguments(node)
        elif isinstance(node, (nodes.List, nodes.Tuple)):
            for item in node.items:
                self.visit_expr(item)
        elif isinstance(node, nodes.Dict):
            for pair in node.items:
                self.visit_expr(pair)
        elif isinstance(node, nodes.Pair):
            self.visit_expr(node.key)
            self.visit_expr(node.value)
        elif isinstance(node, nodes.Keyword):
            self.visit_expr(node.value)
        elif isinstance(node, nodes.CondExpr):
            self.visit_expr(node.test)
            self.visit_expr(node.expr1)
            self.visit_expr(node.expr2)
        elif isinstance(node, nodes.Concat):
            for child in node.nodes:
                self.visit_expr(child)
        elif isinstance(node, nodes.Compare):
            self.visit_expr(node.expr)
            for operand in node.ops:
                self.visit_expr(operand.expr)
        elif isinstance(node, nodes.BinExpr):
            self.visit_expr(node.left)
            self.visit_expr(node.right)
        elif isinstance(node, nodes.UnaryExpr):
            self.visit_expr(node.node)
        elif isinstance(node, nodes.Slice):
            self.visit_expr(node.start)
            self.visit_expr(node.stop)
            self.visit_expr(node.step)
        elif isinstance(node, (nodes.MarkSafe, nodes.MarkSafeIfAutoescape)):
            self.visit_expr(node.expr)
        elif isinstance(node, nodes.NSRef):
            s.references.add(node.name)
        elif isinstance(
            node,
            (
                nodes.Literal,
                nodes.ContextReference,
                nodes.EnvironmentAttribute,
                nodes.ExtensionAttribute,
                nodes.ImportedName,
                nodes.InternalName,
            ),
        ):
            pass
        else:
            logger.warning(
                f"Unhandled {type(node).__name__} expression in "
                f"{self.template_id!r}, variables inside it are not checked"
            )

    def visit_arguments(self, node: nodes.Call | nodes.Filter | nodes.Test) -> None:
        for arg in node.args:
            self.visit_expr(arg)
        for kwarg in node.kwargs:
            self.visit_expr(kwarg)
        self.visit_expr(node.dyn_args)
        self.visit_expr(node.dyn_kwargs)

    def define(self, target: nodes.Node) -> None:
        """Record the names bound by an assignment target."""
        if isinstance(target, nodes.Name):
            self.symbols.definitions.add(target.name)
        elif isinstance(target, (nodes.Tuple, nodes.List)):
            for item in target.items:
                self.define(item)
        else:
            # e.g. `set ns.attr = ...`, which needs `ns` to exist already
            self.visit_expr(target)

    def add_dependency(self, template: nodes.Node, required: bool) -> None:
        if isinstance(template, nodes.Const) and isinstance(template.value, str):
            self.symbols.dependencies.append((template.value, required))
        elif isinstance(template, (nodes.List, nodes.Tuple)) and all(
            isinstance(i, nodes.Const) for i in template.items
        ):
            # the first template found is used, so none of them is mandatory
            for item in template.items:
                self.symbols.dependencies.append((str(item.value), False))
        else:
            logger.warning(
                f"Cannot resolve a dynamic template reference in "
                f"{self.template_id!r}, its variables are not checked"
            )
            self.visit_expr(template)


def collect_symbols(context: Context, template_id: str) -> TemplateSymbols:
    """Collect the symbols of a single registered template."""
    return SymbolCollector(template_id).collect(context.parsed(template_id))


def get_templates_recursive(
    context: Context, template_id: str
) -> list[tuple[str, TemplateSymbols]]:
    """Return the closure of *template_id*, dependencies first, depth-first.

    Each template appears once even if it is reached more than once.
    """
    closure: list[tuple[str, TemplateSymbols]] = []
    seen: set[str] = set()

    def visit(tid: str, required: bool) -> None:
        if tid in seen:
            return
        if tid not in context:
            if required:
                raise IdNotFoundError(repr(tid))
            return
        seen.add(tid)

        symbols = collect_symbols(context, tid)
        for dependency, dep_required in symbols.dependencies:
            visit(dependency, dep_required)
        closure.append((tid, symbols))

    # the starting template must exist
    context.parsed(template_id)
    visit(template_id, True)
    return closure


def get_missing_template_vars(context: Context, template_id: str) -> list[str]:
    """Return the variables *template_id* needs that its closure never sets.

    Built-in variables are never reported. The result is sorted and contains
    each identifier once.
    """
    references: set[str] = set()
    definitions: set[str] = set()
    for _, symbols in get_templates_recursive(context, template_id):
        references |= symbols.references
        definitions |= symbols.definitions

    definitions.add(BUILTIN_VARIABLES_IDENT)
    return sorted(references - definitions)


def get_called_names(context: Context, template_id: str) -> set[str]:
    """Return every name used as a call target in the closure of *template_id*."""
    calls: set[str] = set()
    for _, symbols in get_templates_recursive(context, template_id):
        calls |= symbols.calls
    return calls


def get_missing_vars(template: Template) -> list[str]:
    """Return the variables a file or project template needs.

    For a project template, this is the union over every member.
    """
    if isinstance(template, FileTemplate):
        return get_missing_template_vars(template.context, template.name)

    missing: set[str] = set()
    for template_id in template.file_template_names:
        missing.update(get_missing_template_vars(template.context, template_id))
    return sorted(missing)
