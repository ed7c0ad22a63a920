"""Translate Python modules into the artifact model.

Only module-level functions and class methods become ``FunctionArtifact``s;
nested definitions are skipped. Loop, ``with`` and ``try`` bodies are
flattened into blocks that execute once, together with their ``else``
clauses; exception handlers are not walked. Calls resolve within the module:
plain names to module-level functions, ``self.``/``cls.`` attributes to
methods of the enclosing class. Arguments of a resolved call are bound to the
callee's parameters the way the interpreter binds them.

A parameter the function body assigns is treated as a local everywhere in
that body. A local assigned a constant in the straight-line part of the body
reads as that constant until it is bound again.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from sightline.artifact.model import (
    ArtifactElement,
    ArtifactLiteralValue,
    BinaryExpressionArtifact,
    BlockArtifact,
    CallArtifact,
    CallResolver,
    FunctionArtifact,
    IfArtifact,
    ReferenceArtifact,
    ReturnArtifact,
)
from sightline.ingest.adapter_contract import LanguageAdapter, ParsedModule

_COMPARE_OPERATORS: dict[type[ast.cmpop], str] = {
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.LtE: "<=",
    ast.Gt: ">",
    ast.GtE: ">=",
    ast.Is: "is",
    ast.IsNot: "is not",
    ast.In: "in",
    ast.NotIn: "not in",
}

_BINARY_OPERATORS: dict[type[ast.operator], str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.FloorDiv: "//",
    ast.Mod: "%",
}

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef

_SIMPLE_STATEMENTS = (ast.Expr, ast.Assign, ast.AugAssign, ast.AnnAssign, ast.Return)


def _callee_name(call: ast.Call) -> str:
    try:
        return ast.unparse(call.func)
    except (ValueError, TypeError, AttributeError):
        return "<call>"


def _param_names(fn: FunctionNode, class_name: str | None) -> tuple[list[str], list[str]]:
    """Positional and keyword-only parameter names; ``self``/``cls`` dropped on methods."""
    positional = [a.arg for a in fn.args.posonlyargs + fn.args.args]
    if class_name is not None and positional and positional[0] in {"self", "cls"}:
        positional = positional[1:]
    return positional, [a.arg for a in fn.args.kwonlyargs]


def _param_defaults(fn: FunctionNode) -> dict[str, ast.expr]:
    positional = fn.args.posonlyargs + fn.args.args
    defaults: dict[str, ast.expr] = {}
    offset = len(positional) - len(fn.args.defaults)
    for index, default in enumerate(fn.args.defaults):
        defaults[positional[offset + index].arg] = default
    for arg, default in zip(fn.args.kwonlyargs, fn.args.kw_defaults):
        if default is not None:
            defaults[arg.arg] = default
    return defaults


def _bound_names(nodes: Iterable[ast.AST]) -> frozenset[str]:
    """Names the statements bind, excluding nested scopes."""
    names: set[str] = set()
    pending: list[ast.AST] = list(nodes)
    while pending:
        node = pending.pop()
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
            continue
        if isinstance(node, (ast.Lambda, ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp)):
            continue
        if isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
            names.add(node.id)
        elif isinstance(node, (ast.ExceptHandler, ast.MatchAs, ast.MatchStar)) and node.name:
            names.add(node.name)
        elif isinstance(node, ast.MatchMapping) and node.rest:
            names.add(node.rest)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            names.update((alias.asname or alias.name).split(".")[0] for alias in node.names)
        pending.extend(ast.iter_child_nodes(node))
    return frozenset(names)


def _constant_assignment(node: ast.stmt) -> tuple[str, object] | None:
    if isinstance(node, ast.Assign) and len(node.targets) == 1:
        target = node.targets[0]
    elif isinstance(node, ast.AnnAssign) and node.value is not None:
        target = node.target
    else:
        return None
    if isinstance(target, ast.Name) and isinstance(node.value, ast.Constant):
        return target.id, node.value.value
    return None


def _placeholder(name: str) -> ReferenceArtifact:
    return ReferenceArtifact(f"<{name}>")


@dataclass(frozen=True)
class _Signature:
    key: str
    node: FunctionNode
    class_name: str | None
    positional: tuple[str, ...]
    vararg: str | None
    kwonly: tuple[str, ...]
    kwarg: str | None
    defaults: dict[str, ast.expr]

    @property
    def params(self) -> tuple[str, ...]:
        """Every parameter in binding order: positional, ``*args``, keyword-only, ``**kwargs``."""
        return (
            *self.positional,
            *((self.vararg,) if self.vararg is not None else ()),
            *self.kwonly,
            *((self.kwarg,) if self.kwarg is not None else ()),
        )


@dataclass(frozen=True)
class _Scope:
    class_name: str | None
    params: tuple[str, ...]
    rebound: frozenset[str] = frozenset()
    constants: dict[str, object] = field(default_factory=dict)

    def parameter_index(self, name: str) -> int | None:
        # A name the body assigns no longer holds the argument.
        if name in self.rebound:
            return None
        try:
            return self.params.index(name)
        except ValueError:
            return None


_NO_SCOPE = _Scope(class_name=None, params=())


class _ModuleTranslator:
    def __init__(self, module_name: str) -> None:
        self.module_name = module_name
        self.signatures: dict[str, _Signature] = {}
        self.functions: dict[str, FunctionArtifact] = {}

    def collect(self, tree: ast.Module) -> None:
        for statement in tree.body:
            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._add_signature(statement.name, statement, None)
            elif isinstance(statement, ast.ClassDef):
                for item in statement.body:
                    if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                        self._add_signature(f"{statement.name}.{item.name}", item, statement.name)

    def _add_signature(self, key: str, node: FunctionNode, class_name: str | None) -> None:
        positional, kwonly = _param_names(node, class_name)
        self.signatures[key] = _Signature(
            key=key,
            node=node,
            class_name=class_name,
            positional=tuple(positional),
            vararg=node.args.vararg.arg if node.args.vararg else None,
            kwonly=tuple(kwonly),
            kwarg=node.args.kwarg.arg if node.args.kwarg else None,
            defaults=_param_defaults(node),
        )

    def translate(self, tree: ast.Module) -> BlockArtifact:
        self.collect(tree)
        for key, signature in self.signatures.items():
            scope = _Scope(
                class_name=signature.class_name,
                params=signature.params,
                rebound=_bound_names(signature.node.body),
            )
            self.functions[key] = FunctionArtifact(
                signature.node.name,
                signature.params,
                BlockArtifact(self._body(signature.node.body, scope)),
                qualified_name=f"{self.module_name}.{key}",
                source=signature.node,
            )
        return BlockArtifact(list(self.functions.values()), source=tree)

    def _body(self, statements: Sequence[ast.stmt], scope: _Scope) -> list[ArtifactElement]:
        """Translate a function body, tracking locals last assigned a constant.

        Only straight-line assignments count. A name bound anywhere inside a
        compound statement is unknown from the start of that statement on.
        """
        translated: list[ArtifactElement] = []
        for statement in statements:
            bound = _bound_names([statement])
            if not isinstance(statement, _SIMPLE_STATEMENTS):
                for name in bound:
                    scope.constants.pop(name, None)
            artifact = self._statement(statement, scope)
            if artifact is not None:
                translated.append(artifact)
            for name in bound:
                scope.constants.pop(name, None)
            constant = _constant_assignment(statement)
            if constant is not None:
                scope.constants[constant[0]] = constant[1]
        return translated

    def _statements(self, statements: Sequence[ast.stmt], scope: _Scope) -> list[ArtifactElement]:
        translated = [self._statement(statement, scope) for statement in statements]
        return [artifact for artifact in translated if artifact is not None]

    def _statement(self, node: ast.stmt, scope: _Scope) -> ArtifactElement | None:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            return None
        if isinstance(node, ast.If):
            return IfArtifact(
                self._expression(node.test, scope),
                BlockArtifact(self._statements(node.body, scope)),
                BlockArtifact(self._statements(node.orelse, scope)) if node.orelse else None,
                source=node,
            )
        if isinstance(node, (ast.For, ast.AsyncFor, ast.While)):
            head = self._expression(node.test if isinstance(node, ast.While) else node.iter, scope)
            body = self._statements(node.body, scope) + self._statements(node.orelse, scope)
            return BlockArtifact([head, *body] if head is not None else body, source=node)
        if isinstance(node, (ast.With, ast.AsyncWith)):
            heads = [self._expression(item.context_expr, scope) for item in node.items]
            body = self._statements(node.body, scope)
            return BlockArtifact([*(h for h in heads if h is not None), *body], source=node)
        if isinstance(node, ast.Try):
            return BlockArtifact(
                self._statements(node.body, scope)
                + self._statements(node.orelse, scope)
                + self._statements(node.finalbody, scope),
                source=node,
            )
        if isinstance(node, ast.Return):
            value = self._expression(node.value, scope) if node.value is not None else None
            return ReturnArtifact(value, source=node)
        value = getattr(node, "value", None)
        if isinstance(node, (ast.Expr, ast.Assign, ast.AugAssign, ast.AnnAssign)):
            if value is None:
                return None
            return self._expression(value, scope)
        return self._nested_calls(node, scope)

    def _expression(self, node: ast.expr, scope: _Scope) -> ArtifactElement | None:
        if isinstance(node, ast.Constant):
            return ArtifactLiteralValue(node.value, source=node)
        if isinstance(node, ast.Name):
            if node.id in scope.constants:
                return ArtifactLiteralValue(scope.constants[node.id], source=node)
            return ReferenceArtifact(
                node.id,
                parameter_index=scope.parameter_index(node.id),
                source=node,
            )
        if isinstance(node, ast.Call):
            return self._call(node, scope)
        if isinstance(node, ast.Compare):
            return self._compare(node, scope)
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
            return BinaryExpressionArtifact(
                _BINARY_OPERATORS[type(node.op)],
                self._expression(node.left, scope),
                self._expression(node.right, scope),
                source=node,
            )
        if isinstance(node, ast.BoolOp):
            operator = "and" if isinstance(node.op, ast.And) else "or"
            folded = self._expression(node.values[0], scope)
            for value in node.values[1:]:
                folded = BinaryExpressionArtifact(
                    operator, folded, self._expression(value, scope), source=node
                )
            return folded
        if isinstance(node, ast.UnaryOp):
            if isinstance(node.op, ast.Not):
                return BinaryExpressionArtifact(
                    "not", self._expression(node.operand, scope), None, source=node
                )
            if isinstance(node.op, ast.USub) and isinstance(node.operand, ast.Constant):
                if isinstance(node.operand.value, (int, float)):
                    return ArtifactLiteralValue(-node.operand.value, source=node)
        return self._nested_calls(node, scope)

    def _compare(self, node: ast.Compare, scope: _Scope) -> ArtifactElement | None:
        left = node.left
        folded: ArtifactElement | None = None
        for op, right in zip(node.ops, node.comparators):
            operator = _COMPARE_OPERATORS.get(type(op))
            if operator is None:
                return self._nested_calls(node, scope)
            comparison = BinaryExpressionArtifact(
                operator,
                self._expression(left, scope),
                self._expression(right, scope),
                source=node,
            )
            folded = (
                comparison
                if folded is None
                else BinaryExpressionArtifact("and", folded, comparison, source=node)
            )
            left = right
        return folded

    def _nested_calls(self, node: ast.AST, scope: _Scope) -> ArtifactElement | None:
        calls = [self._call(call, scope) for call in _top_level_calls(node)]
        if not calls:
            return None
        if len(calls) == 1:
            return calls[0]
        return BlockArtifact(calls, source=node)

    def _argument(self, node: ast.expr, scope: _Scope) -> ArtifactElement:
        translated = self._expression(node, scope)
        if translated is not None:
            return translated
        return ReferenceArtifact(ast.unparse(node), source=node)

    def _target_key(self, func: ast.expr, scope: _Scope) -> str | None:
        if isinstance(func, ast.Name):
            return func.id if func.id in self.signatures else None
        if (
            isinstance(func, ast.Attribute)
            and isinstance(func.value, ast.Name)
            and func.value.id in {"self", "cls"}
            and scope.class_name is not None
        ):
            key = f"{scope.class_name}.{func.attr}"
            return key if key in self.signatures else None
        return None

    def _resolver(self, key: str | None) -> CallResolver | None:
        if key is None:
            return None
        return lambda _call: self.functions.get(key)

    def _call(self, node: ast.Call, scope: _Scope) -> CallArtifact:
        key = self._target_key(node.func, scope)
        signature = self.signatures.get(key) if key is not None else None
        if signature is not None:
            arguments = self._bind(signature, node, scope)
        else:
            arguments = [self._argument(_unstarred(arg), scope) for arg in node.args]
            arguments.extend(self._argument(kw.value, scope) for kw in node.keywords)
        return CallArtifact(
            _callee_name(node),
            arguments,
            resolver=self._resolver(key),
            source=node,
        )

    def _bind(self, signature: _Signature, node: ast.Call, scope: _Scope) -> list[ArtifactElement]:
        """Call arguments laid out in the callee's parameter order.

        Slots whose value is not known statically hold a placeholder
        reference: ``*args`` and ``**kwargs``, positions after a starred
        argument, and names a ``**`` mapping may supply. Calls inside values
        that bind to no named parameter follow the bound slots.
        """
        leading: list[ast.expr] = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                break
            leading.append(arg)
        starred = len(leading) < len(node.args)
        keywords = {kw.arg: kw.value for kw in node.keywords if kw.arg is not None}
        mapping = any(kw.arg is None for kw in node.keywords)

        bound: list[ArtifactElement] = []
        for index, name in enumerate(signature.positional):
            if index < len(leading):
                bound.append(self._argument(leading[index], scope))
            else:
                bound.append(
                    self._keyword_or_default(signature, name, keywords, starred or mapping, scope)
                )
        if signature.vararg is not None:
            bound.append(_placeholder(signature.vararg))
        for name in signature.kwonly:
            bound.append(self._keyword_or_default(signature, name, keywords, mapping, scope))
        if signature.kwarg is not None:
            bound.append(_placeholder(signature.kwarg))

        unbound = leading[len(signature.positional):] + [
            _unstarred(arg) for arg in node.args[len(leading):]
        ]
        unbound.extend(keywords.values())
        unbound.extend(kw.value for kw in node.keywords if kw.arg is None)
        nested = [
            self._call(call, scope)
            for value in unbound
            for call in ([value] if isinstance(value, ast.Call) else _top_level_calls(value))
        ]
        return bound + nested

    def _keyword_or_default(
        self,
        signature: _Signature,
        name: str,
        keywords: dict[str, ast.expr],
        unknown: bool,
        scope: _Scope,
    ) -> ArtifactElement:
        if name in keywords:
            return self._argument(keywords.pop(name), scope)
        if unknown:
            return _placeholder(name)
        if name in signature.defaults:
            return self._argument(signature.defaults[name], _NO_SCOPE)
        return _placeholder(name)


def _unstarred(node: ast.expr) -> ast.expr:
    return node.value if isinstance(node, ast.Starred) else node


def _top_level_calls(node: ast.AST) -> list[ast.Call]:
    calls: list[ast.Call] = []
    for child in ast.iter_child_nodes(node):
        if isinstance(child, ast.Call):
            calls.append(child)
        elif not isinstance(child, (ast.Lambda, ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            calls.extend(_top_level_calls(child))
    return calls


class PythonAdapter(LanguageAdapter):
    language_id = "python"
    file_extensions = (".py",)

    def parse_source(
        self,
        source: str,
        *,
        module_name: str,
        path: Path | None = None,
    ) -> ParsedModule:
        tree = ast.parse(source, filename=str(path) if path is not None else "<string>")
        translator = _ModuleTranslator(module_name)
        root = translator.translate(tree)
        return ParsedModule(
            language_id=self.language_id,
            module_name=module_name,
            path=path,
            root=root,
            functions=tuple(translator.functions.values()),
        )

    def parse_file(self, path: Path) -> ParsedModule:
        source = path.read_text(encoding="utf-8")
        return self.parse_source(source, module_name=path.stem, path=path)
