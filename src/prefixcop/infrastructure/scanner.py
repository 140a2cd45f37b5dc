"""Static type scanner — class metadata from Python sources via ``ast``.

INVARIANT: Nothing under the scan root is imported or executed.
Each ``*.py`` file is parsed once; classes, decorators (markers), base
classes, and abstract methods are read from the syntax tree and resolved
through the module's imports into dotted names.

The scan is a scoped resource: :func:`scan_types` yields a
:class:`ScanResult` and releases it when the ``with`` block exits.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Generator, Iterable, Iterator
from concurrent.futures import Executor
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from prefixcop.domain.model import TypeDescriptor, freeze_markers
from prefixcop.domain.rules import MARKER_NAMES, PREFIX_PARAM
from prefixcop.infrastructure.graph.engine import ImplementsGraph

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = frozenset(
    {"__pycache__", ".git", ".venv", "venv", "build", "dist", ".tox", "node_modules"}
)

# Listing one of these directly makes the class an interface.
_PROTOCOL_BASES = frozenset({"typing.Protocol", "typing_extensions.Protocol"})
# Bases and metaclasses that enable abstract-method bookkeeping.
_ABC_BASES = frozenset({"abc.ABC"})
_ABSTRACT_METACLASSES = frozenset({"abc.ABCMeta"})
_ABSTRACT_DECORATORS = frozenset(
    {
        "abc.abstractmethod",
        "abc.abstractproperty",
        "abc.abstractclassmethod",
        "abc.abstractstaticmethod",
    }
)


class ScanError(Exception):
    """A source file could not be read or parsed."""


# ---------------------------------------------------------------------------
# Raw per-module records (first pass)
# ---------------------------------------------------------------------------


@dataclass
class _RawClass:
    qualname: str
    name: str
    lineno: int
    base_exprs: list[str] = field(default_factory=list)
    metaclass_expr: str | None = None
    decorators: list[tuple[str, dict[str, ast.expr]]] = field(default_factory=list)
    abstract_methods: set[str] = field(default_factory=set)
    concrete_members: set[str] = field(default_factory=set)


@dataclass
class _ModuleInfo:
    module: str
    path: Path
    is_package: bool
    imports: dict[str, str] = field(default_factory=dict)
    constants: dict[str, str] = field(default_factory=dict)
    classes: list[_RawClass] = field(default_factory=list)

    def resolve(self, dotted: str) -> str:
        """Resolve a dotted expression written in this module."""
        head, _, rest = dotted.partition(".")
        if any(c.qualname == head for c in self.classes):
            target = f"{self.module}.{head}"
        elif head in self.imports:
            target = self.imports[head]
        else:
            return dotted
        return f"{target}.{rest}" if rest else target


# ---------------------------------------------------------------------------
# ScanResult
# ---------------------------------------------------------------------------


class ScanResult:
    """Scanned descriptors in discovery order plus the implements graph.

    Discovery order is file path order, then source order within a file.
    """

    def __init__(
        self,
        root: Path,
        types: Iterable[TypeDescriptor],
        *,
        skipped: Iterable[str] = (),
        files_scanned: int = 0,
    ) -> None:
        self.root = root
        self._types: dict[str, TypeDescriptor] = {}
        for descriptor in types:
            self._types.setdefault(descriptor.fqn, descriptor)
        self.skipped: list[str] = list(skipped)
        self.files_scanned = files_scanned
        self._graph = ImplementsGraph(self._types.values())
        self._closed = False

    @property
    def types(self) -> list[TypeDescriptor]:
        self._ensure_open()
        return list(self._types.values())

    def get(self, fqn: str) -> TypeDescriptor | None:
        self._ensure_open()
        return self._types.get(fqn)

    def find_implementors(self, interface_fqn: str) -> list[TypeDescriptor]:
        """Concrete types implementing *interface_fqn*, directly or transitively.

        Interfaces extending the given one are passed through, never
        returned. The interface itself is never its own implementor.
        """
        self._ensure_open()
        return [
            self._types[fqn]
            for fqn in self._graph.implementors(interface_fqn)
            if self._types[fqn].is_concrete
        ]

    def close(self) -> None:
        self._types.clear()
        self._graph.invalidate()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("ScanResult has been closed")

    def __enter__(self) -> ScanResult:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@contextmanager
def scan_types(
    root: Path,
    package_filter: str | None = None,
    *,
    exclude: Iterable[str] = DEFAULT_EXCLUDES,
    executor: Executor | None = None,
) -> Generator[ScanResult]:
    """Scan every Python module under *root* whose name is in *package_filter*.

    Args:
        root: Directory holding the top-level packages.
        package_filter: Dotted package; only it and its submodules are
            scanned. None scans everything.
        exclude: Directory names skipped during discovery.
        executor: Optional caller-owned pool used to parse files in
            parallel. Results keep file order either way.
    """
    files = list(find_modules(root, package_filter, exclude=frozenset(exclude)))
    logger.debug("Scanning %d modules under %s", len(files), root)

    if executor is not None:
        parsed = list(executor.map(_parse_or_none, files))
    else:
        parsed = [_parse_or_none(item) for item in files]

    modules: list[_ModuleInfo] = []
    skipped: list[str] = []
    for (_, path), outcome in zip(files, parsed, strict=True):
        if isinstance(outcome, _ModuleInfo):
            modules.append(outcome)
        else:
            skipped.append(f"Skipped {path}: {outcome}")
            logger.warning("Skipping unparsable module %s: %s", path, outcome)

    result = ScanResult(
        root,
        _build_descriptors(modules),
        skipped=skipped,
        files_scanned=len(files),
    )
    try:
        yield result
    finally:
        result.close()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def module_name(root: Path, path: Path) -> str:
    """Dotted module name of *path* relative to *root*.

    Examples:
        >>> module_name(Path("src"), Path("src/pkg/__init__.py"))
        'pkg'
        >>> module_name(Path("src"), Path("src/pkg/sub/mod.py"))
        'pkg.sub.mod'
    """
    parts = list(path.relative_to(root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def in_package(module: str, package_filter: str | None) -> bool:
    if not package_filter:
        return True
    return module == package_filter or module.startswith(f"{package_filter}.")


def find_modules(
    root: Path,
    package_filter: str | None = None,
    *,
    exclude: frozenset[str] = DEFAULT_EXCLUDES,
) -> Iterator[tuple[str, Path]]:
    """Yield ``(module, path)`` for every in-scope ``.py`` file, sorted by path."""
    for path in sorted(root.rglob("*.py")):
        rel_parts = path.relative_to(root).parts
        if any(part in exclude for part in rel_parts[:-1]):
            continue
        module = module_name(root, path)
        if module and in_package(module, package_filter):
            yield module, path


# ---------------------------------------------------------------------------
# First pass: parse one module
# ---------------------------------------------------------------------------


def _parse_or_none(item: tuple[str, Path]) -> _ModuleInfo | str:
    """Parse a module, returning the error text instead of raising."""
    try:
        return parse_module(*item)
    except ScanError as exc:
        return str(exc)


def parse_module(module: str, path: Path) -> _ModuleInfo:
    try:
        source = path.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(path))
    except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
        raise ScanError(f"{type(exc).__name__}: {exc}") from exc

    info = _ModuleInfo(module=module, path=path, is_package=path.name == "__init__.py")
    _collect_imports(tree, info)
    _collect_constants(tree, info)
    _collect_classes(tree.body, info, outer="")
    return info


def _package_of(info: _ModuleInfo, level: int) -> str:
    """Base package for a relative import of the given level."""
    parts = info.module.split(".")
    if not info.is_package:
        parts = parts[:-1]
    if level > 1:
        parts = parts[: len(parts) - (level - 1)]
    return ".".join(parts)


def _collect_imports(tree: ast.Module, info: _ModuleInfo) -> None:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    info.imports[alias.asname] = alias.name
                else:
                    head = alias.name.split(".", 1)[0]
                    info.imports[head] = head
        elif isinstance(node, ast.ImportFrom):
            base = node.module or ""
            if node.level:
                package = _package_of(info, node.level)
                base = f"{package}.{base}" if package and base else package or base
            for alias in node.names:
                if alias.name == "*":
                    continue
                target = f"{base}.{alias.name}" if base else alias.name
                info.imports[alias.asname or alias.name] = target


def _collect_constants(tree: ast.Module, info: _ModuleInfo) -> None:
    """Module-level ``NAME = "literal"`` bindings, usable as marker arguments."""
    for stmt in tree.body:
        if isinstance(stmt, ast.Assign) and _is_str_constant(stmt.value):
            for target in stmt.targets:
                if isinstance(target, ast.Name):
                    info.constants[target.id] = stmt.value.value  # type: ignore[attr-defined]
        elif (
            isinstance(stmt, ast.AnnAssign)
            and isinstance(stmt.target, ast.Name)
            and stmt.value is not None
            and _is_str_constant(stmt.value)
        ):
            info.constants[stmt.target.id] = stmt.value.value  # type: ignore[attr-defined]


def _collect_classes(body: list[ast.stmt], info: _ModuleInfo, *, outer: str) -> None:
    """Record classes in source order, descending into nested class bodies."""
    for stmt in body:
        if isinstance(stmt, ast.ClassDef):
            qualname = f"{outer}.{stmt.name}" if outer else stmt.name
            info.classes.append(_read_class(stmt, qualname, info))
            _collect_classes(stmt.body, info, outer=qualname)
        elif isinstance(stmt, ast.If | ast.With):
            _collect_classes(stmt.body, info, outer=outer)
            if isinstance(stmt, ast.If):
                _collect_classes(stmt.orelse, info, outer=outer)
        elif isinstance(stmt, ast.Try):
            _collect_classes(stmt.body, info, outer=outer)
            for handler in stmt.handlers:
                _collect_classes(handler.body, info, outer=outer)
            _collect_classes(stmt.orelse, info, outer=outer)
            _collect_classes(stmt.finalbody, info, outer=outer)


def _read_class(node: ast.ClassDef, qualname: str, info: _ModuleInfo) -> _RawClass:
    raw = _RawClass(qualname=qualname, name=node.name, lineno=node.lineno)

    for base in node.bases:
        dotted = _dotted_name(base)
        if dotted is not None:
            raw.base_exprs.append(dotted)
    for keyword in node.keywords:
        if keyword.arg == "metaclass":
            raw.metaclass_expr = _dotted_name(keyword.value)

    for decorator in node.decorator_list:
        call = decorator if isinstance(decorator, ast.Call) else None
        dotted = _dotted_name(call.func if call else decorator)
        if dotted is None:
            continue
        params: dict[str, ast.expr] = {}
        if call is not None:
            for index, arg in enumerate(call.args):
                params[str(index)] = arg
            for keyword in call.keywords:
                if keyword.arg is not None:
                    params[keyword.arg] = keyword.value
        raw.decorators.append((dotted, params))

    for stmt in node.body:
        if isinstance(stmt, ast.FunctionDef | ast.AsyncFunctionDef):
            decorators = {info.resolve(d) for d in map(_dotted_name, stmt.decorator_list) if d}
            if decorators & _ABSTRACT_DECORATORS:
                raw.abstract_methods.add(stmt.name)
            else:
                raw.concrete_members.add(stmt.name)
        elif isinstance(stmt, ast.Assign):
            raw.concrete_members.update(t.id for t in stmt.targets if isinstance(t, ast.Name))
        elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
            if isinstance(stmt.target, ast.Name):
                raw.concrete_members.add(stmt.target.id)
    return raw


def _dotted_name(node: ast.expr) -> str | None:
    """``a.b.C`` for Name/Attribute chains; subscripts are unwrapped."""
    if isinstance(node, ast.Subscript):
        return _dotted_name(node.value)
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        parent = _dotted_name(node.value)
        return f"{parent}.{node.attr}" if parent else None
    return None


def _is_str_constant(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and isinstance(node.value, str)


# ---------------------------------------------------------------------------
# Second pass: resolve names across modules and build descriptors
# ---------------------------------------------------------------------------


def _build_descriptors(modules: list[_ModuleInfo]) -> list[TypeDescriptor]:
    # Re-exports: ``pkg.Name`` -> where ``pkg`` imported it from.
    aliases: dict[str, str] = {}
    for info in modules:
        for local, target in info.imports.items():
            aliases.setdefault(f"{info.module}.{local}", target)

    classes: dict[str, tuple[_ModuleInfo, _RawClass]] = {}
    for info in modules:
        for raw in info.classes:
            fqn = f"{info.module}.{raw.qualname}"
            if fqn in classes:
                logger.debug("Duplicate class definition %s, keeping the first", fqn)
                continue
            classes[fqn] = (info, raw)

    def canonical(dotted: str) -> str:
        seen: set[str] = set()
        while dotted not in classes and dotted in aliases and dotted not in seen:
            seen.add(dotted)
            dotted = aliases[dotted]
        return dotted

    bases: dict[str, tuple[str, ...]] = {
        fqn: tuple(canonical(info.resolve(expr)) for expr in raw.base_exprs)
        for fqn, (info, raw) in classes.items()
    }
    abstract = _AbstractnessResolver(classes, bases)

    descriptors: list[TypeDescriptor] = []
    for fqn, (info, raw) in classes.items():
        markers: dict[str, dict[str, str | None]] = {}
        for expr, params in raw.decorators:
            name = canonical(info.resolve(expr))
            markers[name] = _marker_params(name, params, info)
        descriptors.append(
            TypeDescriptor(
                fqn=fqn,
                simple_name=raw.name,
                module=info.module,
                is_interface=abstract.is_interface(fqn),
                markers=freeze_markers(markers),
                bases=bases[fqn],
                path=info.path,
                lineno=raw.lineno,
            )
        )
    return descriptors


def _marker_params(
    name: str, params: dict[str, ast.expr], info: _ModuleInfo
) -> dict[str, str | None]:
    values: dict[str, str | None] = {}
    for key, node in params.items():
        if name in MARKER_NAMES and key == "0":
            key = PREFIX_PARAM
        values[key] = _literal_value(node, info)
    return values


def _literal_value(node: ast.expr, info: _ModuleInfo) -> str | None:
    if _is_str_constant(node):
        return node.value  # type: ignore[attr-defined]
    if isinstance(node, ast.Name) and node.id in info.constants:
        return info.constants[node.id]
    return None


class _AbstractnessResolver:
    """Decides interface-vs-concrete for scanned classes, memoized.

    A class is an interface when it directly lists ``Protocol``, or when
    it is ABC-based and some abstract method is left unimplemented.
    Abstractness follows the method resolution order: a name stays
    abstract only if the first class along the MRO defining it defines
    it abstractly, so a concrete mixin listed first satisfies an
    abstract method of a later base.

    Unscanned bases (stdlib, third-party) contribute no members.
    """

    def __init__(
        self,
        classes: dict[str, tuple[_ModuleInfo, _RawClass]],
        bases: dict[str, tuple[str, ...]],
    ) -> None:
        self._classes = classes
        self._bases = bases
        self._mros: dict[str, tuple[str, ...]] = {}

    def is_interface(self, fqn: str) -> bool:
        if any(base in _PROTOCOL_BASES for base in self._bases[fqn]):
            return True
        mro = self.mro(fqn)
        if not any(self._enables_abc(name) for name in mro):
            return False
        return bool(self.remaining_abstract(fqn))

    def remaining_abstract(self, fqn: str) -> frozenset[str]:
        """Abstract method names still unresolved on *fqn*."""
        mro = self.mro(fqn)
        candidates = set().union(*(self._classes[name][1].abstract_methods for name in mro))
        remaining: set[str] = set()
        for method in candidates:
            for name in mro:
                raw = self._classes[name][1]
                if method in raw.abstract_methods:
                    remaining.add(method)
                    break
                if method in raw.concrete_members:
                    break
        return frozenset(remaining)

    def mro(self, fqn: str) -> tuple[str, ...]:
        """C3 linearization over scanned classes, starting with *fqn*.

        An inconsistent hierarchy (which Python itself would reject)
        falls back to a depth-first, left-to-right order.
        """
        return self._mro(fqn, set())

    def _mro(self, fqn: str, visiting: set[str]) -> tuple[str, ...]:
        if fqn in self._mros:
            return self._mros[fqn]
        visiting.add(fqn)
        bases = [b for b in self._bases[fqn] if b in self._classes and b not in visiting]
        base_mros = [list(self._mro(base, visiting)) for base in bases]
        visiting.discard(fqn)

        merged = _c3_merge([*base_mros, bases])
        if merged is None:
            merged = list(dict.fromkeys(name for seq in base_mros for name in seq))
        result = (fqn, *merged)
        self._mros[fqn] = result
        return result

    def _enables_abc(self, fqn: str) -> bool:
        info, raw = self._classes[fqn]
        if any(base in _ABC_BASES | _PROTOCOL_BASES for base in self._bases[fqn]):
            return True
        if raw.metaclass_expr is not None:
            return info.resolve(raw.metaclass_expr) in _ABSTRACT_METACLASSES
        return False


def _c3_merge(sequences: list[list[str]]) -> list[str] | None:
    """Merge step of C3 linearization; None when no consistent order exists."""
    pending = [list(seq) for seq in sequences if seq]
    result: list[str] = []
    while pending:
        for seq in pending:
            head = seq[0]
            if not any(head in other[1:] for other in pending):
                break
        else:
            return None
        result.append(head)
        pending = [[name for name in seq if name != head] for seq in pending]
        pending = [seq for seq in pending if seq]
    return result
