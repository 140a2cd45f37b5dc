"""Value objects produced by a scan and consumed by the naming rules.

Pure data, no infrastructure dependencies. Descriptors are built once by
the scanner and treated as read-only snapshots for the rest of the run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

# marker name -> parameter name -> literal value (None when not a literal)
type Markers = Mapping[str, Mapping[str, str | None]]


def freeze_markers(raw: Mapping[str, Mapping[str, str | None]]) -> Markers:
    """Wrap marker parameters in read-only mappings."""
    return MappingProxyType({name: MappingProxyType(dict(params)) for name, params in raw.items()})


@dataclass(frozen=True)
class TypeDescriptor:
    """A scanned class and the metadata the checker needs about it.

    Attributes:
        fqn: Fully qualified name, ``module.Qualname``.
        simple_name: The class's own name (last dotted segment).
        module: Dotted module the class is declared in.
        is_interface: True for protocols, ABCs, and classes that still
            have unimplemented abstract methods.
        markers: Decorators attached to the class, by resolved name.
        bases: Resolved dotted names of the direct base classes.
    """

    fqn: str
    simple_name: str
    module: str
    is_interface: bool = False
    markers: Markers = field(default_factory=lambda: MappingProxyType({}), hash=False)
    bases: tuple[str, ...] = ()
    path: Path | None = field(default=None, compare=False)
    lineno: int = field(default=0, compare=False)

    @property
    def is_concrete(self) -> bool:
        return not self.is_interface


@dataclass(frozen=True)
class PrefixConstraint:
    """An interface whose concrete implementors must start with *prefix*."""

    interface: TypeDescriptor
    prefix: str

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ValueError(f"prefix must not be empty for {self.interface.fqn}")


@dataclass(frozen=True)
class MalformedConstraint:
    """An interface carrying the marker without a usable prefix."""

    interface: TypeDescriptor

    @property
    def message(self) -> str:
        return f"Interface '{self.interface.fqn}' requires a prefix but none was declared"


@dataclass(frozen=True)
class Violation:
    """A concrete implementor whose simple name lacks the required prefix."""

    implementor: TypeDescriptor
    interface: TypeDescriptor
    prefix: str

    @property
    def message(self) -> str:
        return (
            f"Type '{self.implementor.fqn}' implements '{self.interface.fqn}' "
            f"but its name does not start with '{self.prefix}'"
        )


type Extraction = PrefixConstraint | MalformedConstraint
