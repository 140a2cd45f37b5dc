"""Naming rules — constraint extraction and the prefix predicate.

Pure functions over scanned descriptors. The service layer feeds them
with a scan result and decides what a broken rule means for the build.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from prefixcop.domain.model import (
    Extraction,
    MalformedConstraint,
    PrefixConstraint,
    TypeDescriptor,
    Violation,
)

logger = logging.getLogger(__name__)

# Resolved decorator names recognised as the naming marker.
MARKER_NAMES = frozenset({"prefixcop.require_prefix", "prefixcop.marker.require_prefix"})
PREFIX_PARAM = "prefix"


def find_marker(descriptor: TypeDescriptor) -> dict[str, str | None] | None:
    """Return the marker parameters of *descriptor*, or None when unmarked."""
    for name, params in descriptor.markers.items():
        if name in MARKER_NAMES:
            return dict(params)
    return None


def extract_constraints(types: Iterable[TypeDescriptor]) -> list[Extraction]:
    """Select marked interfaces and resolve their prefixes.

    Returns one entry per marked interface, in the order given. A marker
    without a non-empty ``prefix`` yields a :class:`MalformedConstraint`
    instead of a constraint, so callers never validate against an empty
    prefix.
    """
    results: list[Extraction] = []
    for descriptor in types:
        params = find_marker(descriptor)
        if params is None:
            continue
        if descriptor.is_concrete:
            logger.debug("Ignoring marker on concrete class %s", descriptor.fqn)
            continue
        prefix = params.get(PREFIX_PARAM)
        if not prefix:
            results.append(MalformedConstraint(interface=descriptor))
        else:
            results.append(PrefixConstraint(interface=descriptor, prefix=prefix))
    return results


def has_required_prefix(descriptor: TypeDescriptor, prefix: str) -> bool:
    """Exact, case-sensitive prefix test on the simple name."""
    return descriptor.simple_name.startswith(prefix)


def find_violations(
    constraint: PrefixConstraint,
    implementors: Iterable[TypeDescriptor],
) -> list[Violation]:
    """Check every implementor of one constraint, keeping their order."""
    return [
        Violation(implementor=impl, interface=constraint.interface, prefix=constraint.prefix)
        for impl in implementors
        if impl.is_concrete and not has_required_prefix(impl, constraint.prefix)
    ]
