"""prefixcop — naming-convention checker for prefix-constrained interfaces."""

from prefixcop.marker import require_prefix

__version__ = "0.1.0"

__all__ = ["__version__", "require_prefix"]
