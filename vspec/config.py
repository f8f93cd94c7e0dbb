# vspec/config.py
"""Parser configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from vspec.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_XLEN = 64
SUPPORTED_XLENS = (32, 64)


@dataclass(frozen=True)
class ParserConfig:
    """Tuning knobs for the specification front end."""

    xlen: int = DEFAULT_XLEN
    # Parse without the catalogue first and type the tree afterwards.
    deferred_typing: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.xlen, int) or isinstance(self.xlen, bool) or self.xlen <= 0:
            raise ConfigError(f"xlen must be a positive integer, got {self.xlen!r}")

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.xlen % 8 != 0:
            warnings.append(f"xlen {self.xlen} is not a whole number of bytes")
        if self.xlen not in SUPPORTED_XLENS:
            warnings.append(
                f"xlen {self.xlen} is not a RISC-V word width "
                f"({', '.join(map(str, SUPPORTED_XLENS))})"
            )
        return warnings

    def log_warnings(self) -> None:
        for w in self.validate():
            logger.warning("ParserConfig: %s", w)
