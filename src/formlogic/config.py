"""
Runtime limits for the logic validators.

The per-logic-block cycle probe is O(blocks x edges) in the worst case,
so block collections are capped before any graph is built.
"""

import os
from dataclasses import dataclass

DEFAULT_MAX_BLOCKS = 5000
MAX_BLOCKS_ENV = "FORMLOGIC_MAX_BLOCKS"


@dataclass(frozen=True)
class FormLogicSettings:
    max_blocks: int = DEFAULT_MAX_BLOCKS

    @classmethod
    def from_env(cls) -> "FormLogicSettings":
        """Build settings from environment variables, falling back to defaults."""
        raw = os.environ.get(MAX_BLOCKS_ENV, "").strip()
        if not raw:
            return cls()
        try:
            max_blocks = int(raw)
        except ValueError:
            raise ValueError(f"{MAX_BLOCKS_ENV} must be an integer, got {raw!r}")
        if max_blocks < 1:
            raise ValueError(f"{MAX_BLOCKS_ENV} must be positive, got {max_blocks}")
        return cls(max_blocks=max_blocks)
