"""
Block Registry: indexes a form's blocks by id and classifies them.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from formlogic.config import FormLogicSettings
from formlogic.model import Block, BlockKind, classify

logger = logging.getLogger(__name__)


class DuplicateBlockId(ValueError):
    """Raised when two blocks in one collection share an id."""

    def __init__(self, block_ids: List[str]):
        self.block_ids = block_ids
        super().__init__(f"Duplicate block ids: {', '.join(block_ids)}")


class FormTooLargeError(ValueError):
    """Raised when a block collection exceeds the configured maximum."""
    pass


class BlockRegistry:
    """
    Per-call index of a block collection.

    Keeps the original array order; the first block is the entry block.
    """

    def __init__(self, settings: Optional[FormLogicSettings] = None):
        self.settings = settings or FormLogicSettings()
        self._blocks: List[Block] = []
        self._by_id: Dict[str, Block] = {}

    def register(self, blocks: Iterable[Block]) -> "BlockRegistry":
        """
        Index ``blocks``.

        Raises:
            FormTooLargeError: more blocks than settings.max_blocks
            DuplicateBlockId: an id occurs more than once
        """
        blocks = list(blocks)
        if len(blocks) > self.settings.max_blocks:
            raise FormTooLargeError(
                f"Form has {len(blocks)} blocks; the limit is {self.settings.max_blocks}"
            )

        id_counts = Counter(b.id for b in blocks)
        duplicates = [block_id for block_id, n in id_counts.items() if n > 1]
        if duplicates:
            raise DuplicateBlockId(duplicates)

        self._blocks = blocks
        self._by_id = {b.id: b for b in blocks}

        for block in blocks:
            if classify(block) == BlockKind.UNCLASSIFIED:
                logger.info("Block %s has unrecognized type %r", block.id, block.type)

        return self

    def lookup(self, block_id: Optional[str]) -> Optional[Block]:
        """Return the block with ``block_id``, or None if not registered."""
        if not isinstance(block_id, str):
            return None
        return self._by_id.get(block_id)

    def __contains__(self, block_id: object) -> bool:
        return isinstance(block_id, str) and block_id in self._by_id

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def blocks(self) -> List[Block]:
        return list(self._blocks)

    @property
    def ids(self) -> List[str]:
        return [b.id for b in self._blocks]

    @property
    def entry(self) -> Optional[Block]:
        return self._blocks[0] if self._blocks else None

    @staticmethod
    def classify(block: Block) -> BlockKind:
        return classify(block)

    def blocks_of_kind(self, kind: BlockKind) -> List[Block]:
        return [b for b in self._blocks if classify(b) == kind]

    def logic_blocks(self) -> List[Block]:
        return self.blocks_of_kind(BlockKind.LOGIC)

    def question_blocks(self) -> List[Block]:
        """Input blocks, i.e. the questions a respondent answers."""
        return self.blocks_of_kind(BlockKind.INPUT)

    def kind_counts(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in BlockKind}
        for block in self._blocks:
            counts[classify(block).value] += 1
        return counts
