"""Nodes of the weight graph used to compute a cover of weighted sequences."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

INVALID_UINT32 = 0xFFFFFFFF


@dataclass
class Node:
    """A sequence with the weights at its two ends; inner nodes refer to children."""

    id: int = INVALID_UINT32
    front: int = INVALID_UINT32
    back: int = INVALID_UINT32
    sign: bool = True  # True: forward, False: backward
    chain_id: int = INVALID_UINT32
    left: int = INVALID_UINT32
    right: int = INVALID_UINT32

    def change_orientation(self) -> None:
        """Swap the two ends and flip the sign."""
        self.front, self.back = self.back, self.front
        self.sign = not self.sign

    def is_leaf(self) -> bool:
        """Return True when the node has no children."""
        return self.left == INVALID_UINT32 and self.right == INVALID_UINT32

    def __str__(self) -> str:
        return f"{self.id}:[{self.front},{self.back},{'+' if self.sign else '-'}]"


Walk = deque  # a walk is a deque of Node