# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Worklist - Resumable queues of functions and layers to clean.

One Worklist lives as long as the process (a warm Lambda container, a
FastAPI app). Inventories are fetched once per pass. An entity leaves its
queue only after it has been cleaned completely, so a run that fails
half way picks up at the failed entity next time without listing or
re-cleaning anything already done.
"""

from typing import Awaitable, Callable, Dict, List, Tuple

import structlog

logger = structlog.get_logger()

Loader = Callable[[], Awaitable[List[str]]]
Action = Callable[[str], Awaitable[object]]


class Worklist:
    """Pending functions and layers for the current cleanup pass."""

    def __init__(self) -> None:
        self.functions: Tuple[str, ...] | None = None
        self.pending_functions: List[str] | None = None
        self.pending_layers: List[str] | None = None

    @property
    def in_progress(self) -> bool:
        """True while a pass has started but not completed."""
        return self.pending_functions is not None

    async def load_functions(self, loader: Loader) -> List[str]:
        """Fetch the function inventory unless this pass already has it."""
        if self.pending_functions is None:
            inventory = await loader()
            self.functions = tuple(inventory)
            self.pending_functions = list(inventory)
        return self.pending_functions

    async def load_layers(self, loader: Loader) -> List[str]:
        """Fetch the layer inventory unless this pass already has it."""
        if self.pending_layers is None:
            self.pending_layers = list(await loader())
        return self.pending_layers

    async def drain(self, pending: List[str], action: Action) -> int:
        """
        Run ``action`` for every pending item, removing each once it succeeds.

        Iterates over a snapshot so removal does not disturb iteration. If
        an action raises, the error propagates and the failing item plus
        everything not yet visited stay in ``pending``.

        Returns:
            Number of items drained
        """
        snapshot = list(pending)
        logger.info("worklist_draining", count=len(snapshot))

        for item in snapshot:
            await action(item)
            pending.remove(item)

        return len(snapshot)

    def complete(self) -> None:
        """Finish the pass; the next run starts over with fresh inventories."""
        self.functions = None
        self.pending_functions = None
        self.pending_layers = None

    def snapshot(self) -> Dict[str, int | None]:
        return {
            "pending_functions": (
                len(self.pending_functions) if self.pending_functions is not None else None
            ),
            "pending_layers": (
                len(self.pending_layers) if self.pending_layers is not None else None
            ),
        }
