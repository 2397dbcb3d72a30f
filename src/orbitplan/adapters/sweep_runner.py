# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Background sweep runner with cancellation by replacement.

One coordinator thread runs porkchop sweeps; grid rows are spread
across a ThreadPoolExecutor. Every submission takes a new generation
number, and a sweep whose generation is no longer the latest stops at
the next row boundary and resolves to None. Partial grids are never
returned.

External dependencies (threading, concurrent.futures) are confined to
this adapter layer.
"""
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from orbitplan.domain.catalog import BodyCatalog, OrbitCatalog
from orbitplan.domain.porkchop import PorkchopResult, TransferRequest, sweep

_log = logging.getLogger(__name__)


class GenerationCounter:
    """Thread-safe, monotonically increasing generation counter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    @property
    def current(self) -> int:
        with self._lock:
            return self._value

    def issue(self) -> "GenerationToken":
        """Start a new generation; every earlier token stops being current."""
        with self._lock:
            self._value += 1
            return GenerationToken(self, self._value)


class GenerationToken:
    """Handle on one generation of a ``GenerationCounter``."""

    def __init__(self, counter: GenerationCounter, generation: int) -> None:
        self._counter = counter
        self.generation = generation

    def is_current(self) -> bool:
        return self._counter.current == self.generation

    def __repr__(self) -> str:
        return f"GenerationToken(generation={self.generation})"


class SweepRunner:
    """
    Runs porkchop sweeps off the caller's thread.

    A new ``submit`` supersedes any sweep still queued or running; the
    superseded future resolves to None.

    Args:
        max_workers: Thread pool size for grid rows.
            Default: min(32, os.cpu_count() + 4), same as Python default.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._max_workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
        self._generations = GenerationCounter()
        self._coordinator = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="orbitplan-sweep",
        )
        self._rows = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="orbitplan-row",
        )

    def submit(
        self,
        request: TransferRequest,
        bodies: BodyCatalog,
        orbits: OrbitCatalog,
    ) -> "Future[PorkchopResult | None]":
        """Queue a sweep, superseding any earlier one."""
        token = self._generations.issue()
        return self._coordinator.submit(self._run, token, request, bodies, orbits)

    def cancel(self) -> None:
        """Supersede the in-flight sweep without starting a new one."""
        self._generations.issue()

    def _run(
        self,
        token: GenerationToken,
        request: TransferRequest,
        bodies: BodyCatalog,
        orbits: OrbitCatalog,
    ) -> PorkchopResult | None:
        if not token.is_current():
            _log.debug("Sweep %d superseded before start", token.generation)
            return None
        result = sweep(request, bodies, orbits, executor=self._rows, token=token)
        if result is None or not token.is_current():
            _log.debug("Sweep %d superseded, discarding grid", token.generation)
            return None
        return result

    def shutdown(self, wait: bool = True) -> None:
        self.cancel()
        self._coordinator.shutdown(wait=wait)
        self._rows.shutdown(wait=wait)

    def __enter__(self) -> "SweepRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
