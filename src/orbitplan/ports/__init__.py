# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for catalog sources.

Adapters implement these to load bodies and orbits from different
storage formats.
"""
from typing import Protocol, runtime_checkable

from orbitplan.domain.catalog import Orbit, SpaceBody


@runtime_checkable
class CatalogSource(Protocol):
    """Port for loading the body and orbit catalog."""

    def load_bodies(self) -> list[SpaceBody]:
        """Load all celestial bodies."""
        ...

    def load_orbits(self) -> list[Orbit]:
        """Load all named orbits."""
        ...
