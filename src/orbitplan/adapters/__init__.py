# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Adapters for catalog I/O and background sweeps.

External dependencies (json, file I/O, threads) are confined to this layer.
"""
from orbitplan.adapters.json_catalog import JsonCatalogReader, parse_body, parse_orbit
from orbitplan.adapters.sweep_runner import GenerationCounter, GenerationToken, SweepRunner

__all__ = [
    "GenerationCounter",
    "GenerationToken",
    "JsonCatalogReader",
    "SweepRunner",
    "parse_body",
    "parse_orbit",
]
