"""hvmemcalc — Harvester VM reserved memory calculator."""

from __future__ import annotations

__version__ = "0.1.0"
