"""Report configuration (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReportConfig:
    """Groups options for the frequency report workflow."""

    top: int = 0  # 0 keeps every entry
    listing: bool = False
