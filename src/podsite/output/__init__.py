"""Output gating and atomic writes for site artifacts."""

from podsite.output.manager import OutputManager, WriteMode

__all__ = ["OutputManager", "WriteMode"]
