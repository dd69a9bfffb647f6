"""Repair Engine - Schema-aware rewrites for near-valid JSON."""

from redline.core.repair.repairer import JSONRepairer, RepairResult

__all__ = ["JSONRepairer", "RepairResult"]
