"""Fragment Recovery Engine - Salvage valid pieces of a malformed response."""

from redline.core.recovery.fragments import FragmentExtractor

__all__ = ["FragmentExtractor"]
