"""Response Normalizer - Clean raw model output before parsing."""

from redline.core.normalizer.normalizer import NormalizerResult, ResponseNormalizer

__all__ = ["NormalizerResult", "ResponseNormalizer"]
