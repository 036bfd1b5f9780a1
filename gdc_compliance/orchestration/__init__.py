from .analyzer import CancellationToken, analyze, select_extractor

__all__ = ["CancellationToken", "analyze", "select_extractor"]
