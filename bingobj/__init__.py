"""BING objectness proposals: prediction, training data and recall evaluation."""

__version__ = "0.1.0"
__all__ = [
    "boxes",
    "scored",
    "filter_bing",
    "fileutil",
    "timer",
    "matfile",
    "dataset",
    "gradient",
    "objectness",
    "evaluation",
    "boxio",
    "cli",
]