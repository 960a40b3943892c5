"""txclassifier: protocol-aware classification of blockchain transactions."""

__version__ = "0.1.0"
