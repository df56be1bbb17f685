"""Total addressable market visualization: segment quantization and AI-assisted analysis."""

__version__ = "1.0.0"
