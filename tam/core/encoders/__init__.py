from .compact_encoder import CompactArrayEncoder

__all__ = ['CompactArrayEncoder']
