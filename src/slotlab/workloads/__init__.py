from .patterns import PATTERNS, generate_keys

__all__ = ["PATTERNS", "generate_keys"]
