"""Hero image pipeline: optimized variants for tenant hero images."""

__version__ = "0.1.0"
