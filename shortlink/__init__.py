"""Short link manager with per-link TTL and click quotas."""

__version__ = "0.1.0"
