from . import converter, resolution_cache, resolver

__all__ = ["converter", "resolution_cache", "resolver"]
