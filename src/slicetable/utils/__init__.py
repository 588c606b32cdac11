from .throttle import Throttle

__all__ = ["Throttle"]
