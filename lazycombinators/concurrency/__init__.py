from .parallel import parallel

__all__ = ("parallel",)
