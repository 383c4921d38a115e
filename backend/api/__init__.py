from .routes_points import router

__all__ = ["router"]
