from importlib import import_module

__all__ = [
    "PointsService",
    "get_points_service",
    "WalletScoreUnavailable",
]

_LAZY_EXPORTS = {
    "PointsService": ("services.points.scoring", "PointsService"),
    "get_points_service": ("services.points.scoring", "get_points_service"),
    "WalletScoreUnavailable": ("services.points.scoring", "WalletScoreUnavailable"),
}


def __getattr__(name):
    if name not in _LAZY_EXPORTS:
        raise AttributeError(f"module 'services' has no attribute {name!r}")

    module_name, attr_name = _LAZY_EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
