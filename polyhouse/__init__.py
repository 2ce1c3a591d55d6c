"""Parametric polyhouse generator, cost estimator and camera controller."""

__all__ = [
    "builder",
    "camera",
    "climate",
    "costing",
    "crops",
    "doors",
    "elements",
    "export",
    "features",
    "freecad_export",
    "interior",
    "layout",
    "materials",
    "model",
    "parameters",
    "pipeline",
    "profiles",
    "report",
    "vec3",
    "ventilation",
]
