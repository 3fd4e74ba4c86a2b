"""F4ST layer model and dependency validation.

Quick usage::

    from f4st.layers import default_layers, validate_layers

    ordered = validate_layers(default_layers())
    print([layer.name for layer in ordered])  # shared, core, modules, routes
"""

from f4st.layers.models import (
    CANONICAL_DEPENDENCIES,
    LAYER_NAMES,
    LayerDefinition,
    default_layers,
    layers_by_name,
)
from f4st.layers.validator import check_imports, topological_order, validate_layers

__all__ = [
    "CANONICAL_DEPENDENCIES",
    "LAYER_NAMES",
    "LayerDefinition",
    "check_imports",
    "default_layers",
    "layers_by_name",
    "topological_order",
    "validate_layers",
]
