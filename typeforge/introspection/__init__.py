"""
typeforge introspection utilities - export markers and the Python type model adapter
"""

# Export markers
from .markers import (
    export_ts_class, export_ts_interface, export_ts_enum, ts_custom_base,
    TsIgnore, TsType, TsOptional, TsDefaultTypeOutput, TsDefaultValue,
)

# Type model construction
from .models import build_type_model
from .type_conversion import python_type_to_type_reference


__all__ = [
    # Class decorators
    'export_ts_class', 'export_ts_interface', 'export_ts_enum', 'ts_custom_base',

    # Member markers
    'TsIgnore', 'TsType', 'TsOptional', 'TsDefaultTypeOutput', 'TsDefaultValue',

    # Type model
    'build_type_model', 'python_type_to_type_reference',
]
