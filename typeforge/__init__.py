"""
typeforge - TypeScript type generation for Python models with preserved custom code
"""

def _check_dependencies():
    """Check for required dependencies"""
    try:
        import pydantic
    except ImportError:
        raise ImportError(
            "typeforge requires pydantic to be installed.\n"
            "Install with: pip install pydantic\n"
            "typeforge works with your existing pydantic 2.x version."
        ) from None

# Check dependencies on import
_check_dependencies()

# Import main API only after dependency check
from .core.config import get_version, GeneratorOptions
from .core.errors import ConfigurationError, PreservationWarning
from .core.integrator import integrate, introspect_only, generate_only
from .introspection import (
    export_ts_class, export_ts_interface, export_ts_enum, ts_custom_base,
    TsIgnore, TsType, TsOptional, TsDefaultTypeOutput, TsDefaultValue,
)

__version__ = get_version()

__all__ = [
    # Main functions
    'integrate',
    'introspect_only',
    'generate_only',

    # Export markers
    'export_ts_class', 'export_ts_interface', 'export_ts_enum', 'ts_custom_base',
    'TsIgnore', 'TsType', 'TsOptional', 'TsDefaultTypeOutput', 'TsDefaultValue',

    # Configuration and diagnostics
    'GeneratorOptions',
    'ConfigurationError',
    'PreservationWarning',

    # Version
    '__version__'
]
