"""
typeforge Data Models

Immutable descriptors for the types that get exported to TypeScript. They are
produced once per run by a type model adapter (see typeforge.introspection)
and only read afterwards, so every structure here is a frozen dataclass with
tuple-typed collections.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

# === TYPE SYSTEM === #

class TypeKind(Enum):
    """Output shape of an exported type."""
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"


class BaseType(Enum):
    """Primitive TypeScript types for code generation."""
    ANY = "any"
    NULL = "null"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"
    OBJECT = "object"


class ContainerType(Enum):
    """Container types for complex TypeScript structures."""
    ARRAY = "array"        # List[T] -> T[]
    UNION = "union"        # Union[A, B] -> A | B
    TUPLE = "tuple"        # Tuple[A, B] -> [A, B]
    OBJECT = "object"      # Dict[K, V] -> Record<K, V>
    LITERAL = "literal"    # Literal["a", "b"] -> "a" | "b"
    OPTIONAL = "optional"  # Optional[T] -> T | null


# === TYPE REFERENCES === #

@dataclass(frozen=True)
class TypeReference:
    """
    Recursive representation of a declared member or base type.

    Examples:
        str -> TypeReference(base_type=BaseType.STRING)
        List[User] -> TypeReference(container=ContainerType.ARRAY, args=(TypeReference(custom_type="app.User"),))
        Page[T] -> TypeReference(custom_type="app.Page", args=(TypeReference(generic_parameter="T"),))
    """
    base_type: Optional[BaseType] = None                 # Primitive type
    container: Optional[ContainerType] = None            # Container shape
    args: Tuple['TypeReference', ...] = ()               # Container or generic arguments
    literal_values: Tuple[Any, ...] = ()                 # Values for Literal types
    custom_type: Optional[str] = None                    # Qualified name of a model type
    generic_parameter: Optional[str] = None              # Open type parameter ("T")

    def is_optional(self) -> bool:
        return self.container == ContainerType.OPTIONAL

    def get_referenced_types(self) -> List[str]:
        """
        Get all custom type names referenced in this reference tree.

        Returns:
            Names in discovery order (the type itself before its arguments), no duplicates.
        """
        types: List[str] = []
        if self.custom_type:
            types.append(self.custom_type)
        for arg in self.args:
            for name in arg.get_referenced_types():
                if name not in types:
                    types.append(name)
        return types


# === EXPORT METADATA === #

@dataclass(frozen=True)
class TsTypeOverride:
    """Explicit TypeScript type for a member, optionally imported from a path."""
    type_name: Optional[str] = None                      # "Moment" or "Moment[]"
    import_path: Optional[str] = None                    # "moment"
    original_type_name: Optional[str] = None             # import { original as type_name }

    @property
    def flat_type_name(self) -> str:
        """Type name without generic arguments or array brackets, as used in imports."""
        name = self.type_name or ""
        for delimiter in ("<", "["):
            name = name.split(delimiter, 1)[0]
        return name.strip()


@dataclass(frozen=True)
class CustomBase:
    """Explicit base type override. An empty base suppresses the declared base type."""
    base: Optional[str] = None
    import_path: Optional[str] = None
    original_type_name: Optional[str] = None


@dataclass(frozen=True)
class ExportConfig:
    """Export settings attached to a type."""
    output_dir: Optional[str] = None                     # Relative to output root, None = root
    custom_base: Optional[CustomBase] = None
    is_const: bool = False                               # Enums only


# === DESCRIPTORS === #

@dataclass(frozen=True)
class MemberDescriptor:
    """One field, property or enum value of an exported type."""
    name: str
    type: TypeReference = field(default_factory=lambda: TypeReference(base_type=BaseType.ANY))
    optional: bool = False
    default_value: Optional[str] = None                  # TypeScript expression text
    default_string: Optional[str] = None                 # String default, quoted when rendered
    ignore: bool = False
    ts_type: Optional[TsTypeOverride] = None
    enum_value: Union[int, str, None] = None
    default_type_output: Optional[str] = None            # Output dir hint for non-exported referenced types
    is_public: bool = True
    is_static: bool = False


@dataclass(frozen=True)
class TypeDescriptor:
    """
    A type known to the type model.

    `export` is None for types that are referenced by exported types but are
    not marked for export themselves.
    """
    kind: TypeKind
    qualified_name: str
    name: str                                            # May carry a generic arity suffix ("Page`1")
    generic_parameters: Tuple[str, ...] = ()
    base_type: Optional[TypeReference] = None
    members: Tuple[MemberDescriptor, ...] = ()
    export: Optional[ExportConfig] = None

    @property
    def is_exported(self) -> bool:
        return self.export is not None

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_parameters)

    @property
    def output_dir(self) -> Optional[str]:
        return self.export.output_dir if self.export else None

    @property
    def custom_base(self) -> Optional[CustomBase]:
        return self.export.custom_base if self.export else None


@dataclass(frozen=True)
class TypeDependencyInfo:
    """Edge from a type to a type it references through its base type or a member."""
    type: TypeDescriptor
    is_base: bool = False
    member: Optional[MemberDescriptor] = None            # First member that produced the edge


# === TYPE MODEL === #

class TypeModel:
    """
    Read-only registry of type descriptors keyed by qualified name.

    Enumeration order is registration order, which is the order files and
    index entries are generated in.
    """

    def __init__(self, descriptors: Iterable[TypeDescriptor] = ()):
        self._types: Dict[str, TypeDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.qualified_name in self._types:
                raise ValueError(f"Duplicate type descriptor: {descriptor.qualified_name}")
            self._types[descriptor.qualified_name] = descriptor

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self):
        return iter(self._types.values())

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._types

    def find(self, qualified_name: Optional[str]) -> Optional[TypeDescriptor]:
        """Find a descriptor by qualified name; None for ambient types."""
        if not qualified_name:
            return None
        return self._types.get(qualified_name)

    def exported_types(self) -> List[TypeDescriptor]:
        """Types marked for export, in registration order."""
        return [t for t in self._types.values() if t.is_exported]
