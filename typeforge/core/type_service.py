"""
typeforge Type Service

Answers questions about the type model: which members of a type get exported,
what its base type is, and how a TypeReference is spelled in TypeScript.
"""

from typing import List, Optional

from typeforge.core.errors import ConfigurationError
from typeforge.core.converters import ConverterChain
from typeforge.core.utils import remove_type_arity
from typeforge.core.schema import (
    TypeModel, TypeDescriptor, MemberDescriptor, TypeReference, TypeKind,
    BaseType, ContainerType,
)


class TypeService:
    """Type Model Service bound to one TypeModel and one type name converter chain."""

    def __init__(self, type_model: TypeModel, type_name_converters: Optional[ConverterChain] = None):
        self.type_model = type_model
        self.type_name_converters = type_name_converters or ConverterChain()

    # === MEMBERS & BASE TYPES === #

    def get_exportable_members(self, descriptor: TypeDescriptor) -> List[MemberDescriptor]:
        """Members that are not ignored, public and not static, in declaration order."""
        return [
            member for member in descriptor.members
            if not member.ignore and member.is_public and not member.is_static
        ]

    def get_base_type(self, descriptor: TypeDescriptor) -> Optional[TypeDescriptor]:
        """
        Resolve the declared base type to a descriptor.

        Returns None for enums, for types without a base, for ambient bases and
        whenever a custom base override is configured (the override replaces
        the declared base).
        """
        if descriptor.kind == TypeKind.ENUM or descriptor.custom_base is not None:
            return None
        if descriptor.base_type is None:
            return None
        return self.type_model.find(descriptor.base_type.custom_type)

    def has_base(self, descriptor: TypeDescriptor) -> bool:
        """Whether the type renders an extends clause."""
        if descriptor.kind == TypeKind.ENUM:
            return False
        if descriptor.custom_base is not None:
            return bool(descriptor.custom_base.base)
        return descriptor.base_type is not None

    def validate(self, descriptor: TypeDescriptor) -> None:
        """
        Check export metadata for contradictions.

        Raises:
            ConfigurationError: alias without backing name, circular custom base,
                base override on an enum
        """
        custom_base = descriptor.custom_base
        if custom_base is not None:
            if descriptor.kind == TypeKind.ENUM:
                raise ConfigurationError("enums cannot declare a custom base type", descriptor.qualified_name)
            if custom_base.original_type_name and not custom_base.base:
                raise ConfigurationError(
                    f"custom base alias for '{custom_base.original_type_name}' has no base name",
                    descriptor.qualified_name,
                )
            if custom_base.base:
                own_name = self.get_type_name(descriptor)
                if custom_base.base.split("<", 1)[0].strip() == own_name:
                    raise ConfigurationError(
                        f"custom base '{custom_base.base}' refers back to the type itself",
                        descriptor.qualified_name,
                    )

        for member in descriptor.members:
            override = member.ts_type
            if override is None:
                continue
            if override.original_type_name and not override.type_name:
                raise ConfigurationError(
                    f"member '{member.name}' aliases '{override.original_type_name}' without a type name",
                    descriptor.qualified_name,
                )
            if override.import_path and not override.flat_type_name:
                raise ConfigurationError(
                    f"member '{member.name}' has an import path but no type name",
                    descriptor.qualified_name,
                )

    # === NAMES === #

    def get_type_name(self, descriptor: TypeDescriptor) -> str:
        """Converted, arity-stripped name of a type without generic parameters."""
        return self.type_name_converters.convert(remove_type_arity(descriptor.name), descriptor)

    def get_declaration_name(self, descriptor: TypeDescriptor) -> str:
        """Name used in the type's own declaration, including "<T, U>" for generic types."""
        name = self.get_type_name(descriptor)
        if descriptor.is_generic:
            name += f"<{', '.join(descriptor.generic_parameters)}>"
        return name

    def get_member_ts_type_name(self, member: MemberDescriptor) -> str:
        """TypeScript type of a member; an explicit override wins over the declared type."""
        if member.ts_type is not None and member.ts_type.type_name:
            return member.ts_type.type_name
        return self.get_ts_type_name(member.type, is_top_level=True)

    def get_extends_type_name(self, descriptor: TypeDescriptor) -> Optional[str]:
        """Name after "extends", or None when the type has no base."""
        if not self.has_base(descriptor):
            return None
        if descriptor.custom_base is not None:
            return descriptor.custom_base.base
        return self.get_ts_type_name(descriptor.base_type, for_extends=True)

    def get_ts_type_name(
        self,
        reference: TypeReference,
        converters: Optional[ConverterChain] = None,
        for_extends: bool = False,
        is_top_level: bool = False,
    ) -> str:
        """
        Convert a TypeReference to its TypeScript spelling.

        Args:
            reference: Declared type
            converters: Type name converters (defaults to the service's chain)
            for_extends: Render open generic arguments of a generic base by name
            is_top_level: Member-level reference; a top-level Optional[T] renders
                as T because optionality is expressed with "?"
        """
        converters = converters or self.type_name_converters

        if reference.generic_parameter:
            return reference.generic_parameter
        if reference.container:
            return self._convert_container_type(reference, converters, is_top_level)
        if reference.custom_type:
            return self._convert_custom_type(reference, converters, for_extends)
        if reference.base_type:
            return reference.base_type.value
        return BaseType.ANY.value

    def _convert_custom_type(self, reference: TypeReference, converters: ConverterChain, for_extends: bool) -> str:
        descriptor = self.type_model.find(reference.custom_type)
        if descriptor is None:
            # Ambient type: last segment of the qualified name, as-is
            name = remove_type_arity(reference.custom_type.rsplit(".", 1)[-1])
        else:
            name = converters.convert(remove_type_arity(descriptor.name), descriptor)

        if reference.args:
            args = [
                arg.generic_parameter if (for_extends and arg.generic_parameter)
                else self.get_ts_type_name(arg, converters)
                for arg in reference.args
            ]
            return f"{name}<{', '.join(args)}>"

        if for_extends and descriptor is not None and descriptor.generic_parameters:
            return f"{name}<{', '.join(descriptor.generic_parameters)}>"

        return name

    def _convert_container_type(self, reference: TypeReference, converters: ConverterChain, is_top_level: bool) -> str:
        """Convert container types to TypeScript."""
        if reference.container == ContainerType.OPTIONAL:
            return self._convert_optional_type(reference, converters, is_top_level)
        elif reference.container == ContainerType.ARRAY:
            return self._convert_array_type(reference, converters)
        elif reference.container == ContainerType.OBJECT:
            return self._convert_object_type(reference, converters)
        elif reference.container == ContainerType.TUPLE:
            return self._convert_tuple_type(reference, converters)
        elif reference.container == ContainerType.UNION:
            return self._convert_union_type(reference, converters)
        elif reference.container == ContainerType.LITERAL:
            return self._convert_literal_type(reference)
        else:
            return "any"

    def _convert_array_type(self, reference: TypeReference, converters: ConverterChain) -> str:
        """Convert List[T] to T[]."""
        if reference.args:
            inner_type = self.get_ts_type_name(reference.args[0], converters)
            if "|" in inner_type or "&" in inner_type:
                return f"({inner_type})[]"
            return f"{inner_type}[]"
        return "any[]"

    def _convert_object_type(self, reference: TypeReference, converters: ConverterChain) -> str:
        """Convert Dict[K, V] to Record<K, V>."""
        if len(reference.args) >= 2:
            key_type = self.get_ts_type_name(reference.args[0], converters)
            value_type = self.get_ts_type_name(reference.args[1], converters)
            return f"Record<{key_type}, {value_type}>"
        elif len(reference.args) == 1:
            value_type = self.get_ts_type_name(reference.args[0], converters)
            return f"Record<string, {value_type}>"
        else:
            return "Record<string, any>"

    def _convert_union_type(self, reference: TypeReference, converters: ConverterChain) -> str:
        """Convert Union[A, B] to A | B."""
        if reference.args:
            return " | ".join(self.get_ts_type_name(arg, converters) for arg in reference.args)
        return "any"

    def _convert_literal_type(self, reference: TypeReference) -> str:
        """Convert Literal["a", 1] to "a" | 1."""
        if not reference.literal_values:
            return "any"
        literal_parts = []
        for value in reference.literal_values:
            if isinstance(value, bool):
                literal_parts.append(str(value).lower())
            elif isinstance(value, str):
                literal_parts.append(f'"{escape_typescript_string(value)}"')
            else:
                literal_parts.append(str(value))
        return " | ".join(literal_parts)

    def _convert_tuple_type(self, reference: TypeReference, converters: ConverterChain) -> str:
        """Convert Tuple[A, B] to [A, B]."""
        if reference.args:
            return f"[{', '.join(self.get_ts_type_name(arg, converters) for arg in reference.args)}]"
        return "any[]"

    def _convert_optional_type(self, reference: TypeReference, converters: ConverterChain, is_top_level: bool) -> str:
        """Convert Optional[T] to T (top-level) or T | null (nested)."""
        if not reference.args:
            return "any"
        inner_type = self.get_ts_type_name(reference.args[0], converters)
        if is_top_level:
            return inner_type
        return f"{inner_type} | null"


def escape_typescript_string(value: str, quote: str = '"') -> str:
    """Escape a string literal body for TypeScript."""
    return value.replace("\\", "\\\\").replace(quote, f"\\{quote}").replace("\n", "\\n")
