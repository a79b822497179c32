# generators/typescript/dependencies.py
"""
typeforge Dependency Resolver

Works out which model types an exported type depends on, where each of those
types is written, and the relative import specifier between the two files.
Path handling is lexical and OS-independent (see core.utils.relative_path).
"""

from typing import Dict, List, Optional

from typeforge.core.converters import ConverterChain
from typeforge.core.type_service import TypeService
from typeforge.core.utils import relative_path, join_import_path, remove_type_arity
from typeforge.core.schema import TypeDescriptor, TypeDependencyInfo, MemberDescriptor, TypeKind


class DependencyResolver:
    """Dependency Graph Resolver over the type service's model."""

    def __init__(self, type_service: TypeService, file_name_converters: Optional[ConverterChain] = None):
        self.type_service = type_service
        self.file_name_converters = file_name_converters or ConverterChain()

    def get_type_dependencies(self, descriptor: TypeDescriptor) -> List[TypeDependencyInfo]:
        """
        Enumerate the model types referenced by a type.

        The base type comes first (is_base=True), followed by the types in its
        generic arguments and then member types in declaration order. Each
        referenced type appears once; self references and ambient names are
        skipped. The base edge is left out when a custom base override is
        configured, because the override brings its own import.

        Args:
            descriptor: Type whose dependencies are needed

        Returns:
            Ordered, duplicate-free list of dependency edges
        """
        if descriptor.kind == TypeKind.ENUM:
            return []

        dependencies: Dict[str, TypeDependencyInfo] = {}

        def add(qualified_name: str, is_base: bool, member: Optional[MemberDescriptor]):
            if qualified_name == descriptor.qualified_name or qualified_name in dependencies:
                return
            referenced = self.type_service.type_model.find(qualified_name)
            if referenced is None:
                return
            dependencies[qualified_name] = TypeDependencyInfo(type=referenced, is_base=is_base, member=member)

        if descriptor.base_type is not None and descriptor.custom_base is None:
            base = self.type_service.get_base_type(descriptor)
            # Only the base itself is a base edge; its generic arguments are plain edges
            for qualified_name in descriptor.base_type.get_referenced_types():
                add(qualified_name, base is not None and qualified_name == base.qualified_name, None)

        for member in self.type_service.get_exportable_members(descriptor):
            if member.ts_type is not None and member.ts_type.type_name:
                continue
            for qualified_name in member.type.get_referenced_types():
                add(qualified_name, False, member)

        return list(dependencies.values())

    def resolve_output_dir(self, dependency: TypeDependencyInfo, parent_output_dir: Optional[str]) -> Optional[str]:
        """
        Output directory of a dependency.

        An exported type is always written to its own configured directory
        (None meaning the output root). A type that is not exported falls back
        to the default output hint of the member that referenced it, then to
        the referencing type's directory.
        """
        referenced = dependency.type
        if referenced.is_exported:
            return referenced.output_dir

        if dependency.member is not None and dependency.member.default_type_output:
            return dependency.member.default_type_output

        return parent_output_dir

    def get_file_name(self, descriptor: TypeDescriptor) -> str:
        """Output file name of a type without extension."""
        return self.file_name_converters.convert(remove_type_arity(descriptor.name), descriptor)

    def get_import_path(self, dependency: TypeDependencyInfo, parent_output_dir: Optional[str]) -> str:
        """Relative import specifier from the referencing type's file to the dependency's file."""
        dependency_output_dir = self.resolve_output_dir(dependency, parent_output_dir)
        directory_diff = relative_path(parent_output_dir, dependency_output_dir)
        return join_import_path(directory_diff, self.get_file_name(dependency.type))
