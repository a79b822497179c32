"""
typeforge TypeScript Generation Pipeline

Orchestrates the type service, dependency resolver, template service and
content merger into complete TypeScript files, one per type, plus an optional
index barrel. Each file is assembled fully in memory; generation of different
types is independent and runs on a thread pool.
"""

import os
import logging
import tempfile
import posixpath
from pathlib import Path
from dataclasses import dataclass, field
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from typeforge.core.errors import ConfigurationError
from typeforge.core.config import GeneratorOptions
from typeforge.core.type_service import TypeService, escape_typescript_string
from typeforge.core.utils import join_output_path, normalize_dir
from typeforge.core.schema import TypeModel, TypeDescriptor, TypeKind, MemberDescriptor
from typeforge.generators.typescript.templates import TemplateService
from typeforge.generators.typescript.preservation import ContentMerger
from typeforge.generators.typescript.dependencies import DependencyResolver


logger = logging.getLogger(__name__)

FILE_HEADER = '''/**
 * Auto-generated by typeforge - DO NOT EDIT outside the custom-head and custom-body blocks.
 * Other changes will be overwritten on regeneration.
 */

'''


@dataclass
class GeneratedFile:
    """One output unit: a path and its complete text."""
    path: str
    content: str
    type_name: Optional[str] = None                  # Qualified name, None for the index barrel


@dataclass
class GenerationResult:
    """Outcome of a generation run."""
    files: List[GeneratedFile] = field(default_factory=list)
    errors: Dict[str, ConfigurationError] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def as_dict(self) -> Dict[str, str]:
        """Generated files mapping (file_path -> content)."""
        return {f.path: f.content for f in self.files}


@dataclass(frozen=True)
class _GenerationUnit:
    descriptor: TypeDescriptor
    output_dir: Optional[str]


class TypeScriptGenerator:
    """File Generation Orchestrator for one type model and one set of options."""

    def __init__(self, type_model: TypeModel, options: Optional[GeneratorOptions] = None,
                 content_merger: Optional[ContentMerger] = None):
        self.options = options or GeneratorOptions()
        self.type_model = type_model
        self.type_service = TypeService(type_model, self.options.converter_chain("type_name_converters"))
        self.dependency_resolver = DependencyResolver(
            self.type_service, self.options.converter_chain("file_name_converters")
        )
        self.templates = TemplateService(self.options)
        self.content_merger = content_merger or ContentMerger()
        self._property_name_converters = self.options.converter_chain("property_name_converters")
        self._enum_value_name_converters = self.options.converter_chain("enum_value_name_converters")

    # === RUN === #

    def generate(self) -> GenerationResult:
        """
        Generate every exported type (and, if enabled, the non-exported types
        they depend on).

        Configuration errors are recorded per type and never stop unrelated
        types from being generated.

        Returns:
            GenerationResult with files in type enumeration order
        """
        result = GenerationResult()
        units = self._collect_generation_units()
        units = self._reject_path_collisions(units, result)

        max_workers = self.options.max_workers or os.cpu_count() or 1
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(self._generate_unit, units))

        for unit, generated, error in outcomes:
            if error is not None:
                result.errors[unit.descriptor.qualified_name] = error
                logger.error(f"Skipping {unit.descriptor.qualified_name}: {error}")
            else:
                result.files.append(generated)

        if self.options.create_index_file and result.files:
            result.files.append(self.generate_index_file(result.files))

        logger.debug(f"Generated {len(result.files)} files, {len(result.errors)} types failed")
        return result

    def _generate_unit(self, unit: _GenerationUnit) -> Tuple[_GenerationUnit, Optional[GeneratedFile], Optional[ConfigurationError]]:
        try:
            return unit, self.generate_type_file(unit.descriptor, unit.output_dir), None
        except ConfigurationError as e:
            return unit, None, e

    def _collect_generation_units(self) -> List[_GenerationUnit]:
        """Exported types in model order, each followed by the non-exported types it pulls in."""
        units: List[_GenerationUnit] = []
        seen = set()

        def visit(descriptor: TypeDescriptor, output_dir: Optional[str]):
            key = (descriptor.qualified_name, normalize_dir(output_dir))
            if key in seen:
                return
            seen.add(key)
            units.append(_GenerationUnit(descriptor, output_dir))

            if not self.options.generate_dependencies:
                return
            for dependency in self.dependency_resolver.get_type_dependencies(descriptor):
                if not dependency.type.is_exported:
                    visit(dependency.type, self.dependency_resolver.resolve_output_dir(dependency, output_dir))

        for descriptor in self.type_model.exported_types():
            visit(descriptor, descriptor.output_dir)

        return units

    def _reject_path_collisions(self, units: List[_GenerationUnit], result: GenerationResult) -> List[_GenerationUnit]:
        """Drop every unit whose output path is shared with another type."""
        by_path: Dict[str, List[_GenerationUnit]] = {}
        for unit in units:
            by_path.setdefault(self.get_output_path(unit.descriptor, unit.output_dir), []).append(unit)

        valid = []
        for unit in units:
            path = self.get_output_path(unit.descriptor, unit.output_dir)
            sharing = by_path[path]
            names = {u.descriptor.qualified_name for u in sharing}
            if len(names) > 1:
                others = ", ".join(sorted(names - {unit.descriptor.qualified_name}))
                error = ConfigurationError(
                    f"output path {path} is also used by {others}", unit.descriptor.qualified_name
                )
                result.errors[unit.descriptor.qualified_name] = error
                logger.error(str(error))
            else:
                valid.append(unit)
        return valid

    # === PATHS === #

    def get_file_name(self, descriptor: TypeDescriptor) -> str:
        return f"{self.dependency_resolver.get_file_name(descriptor)}.{self.options.file_extension}"

    def get_output_path(self, descriptor: TypeDescriptor, output_dir: Optional[str] = None) -> str:
        """Output file path of a type; defaults to the type's configured directory."""
        if output_dir is None:
            output_dir = descriptor.output_dir
        return join_output_path(self.options.output_directory, output_dir, self.get_file_name(descriptor))

    # === PER-TYPE GENERATION === #

    def generate_type_file(self, descriptor: TypeDescriptor, output_dir: Optional[str] = None) -> GeneratedFile:
        """
        Generate the complete file for one type.

        Raises:
            ConfigurationError: If the type's export metadata is contradictory
        """
        if output_dir is None:
            output_dir = descriptor.output_dir

        self.type_service.validate(descriptor)
        path = self.get_output_path(descriptor, output_dir)
        imports = self.get_imports_text(descriptor, output_dir)
        name = self.type_service.get_declaration_name(descriptor)

        if descriptor.kind == TypeKind.CLASS:
            content = self.templates.fill_class(
                imports, name, self.get_extends_text(descriptor), self.get_class_properties_text(descriptor),
                self.content_merger.get_custom_head(path),
                self.content_merger.get_custom_body(path, self.options.tab_length),
            )
        elif descriptor.kind == TypeKind.INTERFACE:
            content = self.templates.fill_interface(
                imports, name, self.get_extends_text(descriptor), self.get_interface_properties_text(descriptor),
                self.content_merger.get_custom_head(path),
                self.content_merger.get_custom_body(path, self.options.tab_length),
            )
        elif descriptor.kind == TypeKind.ENUM:
            is_const = bool(descriptor.export and descriptor.export.is_const)
            content = self.templates.fill_enum(imports, name, self.get_enum_values_text(descriptor), is_const)
        else:
            raise ConfigurationError(f"unsupported type kind {descriptor.kind!r}", descriptor.qualified_name)

        if self.options.add_file_header:
            content = FILE_HEADER + content

        logger.debug(f"Generated {path} for {descriptor.qualified_name}")
        return GeneratedFile(path=path, content=content, type_name=descriptor.qualified_name)

    def get_imports_text(self, descriptor: TypeDescriptor, output_dir: Optional[str]) -> str:
        """Dependency imports followed by custom imports, then one blank line if any."""
        lines = _unique(
            self.get_type_dependency_imports(descriptor, output_dir) + self.get_custom_imports(descriptor)
        )
        if not lines:
            return ""
        return "".join(lines) + "\n"

    def get_type_dependency_imports(self, descriptor: TypeDescriptor, output_dir: Optional[str]) -> List[str]:
        """
        One import line per dependency, in discovery order.

        Without dependency generation, types that are not exported have no file
        to import from and are left ambient.
        """
        lines = []
        for dependency in self.dependency_resolver.get_type_dependencies(descriptor):
            if not dependency.type.is_exported and not self.options.generate_dependencies:
                continue
            import_path = self.dependency_resolver.get_import_path(dependency, output_dir)
            type_name = self.type_service.get_type_name(dependency.type)
            lines.append(self.templates.fill_import(type_name, import_path))
        return _unique(lines)

    def get_custom_imports(self, descriptor: TypeDescriptor) -> List[str]:
        """Imports requested by a custom base override and by member type overrides."""
        lines = []

        custom_base = descriptor.custom_base
        if custom_base is not None and custom_base.base and custom_base.import_path:
            flat_base = custom_base.base.split("<", 1)[0].strip()
            lines.append(self._fill_custom_import(flat_base, custom_base.import_path, custom_base.original_type_name))

        for member in self.type_service.get_exportable_members(descriptor):
            override = member.ts_type
            if override is not None and override.import_path:
                lines.append(self._fill_custom_import(
                    override.flat_type_name, override.import_path, override.original_type_name
                ))

        return _unique(lines)

    def _fill_custom_import(self, type_name: str, import_path: str, original_type_name: Optional[str]) -> str:
        if original_type_name:
            return self.templates.fill_import(original_type_name, import_path, type_alias=type_name)
        return self.templates.fill_import(type_name, import_path)

    def get_extends_text(self, descriptor: TypeDescriptor) -> str:
        return self.templates.get_extends_text(self.type_service.get_extends_type_name(descriptor))

    def get_class_properties_text(self, descriptor: TypeDescriptor) -> str:
        parts = []
        for member in self.type_service.get_exportable_members(descriptor):
            parts.append(self.templates.fill_class_property(
                self._property_name(member),
                self.type_service.get_member_ts_type_name(member),
                self._default_value_text(member),
            ))
        return "".join(parts)

    def _default_value_text(self, member: MemberDescriptor) -> Optional[str]:
        if member.default_value is not None:
            return member.default_value
        if member.default_string is not None:
            return self._quoted(member.default_string)
        return None

    def get_interface_properties_text(self, descriptor: TypeDescriptor) -> str:
        parts = []
        for member in self.type_service.get_exportable_members(descriptor):
            parts.append(self.templates.fill_interface_property(
                self._property_name(member),
                self.type_service.get_member_ts_type_name(member),
                member.optional,
            ))
        return "".join(parts)

    def get_enum_values_text(self, descriptor: TypeDescriptor) -> str:
        parts = []
        for index, member in enumerate(self.type_service.get_exportable_members(descriptor)):
            name = self._enum_value_name_converters.convert(member.name, member)
            parts.append(self.templates.fill_enum_value(name, self._enum_value_text(member, index)))
        return "".join(parts)

    def _property_name(self, member: MemberDescriptor) -> str:
        return self._property_name_converters.convert(member.name, member)

    def _enum_value_text(self, member: MemberDescriptor, index: int) -> str:
        value = member.enum_value
        if value is None:
            return str(index)
        if isinstance(value, str):
            return self._quoted(value)
        return str(int(value))

    def _quoted(self, value: str) -> str:
        quote = self.templates.quote
        return f"{quote}{escape_typescript_string(value, quote)}{quote}"

    # === INDEX === #

    def generate_index_file(self, files: List[GeneratedFile]) -> GeneratedFile:
        """
        Barrel file re-exporting every generated file, in the given order.

        A type written to several directories is re-exported from its first
        file only, so the barrel never exports the same name twice.
        """
        root = self.options.output_directory.replace("\\", "/") or "."
        exports = []
        exported_types = set()
        for generated in files:
            if generated.type_name is not None:
                if generated.type_name in exported_types:
                    continue
                exported_types.add(generated.type_name)
            relative = posixpath.relpath(generated.path, root)
            module_path = posixpath.splitext(relative)[0]
            exports.append(self.templates.fill_index_export(module_path))

        content = self.templates.fill_index("".join(exports))
        if self.options.add_file_header:
            content = FILE_HEADER + content

        index_name = f"{self.options.index_file_name}.{self.options.file_extension}"
        return GeneratedFile(path=join_output_path(self.options.output_directory, None, index_name), content=content)


def _unique(lines: List[str]) -> List[str]:
    """Drop repeated lines, keeping the first occurrence."""
    return list(dict.fromkeys(lines))


# === WRITING === #

def write_generated_files(files: List[GeneratedFile]) -> List[str]:
    """
    Write generated files to disk.

    Each file is written to a temporary file in its target directory and
    moved into place, so a file is either fully replaced or left untouched.

    Returns:
        Paths written
    """
    written = []
    for generated in files:
        target = Path(generated.path)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
                f.write(generated.content)
            os.replace(temp_path, target)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        logger.debug(f"Wrote {generated.path}")
        written.append(generated.path)
    return written
