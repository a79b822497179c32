"""
Model Introspection for typeforge

Builds the TypeModel from exported Python classes (pydantic models,
dataclasses, plain annotated classes and Enums) using runtime introspection
and tree traversal within project boundaries. Classes referenced by exported
classes are discovered recursively and registered without export settings.
"""

import math
import typing
import inspect
import logging
import dataclasses
from enum import Enum
from pathlib import Path
from pydantic import BaseModel
from typing import Any, Dict, Iterable, List, Optional, Tuple, get_args, get_origin

from typeforge.core.errors import ConfigurationError
from typeforge.core.schema import TypeModel, TypeDescriptor, MemberDescriptor, TypeKind
from typeforge.introspection.type_conversion import (
    python_type_to_type_reference, get_referenced_classes, qualified_name_of,
    generic_origin_of, is_model_class,
)
from typeforge.introspection.markers import (
    get_export_marker, get_export_config,
    TsIgnore, TsOptional, TsType, TsDefaultTypeOutput, TsDefaultValue, find_marker,
)


logger = logging.getLogger(__name__)

_MISSING = object()


def build_type_model(classes: Iterable[type], project_root: Optional[str] = None) -> TypeModel:
    """
    Build a TypeModel from exported classes.

    Uses tree traversal starting from each exported class, recursively
    discovering referenced model classes (base classes, member types and
    generic arguments) within project boundaries.

    Args:
        classes: Classes decorated with an export decorator, in output order
        project_root: Project root directory for boundary detection (optional)

    Returns:
        TypeModel with exported classes first, in the given order

    Raises:
        ConfigurationError: If a class is not exported or cannot be introspected
    """
    classes = list(classes)
    project_path = Path(project_root).resolve() if project_root else None
    discovered: Dict[str, TypeDescriptor] = {}

    for cls in classes:
        if get_export_marker(cls) is None:
            raise ConfigurationError(
                "class is not decorated with export_ts_class, export_ts_interface or export_ts_enum",
                qualified_name_of(cls),
            )

    # Exported classes register first so the model enumerates them in the given order
    for cls in classes:
        key = qualified_name_of(cls)
        if key not in discovered:
            discovered[key] = _introspect_class(cls, None)

    for cls in classes:
        _discover_references(discovered[qualified_name_of(cls)], cls, discovered, project_path)

    return TypeModel(discovered.values())


def _discover_references(descriptor: TypeDescriptor, cls: type, discovered: Dict[str, TypeDescriptor],
                         project_path: Optional[Path]):
    """Recursively register the model classes a class refers to."""
    for referenced in _get_class_references(cls):
        key = qualified_name_of(referenced)
        if key in discovered:
            continue
        if not _is_within_project_boundary(referenced, project_path):
            continue

        discovered[key] = _introspect_class(referenced, descriptor.kind)
        logger.debug(f"Discovered {key} through {descriptor.qualified_name}")
        _discover_references(discovered[key], referenced, discovered, project_path)


def _get_class_references(cls: type) -> List[type]:
    references: List[type] = []
    base = _get_model_base(cls)
    if base is not None:
        references.extend(get_referenced_classes(base))
    if not _is_enum_class(cls):
        for _, py_type in _get_own_type_hints(cls):
            for referenced in get_referenced_classes(py_type):
                if referenced not in references:
                    references.append(referenced)
    return [r for r in references if generic_origin_of(r) is not generic_origin_of(cls)]


def _is_within_project_boundary(cls: type, project_path: Optional[Path]) -> bool:
    """
    Check if a class is defined within the project boundaries.

    Args:
        cls: Python class object
        project_path: Project root path (None = accept all)

    Returns:
        True if class is within project boundaries
    """
    if project_path is None:
        return True

    try:
        class_file = Path(inspect.getfile(cls)).resolve()
        return class_file.is_relative_to(project_path)
    except (TypeError, OSError):
        return False


# === CLASS INTROSPECTION === #

def _introspect_class(cls: type, referencing_kind: Optional[TypeKind]) -> TypeDescriptor:
    """
    Convert a Python class to a TypeDescriptor.

    A class without an export marker takes its kind from the type that
    referenced it (enums are always enums).
    """
    marker = get_export_marker(cls)
    if _is_enum_class(cls):
        kind = TypeKind.ENUM
    elif marker is not None:
        kind = marker.kind
    else:
        kind = referencing_kind if referencing_kind in (TypeKind.CLASS, TypeKind.INTERFACE) else TypeKind.INTERFACE

    if marker is not None and (marker.kind == TypeKind.ENUM) != _is_enum_class(cls):
        raise ConfigurationError(
            f"export_ts_enum is only valid on Enum classes, got a {marker.kind.value} export on {cls.__name__}",
            qualified_name_of(cls),
        )

    if kind == TypeKind.ENUM:
        members = _introspect_enum_members(cls)
        base_type = None
    else:
        members = _introspect_members(cls, kind)
        base = _get_model_base(cls)
        base_type = python_type_to_type_reference(base) if base is not None else None

    return TypeDescriptor(
        kind=kind,
        qualified_name=qualified_name_of(cls),
        name=cls.__name__,
        generic_parameters=_get_generic_parameters(cls),
        base_type=base_type,
        members=tuple(members),
        export=get_export_config(cls),
    )


def _is_pydantic_model(cls: type) -> bool:
    """Check if class is a Pydantic model."""
    try:
        return issubclass(cls, BaseModel)
    except TypeError:
        return False


def _is_enum_class(cls: type) -> bool:
    """Check if class is an Enum."""
    try:
        return issubclass(cls, Enum)
    except TypeError:
        return False


def _get_generic_parameters(cls: type) -> Tuple[str, ...]:
    metadata = getattr(cls, '__pydantic_generic_metadata__', None)
    parameters = metadata.get('parameters') if metadata else None
    if not parameters:
        parameters = vars(cls).get('__parameters__', ())
    return tuple(p.__name__ for p in parameters)


def _get_model_base(cls: type) -> Optional[Any]:
    """First declared base that is itself a model class, as written (Page[T] stays parametrized)."""
    if _is_enum_class(cls):
        return None
    for base in vars(cls).get('__orig_bases__', cls.__bases__):
        candidate = get_origin(base) or base
        if not inspect.isclass(candidate):
            continue
        if is_model_class(generic_origin_of(candidate)):
            return base
    return None


def _get_own_type_hints(cls: type) -> List[Tuple[str, Any]]:
    """Resolved annotations declared on the class itself, in declaration order."""
    if _is_pydantic_model(cls):
        return _get_pydantic_type_hints(cls)

    own_names = list(inspect.get_annotations(cls))
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise ConfigurationError(f"cannot resolve annotations: {e}", qualified_name_of(cls)) from e
    return [(name, hints[name]) for name in own_names if name in hints]


def _get_pydantic_type_hints(cls: type) -> List[Tuple[str, Any]]:
    """
    Field annotations as resolved by pydantic, with their Annotated metadata.

    Annotations that are not fields (class variables, private attributes) are
    never exported, so only their static-ness is recovered.
    """
    fields = cls.model_fields
    class_vars = getattr(cls, '__class_vars__', set())

    hints = []
    for name in inspect.get_annotations(cls):
        field_info = fields.get(name)
        if field_info is not None:
            py_type = field_info.annotation
            if field_info.metadata:
                py_type = typing.Annotated[(py_type, *field_info.metadata)]
        elif name in class_vars:
            py_type = typing.ClassVar[Any]
        else:
            py_type = Any
        hints.append((name, py_type))
    return hints


def _introspect_members(cls: type, kind: TypeKind) -> List[MemberDescriptor]:
    members = []
    for name, py_type in _get_own_type_hints(cls):
        metadata = _get_annotated_metadata(py_type)
        is_static = get_origin(_unwrap_class_var(py_type, keep=True)) is typing.ClassVar
        reference = python_type_to_type_reference(_unwrap_class_var(py_type))

        default = _get_default(cls, name)
        ts_type = find_marker(metadata, TsType)
        default_type_output = find_marker(metadata, TsDefaultTypeOutput)
        default_value = find_marker(metadata, TsDefaultValue)

        optional = (
            reference.is_optional()
            or (default is not _MISSING and default is not None)
            or find_marker(metadata, TsOptional) is not None
        )

        default_text = default_string = None
        if default_value is not None:
            default_text = default_value.value
        elif kind == TypeKind.CLASS and default is not _MISSING:
            if isinstance(default, str) and not isinstance(default, Enum):
                default_string = default
            else:
                default_text = _to_ts_literal(default)

        members.append(MemberDescriptor(
            name=name,
            type=reference,
            optional=optional,
            default_value=default_text,
            default_string=default_string,
            ignore=find_marker(metadata, TsIgnore) is not None,
            ts_type=ts_type.to_override() if ts_type is not None else None,
            default_type_output=default_type_output.output_dir if default_type_output else None,
            is_public=not name.startswith('_'),
            is_static=is_static,
        ))
    return members


def _introspect_enum_members(cls: type) -> List[MemberDescriptor]:
    members = []
    for member in cls:
        value = member.value
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ConfigurationError(
                f"enum value {member.name}={value!r} is neither an int nor a str",
                qualified_name_of(cls),
            )
        members.append(MemberDescriptor(
            name=member.name,
            type=python_type_to_type_reference(type(value)),
            enum_value=value,
        ))
    return members


def _get_annotated_metadata(py_type: Any) -> Tuple[Any, ...]:
    """Metadata of Annotated[...] wrappers, including one nested in ClassVar."""
    metadata: Tuple[Any, ...] = ()
    while True:
        origin = get_origin(py_type)
        if origin is typing.Annotated:
            args = get_args(py_type)
            metadata += tuple(args[1:])
            py_type = args[0]
        elif origin is typing.ClassVar:
            args = get_args(py_type)
            py_type = args[0] if args else None
        else:
            return metadata


def _unwrap_class_var(py_type: Any, keep: bool = False) -> Any:
    """Type inside ClassVar[...]; with keep=True only outer Annotated layers are removed."""
    while get_origin(py_type) is typing.Annotated:
        py_type = get_args(py_type)[0]
    if keep:
        return py_type
    if get_origin(py_type) is typing.ClassVar:
        args = get_args(py_type)
        return args[0] if args else Any
    return py_type


def _get_default(cls: type, name: str) -> Any:
    """Default value of a member, or _MISSING for required members."""
    if _is_pydantic_model(cls):
        field_info = cls.model_fields.get(name)
        if field_info is not None:
            if field_info.is_required() or field_info.default_factory is not None:
                return _MISSING
            return field_info.default

    if dataclasses.is_dataclass(cls):
        for field in dataclasses.fields(cls):
            if field.name == name:
                return _MISSING if field.default is dataclasses.MISSING else field.default

    return vars(cls).get(name, _MISSING)


def _to_ts_literal(value: Any) -> Optional[str]:
    """TypeScript initializer for a non-string primitive default, None when there is none."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value) if math.isfinite(value) else None
    if value is None:
        return "null"
    return None
