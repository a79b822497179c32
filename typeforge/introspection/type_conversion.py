"""
typeforge Type Conversion for Runtime Introspection

Converts Python runtime type objects to typeforge's TypeReference system.
Handles typing module constructs, primitive types, type variables, generic
classes and custom classes with full recursive support for nested types.
"""

import uuid
import types
import typing
import inspect
from enum import Enum
from pathlib import Path
from decimal import Decimal
from datetime import datetime, date, time, timedelta
from collections import abc
from typing import Any, List, Union, get_origin, get_args

from pydantic import BaseModel, EmailStr, HttpUrl, AnyUrl, SecretStr

from typeforge.core.schema import TypeReference, BaseType, ContainerType
from typeforge.introspection.markers import get_export_marker


# Types serialized as JSON primitives
COMMON_TYPE_MAP = {
    uuid.UUID: BaseType.STRING,
    Decimal: BaseType.NUMBER,
    datetime: BaseType.STRING,
    date: BaseType.STRING,
    time: BaseType.STRING,
    timedelta: BaseType.STRING,
    Path: BaseType.STRING,
    EmailStr: BaseType.STRING,
    HttpUrl: BaseType.STRING,
    AnyUrl: BaseType.STRING,
    SecretStr: BaseType.STRING,
    bytes: BaseType.STRING,
}

_ARRAY_ORIGINS = (list, set, frozenset, abc.Sequence, abc.MutableSequence, abc.Set, abc.MutableSet, abc.Iterable)
_OBJECT_ORIGINS = (dict, abc.Mapping, abc.MutableMapping)
_UNION_ORIGINS = (Union, types.UnionType)


def qualified_name_of(cls: type) -> str:
    """Stable model key of a class: "module.QualName"."""
    cls = generic_origin_of(cls)
    return f"{cls.__module__}.{cls.__qualname__}"


def generic_origin_of(cls: type) -> type:
    """Unparametrized class behind a pydantic generic model such as Page[User]."""
    metadata = getattr(cls, '__pydantic_generic_metadata__', None)
    if metadata and metadata.get('origin') is not None:
        return metadata['origin']
    return cls


def strip_annotated(py_type: Any) -> Any:
    """Drop Annotated[...] wrappers, keeping the underlying type."""
    while get_origin(py_type) is typing.Annotated:
        py_type = get_args(py_type)[0]
    return py_type


def python_type_to_type_reference(py_type: Any) -> TypeReference:
    """
    Convert Python runtime type object to TypeReference.

    Handles all typing module constructs, primitives, and custom classes.
    Supports complex nested types like Optional[List[Union[User, Product]]].

    Args:
        py_type: Python type object from typing.get_type_hints() or a pydantic field

    Returns:
        TypeReference representing the type structure
    """
    py_type = strip_annotated(py_type)

    if py_type is None or py_type is type(None):
        return TypeReference(base_type=BaseType.NULL)

    if py_type is Any:
        return TypeReference(base_type=BaseType.ANY)

    if isinstance(py_type, typing.TypeVar):
        return TypeReference(generic_parameter=py_type.__name__)

    if isinstance(py_type, typing.ForwardRef):
        # Unresolved forward reference: treat the name as an ambient type
        return TypeReference(custom_type=py_type.__forward_arg__)

    # Pydantic generic models are real subclasses rather than typing aliases
    metadata = getattr(py_type, '__pydantic_generic_metadata__', None)
    if metadata and metadata.get('origin') is not None:
        return _convert_generic_class(metadata['origin'], metadata.get('args', ()))

    origin = get_origin(py_type)
    if origin is not None:
        return _convert_typing_construct(py_type, origin)

    if _is_primitive_type(py_type):
        return _convert_primitive_type(py_type)

    if py_type in COMMON_TYPE_MAP:
        return TypeReference(base_type=COMMON_TYPE_MAP[py_type])

    if inspect.isclass(py_type):
        return TypeReference(custom_type=qualified_name_of(py_type))

    return TypeReference(base_type=BaseType.ANY)


def _convert_typing_construct(py_type: Any, origin: Any) -> TypeReference:
    """Convert typing module constructs (Optional, List, Union, etc.)."""
    args = get_args(py_type)

    if origin in _UNION_ORIGINS:
        return _convert_union_type(args)
    elif origin is typing.Literal:
        return TypeReference(container=ContainerType.LITERAL, literal_values=tuple(args))
    elif origin is tuple:
        return _convert_tuple_type(args)
    elif origin in _OBJECT_ORIGINS:
        return _convert_dict_type(args)
    elif origin in _ARRAY_ORIGINS:
        return _convert_list_type(args)
    elif origin is typing.ClassVar:
        return python_type_to_type_reference(args[0]) if args else TypeReference(base_type=BaseType.ANY)
    elif inspect.isclass(origin) and origin not in COMMON_TYPE_MAP:
        # User generic class: Box[int]
        return _convert_generic_class(origin, args)
    else:
        return TypeReference(base_type=BaseType.ANY)


def _convert_generic_class(origin: type, args: tuple) -> TypeReference:
    return TypeReference(
        custom_type=qualified_name_of(origin),
        args=tuple(python_type_to_type_reference(arg) for arg in args),
    )


def _convert_union_type(args: tuple) -> TypeReference:
    """
    Convert Union types, including Optional (Union[T, None]).

    Union[A, B, None] becomes OPTIONAL around a UNION of the non-None members.
    """
    non_none = [arg for arg in args if arg is not type(None)]
    if len(non_none) < len(args):
        if len(non_none) == 1:
            inner = python_type_to_type_reference(non_none[0])
        else:
            inner = TypeReference(
                container=ContainerType.UNION,
                args=tuple(python_type_to_type_reference(arg) for arg in non_none),
            )
        return TypeReference(container=ContainerType.OPTIONAL, args=(inner,))

    return TypeReference(
        container=ContainerType.UNION,
        args=tuple(python_type_to_type_reference(arg) for arg in args),
    )


def _convert_list_type(args: tuple) -> TypeReference:
    """Convert List[T] to ARRAY container."""
    inner = python_type_to_type_reference(args[0]) if args else TypeReference(base_type=BaseType.ANY)
    return TypeReference(container=ContainerType.ARRAY, args=(inner,))


def _convert_dict_type(args: tuple) -> TypeReference:
    """Convert Dict[K, V] to OBJECT container."""
    if len(args) >= 2:
        return TypeReference(
            container=ContainerType.OBJECT,
            args=(python_type_to_type_reference(args[0]), python_type_to_type_reference(args[1])),
        )
    return TypeReference(
        container=ContainerType.OBJECT,
        args=(TypeReference(base_type=BaseType.STRING), TypeReference(base_type=BaseType.ANY)),
    )


def _convert_tuple_type(args: tuple) -> TypeReference:
    """Convert Tuple[A, B] to TUPLE and Tuple[A, ...] to ARRAY."""
    if len(args) == 2 and args[1] is Ellipsis:
        return _convert_list_type(args[:1])
    if not args or args == ((),):
        return TypeReference(container=ContainerType.ARRAY, args=(TypeReference(base_type=BaseType.ANY),))
    return TypeReference(
        container=ContainerType.TUPLE,
        args=tuple(python_type_to_type_reference(arg) for arg in args),
    )


def _convert_primitive_type(py_type: type) -> TypeReference:
    """Convert primitive Python types to BaseType."""
    if py_type is bool:
        return TypeReference(base_type=BaseType.BOOLEAN)
    elif py_type is int or py_type is float:
        return TypeReference(base_type=BaseType.NUMBER)
    elif py_type is str:
        return TypeReference(base_type=BaseType.STRING)
    elif py_type is dict:
        return _convert_dict_type(())
    elif py_type is object:
        return TypeReference(base_type=BaseType.UNKNOWN)
    else:
        return _convert_list_type(())


def _is_primitive_type(py_type: Any) -> bool:
    """Check if type is a Python primitive type."""
    return py_type in (int, float, str, bool, dict, list, tuple, set, frozenset, object)


# === REFERENCED CLASSES === #

def get_referenced_classes(py_type: Any) -> List[type]:
    """
    Collect the classes a type annotation refers to that could be model types.

    Pydantic models, dataclasses, enums and generic classes are returned in
    discovery order; primitives and mapped common types are skipped.
    """
    found: List[type] = []
    _collect_classes(py_type, found)
    return found


def _collect_classes(py_type: Any, found: List[type]):
    py_type = strip_annotated(py_type)

    metadata = getattr(py_type, '__pydantic_generic_metadata__', None)
    if metadata and metadata.get('origin') is not None:
        _add_class(metadata['origin'], found)
        for arg in metadata.get('args', ()):
            _collect_classes(arg, found)
        return

    origin = get_origin(py_type)
    if origin is not None:
        if inspect.isclass(origin) and is_model_class(origin):
            _add_class(origin, found)
        for arg in get_args(py_type):
            _collect_classes(arg, found)
        return

    if inspect.isclass(py_type) and is_model_class(py_type):
        _add_class(py_type, found)


def _add_class(cls: type, found: List[type]):
    if cls not in found:
        found.append(cls)


def is_model_class(cls: type) -> bool:
    """Whether a class can become a type descriptor."""
    if cls in COMMON_TYPE_MAP or _is_primitive_type(cls):
        return False
    if get_export_marker(cls) is not None:
        return True
    try:
        if issubclass(cls, Enum) or issubclass(cls, BaseModel):
            return cls is not BaseModel and cls.__module__ != 'enum'
    except TypeError:
        return False
    return hasattr(cls, '__dataclass_fields__')
