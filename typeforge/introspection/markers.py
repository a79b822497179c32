"""
typeforge Export Markers

Decorators that mark Python classes for TypeScript export, and Annotated
metadata that tunes individual members:

    @export_ts_interface(output_dir="model")
    class User(BaseModel):
        id: int
        created: Annotated[datetime, TsType("Moment", import_path="moment")]
        secret: Annotated[str, TsIgnore()]
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from typeforge.core.errors import ConfigurationError
from typeforge.core.schema import TypeKind, ExportConfig, CustomBase, TsTypeOverride


EXPORT_ATTRIBUTE = "__typeforge_export__"
CUSTOM_BASE_ATTRIBUTE = "__typeforge_custom_base__"


@dataclass(frozen=True)
class ExportMarker:
    """What an export decorator recorded on a class."""
    kind: TypeKind
    output_dir: Optional[str] = None
    is_const: bool = False


# === CLASS DECORATORS === #

def _export_decorator(kind: TypeKind, cls=None, output_dir: Optional[str] = None, is_const: bool = False):
    def decorate(target):
        existing = target.__dict__.get(EXPORT_ATTRIBUTE)
        if existing is not None:
            raise ConfigurationError(
                f"already exported as {existing.kind.value}, cannot also export as {kind.value}",
                f"{target.__module__}.{target.__qualname__}",
            )
        setattr(target, EXPORT_ATTRIBUTE, ExportMarker(kind=kind, output_dir=output_dir, is_const=is_const))
        return target

    # Support both @export_ts_class and @export_ts_class(...)
    if cls is not None:
        return decorate(cls)
    return decorate


def export_ts_class(cls=None, *, output_dir: Optional[str] = None):
    """Export a class as a TypeScript class."""
    return _export_decorator(TypeKind.CLASS, cls, output_dir=output_dir)


def export_ts_interface(cls=None, *, output_dir: Optional[str] = None):
    """Export a class as a TypeScript interface."""
    return _export_decorator(TypeKind.INTERFACE, cls, output_dir=output_dir)


def export_ts_enum(cls=None, *, output_dir: Optional[str] = None, is_const: bool = False):
    """Export an Enum as a TypeScript enum, optionally a const enum."""
    return _export_decorator(TypeKind.ENUM, cls, output_dir=output_dir, is_const=is_const)


def ts_custom_base(base: Optional[str] = None, import_path: Optional[str] = None,
                   original_type_name: Optional[str] = None):
    """
    Replace the declared base type in the generated declaration.

    An empty base suppresses the extends clause. With import_path the base is
    imported, aliased when original_type_name is given:

        @ts_custom_base("BaseEntity", import_path="../lib/entity", original_type_name="Entity")
        -> import { Entity as BaseEntity } from '../lib/entity';
    """
    def decorate(target):
        setattr(target, CUSTOM_BASE_ATTRIBUTE, CustomBase(
            base=base, import_path=import_path, original_type_name=original_type_name
        ))
        return target
    return decorate


def get_export_marker(cls: type) -> Optional[ExportMarker]:
    """Export marker declared on the class itself; subclasses do not inherit it."""
    return vars(cls).get(EXPORT_ATTRIBUTE)


def get_export_config(cls: type) -> Optional[ExportConfig]:
    marker = get_export_marker(cls)
    if marker is None:
        return None
    return ExportConfig(
        output_dir=marker.output_dir,
        custom_base=vars(cls).get(CUSTOM_BASE_ATTRIBUTE),
        is_const=marker.is_const,
    )


# === MEMBER MARKERS === #

@dataclass(frozen=True)
class TsIgnore:
    """Leave the member out of the generated type."""


@dataclass(frozen=True)
class TsOptional:
    """Render the member as optional ("name?: T")."""


@dataclass(frozen=True)
class TsType:
    """Explicit TypeScript type, optionally imported (and aliased) from a module."""
    type_name: Optional[str] = None
    import_path: Optional[str] = None
    original_type_name: Optional[str] = None

    def to_override(self) -> TsTypeOverride:
        return TsTypeOverride(
            type_name=self.type_name,
            import_path=self.import_path,
            original_type_name=self.original_type_name,
        )


@dataclass(frozen=True)
class TsDefaultTypeOutput:
    """Output directory for a non-exported type first reached through this member."""
    output_dir: str


@dataclass(frozen=True)
class TsDefaultValue:
    """TypeScript initializer text for a class property."""
    value: str


def find_marker(metadata: Iterable[Any], marker_type: type) -> Optional[Any]:
    """First marker of a type in Annotated metadata; a bare marker class counts too."""
    for item in metadata:
        if isinstance(item, marker_type):
            return item
        if item is marker_type:
            return marker_type()
    return None
