"""
Introspection tests for type conversion, export markers, type model
construction and the integrate() entry point
"""

import json
import pytest
from enum import Enum
from pathlib import Path
from datetime import datetime
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, Tuple, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel

import typeforge
from typeforge import (
    integrate, introspect_only, generate_only, ConfigurationError,
    export_ts_class, export_ts_interface, export_ts_enum, TsIgnore,
)
from typeforge.core.config import CONFIG_FILE_NAME
from typeforge.core.schema import TypeReference, TypeKind, BaseType, ContainerType
from typeforge.introspection.models import build_type_model
from typeforge.introspection.type_conversion import python_type_to_type_reference, qualified_name_of

from tests.sample.models.users import UserRole, UserStatus, Address, Entity, User, Page, UserPage
from tests.sample.models.orders import Order, OrderLine


PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)
SAMPLE_CLASSES = [UserRole, Entity, User, Page, UserPage, Order]

T = TypeVar("T")


# === TYPE CONVERSION === #

def test_python_type_to_type_reference():
    """Test conversion of various Python types to TypeReference"""
    string = TypeReference(base_type=BaseType.STRING)
    number = TypeReference(base_type=BaseType.NUMBER)
    user = TypeReference(custom_type=qualified_name_of(User))

    test_cases = [
        # Primitives
        (int, number),
        (float, number),
        (str, string),
        (bool, TypeReference(base_type=BaseType.BOOLEAN)),
        (Any, TypeReference(base_type=BaseType.ANY)),
        (type(None), TypeReference(base_type=BaseType.NULL)),

        # Common external types
        (UUID, string),
        (datetime, string),

        # Containers
        (Optional[str], TypeReference(container=ContainerType.OPTIONAL, args=(string,))),
        (str | None, TypeReference(container=ContainerType.OPTIONAL, args=(string,))),
        (List[User], TypeReference(container=ContainerType.ARRAY, args=(user,))),
        (set[int], TypeReference(container=ContainerType.ARRAY, args=(number,))),
        (Tuple[int, ...], TypeReference(container=ContainerType.ARRAY, args=(number,))),
        (Tuple[str, int], TypeReference(container=ContainerType.TUPLE, args=(string, number))),
        (Dict[str, int], TypeReference(container=ContainerType.OBJECT, args=(string, number))),
        (Union[str, int], TypeReference(container=ContainerType.UNION, args=(string, number))),
        (Literal["a", 1], TypeReference(container=ContainerType.LITERAL, literal_values=("a", 1))),

        # Generics and metadata
        (T, TypeReference(generic_parameter="T")),
        (Page[User], TypeReference(custom_type=qualified_name_of(Page), args=(user,))),
        (Annotated[str, TsIgnore()], string),
    ]

    for py_type, expected in test_cases:
        assert python_type_to_type_reference(py_type) == expected, py_type


def test_optional_union_keeps_members():
    """Test Union[A, B, None] is an optional union"""
    reference = python_type_to_type_reference(Union[str, int, None])

    assert reference.container == ContainerType.OPTIONAL
    assert reference.args[0].container == ContainerType.UNION
    assert len(reference.args[0].args) == 2


# === MARKERS === #

def test_two_export_decorators_are_rejected():
    """Test a class can only be exported once"""
    with pytest.raises(ConfigurationError):
        @export_ts_class
        @export_ts_interface
        class Twice:
            name: str


def test_export_marker_is_not_inherited():
    """Test subclasses of exported classes need their own decorator"""
    @export_ts_interface
    class Parent:
        name: str

    class Child(Parent):
        age: int

    with pytest.raises(ConfigurationError):
        build_type_model([Child])


def test_enum_decorator_on_non_enum_is_rejected():
    """Test export_ts_enum only accepts Enum classes"""
    @export_ts_enum
    class NotAnEnum:
        value: int

    with pytest.raises(ConfigurationError):
        build_type_model([NotAnEnum])


def test_unsupported_enum_values_are_rejected():
    """Test enum values must be ints or strings"""
    @export_ts_enum
    class Ratio(Enum):
        HALF = 0.5

    with pytest.raises(ConfigurationError):
        build_type_model([Ratio])


# === TYPE MODEL === #

def test_build_type_model_discovers_references():
    """Test exported classes come first and referenced classes are discovered"""
    model = build_type_model(SAMPLE_CLASSES)

    names = [descriptor.name for descriptor in model]
    assert names[:6] == ["UserRole", "Entity", "User", "Page", "UserPage", "Order"]
    assert set(names[6:]) == {"UserStatus", "Address", "OrderLine"}

    assert model.find(qualified_name_of(UserStatus)).kind == TypeKind.ENUM
    assert model.find(qualified_name_of(Address)).kind == TypeKind.INTERFACE
    assert model.find(qualified_name_of(OrderLine)).kind == TypeKind.CLASS
    assert not model.find(qualified_name_of(Address)).is_exported


def test_project_boundary_limits_discovery(tmp_path):
    """Test referenced classes outside the project root are left ambient"""
    model = build_type_model([User], project_root=str(tmp_path))

    assert [descriptor.name for descriptor in model] == ["User"]


def test_pydantic_members():
    """Test member flags from pydantic fields and markers"""
    user = build_type_model([User]).find(qualified_name_of(User))
    members = {member.name: member for member in user.members}

    assert user.kind == TypeKind.INTERFACE
    assert user.output_dir == "model/users"
    assert user.base_type == TypeReference(custom_type=qualified_name_of(Entity))
    assert list(members) == [
        "username", "email", "role", "status", "addresses", "updated_at",
        "account_balance", "password_hash", "avatar", "nickname", "max_sessions",
    ]
    assert not members["username"].optional
    assert members["role"].optional
    assert members["updated_at"].optional
    assert members["nickname"].optional
    assert members["password_hash"].ignore
    assert members["max_sessions"].is_static
    assert members["status"].default_type_output == "enums"
    assert members["avatar"].ts_type.type_name == "Blob | null"


def test_generic_pydantic_models():
    """Test generic parameters and parametrized generic bases"""
    model = build_type_model([Page, UserPage])
    page = model.find(qualified_name_of(Page))
    user_page = model.find(qualified_name_of(UserPage))

    assert page.generic_parameters == ("T",)
    assert page.base_type is None
    assert user_page.base_type == TypeReference(
        custom_type=qualified_name_of(Page),
        args=(TypeReference(custom_type=qualified_name_of(User)),),
    )


def test_dataclass_members_and_custom_base():
    """Test dataclass defaults become class initializers"""
    order = build_type_model([Order]).find(qualified_name_of(Order))
    defaults = {member.name: member.default_value for member in order.members}
    strings = {member.name: member.default_string for member in order.members if member.default_string is not None}

    assert order.kind == TypeKind.CLASS
    assert order.custom_base.base == "AggregateRoot"
    assert order.base_type is None
    assert defaults == {
        "number": None,
        "lines": None,
        "customer": "null",
        "shipping": "null",
        "channel": None,
        "paid": "false",
        "note": "''",
        "totals": None,
        "dimensions": "null",
        "placed_at": None,
    }
    assert strings == {"channel": "web", "placed_at": ""}


def test_plain_annotated_class():
    """Test classes without a model library are introspected from annotations"""
    @export_ts_class
    class Point:
        x: float = 0.0
        y: float = 0.0
        _label: str = ""

    point = build_type_model([Point]).find(qualified_name_of(Point))

    assert [(m.name, m.default_value, m.default_string, m.is_public) for m in point.members] == [
        ("x", "0.0", None, True), ("y", "0.0", None, True), ("_label", None, "", False),
    ]


# === INTEGRATION === #

def test_integrate_writes_sample_project(tmp_path, capsys):
    """Test complete generation of the sample models"""
    model, result = integrate(SAMPLE_CLASSES, project_root=PROJECT_ROOT,
                              output_directory=str(tmp_path), add_file_header=False)

    assert result.exit_code == 0
    assert "typeforge: Generated 10 TypeScript files" in capsys.readouterr().out
    assert sorted(str(p.relative_to(tmp_path)) for p in tmp_path.rglob("*.ts")) == [
        "enums/user-role.ts",
        "enums/user-status.ts",
        "model/entity.ts",
        "model/page.ts",
        "model/users/address.ts",
        "model/users/user-page.ts",
        "model/users/user.ts",
        "orders/address.ts",
        "orders/order-line.ts",
        "orders/order.ts",
    ]

    assert (tmp_path / "model" / "users" / "user.ts").read_text(encoding="utf-8") == (
        "import { Entity } from '../entity';\n"
        "import { UserRole } from '../../enums/user-role';\n"
        "import { UserStatus } from '../../enums/user-status';\n"
        "import { Address } from './address';\n"
        "\n"
        "export interface User extends Entity {\n"
        "  username: string;\n"
        "  email: string;\n"
        "  role?: UserRole;\n"
        "  status: UserStatus;\n"
        "  addresses?: Address[];\n"
        "  updated_at?: string;\n"
        "  account_balance?: number;\n"
        "  avatar?: Blob | null;\n"
        "  nickname?: string;\n"
        "}\n"
    )
    assert (tmp_path / "enums" / "user-role.ts").read_text(encoding="utf-8") == (
        "export enum UserRole {\n"
        "  ADMIN = 'admin',\n"
        "  USER = 'user',\n"
        "  MODERATOR = 'moderator',\n"
        "}\n"
    )
    assert (tmp_path / "model" / "users" / "user-page.ts").read_text(encoding="utf-8") == (
        "import { Page } from '../page';\n"
        "import { User } from './user';\n"
        "\n"
        "export interface UserPage extends Page<User> {\n"
        "  cursor?: string;\n"
        "}\n"
    )
    assert (tmp_path / "orders" / "order.ts").read_text(encoding="utf-8") == (
        "import { OrderLine } from './order-line';\n"
        "import { User } from '../model/users/user';\n"
        "import { Address } from './address';\n"
        "import { Root as AggregateRoot } from '../lib/aggregate';\n"
        "import { Moment } from 'moment';\n"
        "\n"
        "export class Order extends AggregateRoot {\n"
        "  public number: string;\n"
        "  public lines: OrderLine[];\n"
        "  public customer: User = null;\n"
        "  public shipping: Address = null;\n"
        "  public channel: \"web\" | \"store\" = 'web';\n"
        "  public paid: boolean = false;\n"
        "  public note: string = '';\n"
        "  public totals: Record<string, number>;\n"
        "  public dimensions: [number, number, number] = null;\n"
        "  public placed_at: Moment = '';\n"
        "}\n"
    )


def test_string_defaults_follow_quote_option(tmp_path):
    """Test string initializers use the configured quote character"""
    @export_ts_class
    class Greeting(BaseModel):
        text: str = "it's"

    integrate([Greeting], project_root=PROJECT_ROOT, output_directory=str(tmp_path / "single"),
              add_file_header=False)
    integrate([Greeting], project_root=PROJECT_ROOT, output_directory=str(tmp_path / "double"),
              add_file_header=False, single_quotes=False)

    assert (tmp_path / "single" / "greeting.ts").read_text(encoding="utf-8") == (
        "export class Greeting {\n  public text: string = 'it\\'s';\n}\n"
    )
    assert (tmp_path / "double" / "greeting.ts").read_text(encoding="utf-8") == (
        "export class Greeting {\n  public text: string = \"it's\";\n}\n"
    )


def test_integrate_reads_config_file(tmp_path):
    """Test typeforge.config.json settings and keyword overrides"""
    (tmp_path / CONFIG_FILE_NAME).write_text(json.dumps({
        "outputDirectory": "generated",
        "tabLength": 4,
        "createIndexFile": True,
        "addFileHeader": False,
    }), encoding="utf-8")

    @export_ts_interface
    class Tag:
        label: str

    _, result = integrate([Tag], project_root=str(tmp_path), single_quotes=False, verbose=True)

    assert (tmp_path / "generated" / "tag.ts").read_text(encoding="utf-8") == (
        "export interface Tag {\n    label: string;\n}\n"
    )
    assert (tmp_path / "generated" / "index.ts").read_text(encoding="utf-8") == 'export * from "./tag";\n'
    assert result.files[-1].type_name is None


def test_generate_only_does_not_write(tmp_path, capsys):
    """Test generation without touching the file system"""
    result = generate_only([UserRole], project_root=PROJECT_ROOT, output_directory=str(tmp_path))

    assert [f.path for f in result.files] == [str(tmp_path / "enums" / "user-role.ts")]
    assert not any(tmp_path.iterdir())
    assert "not written to disk" in capsys.readouterr().out


def test_introspect_only(capsys):
    """Test introspection without generation"""
    model = introspect_only([User], project_root=PROJECT_ROOT)

    assert qualified_name_of(Address) in model
    assert "typeforge: Introspected" in capsys.readouterr().out


def test_public_api():
    """Test the package exposes its entry points and version"""
    assert typeforge.__version__ == "0.3.1"
    for name in typeforge.__all__:
        assert hasattr(typeforge, name)
