"""Tests for tsexport.emit.emitter."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from tests._fixtures.descriptors import (
    INT,
    STRING,
    declaration,
    dict_of,
    enum,
    list_of,
    member,
    nullable_of,
    system,
    user,
)
from tsexport.emit import DeclarationEmitter
from tsexport.errors import DeclarationError
from tsexport.models import DeclarationKind


def _order():
    return declaration(
        "Order",
        member("Id", INT),
        member("Customer", user("Customer", "Shop.Customers")),
        member("Lines", list_of(user("OrderLine"))),
        member("Status", nullable_of(enum("OrderStatus"))),
        member("Totals", dict_of(STRING, user("Money", "Shop.Models.Values"))),
        member("Notes", STRING, override_name="notes"),
        member("Backup", user("OrderLine")),
    )


def test_emits_class_with_imports_and_members(emitter: DeclarationEmitter) -> None:
    unit = emitter.emit(_order())

    assert unit is not None
    assert unit.text == (
        'import { Customer } from "../Customers/Customer";\n'
        'import { OrderLine } from "./OrderLine";\n'
        'import { Money } from "Values/Money";\n'
        "\n"
        "export class Order {\n"
        "  Id!: number;\n"
        "  Customer!: Customer;\n"
        "  Lines!: [OrderLine];\n"
        "  Status!: string;\n"
        "  Totals!: { [key: string]: Money };\n"
        "  notes!: string;\n"
        "  Backup!: OrderLine;\n"
        "}\n"
    )
    assert unit.relative_path == PurePosixPath("Shop/Models/Order.ts")
    assert [directive.symbol for directive in unit.imports] == ["Customer", "OrderLine", "Money"]


def test_interfaces_have_no_definite_assignment_marker(emitter: DeclarationEmitter) -> None:
    decl = declaration(
        "IAddress",
        member("Street", STRING),
        member("Created", system("System.DateTime")),
        kind=DeclarationKind.INTERFACE,
    )

    unit = emitter.emit(decl)

    assert unit is not None
    assert unit.text == (
        "export interface IAddress {\n"
        "  Street: string;\n"
        "  Created: Date;\n"
        "}\n"
    )


def test_empty_declaration_renders_empty_body(emitter: DeclarationEmitter) -> None:
    unit = emitter.emit(declaration("Empty"))

    assert unit is not None
    assert unit.text == "export class Empty {\n}\n"
    assert unit.imports == ()


def test_self_references_are_not_imported(emitter: DeclarationEmitter) -> None:
    decl = declaration("Category", member("Parent", user("Category")), member("Children", list_of(user("Category"))))

    unit = emitter.emit(decl)

    assert unit is not None
    assert unit.imports == ()
    assert unit.text.startswith("export class Category {\n")
    assert "  Children!: [Category];\n" in unit.text


def test_global_declarations_land_at_output_root(emitter: DeclarationEmitter) -> None:
    unit = emitter.emit(declaration("Loose", member("Value", INT), namespace=None))

    assert unit is not None
    assert unit.relative_path == PurePosixPath("Loose.ts")


def test_unmappable_member_raises_declaration_error(emitter: DeclarationEmitter) -> None:
    decl = declaration("Broken", member("Id", INT), member("Maybe", nullable_of(None)))

    with pytest.raises(DeclarationError) as excinfo:
        emitter.emit(decl)

    assert excinfo.value.declaration == "Shop.Models.Broken"
    assert excinfo.value.member == "Maybe"
    assert "Shop.Models.Broken.Maybe" in str(excinfo.value)


def test_indent_and_extension_are_configurable() -> None:
    emitter = DeclarationEmitter(indent="    ", file_extension="d.ts")

    unit = emitter.emit(declaration("Point", member("X", INT)))

    assert unit is not None
    assert unit.text == "export class Point {\n    X!: number;\n}\n"
    assert unit.relative_path == PurePosixPath("Shop/Models/Point.d.ts")


def test_emission_is_deterministic(emitter: DeclarationEmitter) -> None:
    first = emitter.emit(_order())
    second = DeclarationEmitter().emit(_order())

    assert first is not None and second is not None
    assert first.text == second.text


def test_custom_templates_dir_overrides_layout(tmp_path: Path) -> None:
    (tmp_path / "declaration.ts.j2").write_text(
        "// generated\nexport {{ kind }} {{ name }} {}\n", encoding="utf-8"
    )
    emitter = DeclarationEmitter(templates_dir=tmp_path)

    unit = emitter.emit(declaration("Tiny", member("Id", INT)))

    assert unit is not None
    assert unit.text == "// generated\nexport class Tiny {}\n"


def test_blank_rendering_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "declaration.ts.j2").write_text("{# nothing #}\n", encoding="utf-8")
    emitter = DeclarationEmitter(templates_dir=tmp_path)

    assert emitter.emit(declaration("Nothing")) is None
