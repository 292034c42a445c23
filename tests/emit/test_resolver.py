"""Tests for tsexport.emit.resolver."""

from __future__ import annotations

import pytest

from tests._fixtures.descriptors import (
    INT,
    STRING,
    dict_of,
    enum,
    list_of,
    nullable_of,
    system,
    user,
)
from tsexport.emit import ReferenceResolver, relative_module_dir
from tsexport.models import ImportDirective, TypeDescriptor

OWNER = user("Order", "Shop.Models")


@pytest.mark.parametrize(
    "owner, target, expected",
    [
        (("A", "B", "C"), ("A", "B", "D", "E"), "../D/E"),
        (("A", "B"), ("A", "B"), "."),
        (("A",), ("A", "B"), "B"),
        (("A", "B"), ("A",), ".."),
        (("A", "B"), ("C", "D"), "../../C/D"),
    ],
)
def test_relative_module_dir(owner, target, expected) -> None:
    assert relative_module_dir(owner, target) == expected


def test_resolves_sibling_namespace_reference() -> None:
    directive = ReferenceResolver().resolve(user("Customer", "Shop.Customers"), OWNER)
    assert directive == ImportDirective(symbol="Customer", module_path="../Customers/Customer")
    assert directive.render() == 'import { Customer } from "../Customers/Customer";'


def test_resolves_same_namespace_reference() -> None:
    directive = ReferenceResolver().resolve(user("OrderLine"), OWNER)
    assert directive is not None
    assert directive.module_path == "./OrderLine"


def test_skips_base_library_enum_and_global_types() -> None:
    resolver = ReferenceResolver()
    assert resolver.resolve(INT, OWNER) is None
    assert resolver.resolve(system("System.Text.StringBuilder"), OWNER) is None
    assert resolver.resolve(enum("OrderStatus"), OWNER) is None
    assert resolver.resolve(enum("Region", "Shop.Geo"), OWNER) is None
    assert resolver.resolve(TypeDescriptor(name="Widget"), OWNER) is None


def test_system_prefix_is_matched_by_segment() -> None:
    directive = ReferenceResolver().resolve(user("Clock", "SystemTools"), OWNER)
    assert directive is not None
    assert directive.module_path == "../../SystemTools/Clock"


def test_imports_for_descends_into_type_arguments() -> None:
    resolver = ReferenceResolver()
    referenced = dict_of(STRING, list_of(user("Money", "Shop.Models.Values")))

    directives = list(resolver.imports_for(referenced, OWNER))

    assert directives == [ImportDirective(symbol="Money", module_path="Values/Money")]


def test_imports_for_unwraps_nullable_structs() -> None:
    resolver = ReferenceResolver()
    money = user("Money", "Shop.Models.Values")

    directives = list(resolver.imports_for(nullable_of(money), OWNER))

    assert [directive.symbol for directive in directives] == ["Money"]


def test_imports_for_generic_user_type_includes_both() -> None:
    resolver = ReferenceResolver()
    page = user("Page", "Shop.Paging", user("Customer", "Shop.Customers"))

    directives = list(resolver.imports_for(page, OWNER))

    assert [directive.module_path for directive in directives] == [
        "../Paging/Page",
        "../Customers/Customer",
    ]


def test_child_namespace_path_has_no_current_directory_prefix() -> None:
    directive = ReferenceResolver().resolve(user("Money", "Shop.Models.Values"), OWNER)

    assert directive is not None
    assert directive.module_path == "Values/Money"


def test_non_generic_sequence_needs_no_import() -> None:
    resolver = ReferenceResolver()

    assert list(resolver.imports_for(system("System.Collections.ArrayList"), OWNER)) == []
    assert list(resolver.imports_for(list_of(INT), OWNER)) == []


def test_dictionary_key_adds_no_import() -> None:
    resolver = ReferenceResolver()

    directives = list(resolver.imports_for(dict_of(STRING, user("Money")), OWNER))

    assert directives == [ImportDirective(symbol="Money", module_path="./Money")]
