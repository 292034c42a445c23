"""Tests for tsexport.discovery.csharp."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder
from tsexport.discovery.csharp import TREE_SITTER_AVAILABLE, CSharpSource
from tsexport.discovery.symbols import SymbolTable
from tsexport.emit import DeclarationEmitter
from tsexport.models import DeclarationKind

MODELS_CS = """
using System;
using System.Collections.Generic;
using Newtonsoft.Json;

namespace Shop.Models
{
    public enum OrderStatus { Open, Closed }

    public class Entity : ITypescriptClassExportable
    {
        public int Id { get; set; }
    }

    public class Order : Entity
    {
        [JsonProperty("lines")]
        public List<OrderLine> Lines { get; set; }
        public OrderStatus? Status { get; set; }
        private string Secret { get; set; }
        public static int Counter { get; set; }
    }

    public class OrderLine : ITypescriptClassExportable
    {
        public string Sku { get; set; }
        public decimal Price { get; set; }
    }

    public class Internal
    {
        public int Hidden { get; set; }
    }

    public interface IAuditable : ITypescriptInterfaceExportable
    {
        DateTime Created { get; }
    }
}
"""


def _declarations(source: CSharpSource, *paths: Path):
    symbols = SymbolTable()
    for path in paths:
        source.index(path, symbols)
    return {decl.qualified_name: decl for decl in source.declarations(symbols)}


def test_disabled_source_ignores_cs_files() -> None:
    source = CSharpSource(enabled=False)

    assert not source.matches(Path("Models/Order.cs"))


def test_enabled_source_matches_only_cs_files() -> None:
    source = CSharpSource(enabled=True)

    assert source.matches(Path("Models/Order.CS"))
    assert not source.matches(Path("Models/orders.tsexport.yml"))


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
def test_collects_marker_tagged_declarations(project: ProjectBuilder) -> None:
    project.write({"Models/Order.cs": MODELS_CS})

    declarations = _declarations(CSharpSource(), project.path() / "Models" / "Order.cs")

    assert set(declarations) == {
        "Shop.Models.Entity",
        "Shop.Models.Order",
        "Shop.Models.OrderLine",
        "Shop.Models.IAuditable",
    }

    order = declarations["Shop.Models.Order"]
    assert order.kind is DeclarationKind.CLASS
    assert [member.emitted_name for member in order.members] == ["lines", "Status", "Id"]
    assert order.members[0].type.generic_arguments[0].qualified_name == "Shop.Models.OrderLine"
    assert order.members[1].type.is_nullable
    assert order.members[1].type.underlying.is_enum

    auditable = declarations["Shop.Models.IAuditable"]
    assert auditable.kind is DeclarationKind.INTERFACE
    assert auditable.members[0].type.qualified_name == "System.DateTime"


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
def test_custom_markers_and_file_scoped_namespace(project: ProjectBuilder) -> None:
    project.write(
        {
            "Geo/Point.cs": """
            namespace Geo;

            public class Point : IExported
            {
                public double X { get; set; }
                public double Y { get; set; }
            }

            public class Hidden : ITypescriptClassExportable
            {
                public int Id { get; set; }
            }
            """
        }
    )

    source = CSharpSource(class_marker="IExported")
    declarations = _declarations(source, project.path() / "Geo" / "Point.cs")

    assert list(declarations) == ["Geo.Point"]
    assert [member.name for member in declarations["Geo.Point"].members] == ["X", "Y"]


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
def test_generic_declarations_are_skipped(project: ProjectBuilder) -> None:
    project.write(
        {
            "Paging/Page.cs": """
            namespace Paging
            {
                public class Page<T> : ITypescriptClassExportable
                {
                    public List<T> Items { get; set; }
                }
            }
            """
        }
    )

    declarations = _declarations(CSharpSource(), project.path() / "Paging" / "Page.cs")

    assert declarations == {}


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
def test_record_positional_parameters_become_members(project: ProjectBuilder) -> None:
    project.write(
        {
            "Shop/Customer.cs": """
            using System.Text.Json.Serialization;

            namespace Shop
            {
                public record Customer(
                    [property: JsonPropertyName("full_name")] string Name,
                    int Age) : ITypescriptClassExportable
                {
                    public string Email { get; init; }
                }
            }
            """
        }
    )

    declarations = _declarations(CSharpSource(), project.path() / "Shop" / "Customer.cs")

    customer = declarations["Shop.Customer"]
    assert customer.kind is DeclarationKind.CLASS
    assert [member.emitted_name for member in customer.members] == ["full_name", "Age", "Email"]
    assert customer.members[1].type.qualified_name == "System.Int32"


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
def test_marker_tagged_struct_exports_as_class(project: ProjectBuilder) -> None:
    project.write(
        {
            "Shop/Money.cs": """
            namespace Shop
            {
                public struct Money : ITypescriptClassExportable
                {
                    public decimal Amount { get; set; }
                }
            }
            """
        }
    )

    declarations = _declarations(CSharpSource(), project.path() / "Shop" / "Money.cs")

    money = declarations["Shop.Money"]
    assert money.kind is DeclarationKind.CLASS
    assert [member.name for member in money.members] == ["Amount"]


@pytest.mark.skipif(not TREE_SITTER_AVAILABLE, reason="tree-sitter not installed")
def test_tuple_and_unlisted_base_library_members_render_as_string(project: ProjectBuilder) -> None:
    project.write(
        {
            "Shop/Envelope.cs": """
            using System;
            using System.Text.Json;

            namespace Shop.Events
            {
                public class Envelope : ITypescriptClassExportable
                {
                    public (int, string) Pair { get; set; }
                    public JsonElement Payload { get; set; }
                    public TimeZoneInfo Zone { get; set; }
                }
            }
            """
        }
    )

    declarations = _declarations(CSharpSource(), project.path() / "Shop" / "Envelope.cs")
    unit = DeclarationEmitter().emit(declarations["Shop.Events.Envelope"])

    assert unit is not None
    assert unit.text == (
        "export class Envelope {\n"
        "  Pair!: string;\n"
        "  Payload!: string;\n"
        "  Zone!: string;\n"
        "}\n"
    )
