"""
Tests for the CSDL schema parser (phase 1).
"""

from __future__ import annotations

from pathlib import Path

import pytest

from csdl_to_code.pipeline.errors import MalformedDocumentError, UnsupportedElementError
from csdl_to_code.pipeline.schema_ast import Multiplicity, SchemaParser

TEST_DATA = Path(__file__).parent / "test_data"

EDM_V3 = "http://schemas.microsoft.com/ado/2009/11/edm"


def load(name: str) -> bytes:
    return (TEST_DATA / name).read_bytes()


def schema_doc(body: str, namespace: str = "Test", extra: str = "") -> str:
    """Wrap schema declarations in a minimal edmx document."""
    return f"""<?xml version="1.0" encoding="utf-8"?>
<edmx:Edmx Version="1.0" xmlns:edmx="http://schemas.microsoft.com/ado/2007/06/edmx">
  <edmx:DataServices>
    <Schema Namespace="{namespace}" {extra} xmlns="{EDM_V3}">
      {body}
    </Schema>
  </edmx:DataServices>
</edmx:Edmx>
"""


def test_parses_scenario_document():
    schema = SchemaParser().parse(load("scenario.xml"))

    assert schema.namespaces == ("Demo",)
    assert list(schema.entity_types) == ["Demo.Person", "Demo.Manager"]
    assert list(schema.complex_types) == ["Demo.Address"]
    assert list(schema.enum_types) == ["Demo.Color"]

    person = schema.entity_types["Demo.Person"]
    assert person.key == ("Id",)
    assert person.base_type is None
    assert [p.name for p in person.properties] == ["Id", "Name", "Home"]
    assert person.properties[0].nullable is False
    assert person.properties[1].nullable is True
    assert person.properties[1].facets == {"MaxLength": "80"}
    assert person.properties[2].type_name == "Demo.Address"

    manager = schema.entity_types["Demo.Manager"]
    assert manager.base_type == "Demo.Person"
    assert manager.key == ()

    color = schema.enum_types["Demo.Color"]
    assert [(m.name, m.value) for m in color.members] == [("Red", 0), ("Green", 1), ("Blue", 2)]
    assert color.underlying_type == "Edm.Int32"

    assert [(s.name, s.entity_type, s.container) for s in schema.entity_sets] == [("People", "Demo.Person", "DemoService")]


def test_merges_schema_sections_and_expands_aliases():
    schema = SchemaParser().parse(load("northwind_v2.xml"))

    assert schema.namespaces == ("NorthwindModel", "ODataWeb.Northwind.Model")
    product = schema.entity_types["NorthwindModel.Product"]
    warehouse = next(p for p in product.properties if p.name == "Warehouse")
    assert warehouse.type_name == "NorthwindModel.Address"

    category_nav = product.navigation_properties[0]
    assert category_nav.relationship == "NorthwindModel.FK_Products_Categories"
    assert category_nav.from_role == "Products"
    assert category_nav.to_role == "Categories"

    association = schema.associations["NorthwindModel.FK_Employees_Employees"]
    assert [end.type_name for end in association.ends] == ["NorthwindModel.Employee", "NorthwindModel.Employee"]
    assert association.end_for_role("Subordinates").multiplicity is Multiplicity.MANY

    assert [s.name for s in schema.entity_sets] == ["Categories", "Products", "Employees"]


def test_carries_facets_through_unchanged():
    schema = SchemaParser().parse(load("northwind_v2.xml"))
    category = schema.entity_types["NorthwindModel.Category"]
    description = next(p for p in category.properties if p.name == "Description")

    assert description.facets == {"MaxLength": "Max", "FixedLength": "false", "Unicode": "true"}


def test_parses_v4_navigation_and_collections():
    schema = SchemaParser().parse(load("trippin_v4.xml"))
    person = schema.entity_types["Trippin.Person"]

    friends, best_friend, _ = person.navigation_properties
    assert friends.relationship is None
    assert friends.type_name == "Collection(Trippin.Person)"
    assert best_friend.type_name == "Trippin.Person"

    emails = next(p for p in person.properties if p.name == "Emails")
    assert emails.is_collection
    assert emails.element_type == "Edm.String"

    owner = schema.entity_types["Trippin.Trip"].navigation_properties[0]
    assert owner.nullable is False
    assert owner.partner == "Trips"

    feature = schema.enum_types["Trippin.Feature"]
    assert feature.is_flags
    assert feature.underlying_type == "Edm.Byte"

    location = schema.complex_types["Trippin.Location"]
    assert location.open_type


def test_enum_members_without_value_continue_from_previous():
    doc = schema_doc(
        """
        <EnumType Name="Size">
          <Member Name="Small" />
          <Member Name="Medium" />
          <Member Name="Large" Value="10" />
          <Member Name="Huge" />
        </EnumType>
        """
    )
    schema = SchemaParser().parse(doc)
    members = schema.enum_types["Test.Size"].members
    assert [(m.name, m.value) for m in members] == [("Small", 0), ("Medium", 1), ("Large", 10), ("Huge", 11)]


def test_accepts_schema_as_document_root():
    doc = f"""<Schema Namespace="Bare" xmlns="{EDM_V3}">
      <ComplexType Name="Point"><Property Name="X" Type="Edm.Double" Nullable="false" /></ComplexType>
    </Schema>"""
    schema = SchemaParser().parse(doc)
    assert list(schema.complex_types) == ["Bare.Point"]


def test_ignores_unknown_attributes_and_foreign_elements():
    doc = schema_doc(
        """
        <EntityType Name="Thing" xmlns:x="urn:example:extensions" x:Label="thing" Flavour="vanilla">
          <Key><PropertyRef Name="Id" /></Key>
          <Property Name="Id" Type="Edm.Int32" Nullable="false" SomethingNew="1" />
          <x:Extension Kind="ui-hint" />
          <Documentation><Summary>Things</Summary></Documentation>
        </EntityType>
        """
    )
    schema = SchemaParser().parse(doc)
    thing = schema.entity_types["Test.Thing"]
    assert [p.name for p in thing.properties] == ["Id"]


def test_reads_namespaced_has_stream_attribute():
    doc = schema_doc(
        """
        <EntityType Name="Photo" m:HasStream="true">
          <Key><PropertyRef Name="Id" /></Key>
          <Property Name="Id" Type="Edm.Int32" Nullable="false" />
        </EntityType>
        """,
        extra='xmlns:m="http://schemas.microsoft.com/ado/2007/08/dataservices/metadata"',
    )
    schema = SchemaParser().parse(doc)
    assert schema.entity_types["Test.Photo"].has_stream


def test_malformed_xml():
    with pytest.raises(MalformedDocumentError):
        SchemaParser().parse("<edmx:Edmx><Schema Namespace='x'></edmx:Edmx>")


def test_empty_document():
    with pytest.raises(MalformedDocumentError):
        SchemaParser().parse("")


def test_document_without_schema():
    doc = '<edmx:Edmx xmlns:edmx="http://schemas.microsoft.com/ado/2007/06/edmx"><edmx:DataServices /></edmx:Edmx>'
    with pytest.raises(MalformedDocumentError, match="no <Schema> element"):
        SchemaParser().parse(doc)


def test_unsupported_root_element():
    with pytest.raises(UnsupportedElementError) as exc_info:
        SchemaParser().parse("<feed />")
    assert exc_info.value.element == "feed"


def test_unsupported_element_inside_entity_type():
    doc = schema_doc(
        """
        <EntityType Name="Thing">
          <Key><PropertyRef Name="Id" /></Key>
          <Property Name="Id" Type="Edm.Int32" Nullable="false" />
          <Gadget Name="Nope" />
        </EntityType>
        """
    )
    with pytest.raises(UnsupportedElementError) as exc_info:
        SchemaParser().parse(doc)
    assert exc_info.value.element == "Gadget"
    assert exc_info.value.parent == "EntityType Thing"


def test_unsupported_element_at_schema_level():
    doc = schema_doc('<RowType Name="Nope" />')
    with pytest.raises(UnsupportedElementError, match="RowType"):
        SchemaParser().parse(doc)


def test_navigation_property_inside_complex_type_is_rejected():
    doc = schema_doc(
        """
        <ComplexType Name="Holder">
          <NavigationProperty Name="Owner" Type="Test.Person" />
        </ComplexType>
        """
    )
    with pytest.raises(UnsupportedElementError, match="NavigationProperty"):
        SchemaParser().parse(doc)


def test_missing_name_attribute():
    doc = schema_doc('<ComplexType><Property Name="X" Type="Edm.Int32" /></ComplexType>')
    with pytest.raises(MalformedDocumentError, match="'Name'"):
        SchemaParser().parse(doc)


def test_invalid_multiplicity():
    doc = schema_doc(
        """
        <Association Name="Broken">
          <End Role="A" Type="Test.A" Multiplicity="2" />
          <End Role="B" Type="Test.B" Multiplicity="*" />
        </Association>
        """
    )
    with pytest.raises(MalformedDocumentError, match="multiplicity"):
        SchemaParser().parse(doc)


def test_invalid_nullable_literal():
    doc = schema_doc('<ComplexType Name="C"><Property Name="X" Type="Edm.Int32" Nullable="sometimes" /></ComplexType>')
    with pytest.raises(MalformedDocumentError, match="Nullable"):
        SchemaParser().parse(doc)


def test_non_integer_enum_value():
    doc = schema_doc('<EnumType Name="E"><Member Name="A" Value="one" /></EnumType>')
    with pytest.raises(MalformedDocumentError, match="non-integer"):
        SchemaParser().parse(doc)


def test_duplicate_declaration():
    doc = schema_doc(
        """
        <ComplexType Name="Twice"><Property Name="X" Type="Edm.Int32" /></ComplexType>
        <EntityType Name="Twice"><Property Name="Y" Type="Edm.Int32" /></EntityType>
        """
    )
    with pytest.raises(MalformedDocumentError, match="Duplicate declaration of 'Test.Twice'"):
        SchemaParser().parse(doc)


def test_navigation_property_needs_relationship_or_type():
    doc = schema_doc(
        """
        <EntityType Name="Thing">
          <NavigationProperty Name="Nowhere" />
        </EntityType>
        """
    )
    with pytest.raises(MalformedDocumentError, match="Nowhere"):
        SchemaParser().parse(doc)
