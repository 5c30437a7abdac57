"""Tests for submodel element tree traversal."""

import pytest

from aas_ci_lint.engines.template.walker import (
    Cardinality,
    PathSets,
    collect_instance_paths,
    collect_template_paths,
    extract_child_elements,
    get_semantic_id_value,
    is_required,
    parse_cardinality,
)


def cardinality(value: str) -> list[dict]:
    return [{"type": "SMT/Cardinality", "value": value, "kind": "TemplateQualifier"}]


class TestGetSemanticIdValue:
    """Tests for semantic ID normalization."""

    def test_bare_string(self):
        assert get_semantic_id_value("urn:x") == "urn:x"

    def test_value_object(self):
        assert get_semantic_id_value({"value": "urn:x"}) == "urn:x"

    def test_reference_keys(self):
        semantic_id = {
            "type": "ExternalReference",
            "keys": [{"type": "GlobalReference"}, {"type": "GlobalReference", "value": "urn:x"}],
        }
        assert get_semantic_id_value(semantic_id) == "urn:x"

    @pytest.mark.parametrize("semantic_id", [None, "", {}, {"keys": []}, {"value": 3}, 42])
    def test_absent(self, semantic_id):
        assert get_semantic_id_value(semantic_id) is None


class TestParseCardinality:
    """Tests for cardinality qualifier values."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0", Cardinality(0, 0)),
            ("1", Cardinality(1, 1)),
            ("0..1", Cardinality(0, 1)),
            ("1..*", Cardinality(1, None)),
            (" 0 .. * ", Cardinality(0, None)),
            ("ZeroToOne", Cardinality(0, None)),
            ("OneToMany", Cardinality(1, None)),
        ],
    )
    def test_recognized(self, value, expected):
        assert parse_cardinality(value) == expected

    @pytest.mark.parametrize("value", ["", "many", "1..n"])
    def test_unrecognized(self, value):
        assert parse_cardinality(value) is None


class TestIsRequired:
    """Tests for per-element requiredness."""

    def test_no_information_means_required(self):
        assert is_required({"idShort": "A"}) is True

    @pytest.mark.parametrize("value", ["One", "OneToMany", "1", "1..*"])
    def test_required_cardinalities(self, value):
        assert is_required({"idShort": "A", "qualifiers": cardinality(value)}) is True

    @pytest.mark.parametrize("value", ["ZeroToOne", "ZeroToMany", "0..1", "0"])
    def test_optional_cardinalities(self, value):
        assert is_required({"idShort": "A", "qualifiers": cardinality(value)}) is False

    def test_multiplicity_qualifier(self):
        element = {"qualifiers": [{"type": "Multiplicity", "value": "0..*"}]}
        assert is_required(element) is False

    def test_min_qualifier(self):
        assert is_required({"qualifiers": [{"type": "minOccurs", "value": "0"}]}) is False
        assert is_required({"qualifiers": [{"type": "minOccurs", "value": "2"}]}) is True

    def test_min_occurrences_field(self):
        assert is_required({"minOccurrences": 0}) is False
        assert is_required({"minOccurrences": 1}) is True

    def test_unrelated_qualifier(self):
        element = {"qualifiers": [{"type": "SMT/EitherOr", "value": "group1"}]}
        assert is_required(element) is True


class TestExtractChildElements:
    """Tests for child element pooling."""

    def test_pools_all_child_fields(self):
        element = {
            "submodelElements": [{"idShort": "a"}],
            "value": [{"idShort": "b"}],
            "statements": [{"idShort": "c"}],
            "annotations": [{"idShort": "d"}],
        }
        assert [c["idShort"] for c in extract_child_elements(element)] == ["a", "b", "c", "d"]

    def test_scalar_value_is_not_a_child(self):
        assert extract_child_elements({"value": "42"}) == []

    def test_operation_variables_unwrapped(self):
        element = {
            "inputVariables": [{"value": {"idShort": "in"}}],
            "outputVariables": [{"value": {"idShort": "out"}}, {"value": "bad"}],
            "inoutputVariables": [{"value": {"idShort": "inout"}}],
        }
        assert [c["idShort"] for c in extract_child_elements(element)] == ["in", "out", "inout"]


class TestCollectPaths:
    """Tests for template and instance path collection."""

    def test_optional_element_excluded_from_template_paths(self):
        elements = [
            {"idShort": "ManufacturerName"},
            {"idShort": "SerialNumber", "qualifiers": cardinality("0..1")},
        ]

        assert collect_template_paths(elements).id_short == {"ManufacturerName"}
        assert collect_instance_paths(elements).id_short == {"ManufacturerName", "SerialNumber"}

    def test_requiredness_is_inherited(self):
        """Children of an optional element are never required."""
        elements = [
            {
                "idShort": "Address",
                "qualifiers": cardinality("ZeroToOne"),
                "value": [{"idShort": "Street"}],
            },
            {"idShort": "Markings", "value": [{"idShort": "Marking"}]},
        ]

        assert collect_template_paths(elements).id_short == {"Markings", "Markings/Marking"}

    def test_semantic_paths(self):
        elements = [
            {
                "idShort": "Address",
                "semanticId": {"keys": [{"value": "urn:address"}]},
                "value": [{"idShort": "Street", "semanticId": "urn:street"}],
            }
        ]

        paths = collect_template_paths(elements)

        assert paths.semantic == {"urn:address", "urn:address/urn:street"}
        assert paths.id_short == {"Address", "Address/Street"}

    def test_missing_identifier_contributes_no_segment(self):
        elements = [{"semanticId": "urn:list", "value": [{"idShort": "Item"}]}]

        paths = collect_instance_paths(elements)

        assert paths.id_short == {"Item"}
        assert paths.semantic == {"urn:list"}

    def test_operation_variables_traversed(self):
        elements = [
            {
                "idShort": "Reset",
                "modelType": "Operation",
                "inputVariables": [{"value": {"idShort": "Force"}}],
            }
        ]

        assert collect_template_paths(elements).id_short == {"Reset", "Reset/Force"}

    @pytest.mark.parametrize("elements", [None, {}, "x", [1, "a", None]])
    def test_malformed_input(self, elements):
        assert collect_instance_paths(elements) == PathSets()


class TestPathSets:
    """Tests for lenient path matching."""

    def test_either_set_satisfies(self):
        paths = PathSets(id_short={"A/B"}, semantic={"urn:a"})

        assert "A/B" in paths
        assert "urn:a" in paths
        assert "urn:b" not in paths
