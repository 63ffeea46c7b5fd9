"""Tests for specfoundry.operations."""

from __future__ import annotations

import pytest

from specfoundry.docs import DocumentationProviders, FieldDescriptionProvider, OperationDocumentation
from specfoundry.engine import ModelSpecGenerator
from specfoundry.nodes import ArrayNode, ObjectNode, ReferenceNode
from specfoundry.operations import (
    ApiDescription,
    ApiParameterDescription,
    LegacyOperationFilter,
    ModelSpecMap,
    OperationSpec,
    OperationSpecGenerator,
    ParameterSource,
    ResponseMessageSpec,
    api_path,
)
from specfoundry.primitives import PRIMITIVE_MAPPINGS
from specfoundry.registry import ModelSpecRegistry
from specfoundry_common.errors import ConfigurationError
from tests.specfoundry.sample_models import Customer, Order, Page, Status


def get_order(order_id: int) -> Order:
    """Fetch one order.

    Orders are returned with their customer.
    """
    raise NotImplementedError


def _description(**overrides: object) -> ApiDescription:
    values: dict[str, object] = {
        "http_method": "get",
        "relative_path": "orders/{order_id}?expand={expand}",
        "controller_name": "orders",
        "action_name": "get_order",
        "parameters": (
            ApiParameterDescription("order_id", ParameterSource.URI, int),
            ApiParameterDescription("expand", ParameterSource.URI, bool, is_optional=True),
            ApiParameterDescription("x_trace", ParameterSource.UNKNOWN, str, is_optional=True),
        ),
        "return_type": Order,
    }
    values.update(overrides)
    return ApiDescription(**values)  # type: ignore[arg-type]


class RecordingFilter:
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    def apply(
        self,
        api_description: ApiDescription,
        operation: OperationSpec,
        registry: ModelSpecRegistry,
        generator: ModelSpecGenerator,
    ) -> None:
        self.calls.append(self.name)
        operation.summary = self.name


class NotFoundFilter:
    def apply(
        self,
        api_description: ApiDescription,
        operation: OperationSpec,
        registry: ModelSpecRegistry,
        generator: ModelSpecGenerator,
    ) -> None:
        generator.generate(Customer, registry)
        operation.response_messages.append(ResponseMessageSpec(404, "Not found", "Customer"))


class LegacySummaryFilter:
    def __init__(self, calls: list[str]) -> None:
        self.calls = calls

    def apply(
        self, api_description: ApiDescription, operation: OperationSpec, model_spec_map: ModelSpecMap
    ) -> None:
        self.calls.append("legacy")
        operation.summary = "legacy"
        operation.notes = model_spec_map.find_or_map(Order).kind


class TestApiPath:
    """Tests for api_path."""

    @pytest.mark.parametrize(
        ("relative_path", "expected"),
        [("orders/{id}?page={page}", "orders/{id}"), ("orders", "orders"), ("?q={q}", "")],
    )
    def test_strips_query(self, relative_path: str, expected: str) -> None:
        """Everything from the first ``?`` is dropped."""
        assert api_path(relative_path) == expected


class TestOperationSpecGenerator:
    """Tests for OperationSpecGenerator.generate."""

    def test_basic_operation(self) -> None:
        """Method, nickname, return type and parameters are filled in."""
        registry = ModelSpecRegistry()
        operation = OperationSpecGenerator().generate(_description(), registry)

        assert operation.method == "GET"
        assert operation.nickname == "orders_get_order"
        assert operation.type == "Order"
        assert registry.ids() == ["Order", "Customer"]
        assert [p.param_type for p in operation.parameters] == ["path", "query", ""]
        assert [p.required for p in operation.parameters] == [True, False, False]
        assert operation.parameters[0].type == "integer"
        assert operation.parameters[0].format == "int64"
        assert operation.response_messages == []

    def test_void_return(self) -> None:
        """A missing return type is ``void``."""
        operation = OperationSpecGenerator().generate(
            _description(return_type=None), ModelSpecRegistry()
        )
        assert operation.type == "void"

    def test_collection_return(self) -> None:
        """Non-object schemas copy type and items."""
        operation = OperationSpecGenerator().generate(
            _description(return_type=list[Order]), ModelSpecRegistry()
        )
        assert operation.type == "array"
        assert operation.items == ReferenceNode(ref="Order")

    def test_enum_parameter(self) -> None:
        """Enumerations copy their members."""
        description = _description(
            parameters=(ApiParameterDescription("status", ParameterSource.URI, Status),)
        )
        operation = OperationSpecGenerator().generate(description, ModelSpecRegistry())
        assert operation.parameters[0].enum == ("PENDING", "SHIPPED")
        assert operation.parameters[0].param_type == "query"

    def test_body_parameter_references_definition(self) -> None:
        """Body models use their definition id as type."""
        registry = ModelSpecRegistry()
        description = _description(
            http_method="POST",
            parameters=(
                ApiParameterDescription(
                    "page", ParameterSource.BODY, Page[Customer], documentation="A page"
                ),
            ),
        )
        operation = OperationSpecGenerator().generate(description, registry)
        parameter = operation.parameters[0]
        assert parameter.param_type == "body"
        assert parameter.type == "Page{Customer}"
        assert parameter.description == "A page"
        assert "Page{Customer}" in registry

    def test_substring_heuristic(self) -> None:
        """A query name contained in the path reads as a path parameter."""
        description = _description(
            relative_path="orders/{order_id}",
            parameters=(ApiParameterDescription("order", ParameterSource.URI, str),),
        )
        operation = OperationSpecGenerator().generate(description, ModelSpecRegistry())
        assert operation.parameters[0].param_type == "path"

    def test_documentation_from_description(self) -> None:
        """Host-supplied documentation is used verbatim."""
        description = _description(
            documentation=OperationDocumentation(summary="Get", remarks="Details")
        )
        operation = OperationSpecGenerator().generate(description, ModelSpecRegistry())
        assert (operation.summary, operation.notes) == ("Get", "Details")

    def test_documentation_from_provider(self) -> None:
        """Handlers are documented through the provider of their package."""
        providers = DocumentationProviders({"tests": FieldDescriptionProvider()})
        generator = OperationSpecGenerator(documentation=providers)
        operation = generator.generate(_description(handler=get_order), ModelSpecRegistry())
        assert operation.summary == "Fetch one order."
        assert operation.notes == "Orders are returned with their customer."

    def test_custom_mappings_forwarded(self) -> None:
        """Overrides reach the model-spec engine."""
        opaque = ObjectNode(id="OpaqueOrder")
        generator = OperationSpecGenerator(custom_mappings={Order: opaque})
        registry = ModelSpecRegistry()
        operation = generator.generate(_description(), registry)
        assert operation.type == "OpaqueOrder"
        assert "Customer" not in registry
        assert generator.model_spec_generator.custom_mappings[Order] is opaque


class TestFilters:
    """Tests for the filter chain."""

    def test_order_and_last_writer_wins(self) -> None:
        """Modern filters run first, legacy filters after, in supplied order."""
        calls: list[str] = []
        generator = OperationSpecGenerator(
            operation_filters=[RecordingFilter("first", calls), RecordingFilter("second", calls)],
            operation_spec_filters=[LegacySummaryFilter(calls)],
        )
        operation = generator.generate(_description(), ModelSpecRegistry())

        assert calls == ["first", "second", "legacy"]
        assert operation.summary == "legacy"
        assert operation.notes == "object"

    def test_legacy_filters_adapted(self) -> None:
        """Legacy filters are wrapped into the single filter interface."""
        legacy = LegacySummaryFilter([])
        generator = OperationSpecGenerator(operation_spec_filters=[legacy])

        (adapted,) = generator.filters
        assert isinstance(adapted, LegacyOperationFilter)
        assert adapted.wrapped is legacy

    def test_filters_share_registry(self) -> None:
        """Filters can register additional definitions."""
        registry = ModelSpecRegistry()
        generator = OperationSpecGenerator(operation_filters=[NotFoundFilter()])
        operation = generator.generate(_description(return_type=None), registry)

        assert operation.response_messages == [ResponseMessageSpec(404, "Not found", "Customer")]
        assert "Customer" in registry

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"operation_filters": [object()]},
            {"operation_spec_filters": ["not-a-filter"]},
            {"operation_filters": "filter"},
            {"custom_mappings": [1, 2]},
        ],
    )
    def test_misconfiguration(self, kwargs: dict[str, object]) -> None:
        """Malformed collaborators fail at construction."""
        with pytest.raises(ConfigurationError):
            OperationSpecGenerator(**kwargs)  # type: ignore[arg-type]


class TestModelSpecMap:
    """Tests for ModelSpecMap."""

    def test_find_existing(self) -> None:
        """Registered ids are returned without regeneration."""
        registry = ModelSpecRegistry()
        stored = ObjectNode(id="Order", description="stored")
        registry.register(stored)

        assert ModelSpecMap(registry, ModelSpecGenerator()).find_or_map(Order) is stored

    def test_map_missing(self) -> None:
        """Unknown types are generated into the registry."""
        registry = ModelSpecRegistry()
        node = ModelSpecMap(registry, ModelSpecGenerator()).find_or_map(list[int])

        assert node == ArrayNode(items=PRIMITIVE_MAPPINGS[int])
        assert len(registry) == 0
