"""Tests for specfoundry.ids."""

from __future__ import annotations

from typing import Union

from specfoundry.ids import unique_id_for
from tests.specfoundry.sample_models import Customer, Envelope, Order, Page


class TestUniqueIdFor:
    """Tests for unique_id_for."""

    def test_plain_type(self) -> None:
        """Plain types use their short name."""
        assert unique_id_for(Order) == "Order"

    def test_generic_ids_are_distinct(self) -> None:
        """Different instantiations never share an id."""
        ids = {unique_id_for(list[Order]), unique_id_for(list[Customer]), unique_id_for(Order)}
        assert ids == {"list{Order}", "list{Customer}", "Order"}

    def test_nested_arguments(self) -> None:
        """Argument ids are embedded recursively."""
        assert unique_id_for(Page[dict[str, Order]]) == "Page{dict{str,Order}}"

    def test_pydantic_name_suffix_stripped(self) -> None:
        """The bracketed suffix in pydantic class names is replaced."""
        assert unique_id_for(Envelope[Customer]) == "Envelope{Customer}"

    def test_nullable_transparent(self) -> None:
        """Nullability is not part of an id."""
        assert unique_id_for(Order | None) == "Order"
        assert unique_id_for(Page[Order | None]) == "Page{Order}"

    def test_deterministic(self) -> None:
        """Repeated calls agree."""
        assert unique_id_for(Page[Order]) == unique_id_for(Page[Order])

    def test_union_named_uniformly(self) -> None:
        """Both union spellings share the ``Union`` name."""
        assert unique_id_for(int | str) == "Union{int,str}"
        assert unique_id_for(Union[int, str]) == "Union{int,str}"  # noqa: UP007
