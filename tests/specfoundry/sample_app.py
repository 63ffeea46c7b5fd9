"""FastAPI application described by the endpoint and CLI tests."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Cookie, FastAPI, Header, Query

from tests.specfoundry.sample_models import Order, Product

app = FastAPI(title="Shop")
router = APIRouter(tags=["catalog"])


@app.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: int, expand: bool = False) -> Order:
    """Fetch one order.

    The customer is embedded.
    """
    raise NotImplementedError


@app.delete("/orders/{order_id}", status_code=204)
def delete_order(order_id: int) -> None:
    return None


@router.post("/products", summary="Create a product", description="Stores the product.")
def create_product(
    product: Product,
    x_request_id: Annotated[str | None, Header()] = None,
    session: Annotated[str | None, Cookie()] = None,
) -> Product:
    return product


@router.get("/products")
def list_products(
    q: Annotated[str | None, Query(description="Search text")] = None,
) -> list[Product]:
    return []


@app.get("/hidden", include_in_schema=False)
def hidden() -> dict[str, str]:
    return {}


app.include_router(router)

not_an_app = object()
