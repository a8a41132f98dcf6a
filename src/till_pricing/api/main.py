from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Any, List, Optional

from till_pricing import __version__
from till_pricing.config.logging_config import configure_logging
from till_pricing.engine import best_line_total, format_pence, resolve_units_and_prices
from till_pricing.exceptions import TillError
from till_pricing.api.admin_api import router as admin_router
from till_pricing.api.errors import till_error_handler
from till_pricing.api.state import basket, catalog

configure_logging()

app = FastAPI(
    title="Till Pricing API",
    description="Basket pricing, bundle deals and price administration for the bar till",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(TillError, till_error_handler)

# Include admin (price editing) API
app.include_router(admin_router)


class LinePriceRequest(BaseModel):
    unit_price_pence: int = Field(ge=0)
    qty: int
    # Left loose on purpose: malformed deals are skipped, not rejected
    deals: Optional[List[Any]] = None


class AddRequest(BaseModel):
    product_id: str
    unit: str


class CashRequest(BaseModel):
    amount: Optional[str] = None  # as typed, e.g. "20" or "12.50"
    pence: Optional[int] = Field(default=None, ge=0)
    exact: bool = False


def _product_view(product) -> dict:
    units, prices = resolve_units_and_prices(product, catalog.band_lookup())
    data = product.to_dict()
    data["units"] = list(units)
    data["pricesPence"] = dict(prices)
    data["prices"] = {u: format_pence(prices.get(u, 0)) for u in units}
    return data


def _basket_view() -> dict:
    summary = basket.summary(catalog.product_lookup())
    summary["total"] = format_pence(summary["total_pence"])
    summary["change"] = format_pence(abs(summary["change_pence"]))
    summary["still_owed"] = summary["change_pence"] < 0
    return summary


@app.get("/")
async def root():
    return {"status": "online", "message": "Till Pricing API Active"}


@app.post("/price/line")
async def price_line(req: LinePriceRequest):
    """Price a quantity at a unit price under a list of deals."""
    result = best_line_total(req.unit_price_pence, req.qty, req.deals)
    return {
        "total_pence": result.total_pence,
        "deal_note": result.deal_note,
        "total": format_pence(result.total_pence),
    }


@app.get("/catalog")
async def get_catalog():
    return {
        "categories": catalog.categories(),
        "stats": catalog.get_stats(),
    }


@app.get("/catalog/categories")
async def get_categories():
    return catalog.categories()


@app.get("/catalog/products")
async def get_products(category: Optional[str] = None, search: str = ""):
    products = [_product_view(p) for p in catalog.filter_products(category, search)]
    pinned = [_product_view(p) for p in catalog.pinned_products(category)] if category else []
    return {"pinned": pinned, "products": products}


@app.get("/catalog/products/{product_id}/units")
async def get_product_units(product_id: str):
    units, prices = catalog.units_and_prices(product_id)
    return {"product_id": product_id, "units": list(units), "pricesPence": dict(prices)}


@app.get("/catalog/price-list")
async def get_price_list():
    return catalog.price_list_frame().to_dict(orient="records")


@app.get("/basket")
async def get_basket():
    return _basket_view()


@app.post("/basket/add")
async def add_to_basket(req: AddRequest):
    product = catalog.get_product(req.product_id)
    units, _ = catalog.units_and_prices(req.product_id)
    if req.unit not in units:
        raise TillError("UNIT_NOT_FOUND", f"'{product.name}' is not sold as '{req.unit}'", unit=req.unit)
    basket.add(product, req.unit, catalog.band_lookup())
    return _basket_view()


@app.post("/basket/lines/{key}/increment")
async def increment_line(key: str):
    basket.increment(key)
    return _basket_view()


@app.post("/basket/lines/{key}/decrement")
async def decrement_line(key: str):
    basket.decrement(key)
    return _basket_view()


@app.delete("/basket/lines/{key}")
async def remove_line(key: str):
    basket.remove(key)
    return _basket_view()


@app.post("/basket/undo")
async def undo_last_add():
    basket.undo_last_add()
    return _basket_view()


@app.post("/basket/clear")
async def clear_sale():
    basket.clear()
    return _basket_view()


@app.put("/basket/cash")
async def set_cash(req: CashRequest):
    if req.exact:
        basket.set_cash_exact(catalog.product_lookup())
    elif req.pence is not None:
        basket.set_cash(req.pence)
    else:
        basket.set_cash_from_text(req.amount or "")
    return _basket_view()
