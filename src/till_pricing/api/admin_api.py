"""
Admin API - FastAPI router for price editing and catalog import/export.

When the PIN is switched on every request must carry it in the
X-Admin-Pin header.
"""
import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import Response
from pydantic import BaseModel
from typing import Optional, Union

from ..engine.money import parse_price_input
from ..exceptions import TillError
from ..services.admin_gate import pin_matches
from .state import catalog

logger = logging.getLogger(__name__)


def require_admin(x_admin_pin: Optional[str] = Header(default=None)):
    """Dependency: reject the request when the PIN is on and does not match."""
    document = catalog.document
    if document.pin_enabled and not pin_matches(x_admin_pin or "", document.pin):
        logger.warning("Admin request with wrong or missing PIN")
        raise TillError("WRONG_PIN")


router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# Pydantic models for API
class PriceUpdate(BaseModel):
    """Either whole pence or a typed pound amount such as "3.10"."""
    pence: Optional[int] = None
    amount: Optional[Union[str, float]] = None

    def to_pence(self) -> int:
        if self.pence is not None:
            if self.pence < 0:
                raise TillError("INVALID_AMOUNT", f"Price must be >= 0, got {self.pence}")
            return self.pence
        if self.amount is None:
            raise TillError("INVALID_AMOUNT", "Give either 'pence' or 'amount'")
        return parse_price_input(self.amount)


class PinSettings(BaseModel):
    pin_enabled: Optional[bool] = None
    pin: Optional[str] = None


# Endpoints

@router.get("/unlock")
async def unlock():
    """Check the PIN; succeeds when the header matches or the PIN is off."""
    return {"authorised": True}


@router.get("/stats")
async def get_stats():
    return catalog.get_stats()


@router.put("/bands/{band_id}/prices/{unit}")
async def update_band_price(band_id: str, unit: str, update: PriceUpdate):
    band = catalog.update_band_price(band_id, unit, update.to_pence())
    return band.to_dict()


@router.put("/products/{product_id}/prices/{unit}")
async def update_override_price(product_id: str, unit: str, update: PriceUpdate):
    product = catalog.update_override_price(product_id, unit, update.to_pence())
    return product.to_dict()


@router.put("/pin")
async def update_pin(settings: PinSettings):
    if settings.pin is not None:
        catalog.set_pin(settings.pin)
    if settings.pin_enabled is not None:
        catalog.set_pin_enabled(settings.pin_enabled)
    return {"pin_enabled": catalog.document.pin_enabled}


@router.get("/export")
async def export_catalog():
    return Response(
        content=catalog.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{catalog.settings.export_filename}"'},
    )


@router.post("/import")
async def import_catalog(request: Request):
    """Replace the catalog with a JSON document; a bad file changes nothing."""
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise TillError("INVALID_JSON", "Import file is not UTF-8 text")
    document = catalog.import_json(text)
    return {"success": True, "bands": len(document.bands), "products": len(document.products)}


@router.post("/reset")
async def reset_catalog():
    catalog.reset_defaults()
    return {"success": True, "message": "Reset."}
