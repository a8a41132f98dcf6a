"""
Process-wide till state shared by the API routers: one catalog, one sale.
"""
from ..config.settings import get_settings
from ..services.basket import Basket
from ..services.catalog_service import CatalogService

settings = get_settings()
catalog = CatalogService(settings)
basket = Basket()
