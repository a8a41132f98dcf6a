import dataclasses
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

# Keep the API's shared catalog in memory so tests never write a store file
os.environ.setdefault("TILL_CATALOG_PATH", "")

from till_pricing.config.settings import Settings
from till_pricing.services.basket import Basket
from till_pricing.services.catalog_service import CatalogService


@pytest.fixture
def settings():
    """Settings with persistence switched off."""
    return dataclasses.replace(Settings.load(), catalog_store=None)


@pytest.fixture
def catalog(settings):
    """Fresh in-memory catalog loaded from the built-in defaults."""
    return CatalogService(settings)


@pytest.fixture
def basket():
    return Basket()
