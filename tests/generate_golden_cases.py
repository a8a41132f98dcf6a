"""
Generate golden test cases by ringing up sample baskets on the default catalog.
This captures current behavior as a regression baseline.
"""
import dataclasses
import os
import sys

import pandas as pd

# Add src to path so we can import till_pricing
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from till_pricing.config.settings import Settings
from till_pricing.services.basket import Basket
from till_pricing.services.catalog_service import CatalogService

# Band priced, override priced, and both deal products
PRODUCTS_TO_TEST = [
    'p-premium-spirit',
    'p-guinness',
    'p-bombs',
    'p-cocktail',
    'p-j20',
    'p-mixer-charge',
]
QUANTITIES = [1, 2, 3, 5]


def generate_golden_cases():
    settings = dataclasses.replace(Settings.load(), catalog_store=None)
    catalog = CatalogService(settings)
    bands = catalog.band_lookup()
    products = catalog.product_lookup()

    cases = []
    for product_id in PRODUCTS_TO_TEST:
        product = products[product_id]
        units, _ = catalog.units_and_prices(product_id)
        for unit in units:
            for qty in QUANTITIES:
                basket = Basket()
                for _ in range(qty):
                    line = basket.add(product, unit, bands)
                priced = basket.line_total(line, products)
                cases.append({
                    'product_id': product_id,
                    'unit': unit,
                    'qty': qty,
                    'expected_label': line.label,
                    'expected_unit_price': line.price_pence,
                    'expected_total': priced.total_pence,
                    'expected_note': priced.deal_note or '',
                })

    df = pd.DataFrame(cases)
    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'golden_cases.csv')
    df.to_csv(output_path, index=False, encoding='utf-8')
    print(f"Generated {len(cases)} golden test cases")
    print(f"Output: {output_path}")
    print()
    print("Sample cases:")
    print(df.head(10).to_string(index=False))


if __name__ == "__main__":
    generate_golden_cases()
