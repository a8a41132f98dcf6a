#!/usr/bin/env python
"""
Check pipeline - validates the till catalog and runs the golden tests.

Usage:
    python scripts/check_catalog.py [catalog.json]
"""
import dataclasses
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from till_pricing.config.settings import get_settings
from till_pricing.exceptions import TillError
from till_pricing.services.catalog_service import CatalogService


def main():
    print("=" * 60)
    print("TILL CATALOG CHECK")
    print("=" * 60)
    print()

    settings = get_settings()
    store = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.catalog_store

    print(f"[1/2] Validating catalog ({store if store and store.exists() else 'built-in defaults'})...")
    # Validate in memory only; never rewrite the file being checked
    service = CatalogService(dataclasses.replace(settings, catalog_store=None))
    if store and store.exists():
        try:
            service.import_json(store.read_text(encoding='utf-8'))
        except TillError as e:
            print(f"\n❌ CATALOG INVALID: {e.message}")
            sys.exit(1)

    stats = service.get_stats()
    if stats['dangling_band_refs']:
        print("  WARNING: products with a missing price band (ring up at £0.00):")
        for product_id in stats['dangling_band_refs']:
            print(f"    - {product_id}")

    print()
    print("[2/2] Running golden tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/test_golden_cases.py', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ CHECK COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Bands: {stats['bands']}")
    print(f"  Products: {stats['products']} ({stats['override_priced']} individually priced)")
    print(f"  Products with deals: {stats['with_deals']}")
    print(f"  PIN required: {'yes' if stats['pin_enabled'] else 'no'}")


if __name__ == "__main__":
    main()
