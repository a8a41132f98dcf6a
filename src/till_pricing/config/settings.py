"""
Centralized settings and path configuration for the till.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Persisted catalog (bands, products, PIN flags)
    catalog_store: Optional[Path]

    # Built-in catalog shipped with the package
    default_catalog: Path

    # File name offered by the export button
    export_filename: str = 'pub-till-config.json'

    # Used when the admin clears the PIN field
    default_pin: str = '1234'

    # Quick cash buttons, in pence
    quick_cash_pence: tuple = (500, 1000, 2000, 5000)

    # Add-ons shown on a category tab regardless of their own category
    pinned_products: dict[str, tuple] = field(
        default_factory=lambda: {'Spirits': ('p-mixer-charge',)}
    )

    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        store_env = os.environ.get('TILL_CATALOG_PATH')
        if store_env == '':
            # Explicitly disabled: keep the catalog in memory only
            catalog_store = None
        elif store_env:
            catalog_store = Path(store_env)
        else:
            catalog_store = root / 'till_catalog.json'

        return cls(
            project_root=root,
            catalog_store=catalog_store,
            default_catalog=Path(__file__).resolve().parent.parent / 'data' / 'default_catalog.json',
            log_level=os.environ.get('TILL_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
