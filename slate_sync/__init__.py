"""Sync Slate theme builds to a Shopify store through Theme Kit."""

from slate_sync.deployer import DeployInProgressError, EmptyInputError, ThemeDeployer
from slate_sync.shopify_api import (
    MalformedThemesResponseError,
    NoMainThemeError,
    ShopifyThemesClient,
    ThemeApiError,
)

__version__ = "0.1.0"

__all__ = [
    "DeployInProgressError",
    "EmptyInputError",
    "MalformedThemesResponseError",
    "NoMainThemeError",
    "ShopifyThemesClient",
    "ThemeApiError",
    "ThemeDeployer",
]
