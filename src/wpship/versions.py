# versions.py
from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import List

from pydantic import BaseModel, ValidationError

from .errors import BestEffortWarning


WP_VERSION_CHECK_URL = "https://api.wordpress.org/core/version-check/1.7/"
WC_PLUGIN_INFO_URL = "https://api.wordpress.org/plugins/info/1.0/woocommerce.json"

DEFAULT_TIMEOUT = 15


# -------------------- Schemas --------------------

class CoreOffer(BaseModel):
    version: str


class CoreVersionCheck(BaseModel):
    offers: List[CoreOffer]


class PluginDirectoryInfo(BaseModel):
    version: str


# -------------------- Lookups --------------------

def _get_json(url: str, timeout: float = DEFAULT_TIMEOUT) -> dict:
    req = urllib.request.Request(url, headers={"Accept": "application/json"}, method="GET")
    with urllib.request.urlopen(req, timeout=timeout) as response:
        return json.loads(response.read().decode("utf-8"))


def fetch_latest_wp_version(url: str = WP_VERSION_CHECK_URL) -> str:
    """
    Latest WordPress core version.

    Raises BestEffortWarning on any network/parse failure; callers log it
    and carry on.
    """
    try:
        data = CoreVersionCheck.model_validate(_get_json(url))
    except (urllib.error.URLError, OSError, ValueError, ValidationError) as e:
        raise BestEffortWarning(f"Could not fetch latest WordPress version from {url}: {e}") from e
    if not data.offers:
        raise BestEffortWarning(f"No version offers returned by {url}")
    return data.offers[0].version


def fetch_latest_wc_version(url: str = WC_PLUGIN_INFO_URL) -> str:
    """Latest WooCommerce version from the WordPress.org plugin directory."""
    try:
        data = PluginDirectoryInfo.model_validate(_get_json(url))
    except (urllib.error.URLError, OSError, ValueError, ValidationError) as e:
        raise BestEffortWarning(f"Could not fetch latest WooCommerce version from {url}: {e}") from e
    return data.version
