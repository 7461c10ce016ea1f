"""
Utilities for loading preset shipping zone configuration.
"""
from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "zone_presets.yaml"


def _slugify(value: Optional[str]) -> str:
    if not value:
        return ""
    return re.sub(r"[^a-z0-9]+", "", value.lower())


@lru_cache()
def load_zone_presets() -> Dict[str, Any]:
    if not CONFIG_PATH.exists():
        return {}
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return (yaml.safe_load(fh) or {}).get("presets", {})


def _match_key(options: Dict[str, Any], name: Optional[str]) -> Optional[str]:
    wanted = _slugify(name)
    if not wanted:
        return None
    for key in options:
        if _slugify(key) == wanted:
            return key
    return None


def list_presets() -> Dict[str, List[str]]:
    """Continent -> region names."""
    return {continent: list(regions.keys()) for continent, regions in load_zone_presets().items()}


def get_country_names() -> Dict[str, str]:
    """ISO code -> country name across all presets."""
    names: Dict[str, str] = {}
    for regions in load_zone_presets().values():
        for countries in regions.values():
            names.update({str(code).upper(): name for code, name in countries.items()})
    return names


def get_country_codes_for_zone(continent: str, region: Optional[str] = None) -> List[str]:
    """
    Country codes for a preset zone.

    Without a region every region of the continent is included. Unknown
    continents or regions give an empty list.
    """
    presets = load_zone_presets()
    continent_key = _match_key(presets, continent)
    if not continent_key:
        return []
    regions = presets[continent_key] or {}
    if region:
        region_key = _match_key(regions, region)
        if not region_key:
            return []
        selected = [regions[region_key]]
    else:
        selected = list(regions.values())

    codes: List[str] = []
    for countries in selected:
        for code in (countries or {}):
            code = str(code).upper()
            if code not in codes:
                codes.append(code)
    return codes
