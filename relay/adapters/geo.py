from __future__ import annotations

from typing import Mapping, Optional

from relay.types import GeoContext, GeoLookup
from server.config import Settings


class HeaderGeoLookup(GeoLookup):
    """Reads the visitor location headers an edge proxy adds to each request.

    Cloudflare sets `CF-IPCountry` by default and `CF-Region` / `CF-IPCity`
    when visitor location headers are enabled. Header names are
    configurable for other proxies.
    """

    def __init__(self, settings: Settings) -> None:
        self.country_header = settings.geo_country_header
        self.region_header = settings.geo_region_header
        self.city_header = settings.geo_city_header

    @staticmethod
    def _read(headers: Mapping[str, str], name: str) -> Optional[str]:
        try:
            value = headers.get(name)
        except Exception:
            return None
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None

    def lookup(self, headers: Mapping[str, str]) -> GeoContext:  # type: ignore[override]
        if headers is None:
            return GeoContext()
        return GeoContext(
            country=self._read(headers, self.country_header),
            region=self._read(headers, self.region_header),
            city=self._read(headers, self.city_header),
        )
