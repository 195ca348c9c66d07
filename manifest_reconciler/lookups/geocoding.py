"""Google Geocoding API client."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from manifest_reconciler.common.http import HttpClient, HttpNotFoundError, HttpRequestError, TimeoutConfig
from manifest_reconciler.common.logging import log_warning
from manifest_reconciler.common.models import GeoPoint

STAGE = "geocoding"


def build_query_address(street: str, number: str, neighborhood: str, city: str, country: str) -> str:
    parts = [street, number, neighborhood, city, country]
    return ", ".join(part.strip() for part in parts if part and part.strip())


def parse_location(payload: dict) -> GeoPoint | None:
    if payload.get("status") != "OK":
        return None
    results = payload.get("results") or []
    if not results:
        return None
    location = (results[0].get("geometry") or {}).get("location") or {}
    if "lat" not in location or "lng" not in location:
        return None
    return GeoPoint(lat=float(location["lat"]), lng=float(location["lng"]))


class GoogleGeocoder:
    def __init__(
        self,
        geocoding_config: dict,
        *,
        http_client: HttpClient | None = None,
        logger: logging.Logger | None = None,
        api_key: str | None = None,
    ) -> None:
        load_dotenv()
        self.enabled = bool(geocoding_config.get("enabled", True))
        self.endpoint = geocoding_config["endpoint"]
        self.country = geocoding_config["country"]
        self.api_key = api_key if api_key is not None else os.getenv(geocoding_config["api_key_env"])
        self.timeout = TimeoutConfig.from_config(geocoding_config)
        self.http_client = http_client or HttpClient(timeout=self.timeout)
        self.logger = logger or logging.getLogger(__name__)
        if self.enabled and not self.api_key:
            log_warning(
                self.logger,
                f"{geocoding_config['api_key_env']} is not set; geocoding requests will be denied",
                stage=STAGE,
                event="GEOCODER_INIT",
                status="warning",
                error_code="GEOCODE_API_KEY_MISSING",
            )

    def close(self) -> None:
        self.http_client.close()

    def geocode(self, street: str, number: str, neighborhood: str, city: str) -> GeoPoint | None:
        if not self.enabled:
            return None
        address = build_query_address(street, number, neighborhood, city, self.country)
        try:
            payload = self.http_client.get_json(
                self.endpoint,
                params={"address": address, "key": self.api_key or ""},
                timeout=self.timeout,
            )
        except HttpNotFoundError:
            payload = {}
        except HttpRequestError as exc:
            log_warning(
                self.logger,
                f"geocoding failed: {exc}",
                stage=STAGE,
                event="GEOCODE",
                status="error",
                error_code="GEOCODE_TRANSPORT_ERROR",
            )
            return None

        point = parse_location(payload if isinstance(payload, dict) else {})
        if point is None:
            status = payload.get("status") if isinstance(payload, dict) else None
            log_warning(
                self.logger,
                f"no coordinates for address: {address} (status {status})",
                stage=STAGE,
                event="GEOCODE",
                status="miss",
                error_code="GEOCODE_NOT_FOUND",
            )
        return point
