"""ViaCEP postal-code directory client (forward and reverse lookups)."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from manifest_reconciler.common.http import HttpClient, HttpNotFoundError, HttpRequestError, TimeoutConfig
from manifest_reconciler.common.logging import log_event, log_warning
from manifest_reconciler.common.models import PostalRecord
from manifest_reconciler.common.postcode import is_valid_cep
from manifest_reconciler.common.street_match import clean_street_name
from manifest_reconciler.common.text import strip_accents

STAGE = "postal_lookup"


def _is_not_found(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return True
    erro = payload.get("erro")
    return erro is True or str(erro).lower() == "true"


def parse_postal_record(payload: dict) -> PostalRecord:
    return PostalRecord(
        street_name=str(payload.get("logradouro") or ""),
        city=str(payload.get("localidade") or ""),
        neighborhood=payload.get("bairro") or None,
        state=payload.get("uf") or None,
        postal_code=(payload.get("cep") or "").replace("-", "") or None,
    )


def build_street_query(street_name: str) -> str:
    return strip_accents(clean_street_name(street_name)).strip()


class ViaCepClient:
    def __init__(
        self,
        postal_config: dict,
        *,
        http_client: HttpClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.enabled = bool(postal_config.get("enabled", True))
        self.base_url = postal_config["base_url"].rstrip("/")
        self.state = postal_config["state"]
        self.min_street_query_length = int(postal_config.get("min_street_query_length", 3))
        self.timeout = TimeoutConfig.from_config(postal_config)
        self.http_client = http_client or HttpClient(timeout=self.timeout)
        self.logger = logger or logging.getLogger(__name__)

    def close(self) -> None:
        self.http_client.close()

    def lookup_postal_code(self, code: str) -> PostalRecord | None:
        if not self.enabled:
            return None
        if not is_valid_cep(code):
            log_warning(
                self.logger,
                f"postal code is not an 8-digit CEP: {code}",
                stage=STAGE,
                event="POSTAL_LOOKUP",
                status="miss",
                postal_code=code,
                error_code="POSTAL_NOT_FOUND",
            )
            return None

        url = f"{self.base_url}/{code}/json/"
        try:
            payload = self.http_client.get_json(url, timeout=self.timeout)
        except HttpNotFoundError:
            payload = None
        except HttpRequestError as exc:
            log_warning(
                self.logger,
                f"postal lookup failed: {exc}",
                stage=STAGE,
                event="POSTAL_LOOKUP",
                status="error",
                postal_code=code,
                error_code="POSTAL_TRANSPORT_ERROR",
            )
            return None

        if _is_not_found(payload):
            log_warning(
                self.logger,
                f"postal code not found: {code}",
                stage=STAGE,
                event="POSTAL_LOOKUP",
                status="miss",
                postal_code=code,
                error_code="POSTAL_NOT_FOUND",
            )
            return None
        return parse_postal_record(payload)

    def reverse_lookup_street(self, street_name: str, city: str) -> PostalRecord | None:
        query = build_street_query(street_name)
        if not self.enabled or len(query) < self.min_street_query_length or not city:
            return None

        url = f"{self.base_url}/{quote(self.state)}/{quote(city)}/{quote(query)}/json/"
        log_event(self.logger, f"reverse postal lookup: {url}", stage=STAGE, event="REVERSE_LOOKUP")
        try:
            payload = self.http_client.get_json(url, timeout=self.timeout)
        except HttpNotFoundError:
            return None
        except HttpRequestError as exc:
            log_warning(
                self.logger,
                f"reverse postal lookup failed: {exc}",
                stage=STAGE,
                event="REVERSE_LOOKUP",
                status="error",
                error_code="POSTAL_TRANSPORT_ERROR",
            )
            return None

        candidates = payload if isinstance(payload, list) else [payload]
        for candidate in candidates:
            if not _is_not_found(candidate) and candidate.get("logradouro"):
                return parse_postal_record(candidate)
        return None
