from __future__ import annotations

from manifest_reconciler.common.http import HttpNotFoundError, HttpRequestError
from manifest_reconciler.common.models import PostalRecord
from manifest_reconciler.lookups.viacep import ViaCepClient, build_street_query

POSTAL_CONFIG = {
    "base_url": "https://viacep.example/ws/",
    "state": "SP",
    "min_street_query_length": 3,
    "timeout_seconds": {"connect": 1, "read": 2},
}


class FakeHttpClient:
    def __init__(self, responses):
        self.responses = responses
        self.calls: list[tuple[str, dict]] = []

    def get_json(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        return None


def test_forward_lookup_parses_record():
    http = FakeHttpClient(
        {
            "https://viacep.example/ws/01310100/json/": {
                "cep": "01310-100",
                "logradouro": "Avenida Paulista",
                "bairro": "Bela Vista",
                "localidade": "São Paulo",
                "uf": "SP",
            }
        }
    )
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    record = client.lookup_postal_code("01310100")

    assert record == PostalRecord(
        street_name="Avenida Paulista",
        city="São Paulo",
        neighborhood="Bela Vista",
        state="SP",
        postal_code="01310100",
    )


def test_forward_lookup_not_found_and_transport_failures_return_none():
    http = FakeHttpClient(
        {
            "https://viacep.example/ws/99999999/json/": {"erro": "true"},
            "https://viacep.example/ws/11111111/json/": HttpRequestError("HTTP status: 500"),
            "https://viacep.example/ws/22222222/json/": HttpNotFoundError("HTTP status: 404"),
        }
    )
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    assert client.lookup_postal_code("99999999") is None
    assert client.lookup_postal_code("11111111") is None
    assert client.lookup_postal_code("22222222") is None


def test_forward_lookup_skips_malformed_codes():
    http = FakeHttpClient({})
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    assert client.lookup_postal_code("1234") is None
    assert http.calls == []


def test_reverse_lookup_uses_cleaned_street_and_first_result():
    url = "https://viacep.example/ws/SP/S%C3%A3o%20Paulo/augusta/json/"
    http = FakeHttpClient(
        {
            url: [
                {"cep": "01305-000", "logradouro": "Rua Augusta", "localidade": "São Paulo"},
                {"cep": "01412-000", "logradouro": "Rua Augusta", "localidade": "São Paulo"},
            ]
        }
    )
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    record = client.reverse_lookup_street("Rua Augusta", "São Paulo")

    assert record.street_name == "Rua Augusta"
    assert record.postal_code == "01305000"
    assert http.calls[0][0] == url


def test_reverse_lookup_empty_list_and_short_queries():
    http = FakeHttpClient({"https://viacep.example/ws/SP/Santos/inexistente/json/": []})
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    assert client.reverse_lookup_street("Rua Inexistente", "Santos") is None
    assert client.reverse_lookup_street("Rua XV", "Santos") is None
    assert len(http.calls) == 1


def test_build_street_query_strips_prefix_and_accents():
    assert build_street_query("Avenida São João") == "sao joao"


def test_disabled_client_makes_no_requests():
    http = FakeHttpClient({})
    client = ViaCepClient({**POSTAL_CONFIG, "enabled": False}, http_client=http)

    assert client.lookup_postal_code("01001000") is None
    assert client.reverse_lookup_street("Rua Augusta", "São Paulo") is None
    assert http.calls == []


def test_forward_lookup_keeps_town_wide_code_without_street():
    http = FakeHttpClient(
        {
            "https://viacep.example/ws/13290000/json/": {
                "cep": "13290-000",
                "logradouro": "",
                "bairro": "",
                "localidade": "Louveira",
                "uf": "SP",
            }
        }
    )
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    record = client.lookup_postal_code("13290000")

    assert record == PostalRecord(street_name="", city="Louveira", state="SP", postal_code="13290000")


def test_reverse_lookup_skips_candidates_without_street():
    url = "https://viacep.example/ws/SP/Louveira/augusta/json/"
    http = FakeHttpClient(
        {
            url: [
                {"cep": "13290-000", "logradouro": "", "localidade": "Louveira"},
                {"cep": "13290-001", "logradouro": "Rua Augusta", "localidade": "Louveira"},
            ]
        }
    )
    client = ViaCepClient(POSTAL_CONFIG, http_client=http)

    assert client.reverse_lookup_street("Rua Augusta", "Louveira").postal_code == "13290001"
