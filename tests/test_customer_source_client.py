from urllib.parse import parse_qs

import httpx
import pytest

from checkout_backend.integrations.contracts.sources import OtherSource
from checkout_backend.integrations.customer_source_client import CustomerSourceClient
from checkout_backend.integrations.errors import ConfigurationError, DecodeError, NetworkingError

BASE_URL = "https://backend.example.com/"
CUSTOMER_ID = "cus_123"


def _form(request: httpx.Request):
    return {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}


def _remote(backend, publishable_key):
    return CustomerSourceClient(
        base_url=BASE_URL,
        customer_id=CUSTOMER_ID,
        publishable_key=publishable_key,
        transport=backend.transport,
    )


# ---------------------------------------------------------------------------
# Local mode
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_local_attach_then_fetch_reflects_source_as_default(visa_source, publishable_key):
    client = CustomerSourceClient(publishable_key=publishable_key)

    assert client.mode == "local"
    assert (await client.attach_source(visa_source)).ok

    result = await client.fetch_sources()

    assert result.error is None
    assert result.default_source_id == "card_visa"
    assert [c.id for c in result.sources] == ["card_visa"]


@pytest.mark.asyncio
async def test_local_select_with_non_card_source_keeps_default(visa_source, publishable_key):
    client = CustomerSourceClient(publishable_key=publishable_key)
    await client.attach_source(visa_source)

    result = await client.select_default_source(OtherSource(id="src_bank"))

    assert result.ok
    assert client.default_source.id == "card_visa"


@pytest.mark.asyncio
async def test_local_select_card_source_sets_default_without_appending(visa_source, visa_card, publishable_key):
    client = CustomerSourceClient(publishable_key=publishable_key)

    await client.select_default_source(visa_source)

    assert client.default_source == visa_card
    assert client.sources == []


@pytest.mark.asyncio
async def test_local_attach_non_card_source_is_ignored(publishable_key):
    client = CustomerSourceClient(publishable_key=publishable_key)

    assert (await client.attach_source(OtherSource(id="src_bank"))).ok
    assert client.sources == []
    assert client.default_source is None


@pytest.mark.asyncio
async def test_local_charge_succeeds_without_network(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=500)
    client = CustomerSourceClient(customer_id=CUSTOMER_ID, publishable_key=publishable_key, transport=backend.transport)

    result = await client.charge_source(visa_source, 1000)

    assert result.ok
    assert backend.requests == []


def test_unusable_base_url_falls_back_to_local(publishable_key):
    client = CustomerSourceClient(base_url="not a url", customer_id=CUSTOMER_ID, publishable_key=publishable_key)

    assert client.mode == "local"


# ---------------------------------------------------------------------------
# Publishable key
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("key", [None, "", "pk_test_####"])
async def test_fetch_fails_closed_without_publishable_key(key, backend_factory):
    backend = backend_factory(body={"cards": []})
    client = _remote(backend, lambda: key)

    result = await client.fetch_sources()

    assert isinstance(result.error, ConfigurationError)
    assert result.error.code == 50
    assert "publishable key" in str(result.error)
    assert result.sources == []
    assert backend.requests == []


@pytest.mark.asyncio
async def test_configuration_error_names_configured_key_variable(monkeypatch):
    monkeypatch.delenv("SHOP_PK", raising=False)
    client = CustomerSourceClient(publishable_key_env="SHOP_PK")

    result = await client.fetch_sources()

    assert isinstance(result.error, ConfigurationError)
    assert "SHOP_PK" in str(result.error)
    assert "STRIPE_PUBLISHABLE_KEY" not in str(result.error)


@pytest.mark.asyncio
async def test_configured_key_variable_is_read_from_environment(monkeypatch, visa_source):
    monkeypatch.setenv("SHOP_PK", "pk_test_shop")
    client = CustomerSourceClient(publishable_key_env="SHOP_PK")
    await client.attach_source(visa_source)

    result = await client.fetch_sources()

    assert result.ok
    assert result.default_source_id == "card_visa"


# ---------------------------------------------------------------------------
# Remote mode
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_remote_fetch_decodes_customer_and_replaces_state(card_json, backend_factory, publishable_key):
    other = dict(card_json, id="c2")
    backend = backend_factory(body={"selected_card": other, "cards": [card_json, other]})
    client = _remote(backend, publishable_key)

    result = await client.fetch_sources()

    assert result.ok
    assert result.default_source_id == "c2"
    assert [c.id for c in result.sources] == ["c1", "c2"]
    assert client.default_source.id == "c2"
    assert [c.id for c in client.sources] == ["c1", "c2"]

    request = backend.requests[0]
    assert request.method == "GET"
    assert str(request.url) == "https://backend.example.com/customers/cus_123"


@pytest.mark.asyncio
async def test_remote_fetch_non_2xx_returns_empty_list_and_networking_error(backend_factory, publishable_key):
    backend = backend_factory(status_code=500, body={"error": "boom"})
    client = _remote(backend, publishable_key)

    result = await client.fetch_sources()

    assert isinstance(result.error, NetworkingError)
    assert result.error.status_code == 500
    assert result.sources == []
    assert result.default_source_id is None


@pytest.mark.asyncio
async def test_remote_fetch_malformed_body_is_decode_error(backend_factory, publishable_key):
    backend = backend_factory(body=b"not json")
    client = _remote(backend, publishable_key)

    result = await client.fetch_sources()

    assert isinstance(result.error, DecodeError)
    assert result.sources == []


@pytest.mark.asyncio
async def test_remote_fetch_without_cards_list_is_decode_error(backend_factory, publishable_key):
    backend = backend_factory(body={"selected_card": None})
    client = _remote(backend, publishable_key)

    result = await client.fetch_sources()

    assert isinstance(result.error, DecodeError)


@pytest.mark.asyncio
async def test_remote_charge_posts_form_body(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=200)
    client = _remote(backend, publishable_key)

    result = await client.charge_source(visa_source, 1099)

    assert result.ok
    request = backend.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://backend.example.com/charge"
    assert _form(request) == {"source": "tok_visa", "amount": "1099", "customer": CUSTOMER_ID}


@pytest.mark.asyncio
async def test_remote_charge_ignores_unparseable_body(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=200, body=b"<html>ok</html>")
    client = _remote(backend, publishable_key)

    assert (await client.charge_source(visa_source, 500)).ok


@pytest.mark.asyncio
async def test_remote_select_posts_and_leaves_state_untouched(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=200)
    client = _remote(backend, publishable_key)

    result = await client.select_default_source(visa_source)

    assert result.ok
    assert client.default_source is None
    request = backend.requests[0]
    assert str(request.url) == "https://backend.example.com/customers/cus_123/select_source"
    assert _form(request) == {"customer": CUSTOMER_ID, "source": "tok_visa"}


@pytest.mark.asyncio
async def test_remote_attach_posts_and_leaves_state_untouched(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=201)
    client = _remote(backend, publishable_key)

    result = await client.attach_source(visa_source)

    assert result.ok
    assert client.sources == []
    request = backend.requests[0]
    assert str(request.url) == "https://backend.example.com/customers/cus_123/sources"
    assert _form(request) == {"customer": CUSTOMER_ID, "source": "tok_visa"}


@pytest.mark.asyncio
async def test_remote_attach_maps_non_2xx(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=402)
    client = _remote(backend, publishable_key)

    result = await client.attach_source(visa_source)

    assert isinstance(result.error, NetworkingError)
    assert result.error.status_code == 402


@pytest.mark.asyncio
async def test_remote_select_maps_non_2xx(visa_source, backend_factory, publishable_key):
    backend = backend_factory(status_code=404, body={"error": "no such customer"})
    client = _remote(backend, publishable_key)

    result = await client.select_default_source(visa_source)

    assert isinstance(result.error, NetworkingError)
    assert result.error.status_code == 404
    assert client.default_source is None


@pytest.mark.asyncio
async def test_select_and_attach_pass_transport_errors_through(visa_source, backend_factory, publishable_key):
    refused = httpx.ConnectError("connection refused")
    backend = backend_factory(exc=refused)
    client = _remote(backend, publishable_key)

    select = await client.select_default_source(visa_source)
    attach = await client.attach_source(visa_source)

    assert select.error is refused
    assert attach.error is refused
    assert client.default_source is None
    assert client.sources == []
    assert len(backend.requests) == 2


@pytest.mark.asyncio
async def test_remote_fetch_deeply_nested_body_is_decode_error(backend_factory, publishable_key):
    backend = backend_factory(body=b"[" * 200_000)
    client = _remote(backend, publishable_key)

    result = await client.fetch_sources()

    assert isinstance(result.error, DecodeError)
    assert result.sources == []


@pytest.mark.asyncio
async def test_transport_errors_pass_through_unchanged(visa_source, backend_factory, publishable_key):
    timeout = httpx.ConnectTimeout("timed out")
    backend = backend_factory(exc=timeout)
    client = _remote(backend, publishable_key)

    charge = await client.charge_source(visa_source, 100)
    fetch = await client.fetch_sources()

    assert charge.error is timeout
    assert fetch.error is timeout
    assert fetch.sources == []


@pytest.mark.asyncio
async def test_customer_id_is_percent_encoded_in_path(backend_factory, publishable_key):
    backend = backend_factory(body={"cards": []})
    client = CustomerSourceClient(
        base_url="https://backend.example.com",
        customer_id="cus/1 2",
        publishable_key=publishable_key,
        transport=backend.transport,
    )

    await client.fetch_sources()

    assert backend.requests[0].url.raw_path == b"/customers/cus%2F1%202"
