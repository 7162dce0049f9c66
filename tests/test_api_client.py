import httpx
import pytest

from couture.api_client import CONNECTION_ERROR, INVALID_RESPONSE, ApiResult, BackendClient
from couture.schemas import CustomerSummary
from couture.services import customer_service, order_service, transaction_service


def _client(handler) -> BackendClient:
    return BackendClient(base_url="http://backend.test/api", transport=httpx.MockTransport(handler))


async def test_network_failure_becomes_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = await customer_service.get_all_customers(_client(handler))
    assert not result.success
    assert result.message == CONNECTION_ERROR

async def test_error_status_uses_backend_message():
    def handler(request):
        return httpx.Response(400, json={"message": "Nom déjà utilisé", "errors": {"Name": ["trop court"]}})

    result = await customer_service.create_customer(_client(handler), "Awa", "77 123 45 67")
    assert not result.success
    assert result.message == "Nom déjà utilisé"
    assert result.errors == {"Name": "trop court"}

async def test_error_status_without_body_uses_default_message():
    result = await transaction_service.get_all_transactions(_client(lambda r: httpx.Response(503)))
    assert result.message == "Erreur HTTP: 503"

async def test_success_false_in_body_is_a_failure():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Identifiants invalides"})

    result = await _client(handler).post("/auth/login", json={})
    assert result == ApiResult.fail("Identifiants invalides")

async def test_non_json_success_is_invalid_response():
    result = await customer_service.get_all_customers(_client(lambda r: httpx.Response(200, text="<html>")))
    assert result.message == INVALID_RESPONSE

async def test_malformed_list_is_invalid_response():
    result = await customer_service.get_all_customers(_client(lambda r: httpx.Response(200, json=[{"id": "x"}])))
    assert not result.success
    assert result.message == INVALID_RESPONSE

async def test_list_is_parsed_into_models():
    payload = [{"id": 1, "name": "Awa", "phoneNumber": "771234567", "hasMeasures": True}]
    result = await customer_service.get_all_customers(_client(lambda r: httpx.Response(200, json=payload)))
    assert result.success
    assert result.data == [CustomerSummary(id=1, name="Awa", phoneNumber="771234567", hasMeasures=True)]

async def test_empty_query_params_are_dropped():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[])

    await transaction_service.get_all_transactions(_client(handler), {"type": "", "categorie": None, "page": 2})
    assert seen["params"] == {"page": "2"}

async def test_status_filter_is_url_encoded():
    seen = {}

    def handler(request):
        seen["path"] = request.url.raw_path.decode()
        return httpx.Response(200, json=[])

    await order_service.get_orders_by_status(_client(handler), "En cours")
    assert seen["path"] == "/api/orders/status/En%20cours"

@pytest.mark.parametrize("payload, expected", [
    ({"total": 13000}, 13000.0),
    ({}, 0.0),
])
async def test_calculate_total_reads_total(payload, expected):
    result = await order_service.calculate_order_total(_client(lambda r: httpx.Response(200, json=payload)), [])
    assert result.success
    assert result.data == expected
