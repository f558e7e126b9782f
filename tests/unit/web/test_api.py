"""
Web API 테스트

httpx ASGITransport로 FastAPI 앱 호출 (lifespan 미실행).
DB/설정/환율 해석기는 dependency override로 임시 자원 사용.
"""

from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.mock.rate_client import MockExchangeRateClient
from core.config.loader import Settings, get_settings
from core.exchange.cache import RateCache
from core.exchange.resolver import ExchangeRateResolver
from web.app import create_app
from web.dependencies import get_app_settings, get_db, get_db_write, set_rate_resolver

OWNER = {"X-User-Id": "user-1"}
STRANGER = {"X-User-Id": "user-2"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def rate_client() -> MockExchangeRateClient:
    return MockExchangeRateClient({"CNY": Decimal("0.1408")})


@pytest_asyncio.fixture
async def client(
    tmp_path: Path,
    temp_settings_file: Path,
    rate_client: MockExchangeRateClient,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    db_path = tmp_path / "api.db"
    async with SQLiteAdapter(db_path) as setup_db:
        await init_schema(setup_db)

    Settings.reset()
    settings = get_settings(temp_settings_file)

    async def override_db() -> AsyncGenerator[SQLiteAdapter, None]:
        async with SQLiteAdapter(db_path) as db:
            yield db

    app = create_app()
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_db_write] = override_db
    app.dependency_overrides[get_app_settings] = lambda: settings
    set_rate_resolver(ExchangeRateResolver(rate_client, RateCache(ttl_seconds=60)))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    set_rate_resolver(None)
    Settings.reset()


async def create_asset(client: httpx.AsyncClient, headers: dict = OWNER) -> dict:
    response = await client.post(
        "/api/assets",
        json={
            "name": "Camera",
            "type": "PHYSICAL",
            "initial_value": "1000",
            "currency": "USD",
            "purchase_date": "2024-01-01",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["mode"] == "development"


class TestAssetsApi:
    """자산/기록 API 테스트"""

    @pytest.mark.asyncio
    async def test_requires_user_header(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/assets")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_and_detail(self, client: httpx.AsyncClient) -> None:
        asset = await create_asset(client)

        assert asset["current_value"] == "1000"
        assert asset["user_id"] == "user-1"

        response = await client.get(f"/api/assets/{asset['id']}", headers=OWNER)
        detail = response.json()
        assert response.status_code == 200
        assert [r["type"] for r in detail["records"]] == ["INITIAL"]

    @pytest.mark.asyncio
    async def test_ledger_flow(self, client: httpx.AsyncClient) -> None:
        """ADDITION → REVALUATION → 과거 기록 수정"""
        asset = await create_asset(client)
        asset_id = asset["id"]

        response = await client.post(
            f"/api/assets/{asset_id}/records",
            json={"type": "ADDITION", "amount": 200, "date": "2024-01-02"},
            headers=OWNER,
        )
        assert response.status_code == 201
        addition = response.json()["record"]
        assert addition["value_after"] == "1200"

        response = await client.post(
            f"/api/assets/{asset_id}/records",
            json={"type": "REVALUATION", "amount": "1500", "date": "2024-01-03"},
            headers=OWNER,
        )
        body = response.json()
        assert body["record"]["amount_change"] == "300"
        assert body["asset"]["current_value"] == "1500"

        response = await client.patch(
            f"/api/assets/records/{addition['id']}",
            json={"amount": "500"},
            headers=OWNER,
        )
        assert response.status_code == 200
        assert response.json()["record"]["value_after"] == "1500"

        response = await client.get(f"/api/assets/{asset_id}/records", headers=OWNER)
        records = response.json()["records"]
        assert records[0]["type"] == "REVALUATION"
        assert records[0]["amount_change"] == "0"

    @pytest.mark.asyncio
    async def test_invalid_amount_is_400(self, client: httpx.AsyncClient) -> None:
        asset = await create_asset(client)

        response = await client.post(
            f"/api/assets/{asset['id']}/records",
            json={"type": "ADDITION", "amount": "lots"},
            headers=OWNER,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_json_number_keeps_precision(self, client: httpx.AsyncClient) -> None:
        """JSON 숫자 금액은 float 변환 없이 Decimal로 처리"""
        asset = await create_asset(client)

        response = await client.post(
            f"/api/assets/{asset['id']}/records",
            content=b'{"type": "ADDITION", "amount": 12345678901234.123456789}',
            headers={**OWNER, "Content-Type": "application/json"},
        )

        body = response.json()
        assert response.status_code == 201
        assert Decimal(body["record"]["amount_change"]) == Decimal("12345678901234.123456789")
        assert Decimal(body["asset"]["current_value"]) == Decimal("12345678902234.123456789")

    @pytest.mark.asyncio
    async def test_missing_asset_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/assets/missing/records",
            json={"type": "ADDITION", "amount": "1"},
            headers=OWNER,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_user_is_403(self, client: httpx.AsyncClient) -> None:
        asset = await create_asset(client)

        response = await client.post(
            f"/api/assets/{asset['id']}/records",
            json={"type": "ADDITION", "amount": "1"},
            headers=STRANGER,
        )
        assert response.status_code == 403

        # 관리자는 허용
        response = await client.post(
            f"/api/assets/{asset['id']}/recalculate",
            headers=ADMIN,
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_list_scoped_to_owner(self, client: httpx.AsyncClient) -> None:
        await create_asset(client)

        mine = (await client.get("/api/assets", headers=OWNER)).json()
        theirs = (await client.get("/api/assets", headers=STRANGER)).json()
        everyone = (await client.get("/api/assets?status=all", headers=ADMIN)).json()

        assert mine["total"] == 1
        assert theirs["total"] == 0
        assert everyone["total"] == 1

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: httpx.AsyncClient) -> None:
        asset = await create_asset(client)

        response = await client.patch(
            f"/api/assets/{asset['id']}", json={"name": "Drone"}, headers=OWNER
        )
        assert response.json()["name"] == "Drone"

        response = await client.patch(f"/api/assets/{asset['id']}", json={}, headers=OWNER)
        assert response.status_code == 400

        response = await client.delete(f"/api/assets/{asset['id']}", headers=OWNER)
        assert response.status_code == 204

        response = await client.get(f"/api/assets/{asset['id']}", headers=OWNER)
        assert response.status_code == 404


class TestExchangeApi:
    """환율 API 테스트"""

    @pytest.mark.asyncio
    async def test_latest(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/exchange/latest?currency=RMB")

        body = response.json()
        assert response.status_code == 200
        assert body["rate"] == "0.1408"
        assert body["is_fallback"] is False

    @pytest.mark.asyncio
    async def test_latest_falls_back(
        self, client: httpx.AsyncClient, rate_client: MockExchangeRateClient
    ) -> None:
        rate_client.set_failure(True)

        response = await client.get("/api/exchange/latest?currency=EUR")

        assert response.status_code == 200
        assert response.json()["is_fallback"] is True

    @pytest.mark.asyncio
    async def test_unsupported_currency(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/exchange/latest?currency=XYZ")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_convert(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/exchange/convert",
            json={"amount": "100", "currency": "CNY"},
        )

        assert response.status_code == 200
        assert response.json()["amount_usd"] == "14.08"


class TestPayoutApi:
    """지급 배치 API 테스트"""

    @pytest.mark.asyncio
    async def test_admin_only(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/admin/payouts/reimbursements", json={"items": []}, headers=OWNER
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_reimbursement_batches(self, client: httpx.AsyncClient) -> None:
        evm = "0x1111111111111111111111111111111111111111"
        items = [
            {"id": "r1", "recipient_id": "a", "recipient_name": "A", "amount_usd": 1000, "evm_address": evm},
            {"id": "r2", "recipient_id": "a", "recipient_name": "A", "amount_usd": "700", "evm_address": evm},
            {"id": "r3", "recipient_id": "b", "recipient_name": "B", "amount_usd": "300"},
        ]

        response = await client.post(
            "/api/admin/payouts/reimbursements", json={"items": items}, headers=ADMIN
        )

        body = response.json()
        assert response.status_code == 200
        assert body["total_batches"] == 2
        assert [i["type"] for i in body["issues"]] == ["missing_evm_address"]
        transactions = body["payload"]["transactions"]
        assert len(transactions) == 1
        assert transactions[0]["value"] == "1700000000"
        assert body["payload"]["token"] == "USDC"

    @pytest.mark.asyncio
    async def test_invalid_salary_month(self, client: httpx.AsyncClient) -> None:
        payments = [
            {"id": "p1", "user_id": "a", "user_name": "A", "month": "2024-13", "amount_usdt": "1"},
        ]

        response = await client.post(
            "/api/admin/payouts/salaries", json={"payments": payments}, headers=ADMIN
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_approved_reimbursements_from_db(self, client: httpx.AsyncClient) -> None:
        """저장된 승인 청구로 지급 배치 생성"""
        evm = "0x2222222222222222222222222222222222222222"
        for amount in ("1000", "700"):
            response = await client.post(
                "/api/reimbursements",
                json={"title": "Hotel", "amount": amount, "currency": "USD", "evm_address": evm},
                headers=OWNER,
            )
            reimbursement_id = response.json()["id"]
            await client.post(
                f"/api/admin/reimbursements/{reimbursement_id}/review",
                json={"action": "approve"},
                headers=ADMIN,
            )

        response = await client.post(
            "/api/admin/payouts/reimbursements/approved", json={}, headers=ADMIN
        )

        body = response.json()
        assert response.status_code == 200
        assert body["total_batches"] == 1
        assert body["payload"]["transactions"][0]["value"] == "1700000000"


class TestReimbursementApi:
    """경비 청구 API 테스트"""

    @pytest.mark.asyncio
    async def test_submit_stores_rate_provenance(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/reimbursements",
            json={"title": "Taxi", "amount": 100, "currency": "CNY"},
            headers=OWNER,
        )

        body = response.json()
        assert response.status_code == 201
        assert body["applicant_id"] == "user-1"
        assert body["amount_usd"] == "14.08"
        assert body["exchange_rate_to_usd"] == "0.1408"
        assert body["exchange_rate_source"] == "mock"
        assert body["is_manual_rate"] is False
        assert body["status"] == "submitted"

    @pytest.mark.asyncio
    async def test_submit_with_provider_down(
        self, client: httpx.AsyncClient, rate_client: MockExchangeRateClient
    ) -> None:
        rate_client.set_failure(True)

        response = await client.post(
            "/api/reimbursements",
            json={"title": "Taxi", "amount": "100", "currency": "EUR"},
            headers=OWNER,
        )

        body = response.json()
        assert response.status_code == 201
        assert body["exchange_rate_source"] == "static-fallback"
        assert body["amount_usd"] == "109.00"

        listed = (await client.get("/api/reimbursements", headers=OWNER)).json()
        assert listed["reimbursements"][0]["exchange_rate_source"] == "static-fallback"

    @pytest.mark.asyncio
    async def test_list_scoped_and_review_admin_only(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/reimbursements",
            json={"title": "Taxi", "amount": "10", "currency": "USD"},
            headers=OWNER,
        )
        reimbursement_id = response.json()["id"]

        assert (await client.get("/api/reimbursements", headers=STRANGER)).json()["total"] == 0
        assert (await client.get("/api/reimbursements", headers=ADMIN)).json()["total"] == 1

        response = await client.post(
            f"/api/admin/reimbursements/{reimbursement_id}/review",
            json={"action": "approve"},
            headers=OWNER,
        )
        assert response.status_code == 403

        response = await client.post(
            f"/api/admin/reimbursements/{reimbursement_id}/review",
            json={"action": "reject"},
            headers=ADMIN,
        )
        assert response.json()["status"] == "rejected"

        # 이미 심사된 청구
        response = await client.post(
            f"/api/admin/reimbursements/{reimbursement_id}/review",
            json={"action": "approve"},
            headers=ADMIN,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_amount_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/api/reimbursements",
            json={"title": "Taxi", "amount": "-5", "currency": "USD"},
            headers=OWNER,
        )
        assert response.status_code == 400
