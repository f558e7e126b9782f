"""
ReimbursementService 통합 테스트

실제 SQLite DB + MockExchangeRateClient로 제출 → 심사 → 지급 배치 흐름 검증.
"""

from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.mock.rate_client import MockExchangeRateClient
from core.errors import NotFoundError, ValidationError
from core.exchange.cache import RateCache
from core.exchange.resolver import SOURCE_FALLBACK, SOURCE_MANUAL, ExchangeRateResolver
from core.reimbursement.service import ReimbursementService
from core.types import ReimbursementStatus

EVM = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def rate_client() -> MockExchangeRateClient:
    return MockExchangeRateClient({"CNY": Decimal("0.1408")})


@pytest.fixture
def service(db: SQLiteAdapter, rate_client: MockExchangeRateClient) -> ReimbursementService:
    resolver = ExchangeRateResolver(rate_client, RateCache(ttl_seconds=60))
    return ReimbursementService(db, resolver)


async def submit(service: ReimbursementService, **overrides):
    params = {
        "applicant_id": "user-1",
        "applicant_name": "Alice",
        "title": "Taxi",
        "amount": "100",
        "currency": "CNY",
        "evm_address": EVM,
    }
    params.update(overrides)
    return await service.submit(**params)


class TestSubmit:
    """청구 제출 테스트"""

    @pytest.mark.asyncio
    async def test_stores_conversion(self, service: ReimbursementService) -> None:
        item = await submit(service)

        stored = await service.get(item.reimbursement_id)
        assert stored.amount_original == Decimal("100")
        assert stored.exchange_rate_to_usd == Decimal("0.1408")
        assert stored.amount_usd == Decimal("14.08")
        assert stored.exchange_rate_source == "mock"
        assert stored.is_manual_rate is False
        assert stored.status == ReimbursementStatus.SUBMITTED.value

    @pytest.mark.asyncio
    async def test_fetch_failure_stores_fallback(
        self, service: ReimbursementService, rate_client: MockExchangeRateClient
    ) -> None:
        """환율 API 장애 시 기본 환율로 저장되고 제출은 성공"""
        rate_client.set_failure(True, "provider down")

        item = await submit(service, amount="100", currency="RMB")

        stored = await service.get(item.reimbursement_id)
        assert stored.currency == "RMB"
        assert stored.exchange_rate_source == SOURCE_FALLBACK
        assert stored.exchange_rate_to_usd == Decimal("0.14")
        assert stored.amount_usd == Decimal("14.00")
        assert stored.is_manual_rate is False

    @pytest.mark.asyncio
    async def test_manual_rate(
        self, service: ReimbursementService, rate_client: MockExchangeRateClient
    ) -> None:
        item = await submit(service, amount="50", manual_rate="0.15")

        stored = await service.get(item.reimbursement_id)
        assert stored.exchange_rate_source == SOURCE_MANUAL
        assert stored.is_manual_rate is True
        assert stored.amount_usd == Decimal("7.50")
        assert rate_client.call_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [{"amount": "0"}, {"amount": "abc"}, {"currency": "XYZ"}, {"title": " "}],
    )
    async def test_invalid_input_writes_nothing(
        self, service: ReimbursementService, overrides: dict
    ) -> None:
        with pytest.raises(ValidationError):
            await submit(service, **overrides)

        assert await service.list_reimbursements() == []

    @pytest.mark.asyncio
    async def test_chain_addresses_kept_as_json(self, service: ReimbursementService) -> None:
        item = await submit(
            service,
            chain="sol",
            evm_address=None,
            chain_addresses={"solana": "So1anaAddress"},
        )

        stored = await service.get(item.reimbursement_id)
        assert stored.chain == "solana"
        assert stored.chain_addresses == '{"solana": "So1anaAddress"}'


class TestReview:
    """청구 심사 테스트"""

    @pytest.mark.asyncio
    async def test_approve(self, service: ReimbursementService) -> None:
        item = await submit(service)

        approved = await service.review(item.reimbursement_id, "admin-1", "approve")

        assert approved.status == ReimbursementStatus.APPROVED.value
        assert approved.reviewer_id == "admin-1"

    @pytest.mark.asyncio
    async def test_only_submitted_can_be_reviewed(self, service: ReimbursementService) -> None:
        item = await submit(service)
        await service.review(item.reimbursement_id, "admin-1", "reject")

        with pytest.raises(ValidationError):
            await service.review(item.reimbursement_id, "admin-1", "approve")

        stored = await service.get(item.reimbursement_id)
        assert stored.status == ReimbursementStatus.REJECTED.value

    @pytest.mark.asyncio
    async def test_unknown_action_and_missing(self, service: ReimbursementService) -> None:
        item = await submit(service)

        with pytest.raises(ValidationError):
            await service.review(item.reimbursement_id, "admin-1", "maybe")
        with pytest.raises(NotFoundError):
            await service.review("missing", "admin-1", "approve")


class TestAggregateApproved:
    """승인 청구 → 지급 배치 테스트"""

    @pytest.mark.asyncio
    async def test_only_approved_are_batched(self, service: ReimbursementService) -> None:
        first = await submit(service, amount="1000", manual_rate="1")
        second = await submit(service, amount="700", manual_rate="1")
        await submit(service, amount="999", manual_rate="1")  # 미심사
        other = await submit(service, applicant_id="user-2", applicant_name="Bob", evm_address=None)

        for item in (first, second, other):
            await service.review(item.reimbursement_id, "admin-1", "approve")

        aggregation = await service.aggregate_approved(token="USDC", decimals=6)

        assert len(aggregation.batches) == 2
        assert len(aggregation.transactions) == 1
        assert aggregation.transactions[0].to == EVM
        assert aggregation.transactions[0].value == "1700000000"
        assert sorted(aggregation.transactions[0].member_item_ids) == sorted(
            [first.reimbursement_id, second.reimbursement_id]
        )
        assert [issue.recipient_id for issue in aggregation.issues] == ["user-2"]

    @pytest.mark.asyncio
    async def test_empty(self, service: ReimbursementService) -> None:
        aggregation = await service.aggregate_approved()

        assert aggregation.batches == []
        assert aggregation.transactions == []
