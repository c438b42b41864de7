"""MatchingOrchestrator 테스트."""

from __future__ import annotations

import pytest
from conftest import FakeSearchBackend, make_item, make_row

from foodmatch.engine import CandidateRetriever, MatchingOrchestrator, MatchStatus, SearchMode


@pytest.fixture
def onion_rows():
    return [
        make_row("cj-1", "양파 국내산", price=4500, score=0.92, supplier="CJ"),
        make_row("sh-1", "양파 국내산", price=4200, score=0.88, supplier="신세계"),
        make_row("im-1", "양파 수입산", price=3000, score=0.75, supplier="CJ"),
    ]


@pytest.fixture
def orchestrator_factory():
    def factory(backend, mode=SearchMode.HYBRID):
        return MatchingOrchestrator(CandidateRetriever(mode, backend))

    return factory


def test_retriever_required():
    with pytest.raises(ValueError):
        MatchingOrchestrator(None)


class TestMatchItem:
    @pytest.mark.asyncio
    async def test_full_pipeline(self, orchestrator_factory, onion_rows):
        backend = FakeSearchBackend(rows=onion_rows)
        orchestrator = orchestrator_factory(backend)
        item = make_item("양파(국내산)", spec="1kg", unit_price=5000, quantity=10)

        outcome = await orchestrator.match_item(item)

        assert outcome.result.status == MatchStatus.AUTO_MATCHED
        assert outcome.result.best_match.id == "cj-1"
        assert outcome.funnel.success
        assert [s.product.id for s in outcome.funnel.result.primary] == ["cj-1", "sh-1"]
        assert outcome.comparison.best_supplier == "신세계"
        # 검색은 한 번만
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_pending(self, orchestrator_factory):
        backend = FakeSearchBackend(rows=[make_row("a", "양파", score=0.5)])
        outcome = await orchestrator_factory(backend).match_item(make_item("양파", spec="1kg", unit_price=5000))

        assert outcome.result.is_pending
        assert [c.id for c in outcome.result.candidates] == ["a"]

    @pytest.mark.asyncio
    async def test_no_candidates(self, orchestrator_factory):
        outcome = await orchestrator_factory(FakeSearchBackend(rows=[])).match_item(make_item("희귀식재료"))

        assert outcome.result.is_unmatched
        assert not outcome.result.is_error
        assert not outcome.funnel.success
        assert outcome.funnel.error == "검색 결과가 없습니다"
        assert outcome.comparison is None

    @pytest.mark.asyncio
    async def test_retrieval_failure(self, orchestrator_factory):
        backend = FakeSearchBackend(fail_on={"양파"})

        outcome = await orchestrator_factory(backend).match_item(make_item("양파"))

        assert outcome.result.error_code == "RETRIEVAL_FAILED"
        assert outcome.funnel.meta["error_code"] == "RETRIEVAL_FAILED"
        assert not outcome.funnel.success
        assert outcome.comparison is None


class TestMatchBatch:
    @pytest.mark.asyncio
    async def test_order_preserved_and_failures_isolated(self, orchestrator_factory, onion_rows):
        backend = FakeSearchBackend(
            rows_by_query={"양파": onion_rows, "대파": [make_row("p", "대파", score=0.4)]},
            fail_on={"마늘"},
        )
        orchestrator = orchestrator_factory(backend, SearchMode.TRIGRAM)
        items = [
            make_item("양파", spec="1kg", unit_price=5000, row_number=1),
            make_item("마늘", row_number=2),
            make_item("대파", row_number=3),
            make_item("없는품목", row_number=4),
        ]

        outcomes = await orchestrator.match_batch(items)

        assert [o.item.row_number for o in outcomes] == [1, 2, 3, 4]
        assert outcomes[0].result.is_auto_matched
        assert outcomes[1].result.error_code == "RETRIEVAL_FAILED"
        assert outcomes[2].result.is_pending
        assert outcomes[3].result.is_unmatched

    @pytest.mark.asyncio
    async def test_empty_batch(self, orchestrator_factory):
        assert await orchestrator_factory(FakeSearchBackend()).match_batch([]) == []
