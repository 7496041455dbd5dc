import json
import pytest
from token_aggregator import cli
from token_aggregator.exceptions import ProviderError
from token_aggregator.schemas.token import AnalyticsSnapshot, MarketSnapshot
from token_aggregator.services.reconcile import reconcile
from tests.conftest import USDT


class FakeAggregator:
    error = None
    calls: list = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None

    async def get_token_data(self, address, chain):
        FakeAggregator.calls.append((address, chain))
        if FakeAggregator.error:
            raise FakeAggregator.error
        analytics = AnalyticsSnapshot(name="Tether USD", symbol="USDT", price=1.0, market_cap=10, liquidity=5)
        return reconcile(address, chain, analytics, MarketSnapshot.empty(), 2)


@pytest.fixture(autouse=True)
def fake_aggregator(monkeypatch):
    FakeAggregator.error = None
    FakeAggregator.calls = []
    monkeypatch.setattr(cli, "TokenAggregator", FakeAggregator)


def test_prints_record_as_json(capsys):
    assert cli.main([USDT, "--chain", "bsc"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["address"] == USDT
    assert data["marketCap"] == 10
    assert data["holders"] == 2
    assert data["volume"]["6h"] == 0
    assert FakeAggregator.calls == [(USDT, "bsc")]


def test_default_chain_is_ethereum(capsys):
    cli.main([USDT])
    assert FakeAggregator.calls == [(USDT, "ethereum")]


def test_chain_help_mentions_network_mapping():
    help_text = cli.build_parser().format_help()
    assert "BITQUERY_NETWORKS" in help_text


def test_provider_error_exit_code(capsys):
    FakeAggregator.error = ProviderError("down", "bitquery")
    assert cli.main([USDT]) == 1
    assert "bitquery: down" in capsys.readouterr().err
