"""
Pytest fixtures for the ETF Insight tests.

Provides common test data and utilities used across test modules.
"""

from decimal import Decimal

import pytest

from etf_insight.models import Holding, PriceObservation, ServerConfig
from etf_insight.server import create_app
from etf_insight.state import AppState


HOLDINGS_CSV = (
    "name,weight,sector\n"
    "AAPL,0.4,Tech\n"
    "MSFT,0.35,Tech\n"
    "XOM,0.25,Energy\n"
)

PRICES_CSV = (
    "DATE,AAPL,MSFT,XOM\n"
    "2024-01-02,185.64,374.58,100.50\n"
    "2024-01-03,184.25,370.60,\n"
    "2024-01-04,181.91,n/a,101.20\n"
)


@pytest.fixture
def holdings_csv() -> bytes:
    """Raw holdings CSV with an extra, ignored column."""
    return HOLDINGS_CSV.encode()


@pytest.fixture
def prices_csv() -> bytes:
    """Raw price panel CSV with a blank and a non-numeric cell."""
    return PRICES_CSV.encode()


@pytest.fixture
def sample_holdings() -> list[Holding]:
    """Holdings matching HOLDINGS_CSV."""
    return [
        Holding(constituent="AAPL", weight=Decimal("0.4")),
        Holding(constituent="MSFT", weight=Decimal("0.35")),
        Holding(constituent="XOM", weight=Decimal("0.25")),
    ]


@pytest.fixture
def sample_observations() -> list[PriceObservation]:
    """Observations matching PRICES_CSV, in arrival order."""
    return [
        PriceObservation("2024-01-02", "AAPL", Decimal("185.64")),
        PriceObservation("2024-01-02", "MSFT", Decimal("374.58")),
        PriceObservation("2024-01-02", "XOM", Decimal("100.50")),
        PriceObservation("2024-01-03", "AAPL", Decimal("184.25")),
        PriceObservation("2024-01-03", "MSFT", Decimal("370.60")),
        PriceObservation("2024-01-04", "AAPL", Decimal("181.91")),
        PriceObservation("2024-01-04", "XOM", Decimal("101.20")),
    ]


@pytest.fixture
def server_config(tmp_path) -> ServerConfig:
    """Server configuration writing uploads under a temporary directory."""
    return ServerConfig(upload_dir=str(tmp_path / "uploads"))


@pytest.fixture
def app_state() -> AppState:
    return AppState()


@pytest.fixture
def app(server_config: ServerConfig, app_state: AppState):
    """Flask app in testing mode."""
    flask_app = create_app(server_config, app_state)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
