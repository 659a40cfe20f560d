"""Stub portfolio provider for offline/testing use."""

import copy
from decimal import Decimal
from typing import Any


# Deterministic sample portfolio: three pies whose names carry their target share
_STUB_PORTFOLIO: dict[str, Any] = {
    "pies": [
        {
            "name": "Next-Gen Growth (40%)",
            "creationDate": "2024-01-12T09:30:00Z",
            "dividendCashAction": "REINVEST",
            "instruments": [
                {
                    "ticker": "NVDA_US_EQ",
                    "fullName": "NVIDIA",
                    "currencyCode": "USD",
                    "type": "STOCK",
                    "ownedQuantity": 4.2,
                    "investedValue": 520.40,
                    "currentValue": 560.10,
                    "dividendYield": 0.03,
                    "performance_1week": 1.8,
                    "performance_1month": 4.2,
                    "performance_3months": 11.5,
                    "performance_1year": 64.0,
                },
                {
                    "ticker": "MSFT_US_EQ",
                    "fullName": "Microsoft",
                    "currencyCode": "USD",
                    "type": "STOCK",
                    "ownedQuantity": 1.1,
                    "investedValue": 458.58,
                    "currentValue": 431.53,
                    "dividendYield": 0.8,
                },
            ],
        },
        {
            "name": "REIT (20%)",
            "creationDate": "2024-01-12T09:35:00Z",
            "dividendCashAction": "TO_ACCOUNT_CASH",
            "instruments": [
                {
                    "ticker": "O_US_EQ",
                    "fullName": "Realty Income",
                    "currencyCode": "USD",
                    "type": "STOCK",
                    "ownedQuantity": 3.5,
                    "investedValue": 200.00,
                    "currentValue": 188.20,
                    "dividendYield": 5.6,
                },
                {
                    "ticker": "VNQ_US_EQ",
                    "fullName": "Vanguard Real Estate ETF",
                    "currencyCode": "USD",
                    "type": "ETF",
                    "ownedQuantity": 1.9,
                    "investedValue": 162.82,
                    "currentValue": 158.97,
                    "dividendYield": 4.1,
                },
            ],
        },
        {
            "name": "Defensive Growth (40%)",
            "creationDate": "2024-01-12T09:40:00Z",
            "dividendCashAction": "REINVEST",
            "instruments": [
                {
                    "ticker": "JNJ_US_EQ",
                    "fullName": "Johnson & Johnson",
                    "currencyCode": "USD",
                    "type": "STOCK",
                    "ownedQuantity": 1.9,
                    "investedValue": 300.00,
                    "currentValue": 295.00,
                    "dividendYield": 3.0,
                },
                {
                    "ticker": "VIG_US_EQ",
                    "fullName": "Vanguard Dividend Appreciation ETF",
                    "currencyCode": "USD",
                    "type": "ETF",
                    "ownedQuantity": 1.5,
                    "investedValue": 295.35,
                    "currentValue": 291.50,
                },
            ],
        },
    ],
    "overallSummary": {
        "totalInvestedOverall": 1937.15,
        "fetchDate": "2025-03-01 17:12:57",
    },
    "depositInfo": {
        "totalDepositedThisMonth": 1430.0,
        "budgetMetThisMonth": "Budget already invested, no available deposit.",
        "expectedDepositDate": "2025-03-10 00:00:00",
        "expectedDepositMessage": "Deposit expected in 9 days",
        "freeCashAvailable": 0.06,
    },
}


class StubPortfolioProvider:
    """
    Stub provider with a fixed sample portfolio for offline operation.

    Counts calls so tests can assert how often upstream was hit.
    """

    def __init__(self) -> None:
        self.calls = 0

    def fetch_portfolio(self, country: str, currency: str, budget: Decimal) -> dict[str, Any]:
        """Return a fresh copy of the sample portfolio."""
        self.calls += 1
        return copy.deepcopy(_STUB_PORTFOLIO)
