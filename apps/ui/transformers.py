from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

import pandas as pd

from core.domain.coin import Coin, PortfolioItem


def _to_float(value: Decimal | None) -> float:
    if value is None:
        return float("nan")
    return float(value)


def portfolio_to_frame(items: Sequence[PortfolioItem]) -> pd.DataFrame:
    records: list[dict[str, object]] = []
    for item in items:
        # Zero and missing prices both render as N/A.
        priced = bool(item.price)
        records.append(
            {
                "id": item.id,
                "coin": item.coin_name,
                "amount": _to_float(item.amount),
                "price": _to_float(item.price) if priced else float("nan"),
                "total": _to_float(item.value) if priced else float("nan"),
            }
        )

    df = pd.DataFrame.from_records(records)
    if df.empty:
        return df

    total_value = df["total"].sum()
    df["weight"] = df["total"].fillna(0.0) / total_value if total_value else 0.0
    return df


def coins_to_frame(coins: Sequence[Coin]) -> pd.DataFrame:
    return pd.DataFrame.from_records(
        [{"name": coin.name, "symbol": coin.symbol, "rank": coin.rank} for coin in coins],
        columns=["name", "symbol", "rank"],
    )


def format_usd(value: float | Decimal | None) -> str:
    if value is None or pd.isna(value) or not value:
        return "N/A"
    return f"${float(value):,.2f}"
