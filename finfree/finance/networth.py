"""
Net Worth

Net worth = everything owned minus everything owed. For a FinancialState
the three savings funds and any tracked assets count as owned; the debt
balance, the unpaid part of every installment and any tracked
liabilities count as owed.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from finfree.finance.aggregation import ZERO
from finfree.models.ledger import (
    INVESTED_ASSET_TYPES,
    Asset,
    FundName,
    RecurringInstallment,
)
from finfree.models.metrics import NetWorthSnapshot
from finfree.models.state import FinancialState


def installment_outstanding(installments: Iterable[RecurringInstallment]) -> Decimal:
    """Amount still owed across all installments."""
    return sum((i.outstanding for i in installments), ZERO)


def total_monthly_installment(installments: Iterable[RecurringInstallment]) -> Decimal:
    """Monthly obligation of the installments that are not yet fully paid."""
    return sum((i.amount for i in installments if not i.is_complete), ZERO)


def invested_assets(assets: Iterable[Asset]) -> Decimal:
    return sum((a.value for a in assets if a.type in INVESTED_ASSET_TYPES), ZERO)


def net_worth(assets: Mapping[str, Decimal], liabilities: Mapping[str, Decimal]) -> Decimal:
    return sum(assets.values(), ZERO) - sum(liabilities.values(), ZERO)


def _breakdown(state: FinancialState) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
    assets: dict[str, Decimal] = {fund.value: state.fund_balance(fund) for fund in FundName}
    for asset in state.assets:
        assets[asset.name] = assets.get(asset.name, ZERO) + asset.value

    liabilities: dict[str, Decimal] = {
        "debt_balance": state.debt_balance,
        "installments_outstanding": installment_outstanding(state.installments),
    }
    for liability in state.liabilities:
        liabilities[liability.name] = liabilities.get(liability.name, ZERO) + liability.value

    return assets, liabilities


def state_net_worth(state: FinancialState) -> Decimal:
    assets, liabilities = _breakdown(state)
    return net_worth(assets, liabilities)


def create_net_worth_snapshot(
    state: FinancialState,
    taken_at: Optional[datetime] = None,
) -> NetWorthSnapshot:
    """Point-in-time breakdown of what is owned and owed."""
    assets, liabilities = _breakdown(state)
    total_assets = sum(assets.values(), ZERO)
    total_liabilities = sum(liabilities.values(), ZERO)

    snapshot = NetWorthSnapshot(
        assets=assets,
        liabilities=liabilities,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
    )
    if taken_at is not None:
        snapshot.taken_at = taken_at
    return snapshot
