"""Builders for sale records, tiers and periods used across the test suite."""

import uuid
from datetime import date
from decimal import Decimal

from app.models.commission import ClosingPeriodModel, CommissionTierModel, CommissionParameterModel
from app.models.sales import SaleRecordModel
from app.models.target import MonthlyGoalModel
from app.services.parameter_service import ResolvedParameters

REFERENCE_MONTH = date(2025, 3, 1)


def make_sale(salesperson="Ana", mrr=0, fee=0, interval="Mensal", sale_type="Venda Direta",
              tier=True, commission=True, goal=True, period_id=None, **extra):
    return SaleRecordModel.from_import(
        sale_type=sale_type,
        interval_label=interval,
        id=str(uuid.uuid4()),
        period_id=period_id,
        salesperson=salesperson,
        mrr_value=Decimal(str(mrr)),
        one_time_fee=Decimal(str(fee)),
        counts_toward_tier=tier,
        counts_toward_commission=commission,
        counts_toward_goal=goal,
        **extra
    )


def make_tier(name, min_mrr, max_mrr, percentage, rank, active=True):
    return CommissionTierModel(
        id=str(uuid.uuid4()),
        name=name,
        min_mrr=Decimal(str(min_mrr)),
        max_mrr=Decimal(str(max_mrr)) if max_mrr is not None else None,
        percentage=Decimal(str(percentage)),
        rank=rank,
        active=active
    )


def standard_tiers():
    return [
        make_tier("Starter", 0, 2499.99, 5, 1),
        make_tier("Pro", 2500, 4999.99, 10, 2),
        make_tier("Elite", 5000, None, 15, 3),
    ]


def make_parameters(goal_mrr=0, goal_quantity=0, team=0, company=0, headcount=1, one_time=0):
    return ResolvedParameters(
        goal_mrr=Decimal(str(goal_mrr)),
        goal_quantity=Decimal(str(goal_quantity)),
        team_bonus_rate=Decimal(str(team)),
        company_bonus_rate=Decimal(str(company)),
        headcount=Decimal(str(headcount)),
        one_time_rate=Decimal(str(one_time))
    )


async def seed_period(session, sales=(), tiers=None, parameters=None, goal=None,
                      reference_month=REFERENCE_MONTH, status="draft"):
    """Insert a closing period with its sales, tiers, parameters and optional monthly goal."""
    period = ClosingPeriodModel(id=str(uuid.uuid4()), reference_month=reference_month, status=status)
    session.add(period)

    for sale in sales:
        sale.period_id = period.id
        session.add(sale)

    session.add_all(tiers if tiers is not None else standard_tiers())

    for key, value in (parameters or {}).items():
        session.add(CommissionParameterModel(key=key, value=str(value)))

    if goal is not None:
        session.add(MonthlyGoalModel(reference_month=reference_month, **goal))

    await session.commit()
    return period.id


def end_to_end_sales():
    return [
        make_sale("A", mrr=3000),
        make_sale("B", mrr=2000),
    ]


END_TO_END_TIERS = [
    ("Starter", 0, 2499.99, 5, 1),
    ("Pro", 2500, 4999.99, 10, 2),
]

END_TO_END_PARAMETERS = {
    "goal_mrr": "4000",
    "goal_quantity": "2",
    "team_bonus_percent": "10",
    "company_bonus_percent": "5",
    "headcount": "2",
    "one_time_commission_percent": "0",
}
