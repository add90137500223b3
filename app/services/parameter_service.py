from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import MalformedRecordError
from app.models.commission import CommissionParameterModel
from app.models.target import MonthlyGoalModel
from app.utils.logger import app_logger

GOAL_MRR = "goal_mrr"
GOAL_QUANTITY = "goal_quantity"
TEAM_BONUS_PERCENT = "team_bonus_percent"
COMPANY_BONUS_PERCENT = "company_bonus_percent"
HEADCOUNT = "headcount"
ONE_TIME_COMMISSION_PERCENT = "one_time_commission_percent"

PARAMETER_KEYS = (GOAL_MRR, GOAL_QUANTITY, TEAM_BONUS_PERCENT, COMPANY_BONUS_PERCENT,
                  HEADCOUNT, ONE_TIME_COMMISSION_PERCENT)

HUNDRED = Decimal("100")


@dataclass
class ResolvedParameters:
    goal_mrr: Decimal = Decimal("0")
    goal_quantity: Decimal = Decimal("0")
    team_bonus_rate: Decimal = Decimal("0")
    company_bonus_rate: Decimal = Decimal("0")
    headcount: Decimal = Decimal("1")
    one_time_rate: Decimal = Decimal("0")
    used_defaults: Set[str] = field(default_factory=set)
    monthly_goal_applied: bool = False


def _to_decimal(key: str, value) -> Decimal:
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise MalformedRecordError(f"Parameter {key} has a non-numeric value: {value!r}")
    if not number.is_finite():
        raise MalformedRecordError(f"Parameter {key} has a non-numeric value: {value!r}")
    return number


class ParameterResolver:

    @staticmethod
    def resolve(parameters: Dict[str, str], monthly_goal: Optional[MonthlyGoalModel] = None) -> ResolvedParameters:
        """
        合并通用配置参数和月度目标

        Args:
            parameters: 通用配置 key -> value
            monthly_goal: 当月目标记录, 可为空

        Returns:
            ResolvedParameters: 百分比已换算为小数, headcount 至少为 1
        """
        used_defaults = set()
        values = {}

        for key in PARAMETER_KEYS:
            goal_value = getattr(monthly_goal, key, None) if monthly_goal is not None else None
            if goal_value is not None:
                values[key] = _to_decimal(key, goal_value)
            elif parameters.get(key) not in (None, ""):
                values[key] = _to_decimal(key, parameters[key])
            else:
                values[key] = None
                used_defaults.add(key)

        headcount = values[HEADCOUNT]
        if headcount is None or headcount <= 0:
            headcount = Decimal("1")

        resolved = ResolvedParameters(
            goal_mrr=values[GOAL_MRR] or Decimal("0"),
            goal_quantity=values[GOAL_QUANTITY] or Decimal("0"),
            team_bonus_rate=(values[TEAM_BONUS_PERCENT] or Decimal("0")) / HUNDRED,
            company_bonus_rate=(values[COMPANY_BONUS_PERCENT] or Decimal("0")) / HUNDRED,
            headcount=headcount,
            one_time_rate=(values[ONE_TIME_COMMISSION_PERCENT] or Decimal("0")) / HUNDRED,
            used_defaults=used_defaults,
            monthly_goal_applied=monthly_goal is not None
        )

        if used_defaults:
            app_logger.warning(f"Commission parameters missing, neutral defaults used for: {sorted(used_defaults)}")
        app_logger.debug(f"Resolved parameters: {resolved}")
        return resolved

    @staticmethod
    async def load(db: AsyncSession, reference_month) -> ResolvedParameters:
        parameter_result = await db.execute(select(CommissionParameterModel))
        parameters = {row.key: row.value for row in parameter_result.scalars().all()}

        goal_result = await db.execute(
            select(MonthlyGoalModel)
                .where(MonthlyGoalModel.reference_month == reference_month)
        )
        monthly_goal = goal_result.scalars().first()
        if monthly_goal is None:
            app_logger.info(f"No monthly goal for {reference_month}, using generic parameters")

        return ParameterResolver.resolve(parameters, monthly_goal)
