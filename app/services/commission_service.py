import asyncio
import weakref
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.config import PERIOD_STATUS_CLOSED, UNASSIGNED_SALESPERSON
from app.core.exceptions import PeriodNotFoundError, PeriodClosedError, AdjustmentNotFoundError
from app.models.commission import ClosingPeriodModel, CommissionTierModel, CalculatedCommissionModel, \
    CommissionAdjustmentModel
from app.models.sales import SaleRecordModel
from app.schemas.commission import CommissionAdjustmentCreate
from app.services.parameter_service import ParameterResolver, ResolvedParameters
from app.utils.logger import app_logger
from app.utils.sale_classifier import BillingInterval, is_recurring

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_float(value) -> float:
    return float(value) if value is not None else 0.0


@dataclass
class SalespersonAggregate:
    salesperson: str
    sale_count: int = 0
    tier_mrr: Decimal = ZERO
    commission_mrr: Decimal = ZERO
    annual_mrr: Decimal = ZERO
    one_time_fee_total: Decimal = ZERO
    tier_name: Optional[str] = None
    rate: Decimal = ZERO
    base_commission: Decimal = ZERO
    annual_bonus: Decimal = ZERO
    team_bonus: Decimal = ZERO
    company_bonus: Decimal = ZERO
    one_time_commission: Decimal = ZERO

    @property
    def total_payable(self) -> Decimal:
        return (self.base_commission + self.annual_bonus + self.team_bonus
                + self.company_bonus + self.one_time_commission)


@dataclass
class GoalEvaluation:
    goal_mrr_total: Decimal = ZERO
    goal_sale_count: int = 0
    goal_met: bool = False
    commission_base: Decimal = ZERO
    team_pool: Decimal = ZERO
    tier_mrr_sum: Decimal = ZERO


@dataclass
class CommissionRunResult:
    aggregates: List[SalespersonAggregate]
    goal: GoalEvaluation
    parameters: ResolvedParameters
    sale_count: int = 0
    recurring_sale_count: int = 0
    salespeople: List[str] = field(default_factory=list)


class CommissionCalculator:
    """
    纯内存计算, 不访问数据库

    Stages run in order: aggregate -> resolve tiers -> commissions -> goal -> bonuses.
    """

    @staticmethod
    def salesperson_key(sale) -> str:
        name = (sale.salesperson or "").strip()
        return name or UNASSIGNED_SALESPERSON

    @staticmethod
    def aggregate_sales(sales: Iterable[SaleRecordModel]) -> Dict[str, SalespersonAggregate]:
        """
        按销售人员汇总

        Args:
            sales: 本结算期的销售记录

        Returns:
            Dict: salesperson -> SalespersonAggregate, 保持首次出现的顺序
        """
        aggregates: Dict[str, SalespersonAggregate] = {}

        for sale in sales:
            key = CommissionCalculator.salesperson_key(sale)
            aggregate = aggregates.get(key)
            if aggregate is None:
                aggregate = SalespersonAggregate(salesperson=key)
                aggregates[key] = aggregate

            mrr = to_decimal(sale.mrr_value)
            fee = to_decimal(sale.one_time_fee)

            if is_recurring(sale):
                aggregate.sale_count += 1

            if sale.counts_toward_tier:
                aggregate.tier_mrr += mrr

            if sale.counts_toward_commission:
                if sale.billing_interval == BillingInterval.ONE_TIME:
                    # 单次销售只计入一次性费用, 不计入MRR
                    aggregate.one_time_fee_total += fee
                else:
                    aggregate.commission_mrr += mrr
                    aggregate.one_time_fee_total += fee
                    if sale.billing_interval == BillingInterval.ANNUAL:
                        aggregate.annual_mrr += mrr

        return aggregates

    @staticmethod
    def sort_tiers(tiers: Iterable[CommissionTierModel]) -> List[CommissionTierModel]:
        return sorted(tiers, key=lambda tier: tier.rank or 0, reverse=True)

    @staticmethod
    def resolve_tier(tier_mrr: Decimal, sorted_tiers: List[CommissionTierModel]) -> Tuple[Optional[str], Decimal]:
        for tier in sorted_tiers:
            if tier_mrr >= to_decimal(tier.min_mrr) and (tier.max_mrr is None or tier_mrr <= to_decimal(tier.max_mrr)):
                return tier.name, to_decimal(tier.percentage) / HUNDRED
        return None, ZERO

    @staticmethod
    def apply_tiers(aggregates: Iterable[SalespersonAggregate], tiers: Iterable[CommissionTierModel]):
        sorted_tiers = CommissionCalculator.sort_tiers(tiers)
        for aggregate in aggregates:
            aggregate.tier_name, aggregate.rate = CommissionCalculator.resolve_tier(aggregate.tier_mrr, sorted_tiers)
            if aggregate.tier_name is None:
                app_logger.debug(f"No tier matches {aggregate.salesperson} with tier MRR {aggregate.tier_mrr}")

    @staticmethod
    def apply_commissions(aggregates: Iterable[SalespersonAggregate], parameters: ResolvedParameters):
        for aggregate in aggregates:
            aggregate.base_commission = aggregate.commission_mrr * aggregate.rate
            # 年付奖金使用与基础佣金相同的比例
            aggregate.annual_bonus = aggregate.annual_mrr * aggregate.rate
            aggregate.one_time_commission = aggregate.one_time_fee_total * parameters.one_time_rate

    @staticmethod
    def evaluate_goal(sales: Iterable[SaleRecordModel], parameters: ResolvedParameters) -> GoalEvaluation:
        goal = GoalEvaluation()
        for sale in sales:
            if sale.counts_toward_goal:
                goal.goal_mrr_total += to_decimal(sale.mrr_value)
                if is_recurring(sale):
                    goal.goal_sale_count += 1

        goal.goal_met = (goal.goal_mrr_total >= parameters.goal_mrr
                         and goal.goal_sale_count >= parameters.goal_quantity)
        return goal

    @staticmethod
    def distribute_bonuses(aggregates: List[SalespersonAggregate], goal: GoalEvaluation,
                           parameters: ResolvedParameters):
        """
        目标达成时分配团队奖金 (按 tier MRR 占比) 和公司奖金 (按人数平均)

        The pool is sized on commission MRR while the split uses tier MRR share.
        """
        for aggregate in aggregates:
            aggregate.team_bonus = ZERO
            aggregate.company_bonus = ZERO

        if not goal.goal_met:
            return

        goal.commission_base = sum((a.commission_mrr for a in aggregates), ZERO)
        goal.tier_mrr_sum = sum((a.tier_mrr for a in aggregates), ZERO)
        goal.team_pool = goal.commission_base * parameters.team_bonus_rate
        company_share = (goal.commission_base * parameters.company_bonus_rate) / parameters.headcount

        for aggregate in aggregates:
            if goal.tier_mrr_sum > 0:
                aggregate.team_bonus = goal.team_pool * (aggregate.tier_mrr / goal.tier_mrr_sum)
            aggregate.company_bonus = company_share

    @staticmethod
    def calculate(sales: List[SaleRecordModel], tiers: List[CommissionTierModel],
                  parameters: ResolvedParameters) -> CommissionRunResult:
        aggregate_map = CommissionCalculator.aggregate_sales(sales)
        aggregates = list(aggregate_map.values())

        CommissionCalculator.apply_tiers(aggregates, tiers)
        CommissionCalculator.apply_commissions(aggregates, parameters)
        goal = CommissionCalculator.evaluate_goal(sales, parameters)
        CommissionCalculator.distribute_bonuses(aggregates, goal, parameters)

        app_logger.debug(f"Goal MRR {goal.goal_mrr_total} / {parameters.goal_mrr}, "
                         f"goal sales {goal.goal_sale_count} / {parameters.goal_quantity}, met: {goal.goal_met}")

        return CommissionRunResult(
            aggregates=aggregates,
            goal=goal,
            parameters=parameters,
            sale_count=len(sales),
            recurring_sale_count=sum(1 for sale in sales if is_recurring(sale)),
            salespeople=list(aggregate_map.keys())
        )


class CommissionUtil:
    # 无人持有或等待时锁被回收
    _period_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @staticmethod
    def get_period_lock(period_id: str) -> asyncio.Lock:
        """同一结算期的计算和删除在进程内串行执行"""
        lock = CommissionUtil._period_locks.get(period_id)
        if lock is None:
            lock = asyncio.Lock()
            CommissionUtil._period_locks[period_id] = lock
        return lock

    @staticmethod
    async def get_period(db: AsyncSession, period_id: str, for_update: bool = False) -> ClosingPeriodModel:
        query = select(ClosingPeriodModel).where(ClosingPeriodModel.id == period_id)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        period = result.scalar_one_or_none()
        if period is None:
            raise PeriodNotFoundError(period_id)
        return period

    @staticmethod
    async def get_open_period(db: AsyncSession, period_id: str, for_update: bool = False) -> ClosingPeriodModel:
        period = await CommissionUtil.get_period(db, period_id, for_update)
        if period.status == PERIOD_STATUS_CLOSED:
            raise PeriodClosedError(period_id)
        return period


class CommissionService:

    @staticmethod
    async def calculate_for_period(db: AsyncSession, period_id: str) -> dict:
        """
        计算结算期佣金并整体替换已保存的结果

        Args:
            db: 数据库会话
            period_id: 结算期ID

        Returns:
            dict: 本次计算汇总
        """
        if not period_id:
            raise ValueError("period_id is required")

        async with CommissionUtil.get_period_lock(period_id):
            try:
                app_logger.info(f"Starting commission calculation for period {period_id}")

                period = await CommissionUtil.get_open_period(db, period_id, for_update=True)

                sales_result = await db.execute(
                    select(SaleRecordModel)
                        .where(SaleRecordModel.period_id == period_id)
                        .order_by(SaleRecordModel.created_at, SaleRecordModel.id)
                )
                sales = sales_result.scalars().all()

                tiers_result = await db.execute(
                    select(CommissionTierModel)
                        .where(CommissionTierModel.active.is_(True))
                        .order_by(CommissionTierModel.rank.desc())
                )
                tiers = tiers_result.scalars().all()

                parameters = await ParameterResolver.load(db, period.reference_month)
                app_logger.info(f"Loaded {len(sales)} sales and {len(tiers)} active tiers for period {period_id}")

                result = CommissionCalculator.calculate(sales, tiers, parameters)

                await CommissionService.replace_calculated_commissions(db, period_id, result.aggregates)

                period.total_sales = result.recurring_sale_count
                period.total_mrr = result.goal.goal_mrr_total
                period.goal_met = result.goal.goal_met
                period.calculated_at = datetime.utcnow()

                await db.commit()
                app_logger.info(f"Commission calculation for period {period_id} finished: "
                                f"{len(result.aggregates)} salespeople, goal met: {result.goal.goal_met}")

                return {
                    "period_id": period_id,
                    "salesperson_count": len(result.aggregates),
                    "sale_count": result.sale_count,
                    "total_mrr": to_float(result.goal.goal_mrr_total),
                    "goal_met": result.goal.goal_met
                }
            except (PeriodNotFoundError, PeriodClosedError) as e:
                app_logger.warning(f"Commission calculation for period {period_id} rejected: {e}")
                await db.rollback()
                raise e
            except Exception as e:
                app_logger.error(f"Commission calculation for period {period_id} failed: {e}", exc_info=True)
                await db.rollback()
                raise e

    @staticmethod
    def build_commission_rows(period_id: str, aggregates: Iterable[SalespersonAggregate]) \
            -> List[CalculatedCommissionModel]:
        return [
            CalculatedCommissionModel(
                period_id=period_id,
                salesperson=aggregate.salesperson,
                sale_count=aggregate.sale_count,
                tier_mrr=aggregate.tier_mrr,
                commission_mrr=aggregate.commission_mrr,
                annual_mrr=aggregate.annual_mrr,
                one_time_fee_total=aggregate.one_time_fee_total,
                tier_name=aggregate.tier_name,
                percentage=aggregate.rate * HUNDRED,
                base_commission=aggregate.base_commission,
                annual_bonus=aggregate.annual_bonus,
                team_bonus=aggregate.team_bonus,
                company_bonus=aggregate.company_bonus,
                one_time_commission=aggregate.one_time_commission,
                total_payable=aggregate.total_payable
            )
            for aggregate in aggregates
        ]

    @staticmethod
    async def replace_calculated_commissions(db: AsyncSession, period_id: str,
                                             aggregates: Iterable[SalespersonAggregate]) -> int:
        """
        在调用方的事务内删除旧结果并插入新结果, 不提交

        The caller commits or rolls back, so the old set stays visible until the new one is complete.
        """
        rows = CommissionService.build_commission_rows(period_id, aggregates)

        delete_result = await db.execute(
            delete(CalculatedCommissionModel)
                .where(CalculatedCommissionModel.period_id == period_id)
        )
        app_logger.debug(f"Deleted {delete_result.rowcount} calculated commissions for period {period_id}")

        db.add_all(rows)
        await db.flush()
        app_logger.debug(f"Inserted {len(rows)} calculated commissions for period {period_id}")
        return len(rows)

    @staticmethod
    async def close_period(db: AsyncSession, period_id: str, user_code: str) -> dict:
        try:
            period = await CommissionUtil.get_open_period(db, period_id, for_update=True)
            period.status = PERIOD_STATUS_CLOSED
            period.closed_at = datetime.utcnow()
            period.closed_by = user_code
            await db.commit()
            app_logger.info(f"Closing period {period_id} closed by {user_code}")
            return CommissionService.format_period(period)
        except ValueError as e:
            app_logger.warning(f"close_period rejected: {str(e)}")
            await db.rollback()
            raise e
        except Exception as e:
            app_logger.error(f"Error in close_period: {str(e)}")
            await db.rollback()
            raise e

    @staticmethod
    async def get_periods(db: AsyncSession, year: Optional[int] = None, status: Optional[str] = None) -> List[dict]:
        """
        结算期历史, 按参考月份倒序

        Args:
            db: 数据库会话
            year: 参考月份所在年份, 为空时不过滤
            status: draft 或 closed, 为空时不过滤

        Returns:
            List[dict]: 格式化后的结算期
        """
        query = select(ClosingPeriodModel)
        if year:
            query = query.where(ClosingPeriodModel.reference_month >= date(year, 1, 1)) \
                .where(ClosingPeriodModel.reference_month <= date(year, 12, 31))
        if status:
            query = query.where(ClosingPeriodModel.status == status)

        result = await db.execute(query.order_by(ClosingPeriodModel.reference_month.desc()))
        periods = result.scalars().all()
        app_logger.info(f"get_periods: year={year} status={status} returned {len(periods)} periods")
        return [CommissionService.format_period(period) for period in periods]

    @staticmethod
    async def delete_period(db: AsyncSession, period_id: str) -> bool:
        """删除未关闭的结算期及其计算结果, 调整和销售记录"""
        async with CommissionUtil.get_period_lock(period_id):
            try:
                period = await CommissionUtil.get_open_period(db, period_id, for_update=True)

                for model in (CalculatedCommissionModel, CommissionAdjustmentModel, SaleRecordModel):
                    delete_result = await db.execute(delete(model).where(model.period_id == period_id))
                    app_logger.debug(f"Deleted {delete_result.rowcount} rows from {model.__tablename__} "
                                     f"for period {period_id}")

                await db.delete(period)
                await db.commit()
                app_logger.info(f"Closing period {period_id} deleted")
                return True
            except ValueError as e:
                app_logger.warning(f"delete_period rejected: {str(e)}")
                await db.rollback()
                raise e
            except Exception as e:
                app_logger.error(f"Error in delete_period: {str(e)}", exc_info=True)
                await db.rollback()
                raise e

    @staticmethod
    def format_period(period: ClosingPeriodModel) -> dict:
        return {
            "period_id": period.id,
            "reference_month": period.reference_month.isoformat() if period.reference_month else None,
            "status": period.status,
            "file_name": period.file_name,
            "total_sales": period.total_sales or 0,
            "total_mrr": to_float(period.total_mrr),
            "goal_met": bool(period.goal_met),
            "calculated_at": period.calculated_at.isoformat() if period.calculated_at else None,
            "closed_at": period.closed_at.isoformat() if period.closed_at else None
        }

    @staticmethod
    def format_commission(row: CalculatedCommissionModel, adjustments_total: Decimal = ZERO) -> dict:
        return {
            "salesperson": row.salesperson,
            "sale_count": row.sale_count,
            "tier_mrr": to_float(row.tier_mrr),
            "commission_mrr": to_float(row.commission_mrr),
            "annual_mrr": to_float(row.annual_mrr),
            "one_time_fee_total": to_float(row.one_time_fee_total),
            "tier_name": row.tier_name,
            "percentage": to_float(row.percentage),
            "base_commission": to_float(row.base_commission),
            "annual_bonus": to_float(row.annual_bonus),
            "team_bonus": to_float(row.team_bonus),
            "company_bonus": to_float(row.company_bonus),
            "one_time_commission": to_float(row.one_time_commission),
            "total_payable": to_float(row.total_payable),
            "adjustments_total": to_float(adjustments_total),
            "adjusted_total": to_float(to_decimal(row.total_payable) + adjustments_total)
        }

    @staticmethod
    def format_adjustment(adjustment: CommissionAdjustmentModel) -> dict:
        return {
            "id": adjustment.id,
            "period_id": adjustment.period_id,
            "salesperson": adjustment.salesperson,
            "kind": adjustment.kind,
            "amount": to_float(adjustment.amount),
            "description": adjustment.description,
            "created_by": adjustment.created_by,
            "created_at": adjustment.created_at.isoformat() if adjustment.created_at else None
        }

    @staticmethod
    def sum_adjustments(adjustments: Iterable[CommissionAdjustmentModel]) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for adjustment in adjustments:
            amount = to_decimal(adjustment.amount)
            signed = amount if adjustment.kind == "credit" else -amount
            totals[adjustment.salesperson] = totals.get(adjustment.salesperson, ZERO) + signed
        return totals

    @staticmethod
    async def get_calculated_rows(db: AsyncSession, period_id: str) -> List[CalculatedCommissionModel]:
        result = await db.execute(
            select(CalculatedCommissionModel)
                .where(CalculatedCommissionModel.period_id == period_id)
                .order_by(CalculatedCommissionModel.total_payable.desc(), CalculatedCommissionModel.salesperson)
        )
        return result.scalars().all()

    @staticmethod
    async def get_commissions_by_period(db: AsyncSession, period_id: str) -> dict:
        period = await CommissionUtil.get_period(db, period_id)
        rows = await CommissionService.get_calculated_rows(db, period_id)
        adjustments = await CommissionService.get_adjustments(db, period_id)
        adjustment_totals = CommissionService.sum_adjustments(adjustments)

        data = [
            CommissionService.format_commission(row, adjustment_totals.get(row.salesperson, ZERO))
            for row in rows
        ]
        app_logger.info(f"get_commissions_by_period: {period_id} returned {len(data)} rows")
        return {
            "period": CommissionService.format_period(period),
            "data": data,
            "total_payable": sum(item["adjusted_total"] for item in data)
        }

    @staticmethod
    async def get_commission_detail(db: AsyncSession, period_id: str, salesperson: str) -> dict:
        await CommissionUtil.get_period(db, period_id)

        result = await db.execute(
            select(CalculatedCommissionModel)
                .where(CalculatedCommissionModel.period_id == period_id)
                .where(CalculatedCommissionModel.salesperson == salesperson)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise ValueError(f"No calculated commission for {salesperson} in period {period_id}")

        adjustments = await CommissionService.get_adjustments(db, period_id, salesperson)
        adjustments_total = CommissionService.sum_adjustments(adjustments).get(salesperson, ZERO)

        sales_result = await db.execute(
            select(SaleRecordModel)
                .where(SaleRecordModel.period_id == period_id)
                .order_by(SaleRecordModel.contract_date.desc(), SaleRecordModel.id)
        )
        sales = [sale for sale in sales_result.scalars().all()
                 if CommissionCalculator.salesperson_key(sale) == salesperson]

        return {
            "commission": CommissionService.format_commission(row, adjustments_total),
            "adjustments": [CommissionService.format_adjustment(a) for a in adjustments],
            "sales": [CommissionRPTService.format_sale(sale) for sale in sales]
        }

    @staticmethod
    async def get_adjustments(db: AsyncSession, period_id: str,
                              salesperson: Optional[str] = None) -> List[CommissionAdjustmentModel]:
        query = select(CommissionAdjustmentModel).where(CommissionAdjustmentModel.period_id == period_id)
        if salesperson:
            query = query.where(CommissionAdjustmentModel.salesperson == salesperson)
        result = await db.execute(query.order_by(CommissionAdjustmentModel.created_at))
        return result.scalars().all()

    @staticmethod
    async def create_adjustment(db: AsyncSession, adjustment: CommissionAdjustmentCreate,
                                user_code: str) -> CommissionAdjustmentModel:
        try:
            await CommissionUtil.get_open_period(db, adjustment.period_id)

            adjustment_record = CommissionAdjustmentModel(
                period_id=adjustment.period_id,
                salesperson=adjustment.salesperson,
                kind=adjustment.kind,
                amount=adjustment.amount,
                description=adjustment.description,
                created_by=user_code
            )
            db.add(adjustment_record)
            await db.commit()
            await db.refresh(adjustment_record)

            app_logger.info(f"Adjustment {adjustment_record.id} ({adjustment.kind} {adjustment.amount}) "
                            f"added for {adjustment.salesperson} in period {adjustment.period_id}")
            return adjustment_record
        except ValueError as e:
            app_logger.warning(f"create_adjustment rejected: {str(e)}")
            await db.rollback()
            raise e
        except Exception as e:
            app_logger.error(f"Error in create_adjustment: {str(e)}")
            await db.rollback()
            raise e

    @staticmethod
    async def delete_adjustment(db: AsyncSession, adjustment_id: str) -> bool:
        try:
            result = await db.execute(
                select(CommissionAdjustmentModel).where(CommissionAdjustmentModel.id == adjustment_id)
            )
            adjustment_record = result.scalar_one_or_none()
            if adjustment_record is None:
                raise AdjustmentNotFoundError(adjustment_id)

            await CommissionUtil.get_open_period(db, adjustment_record.period_id)

            await db.delete(adjustment_record)
            await db.commit()
            app_logger.info(f"Adjustment {adjustment_id} deleted")
            return True
        except ValueError as e:
            app_logger.warning(f"delete_adjustment rejected: {str(e)}")
            await db.rollback()
            raise e
        except Exception as e:
            app_logger.error(f"Error in delete_adjustment: {str(e)}")
            await db.rollback()
            raise e


class CommissionRPTService:

    @staticmethod
    def format_sale(sale: SaleRecordModel) -> dict:
        return {
            "salesperson": CommissionCalculator.salesperson_key(sale),
            "customer_name": sale.customer_name,
            "contract_number": sale.contract_number,
            "contract_date": sale.contract_date.isoformat() if sale.contract_date else None,
            "plan_name": sale.plan_name,
            "sale_type": sale.sale_type,
            "interval_label": sale.interval_label,
            "sale_kind": sale.sale_kind.value if sale.sale_kind is not None else None,
            "mrr_value": to_float(sale.mrr_value),
            "one_time_fee": to_float(sale.one_time_fee),
            "counts_toward_tier": bool(sale.counts_toward_tier),
            "counts_toward_commission": bool(sale.counts_toward_commission),
            "counts_toward_goal": bool(sale.counts_toward_goal)
        }

    @staticmethod
    async def get_rpt_commission_statement(db: AsyncSession, period_id: str) -> dict:
        """
        结算单报表: 汇总, 佣金明细, 销售明细

        Args:
            db: 数据库会话
            period_id: 结算期ID

        Returns:
            dict: summary / commissions / sales, 每个都带 field_translations
        """
        app_logger.info(f"Starting get_rpt_commission_statement for period {period_id}")

        commissions = await CommissionService.get_commissions_by_period(db, period_id)
        period = commissions["period"]

        sales_result = await db.execute(
            select(SaleRecordModel)
                .where(SaleRecordModel.period_id == period_id)
                .order_by(SaleRecordModel.contract_date.desc(), SaleRecordModel.id)
        )
        sales = [CommissionRPTService.format_sale(sale) for sale in sales_result.scalars().all()]

        summary = {
            "reference_month": period["reference_month"],
            "status": period["status"],
            "total_sales": period["total_sales"],
            "total_mrr": period["total_mrr"],
            "goal_met": period["goal_met"],
            "salesperson_count": len(commissions["data"]),
            "total_payable": commissions["total_payable"]
        }

        return {
            "summary": {
                "data": [summary],
                "field_translations": {
                    "reference_month": {"en": "Reference Month", "pt": "Mês de Referência"},
                    "status": {"en": "Status", "pt": "Status"},
                    "total_sales": {"en": "Recurring Sales", "pt": "Vendas Recorrentes"},
                    "total_mrr": {"en": "Goal MRR", "pt": "MRR da Meta"},
                    "goal_met": {"en": "Goal Met", "pt": "Meta Batida"},
                    "salesperson_count": {"en": "Salespeople", "pt": "Vendedores"},
                    "total_payable": {"en": "Total Payable", "pt": "Total a Receber"}
                }
            },
            "commissions": {
                "data": commissions["data"],
                "field_translations": {
                    "salesperson": {"en": "Salesperson", "pt": "Vendedor"},
                    "sale_count": {"en": "Sales", "pt": "Qtd. Vendas"},
                    "tier_mrr": {"en": "Tier MRR", "pt": "MRR Faixa"},
                    "commission_mrr": {"en": "Commission MRR", "pt": "MRR Comissão"},
                    "annual_mrr": {"en": "Annual MRR", "pt": "MRR Anual"},
                    "one_time_fee_total": {"en": "One-time Fees", "pt": "Adesões"},
                    "tier_name": {"en": "Tier", "pt": "Faixa"},
                    "percentage": {"en": "Rate (%)", "pt": "Percentual"},
                    "base_commission": {"en": "Base Commission", "pt": "Comissão"},
                    "annual_bonus": {"en": "Annual Bonus", "pt": "Bônus Anual"},
                    "team_bonus": {"en": "Team Bonus", "pt": "Bônus Meta Equipe"},
                    "company_bonus": {"en": "Company Bonus", "pt": "Bônus Empresa"},
                    "one_time_commission": {"en": "One-time Commission", "pt": "Comissão Venda Única"},
                    "total_payable": {"en": "Total Payable", "pt": "Total a Receber"},
                    "adjustments_total": {"en": "Adjustments", "pt": "Ajustes"},
                    "adjusted_total": {"en": "Adjusted Total", "pt": "Total Ajustado"}
                }
            },
            "sales": {
                "data": sales,
                "field_translations": {
                    "salesperson": {"en": "Salesperson", "pt": "Vendedor"},
                    "customer_name": {"en": "Customer", "pt": "Cliente"},
                    "contract_number": {"en": "Contract", "pt": "Contrato"},
                    "contract_date": {"en": "Contract Date", "pt": "Data Contrato"},
                    "plan_name": {"en": "Plan", "pt": "Plano"},
                    "sale_type": {"en": "Sale Type", "pt": "Tipo de Venda"},
                    "interval_label": {"en": "Interval", "pt": "Intervalo"},
                    "sale_kind": {"en": "Kind", "pt": "Categoria"},
                    "mrr_value": {"en": "MRR", "pt": "MRR"},
                    "one_time_fee": {"en": "One-time Fee", "pt": "Adesão"},
                    "counts_toward_tier": {"en": "Counts for Tier", "pt": "Conta Faixa"},
                    "counts_toward_commission": {"en": "Counts for Commission", "pt": "Conta Comissão"},
                    "counts_toward_goal": {"en": "Counts for Goal", "pt": "Conta Meta"}
                }
            }
        }
