import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Date, DECIMAL, ForeignKey

from app.config import PERIOD_STATUS_DRAFT
from app.database import Base


def _uuid():
    return str(uuid.uuid4())


class ClosingPeriodModel(Base):
    """
    佣金结算期
    每次计算后回写汇总字段
    """
    __tablename__ = "closing_periods"

    id = Column(String(36), primary_key=True, default=_uuid)
    reference_month = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=PERIOD_STATUS_DRAFT)  # draft, closed
    file_name = Column(String(255))
    imported_at = Column(DateTime, default=datetime.utcnow)
    total_sales = Column(Integer, nullable=False, default=0)  # 经常性销售笔数
    total_mrr = Column(DECIMAL(18, 6), nullable=False, default=0)  # 计入目标的MRR
    goal_met = Column(Boolean, nullable=False, default=False)
    calculated_at = Column(DateTime)
    closed_at = Column(DateTime)
    closed_by = Column(String(60))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CommissionTierModel(Base):
    __tablename__ = "commission_tiers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(60), nullable=False)
    min_mrr = Column(DECIMAL(18, 2), nullable=False, default=0)  # 包含
    max_mrr = Column(DECIMAL(18, 2))  # 包含, 为空表示无上限
    percentage = Column(DECIMAL(6, 2), nullable=False, default=0)  # 整数百分比
    rank = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CommissionParameterModel(Base):
    """通用配置参数 (key/value), 月度目标未覆盖时使用"""
    __tablename__ = "commission_parameters"

    key = Column(String(60), primary_key=True)
    value = Column(String(60), nullable=False)
    description = Column(Text)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CalculatedCommissionModel(Base):
    """
    计算结果, 每个结算期每个销售一行
    每次计算整体删除后重新插入
    """
    __tablename__ = "calculated_commissions"

    id = Column(String(36), primary_key=True, default=_uuid)
    period_id = Column(String(36), ForeignKey("closing_periods.id"), nullable=False, index=True)
    salesperson = Column(String(120), nullable=False)
    sale_count = Column(Integer, nullable=False, default=0)
    tier_mrr = Column(DECIMAL(18, 6), nullable=False, default=0)
    commission_mrr = Column(DECIMAL(18, 6), nullable=False, default=0)
    annual_mrr = Column(DECIMAL(18, 6), nullable=False, default=0)
    one_time_fee_total = Column(DECIMAL(18, 6), nullable=False, default=0)
    tier_name = Column(String(60))
    percentage = Column(DECIMAL(9, 4), nullable=False, default=0)  # 整数百分比
    base_commission = Column(DECIMAL(18, 6), nullable=False, default=0)
    annual_bonus = Column(DECIMAL(18, 6), nullable=False, default=0)
    team_bonus = Column(DECIMAL(18, 6), nullable=False, default=0)
    company_bonus = Column(DECIMAL(18, 6), nullable=False, default=0)
    one_time_commission = Column(DECIMAL(18, 6), nullable=False, default=0)
    total_payable = Column(DECIMAL(18, 6), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)


class CommissionAdjustmentModel(Base):
    """人工调整 (credit 增加 / debit 扣减), 重新计算时保留"""
    __tablename__ = "commission_adjustments"

    id = Column(String(36), primary_key=True, default=_uuid)
    period_id = Column(String(36), ForeignKey("closing_periods.id"), nullable=False, index=True)
    salesperson = Column(String(120), nullable=False)
    kind = Column(String(10), nullable=False)  # credit, debit
    amount = Column(DECIMAL(18, 2), nullable=False)
    description = Column(Text, nullable=False)
    created_by = Column(String(60))
    created_at = Column(DateTime, default=datetime.utcnow)
