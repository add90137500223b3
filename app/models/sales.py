import uuid
from datetime import datetime

from sqlalchemy import Column, String, Date, DECIMAL, Boolean, DateTime, Enum, ForeignKey, event

from app.database import Base
from app.utils.sale_classifier import SaleKind, BillingInterval, classify_sale_kind, parse_billing_interval


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class SaleRecordModel(Base):
    """
    导入的销售记录
    由导入模块写入，佣金计算只读
    """
    __tablename__ = "sale_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    period_id = Column(String(36), ForeignKey("closing_periods.id"), nullable=False, index=True)
    salesperson = Column(String(120))  # 为空时归入 Unassigned
    customer_name = Column(String(255))
    contract_number = Column(String(60))
    contract_date = Column(Date)
    plan_name = Column(String(120))
    sale_type = Column(String(60))  # 原始销售类型文本
    interval_label = Column(String(60))  # 原始周期文本
    sale_kind = Column(Enum(SaleKind, native_enum=False, length=20, values_callable=_enum_values),
                       nullable=False)
    billing_interval = Column(Enum(BillingInterval, native_enum=False, length=20, values_callable=_enum_values),
                              nullable=False)
    mrr_value = Column(DECIMAL(18, 6), nullable=False, default=0)
    one_time_fee = Column(DECIMAL(18, 6), nullable=False, default=0)
    counts_toward_tier = Column(Boolean, nullable=False, default=False)
    counts_toward_commission = Column(Boolean, nullable=False, default=False)
    counts_toward_goal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    @classmethod
    def from_import(cls, sale_type=None, interval_label=None, **fields):
        """按导入文本标签生成记录, sale_kind 和 billing_interval 在此确定"""
        return cls(
            sale_type=sale_type,
            interval_label=interval_label,
            sale_kind=classify_sale_kind(sale_type, interval_label),
            billing_interval=parse_billing_interval(interval_label),
            **fields
        )


@event.listens_for(SaleRecordModel, "before_insert")
@event.listens_for(SaleRecordModel, "before_update")
def _classify_from_labels(mapper, connection, target):
    # 标签是唯一来源, 直接构造的记录也在写入前重新分类
    target.sale_kind = classify_sale_kind(target.sale_type, target.interval_label)
    target.billing_interval = parse_billing_interval(target.interval_label)
