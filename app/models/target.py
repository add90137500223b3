import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Date, DECIMAL, Text

from app.database import Base


class MonthlyGoalModel(Base):
    """
    月度目标
    存在时覆盖同名的通用配置参数, 为空的字段回退到通用配置
    """
    __tablename__ = "monthly_goals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    reference_month = Column(Date, nullable=False, unique=True)
    goal_mrr = Column(DECIMAL(18, 2))
    goal_quantity = Column(Integer)
    team_bonus_percent = Column(DECIMAL(6, 2))  # 整数百分比, 例如 10 表示 10%
    company_bonus_percent = Column(DECIMAL(6, 2))
    headcount = Column(Integer)
    one_time_commission_percent = Column(DECIMAL(6, 2))
    remarks = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
