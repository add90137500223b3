class PeriodNotFoundError(ValueError):
    def __init__(self, period_id):
        super().__init__(f"Closing period {period_id} not found")
        self.period_id = period_id


class PeriodClosedError(ValueError):
    def __init__(self, period_id):
        super().__init__(f"Closing period {period_id} is closed and can no longer be changed")
        self.period_id = period_id


class MalformedRecordError(ValueError):
    """上游数据无法解析, 本次计算在写入前中止"""


class AdjustmentNotFoundError(ValueError):
    def __init__(self, adjustment_id):
        super().__init__(f"Adjustment {adjustment_id} not found")
        self.adjustment_id = adjustment_id
