import enum
import re
import unicodedata
from typing import Optional


class SaleKind(str, enum.Enum):
    RECURRING = "recurring"
    ONE_TIME = "one_time"
    SERVICE = "service"


class BillingInterval(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"
    ONE_TIME = "one_time"
    OTHER = "other"


# 匹配前先去掉重音并转小写, "Venda Única" -> "venda unica"
ONE_TIME_PATTERN = re.compile(r"\bunica\b|one[\s-]?time|\bsingle\b")
SERVICE_PATTERN = re.compile(r"\bservico\b|\bservice\b")

INTERVAL_LABELS = {
    BillingInterval.MONTHLY: ("mensal", "monthly", "mes", "month"),
    BillingInterval.QUARTERLY: ("trimestral", "quarterly"),
    BillingInterval.SEMIANNUAL: ("semestral", "semiannual", "semi-annual"),
    BillingInterval.ANNUAL: ("anual", "annual", "yearly", "ano", "year"),
}


def normalize_label(label: Optional[str]) -> str:
    if not label:
        return ""
    decomposed = unicodedata.normalize("NFKD", label)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def parse_billing_interval(label: Optional[str]) -> BillingInterval:
    """
    将导入数据中的周期文本转换为 BillingInterval

    Args:
        label: 原始周期文本, 例如 "Mensal", "Anual", "Venda Única"

    Returns:
        BillingInterval: 无法识别的文本返回 OTHER
    """
    text = normalize_label(label)
    if not text:
        return BillingInterval.OTHER
    if ONE_TIME_PATTERN.search(text):
        return BillingInterval.ONE_TIME
    for interval, names in INTERVAL_LABELS.items():
        if text in names:
            return interval
    return BillingInterval.OTHER


def classify_sale_kind(sale_type: Optional[str], interval: Optional[str]) -> SaleKind:
    """
    导入时根据销售类型和周期文本确定 SaleKind

    One-time wins over service when both labels match.
    """
    type_text = normalize_label(sale_type)
    interval_text = normalize_label(interval)
    if ONE_TIME_PATTERN.search(type_text) or ONE_TIME_PATTERN.search(interval_text):
        return SaleKind.ONE_TIME
    if SERVICE_PATTERN.search(type_text):
        return SaleKind.SERVICE
    return SaleKind.RECURRING


def is_recurring(sale) -> bool:
    return sale.sale_kind == SaleKind.RECURRING
