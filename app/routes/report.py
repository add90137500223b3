from io import BytesIO

import pandas as pd
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PeriodNotFoundError
from app.core.security import get_current_user
from app.database import get_db
from app.services.commission_service import CommissionRPTService
from app.utils.logger import app_logger
from app.utils.responses import success_response, error_response

router = APIRouter()

# sheet 名称 -> 报表数据中的键
STATEMENT_SHEETS = {"Summary": "summary", "Commissions": "commissions", "Sales": "sales"}


@router.get("/data")
async def get_report_data(
        period_id: str = Query(..., description="结算期ID"),
        format: str = Query("json", description="返回格式: json 或 excel"),
        session: AsyncSession = Depends(get_db),
        current_user: dict = Depends(get_current_user)
):
    """
    获取佣金结算单
    - period_id: 结算期（必需）
    - format: json 或 excel
    """
    try:
        report_data = await CommissionRPTService.get_rpt_commission_statement(session, period_id)
        report_data["period_id"] = period_id

        if format.lower() == 'excel':
            return _export_to_excel(report_data)
        return success_response(report_data)

    except PeriodNotFoundError as e:
        return error_response(404, str(e))
    except Exception as e:
        app_logger.error(f"Error generating report: {str(e)}", exc_info=True)
        return error_response(500, f"Error generating report: {str(e)}")


def _write_data_to_sheet(writer, data: dict, sheet_name: str):
    """使用 field_translations 的英文字段名作为表头"""
    field_translations = data.get("field_translations") or {}
    df = pd.DataFrame(data.get("data", []), columns=list(field_translations.keys()) or None)
    column_mapping = {
        old_name: translations["en"]
        for old_name, translations in field_translations.items()
        if "en" in translations
    }
    df.rename(columns=column_mapping, inplace=True)
    df.to_excel(writer, sheet_name=sheet_name, index=False)


def _export_to_excel(report_data: dict):
    output = BytesIO()

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet_name, key in STATEMENT_SHEETS.items():
            _write_data_to_sheet(writer, report_data[key], sheet_name)

    output.seek(0)

    reference_month = report_data["summary"]["data"][0].get("reference_month") or report_data["period_id"]
    headers = {
        'Content-Disposition': f'attachment; filename="commission_statement_{reference_month}.xlsx"',
        'Content-Type': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    }

    return Response(content=output.getvalue(), headers=headers)
