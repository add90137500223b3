from typing import Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PeriodNotFoundError, PeriodClosedError, MalformedRecordError, \
    AdjustmentNotFoundError
from app.core.security import get_current_user
from app.database import get_db
from app.schemas.commission import CalculateCommission, ClosePeriod, CommissionAdjustmentCreate, CalculationSummary
from app.services.commission_service import CommissionService
from app.utils.logger import app_logger
from app.utils.responses import success_response, error_response

router = APIRouter()


def _domain_error(e: ValueError):
    if isinstance(e, (PeriodNotFoundError, AdjustmentNotFoundError)):
        return error_response(404, str(e))
    if isinstance(e, PeriodClosedError):
        return error_response(409, str(e))
    if isinstance(e, MalformedRecordError):
        return error_response(500, str(e))
    return error_response(400, str(e))


@router.post("/calculate")
async def calculate_commissions(request: CalculateCommission,
                                db: AsyncSession = Depends(get_db),
                                current_user: dict = Depends(get_current_user)):
    try:
        app_logger.info(f"calculate_commissions: {current_user['user_code']} {request.period_id}")
        data = await CommissionService.calculate_for_period(db, request.period_id)
        return success_response(CalculationSummary(**data).model_dump())
    except ValueError as e:
        return _domain_error(e)
    except SQLAlchemyError as e:
        app_logger.error(f"calculate_commissions Database error: {str(e)}")
        return error_response(500, "Database error occurred while calculating commissions")
    except Exception as e:
        app_logger.error(f"calculate_commissions An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while calculating commissions: {str(e)}")


@router.get("/periods")
async def get_periods(year: Optional[int] = None,
                      status: Optional[Literal["draft", "closed"]] = None,
                      db: AsyncSession = Depends(get_db),
                      current_user: dict = Depends(get_current_user)):
    try:
        data = await CommissionService.get_periods(db, year, status)
        return success_response(data)
    except SQLAlchemyError as e:
        app_logger.error(f"get_periods Database error: {str(e)}")
        return error_response(500, "Database error occurred while fetching closing periods")
    except Exception as e:
        app_logger.error(f"get_periods An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while fetching closing periods: {str(e)}")


@router.get("/list")
async def get_commissions(period_id: str,
                          db: AsyncSession = Depends(get_db),
                          current_user: dict = Depends(get_current_user)):
    try:
        data = await CommissionService.get_commissions_by_period(db, period_id)
        return success_response(data)
    except ValueError as e:
        return _domain_error(e)
    except SQLAlchemyError as e:
        app_logger.error(f"get_commissions Database error: {str(e)}")
        return error_response(500, "Database error occurred while fetching commissions")
    except Exception as e:
        app_logger.error(f"get_commissions An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while fetching commissions: {str(e)}")


@router.get("/detail")
async def get_commission_detail(period_id: str, salesperson: str,
                                db: AsyncSession = Depends(get_db),
                                current_user: dict = Depends(get_current_user)):
    try:
        data = await CommissionService.get_commission_detail(db, period_id, salesperson)
        return success_response(data)
    except ValueError as e:
        return error_response(404, str(e))
    except SQLAlchemyError as e:
        app_logger.error(f"get_commission_detail Database error: {str(e)}")
        return error_response(500, "Database error occurred while fetching commission detail")
    except Exception as e:
        app_logger.error(f"get_commission_detail An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while fetching commission detail: {str(e)}")


@router.post("/close")
async def close_period(request: ClosePeriod,
                       db: AsyncSession = Depends(get_db),
                       current_user: dict = Depends(get_current_user)):
    try:
        data = await CommissionService.close_period(db, request.period_id, current_user['user_code'])
        return success_response(data, "Closing period closed successfully")
    except ValueError as e:
        return _domain_error(e)
    except SQLAlchemyError as e:
        app_logger.error(f"close_period Database error: {str(e)}")
        return error_response(500, "Database error occurred while closing period")
    except Exception as e:
        app_logger.error(f"close_period An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while closing period: {str(e)}")


@router.delete("/delete_period")
async def delete_period(period_id: str,
                        db: AsyncSession = Depends(get_db),
                        current_user: dict = Depends(get_current_user)):
    try:
        app_logger.info(f"delete_period: {current_user['user_code']} {period_id}")
        await CommissionService.delete_period(db, period_id)
        return success_response(None, "Closing period deleted successfully")
    except ValueError as e:
        return _domain_error(e)
    except SQLAlchemyError as e:
        app_logger.error(f"delete_period Database error: {str(e)}")
        return error_response(500, "Database error occurred while deleting closing period")
    except Exception as e:
        app_logger.error(f"delete_period An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while deleting closing period: {str(e)}")


@router.get("/adjustments")
async def get_adjustments(period_id: str, salesperson: str = None,
                          db: AsyncSession = Depends(get_db),
                          current_user: dict = Depends(get_current_user)):
    try:
        adjustments = await CommissionService.get_adjustments(db, period_id, salesperson)
        return success_response([CommissionService.format_adjustment(a) for a in adjustments])
    except SQLAlchemyError as e:
        app_logger.error(f"get_adjustments Database error: {str(e)}")
        return error_response(500, "Database error occurred while fetching adjustments")
    except Exception as e:
        app_logger.error(f"get_adjustments An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while fetching adjustments: {str(e)}")


@router.post("/add_adjustment")
async def add_adjustment(adjustment: CommissionAdjustmentCreate,
                         db: AsyncSession = Depends(get_db),
                         current_user: dict = Depends(get_current_user)):
    try:
        record = await CommissionService.create_adjustment(db, adjustment, current_user['user_code'])
        return success_response(CommissionService.format_adjustment(record))
    except ValueError as e:
        return _domain_error(e)
    except SQLAlchemyError as e:
        app_logger.error(f"add_adjustment Database error: {str(e)}")
        return error_response(500, "Database error occurred while adding adjustment")
    except Exception as e:
        app_logger.error(f"add_adjustment An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while adding adjustment: {str(e)}")


@router.delete("/delete_adjustment")
async def delete_adjustment(adjustment_id: str,
                            db: AsyncSession = Depends(get_db),
                            current_user: dict = Depends(get_current_user)):
    try:
        await CommissionService.delete_adjustment(db, adjustment_id)
        return success_response(None, "Adjustment deleted successfully")
    except ValueError as e:
        return _domain_error(e)
    except SQLAlchemyError as e:
        app_logger.error(f"delete_adjustment Database error: {str(e)}")
        return error_response(500, "Database error occurred while deleting adjustment")
    except Exception as e:
        app_logger.error(f"delete_adjustment An error occurred: {str(e)}")
        return error_response(500, f"An error occurred while deleting adjustment: {str(e)}")
