from fastapi.responses import JSONResponse


def success_response(data=None, msg: str = "Success") -> dict:
    return {"code": 200, "success": True, "data": data, "msg": msg}


def error_response(code: int, msg: str) -> JSONResponse:
    """失败时HTTP状态码与 code 一致"""
    return JSONResponse(status_code=code, content={"code": code, "success": False, "msg": msg})
