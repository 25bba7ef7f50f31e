"""
Response envelopes shared by every endpoint.

Success:  {"success": true,  "status": 200, "message": "...", "data": {...}}
Failure:  {"success": false, "status": 4xx/5xx, "msg": "..."}
"""
from typing import Optional


class ResponseFlags:
    PARAMETER_MISSING = 400
    ACTION_COMPLETE = 200
    ACTION_FAILED = 500
    NOT_FOUND = 404
    CONFLICT = 409
    UNAUTHORIZED = 401
    BAD_REQUEST = 400
    FORBIDDEN = 403


class ResponseMessages:
    PARAMETER_MISSING = "Insufficient information was supplied. Please check and try again."
    ACTION_COMPLETE = "Successful"
    BAD_REQUEST = "Invalid Request"
    AUTHENTICATION_FAILED = "Authentication failed"
    ACTION_FAILED = "Something went wrong. Please try again."
    NOT_FOUND = "Data Not Found in Database."
    ALREADY_EXISTS = "This data is already present."
    INVALID_OTP = "Invalid OTP"
    OTP_EXPIRED = "OTP expired. Please request a new one."
    OTP_NOT_FOUND = "OTP not found or expired"
    ACCOUNT_INACTIVE = "Account is inactive. Please contact admin."


def action_complete(message: Optional[str] = None, data: Optional[dict] = None) -> dict:
    return {
        "success": True,
        "status": ResponseFlags.ACTION_COMPLETE,
        "message": message or ResponseMessages.ACTION_COMPLETE,
        "data": data or {},
    }


def action_failed(status: int, msg: Optional[str] = None) -> dict:
    return {
        "success": False,
        "status": status,
        "msg": msg or ResponseMessages.ACTION_FAILED,
    }
