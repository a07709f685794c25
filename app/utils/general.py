# app/utils/general.py
"""
General-purpose utility functions.

This module contains helpers for service result handling, time stamps and
request payload parsing shared by the blueprints and services.
"""

from datetime import datetime, timezone
from flask import jsonify, request


def utcnow():
    """Naive UTC timestamp, matching the naive DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    """Converts an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_json_body():
    """Returns the request JSON body as a dict (empty when missing or malformed)."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _handle_service_result(result, default_error_status=500):
    """
    Parses the result from a service function.
    If it's a tuple (error_dict, status_code), it uses the custom status code.
    Otherwise, it assumes success (status 200) or uses the default error status.

    Adds 'error_code' field to error responses for structured frontend handling.
    Domain conflicts set their own string error_code (e.g. 'ALREADY_VOTED').
    """
    # Check if the result is a tuple (error_dict, status_code)
    if isinstance(result, tuple) and len(result) == 2:
        error_dict, status_code = result
        if not error_dict.get("success", True):
            error_dict["error_code"] = error_dict.get("error_code", status_code)
        return jsonify(error_dict), status_code

    if result.get("success"):
        return jsonify(result), 200
    else:
        result["error_code"] = result.get("error_code", default_error_status)
        return jsonify(result), default_error_status
