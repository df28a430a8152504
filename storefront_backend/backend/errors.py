# backend/errors.py

"""
API ERROR NORMALIZATION

Canonical error body shared by every app:
    {"error": {"code": "...", "message": "..."}}
"""

from rest_framework import status
from rest_framework.response import Response


def error_response(*, code: str, message: str, http_status: int):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def internal_error_response():
    return error_response(
        code="INTERNAL_ERROR",
        message="Internal server error",
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
