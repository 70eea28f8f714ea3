"""
Uniform success envelope: {"statusCode", "data", "message", "success"}.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from flask import jsonify

T = TypeVar("T")


@dataclass
class ApiResponse(Generic[T]):
    status_code: int
    data: T
    message: str = "Success"

    @property
    def success(self) -> bool:
        return self.status_code < 400

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "data": self.data,
            "message": self.message,
            "success": self.success,
        }


def respond(data: T, message: str, status: int = 200):
    """Build a (response, status) pair wrapping ``data`` in the envelope."""
    envelope: ApiResponse[T] = ApiResponse(status, data, message)
    return jsonify(envelope.to_dict()), status
