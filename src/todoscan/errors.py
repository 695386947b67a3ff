"""Error taxonomy: the root precondition failure and structured result envelopes."""

from __future__ import annotations

from typing import Any

E_ROOT_NOT_FOUND = "E_ROOT_NOT_FOUND"
E_ROOT_NOT_A_DIRECTORY = "E_ROOT_NOT_A_DIRECTORY"
E_TRAVERSAL_REJECTED = "E_TRAVERSAL_REJECTED"
E_INVALID_REQUEST = "E_INVALID_REQUEST"
E_INTERNAL = "E_INTERNAL"

# What a client can do about each failure; codes without a hint get none.
NEXT_STEPS: dict[str, list[str]] = {
    E_ROOT_NOT_FOUND: ["Check TODOSCAN_ROOT and the 'path' argument."],
    E_ROOT_NOT_A_DIRECTORY: ["Point 'path' at a directory, not a file."],
    E_TRAVERSAL_REJECTED: ["Pass a directory inside the configured root, relative to it."],
    E_INVALID_REQUEST: ["Call tools/list for the accepted arguments."],
}


class ScanRootError(Exception):
    """The scan root is missing or is not a directory.

    This is the only condition the core reports instead of absorbing:
    a bad root is the caller's precondition, not something to skip.
    """

    def __init__(self, code: str, path: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.path = path

    def envelope(self) -> dict[str, Any]:
        """The tool-layer error envelope for this failure."""
        return err(self.code, str(self), path=self.path)


def err(code: str, message: str, **details: Any) -> dict[str, Any]:
    """Failure envelope; keyword arguments become the 'details' object."""
    return {
        "ok": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "nextSteps": list(NEXT_STEPS.get(code, ())),
        },
    }


def ok(result: dict[str, Any]) -> dict[str, Any]:
    return {"ok": True, "result": result}
