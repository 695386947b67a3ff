"""todoscan tool server: stdio JSON-RPC 2.0 loop."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Callable, TextIO

from todoscan.config import ScanConfig, configure_logging, load_config
from todoscan.errors import E_INTERNAL, E_INVALID_REQUEST, err
from todoscan.models import TAGS
from todoscan.tools import handle_find_todos, handle_get_server_info, handle_scan_files

logger = logging.getLogger(__name__)

TOOLS_LIST: list[dict[str, Any]] = [
    {
        "name": "scan_files",
        "description": (
            "List files under the configured root that survive its .gitignore. "
            "Excluded directories are pruned; symlinks are not followed."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Directory to scan, relative to the configured root.",
                },
            },
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "find_todos",
        "description": (
            "Return TODO/FIXME/HACK/XXX/NOTE/BUG comments found in the eligible "
            "files, ordered by file then line."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "kinds": {
                    "type": "array",
                    "items": {"type": "string", "enum": list(TAGS)},
                    "minItems": 1,
                },
            },
            "additionalProperties": False,
        },
        "annotations": {"readOnlyHint": True},
    },
    {
        "name": "get_server_info",
        "description": "Server metadata: name, version, root, tag vocabulary and scan limits.",
        "inputSchema": {"type": "object", "properties": {}, "additionalProperties": False},
        "annotations": {"readOnlyHint": True},
    },
]


Handler = Callable[[dict[str, Any], ScanConfig], dict[str, Any]]

HANDLERS: dict[str, Handler] = {
    "scan_files": handle_scan_files,
    "find_todos": handle_find_todos,
    "get_server_info": handle_get_server_info,
}

# JSON-RPC 2.0 protocol-level error codes
RPC_PARSE_ERROR = -32700
RPC_INVALID_REQUEST = -32600
RPC_METHOD_NOT_FOUND = -32601


def _rpc_result(rpc_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _rpc_error(rpc_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


class TodoScanServer:
    """Binds the tool handlers to one ScanConfig and answers JSON-RPC requests.

    Tool failures travel inside the result as an error envelope; only
    protocol problems (unknown method, malformed request) are JSON-RPC errors.
    """

    def __init__(self, config: ScanConfig) -> None:
        self.config = config

    def call_tool(self, name: str, params: Any) -> dict[str, Any]:
        """Run one tool handler, turning any exception into E_INTERNAL."""
        if not isinstance(params, dict):
            return err(E_INVALID_REQUEST, "'params' must be an object.")
        try:
            return HANDLERS[name](params, self.config)
        except Exception as e:
            logger.exception("Tool %s failed", name)
            return err(E_INTERNAL, "Unhandled server error.", exception=str(e))

    def handle_rpc(self, req: dict[str, Any]) -> dict[str, Any]:
        rpc_id = req.get("id")
        method = req.get("method", "")
        if method == "tools/list":
            return _rpc_result(rpc_id, {"tools": TOOLS_LIST})
        if method not in HANDLERS:
            return _rpc_error(rpc_id, RPC_METHOD_NOT_FOUND, f"Method not found: {method}")
        return _rpc_result(rpc_id, self.call_tool(method, req.get("params") or {}))


def serve(server: TodoScanServer, stdin: TextIO, stdout: TextIO) -> None:
    """Answer one JSON-RPC request per input line until stdin closes."""
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            req = json.loads(line)
        except json.JSONDecodeError:
            resp = _rpc_error(None, RPC_PARSE_ERROR, "Parse error")
        else:
            if isinstance(req, dict):
                resp = server.handle_rpc(req)
            else:
                resp = _rpc_error(None, RPC_INVALID_REQUEST, "Invalid Request")
        stdout.write(json.dumps(resp) + "\n")
        stdout.flush()


def main() -> None:
    """Entry point: load config, run stdio JSON-RPC loop."""
    config = load_config()
    configure_logging(config.log_level)
    logger.info("Serving %d tools (root=%s)", len(TOOLS_LIST), config.root)
    serve(TodoScanServer(config), sys.stdin, sys.stdout)


if __name__ == "__main__":
    main()
