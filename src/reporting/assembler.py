from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder

from digtool.models import ToolInfo

INVALID_PARAMETERS = "InvalidParameters"
DIG_COMMAND_FAILED = "DigCommandFailed"
STATUS_CHECK_FAILED = "StatusCheckFailed"


class Assemble:
    """
    Shapes results into the response format the front end expects.

    Design intent:
      - Query code (digtool, subnets) returns domain objects and raises on failure
      - The assembler is responsible for the wire format:
          - {"success": true, "data": ...} on success
          - {"code", "message", "errors"?} on failure, never a stack trace
          - JSON-safe output
    """

    def success(self, data: Any) -> Dict[str, Any]:
        return jsonable_encoder({"success": True, "data": self._to_json(data)})

    def error(self, code: str, message: str, errors: Optional[List[str]] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"code": code, "message": message}
        if errors is not None:
            body["errors"] = list(errors)
        return body

    def status(self, info: ToolInfo, platform: str, default_server: str) -> Dict[str, Any]:
        """Payload for the status endpoint; `status` is the readiness label shown as a badge."""
        return self.success({
            "toolAvailable": info.available,
            "toolPath": info.path,
            "version": info.version,
            "error": info.error,
            "status": "ready" if info.available else "dig tool not found",
            "platform": platform,
            "defaultServer": default_server,
        })

    def _to_json(self, obj: Any) -> Any:
        """
        Convert a result into JSON-friendly structures.

        - If the object provides to_dict(), use it (camelCase keys live there)
        - Otherwise, encode the object directly.
        """
        if hasattr(obj, "to_dict"):
            return jsonable_encoder(obj.to_dict())
        return jsonable_encoder(obj)
