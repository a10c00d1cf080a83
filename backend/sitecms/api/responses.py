"""Response envelope shared by every endpoint."""
from typing import Any, Dict, List, Optional


def format_response(
    message: str,
    data: Any = None,
    meta: Optional[Dict[str, Any]] = None,
    status: str = "success",
    errors: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Build ``{status, message, data?, meta?, errors?}``."""
    body: Dict[str, Any] = {"status": status, "message": message}
    if data is not None:
        body["data"] = data
    if meta:
        body["meta"] = meta
    if errors:
        body["errors"] = errors
    return body
