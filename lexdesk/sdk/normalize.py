from typing import Any, Dict, List, Optional


def unwrap(body: Any) -> Any:
    """Strip a ``{success, message, data}`` envelope if there is one."""
    if isinstance(body, dict) and "data" in body and ("success" in body or set(body) <= {"data", "message"}):
        return body["data"]
    return body


def normalize_collection(body: Any, key: Optional[str] = None) -> List[Dict[str, Any]]:
    """Flatten the response shapes a collection can come back in.

    Handles ``{success, data: {<key>: [...]}}``, ``{data: [...]}``, bare
    arrays, ``{<key>: [...]}`` and id-keyed objects. Anything else is empty.
    """
    if body is None:
        return []
    if isinstance(body, list):
        return list(body)
    if not isinstance(body, dict):
        return []

    if "data" in body:
        return normalize_collection(body["data"], key)

    if key and isinstance(body.get(key), list):
        return list(body[key])

    values = list(body.values())
    lists = [value for value in values if isinstance(value, list)]
    if len(lists) == 1:
        return list(lists[0])
    if values and all(isinstance(value, dict) for value in values):
        return values

    return []
