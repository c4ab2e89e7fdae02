import json
import re
from typing import Any, Dict


def safe_json_parse(txt: str) -> Dict[str, Any]:
    """Parse a JSON object out of model output; {} when there is none."""
    try:
        data = json.loads(txt)
    except Exception:
        m = re.search(r"\{.*\}", txt or "", re.DOTALL)
        if not m:
            return {}
        try:
            data = json.loads(m.group(0))
        except Exception:
            return {}
    return data if isinstance(data, dict) else {}
