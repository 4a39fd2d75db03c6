from __future__ import annotations

import json
import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from workforce.config import CONFIG
from workforce.records import VerificationRecord
from workforce.storage import HISTORY_KEY

store = Path(sys.argv[1]) if len(sys.argv) > 1 else CONFIG.store_path
if not store.exists():
    raise SystemExit(f"Missing store: {store}")

history = json.loads(store.read_text()).get(HISTORY_KEY, [])
if len(history) > CONFIG.history_limit:
    raise SystemExit(f"History holds {len(history)} records, limit is {CONFIG.history_limit}")

seen: set[str] = set()
for idx, item in enumerate(history):
    try:
        record = VerificationRecord.from_dict(item)
    except (KeyError, TypeError, ValueError) as exc:
        raise SystemExit(f"Record {idx} is malformed: {exc}")
    if record.authorized:
        if record.employee_id in seen:
            raise SystemExit(f"Duplicate authorized record for {record.employee_id}")
        seen.add(record.employee_id)

print(f"Validation OK: {len(history)} records, {len(seen)} authorized employees.")
