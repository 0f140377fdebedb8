from __future__ import annotations
import json, pathlib, time
from typing import Dict, Any

def jsonl_append(path: str, rec: Dict[str, Any]):
    p = pathlib.Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        f.write(json.dumps(rec, ensure_ascii=False) + "\n")

def result_record(result, pom_file: str) -> Dict[str, Any]:
    rec = result.to_dict()
    rec["pom"] = pom_file
    rec["timestamp"] = time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())
    return rec
