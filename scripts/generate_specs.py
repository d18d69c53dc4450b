#!/usr/bin/env python3
"""
Generate JSON Schemas, YAML variants, and OpenAPI from Pydantic models.

Outputs under src/specs/:
 - schemas/*.json (and *.yaml)
 - openapi.yaml and openapi.json
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

try:
    import yaml  # type: ignore
except Exception as exc:  # pragma: no cover
    print("PyYAML is required: pip install pyyaml", file=sys.stderr)
    raise


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SPECS = SRC / "specs"
SCHEMAS_DIR = SPECS / "schemas"

sys.path.insert(0, str(ROOT))

from src.specs.openapi import build_openapi, model_schemas  # noqa: E402


def write_json_yaml(obj: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    yaml_path = json_path.with_suffix(".yaml")
    with yaml_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False, allow_unicode=True)


def generate_model_schemas() -> None:
    for filename, schema in model_schemas().items():
        write_json_yaml(schema, SCHEMAS_DIR / filename)


def generate_openapi() -> None:
    write_json_yaml(build_openapi(), SPECS / "openapi.json")


def main() -> None:
    generate_model_schemas()
    generate_openapi()
    print("Specs generated under src/specs/")


if __name__ == "__main__":
    main()
