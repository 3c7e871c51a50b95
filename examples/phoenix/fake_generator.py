"""Stand-in for a client generator CLI: writes one line per instruction."""

import argparse
import json
import os
from pathlib import Path


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--idl", required=True)
    parser.add_argument("--out", required=True)
    args = parser.parse_args()

    exit_code = int(os.environ.get("FAKE_GENERATOR_EXIT", "0"))
    if exit_code:
        return exit_code
    idl = json.loads(Path(args.idl).read_text())
    lines = []
    for ix in idl["instructions"]:
        arg_list = ", ".join(f"{a['name']}" for a in ix.get("args", []))
        lines.append(f"export function {ix['name']}({arg_list}) {{}}")
    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    (out / "instructions.ts").write_text("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
