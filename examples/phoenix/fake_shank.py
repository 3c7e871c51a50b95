"""Stand-in for ``shank idl`` used by the tests: copies the raw IDL into --out-dir."""

import argparse
import os
import shutil
import sys
from pathlib import Path

RAW_IDL = Path(__file__).resolve().parent / "idl" / "phoenix.raw.json"


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("command")
    parser.add_argument("--out-dir", required=True)
    parser.add_argument("--crate-root", required=True)
    args = parser.parse_args()

    print(f"Analyzing crate at {args.crate_root}", flush=True)
    print("warning: skipping unannotated instruction variants", file=sys.stderr, flush=True)
    exit_code = int(os.environ.get("FAKE_SHANK_EXIT", "0"))
    if exit_code:
        return exit_code
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(RAW_IDL, out_dir / "phoenix.json")
    print(f"Wrote {out_dir / 'phoenix.json'}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
