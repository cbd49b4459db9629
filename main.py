"""slidestate — dev launcher. Starts the state backend, or checks a data dir."""

import argparse
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "127.0.0.1")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13015")


def check(data_dir: Path) -> int:
    """Load (and migrate) data_dir/data.json once, read-only, and summarise it."""
    from slidestate.storage import AppStorage

    storage = AppStorage(data_dir, primary=False)
    state = storage.load()
    print(f"{storage.save_path}: version {state.version}")
    print(f"  scenes:  {len(state.scenes)}")
    print(f"  grids:   {len(state.grids)}")
    print(f"  library: {len(state.library)}")
    print(f"  tags:    {len(state.tags)}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="slidestate dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--secondary", action="store_true",
                        help="Load state read-only; never write data.json")
    parser.add_argument("--check", action="store_true",
                        help="Load and migrate data.json, print a summary, and exit")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.check:
        sys.exit(check(args.data_dir or Path(os.getenv("DATA_DIR", "data"))))

    # Build env for the subprocess so the backend picks up the same settings
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())
    if args.secondary:
        env["PRIMARY_WINDOW"] = "0"

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    procs.append(subprocess.Popen(
        ["uvicorn", "backend.app:app", "--host", HOST, "--port", BACKEND_PORT],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()
