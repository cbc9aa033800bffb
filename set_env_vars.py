"""Simple .env loader and runner.

Usage:
  - Import and call `load()` from Python: `from set_env_vars import load; load()`
  - Check which settings are present: `initialize_env_vars()`
  - Run a command with the .env loaded:
      python set_env_vars.py --exec flask --app main run
"""
from __future__ import annotations

import os
import subprocess
from typing import Dict

REQUIRED_KEYS = (
    "MONGO_URI",
    "MONGO_DB",
    "FLASK_SECRET_KEY",
)

OPTIONAL_KEYS = (
    "STUDY_API_URL",
    "STUDY_ADMIN_API_URL",
    "STUDY_API_TIMEOUT",
    "QUIZ_RUN_TTL_HOURS",
    "APP_NAME",
    "APP_VERSION",
    "LOG_LEVEL",
)


def _parse_dotenv(path: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for raw in fh:
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export "):].strip()
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip()
                if not key:
                    continue
                if len(val) >= 2 and ((val[0] == val[-1] == '"') or (val[0] == val[-1] == "'")):
                    val = val[1:-1]
                pairs[key] = val
    except FileNotFoundError:
        return {}
    return pairs


def load(path: str = ".env", override: bool = False) -> None:
    """Load key=value pairs from `path` into os.environ.

    Args:
        path: path to .env file (default: .env)
        override: if True, overwrite existing environment variables
    """
    for k, v in _parse_dotenv(path).items():
        if override or k not in os.environ:
            os.environ[k] = v


def initialize_env_vars(path: str = ".env") -> Dict[str, object]:
    """Load `path` and report which settings are present (never their values)."""
    load(path)
    return {
        "env_file": path,
        "env_file_found": os.path.exists(path),
        "required": {k: bool(os.environ.get(k)) for k in REQUIRED_KEYS},
        "optional": {k: bool(os.environ.get(k)) for k in OPTIONAL_KEYS},
        "missing": [k for k in REQUIRED_KEYS if not os.environ.get(k)],
    }


def run_command_with_env(cmd: list[str]) -> int:
    """Run a command (list form) with the current process environment and return exit code."""
    return subprocess.run(cmd, env=os.environ).returncode


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Load .env and optionally run a command with it.")
    parser.add_argument("--env-file", "-e", default=".env", help="Path to .env file")
    parser.add_argument("--override", action="store_true", help="Override existing env vars")
    parser.add_argument("--exec", "-x", nargs=argparse.REMAINDER, help="Command to run with env loaded")
    args = parser.parse_args()

    load(args.env_file, override=args.override)

    if args.exec:
        cmd = args.exec
        if not cmd:
            parser.error("--exec requires a command to run")
        rc = run_command_with_env(cmd)
        raise SystemExit(rc)
    else:
        status = initialize_env_vars(args.env_file)
        print(f"Loaded environment from {args.env_file}")
        if status["missing"]:
            print("Missing: " + ", ".join(status["missing"]))
