#!/usr/bin/env python3
"""Command-line entry: repo-trust URL_FILE"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .api.gh_client import GHClient
from .driver import ScoreDriver, read_urls
from .errors import CredentialError, FatalError
from .metric_eval import DEFAULT_PROBE_TIMEOUT, MetricEval, init_metrics, init_weights

DEFAULT_WORKERS = 4
TOKEN_PREFIXES = ("ghp_", "github_pat_", "gho_", "ghu_", "ghs_")

USAGE = "usage: repo-trust URL_FILE"


# ---------------- Logging ----------------
def _validate_log_file_env() -> Optional[str]:
    """
    Validate LOG_FILE env var when it is set:
      - Parent directory is created if needed
      - File must be writable (we must be able to open it for appending)
    Returns None when unset (logs go to stderr).
    """
    log_file = os.getenv("LOG_FILE")
    if not log_file:
        return None

    p = Path(log_file)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(p, "a", encoding="utf-8"):
            pass
    except OSError as e:
        raise FatalError(f"LOG_FILE is not writable: {log_file} ({e})") from e
    return log_file


def _log_level() -> int:
    """LOG_LEVEL -> 0=silent (default), 1=info, 2=debug."""
    try:
        val = int(float(os.getenv("LOG_LEVEL", "0")))
    except ValueError:
        val = 0

    if val == 1:
        return logging.INFO
    if val >= 2:
        return logging.DEBUG
    return logging.CRITICAL + 1


def setup_logging() -> logging.Logger:
    log_file = _validate_log_file_env()
    level = _log_level()

    kwargs = {"filename": log_file, "filemode": "a"} if log_file else {"stream": sys.stderr}
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
        **kwargs,
    )

    log = logging.getLogger("repo-trust")
    log.info("logging initialized: file=%s level=%s", log_file, logging.getLevelName(level))
    return log


# ---------------- Configuration ----------------
def _require_github_token() -> str:
    """
    Enforce presence of a plausibly valid token in $GITHUB_TOKEN.
    Server-side validity is checked separately, once, before scoring.
    """
    tok = os.environ.get("GITHUB_TOKEN", "").strip()
    if not tok:
        raise CredentialError("GITHUB_TOKEN not set")
    if not tok.startswith(TOKEN_PREFIXES):
        raise CredentialError("GITHUB_TOKEN appears invalid (unexpected format)")
    return tok


def _env_float(name: str, default: float) -> float:
    try:
        v = float(os.environ[name])
    except (KeyError, ValueError):
        return default
    return v if v > 0 else default


def _env_int(name: str, default: int) -> int:
    try:
        v = int(os.environ[name])
    except (KeyError, ValueError):
        return default
    return v if v > 0 else default


# ---------------- Entry ----------------
def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print(USAGE, file=sys.stderr)
        return 1

    try:
        log = setup_logging()
        urls = read_urls(args[0])
        token = _require_github_token()

        client = GHClient(token)
        client.validate_token()

        evaluator = MetricEval(
            init_metrics(),
            init_weights(),
            timeout=_env_float("REPO_TRUST_PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT),
            logger=logging.getLogger("repo-trust.metrics"),
        )
        driver = ScoreDriver(
            evaluator,
            client,
            workers=_env_int("REPO_TRUST_WORKERS", DEFAULT_WORKERS),
        )
        emitted = driver.run(urls)
    except FatalError as e:
        logging.getLogger("repo-trust").error("fatal: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    log.info("run complete: %d records", emitted)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
