"""Run one edufeed command and record its outcome as a traced log event."""

from __future__ import annotations

import json
import logging
import os
import socket
import sys
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from edufeed.aggregator.cli import main as cli_main

LOGGER = logging.getLogger("edufeed.run")


@dataclass(frozen=True, slots=True)
class RunContext:
    """Identity of one command invocation, attached to every outcome event."""

    trace_id: str
    host: str
    command: tuple[str, ...]
    started_ns: int

    @property
    def started_at(self) -> str:
        moment = datetime.fromtimestamp(self.started_ns / 1_000_000_000, tz=timezone.utc)
        return moment.isoformat().replace("+00:00", "Z")

    def fields(self, **extra: Any) -> dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "host": self.host,
            "command": " ".join(self.command),
            "started_at": self.started_at,
            **extra,
        }


def _context_for(argv: Sequence[str]) -> RunContext:
    return RunContext(
        trace_id=os.getenv("EDUFEED_TRACE_ID") or uuid.uuid4().hex,
        host=os.getenv("EDUFEED_INSTANCE_ID") or socket.gethostname(),
        command=tuple(argv),
        started_ns=time.time_ns(),
    )


def _emit(level: int, event: str, context: RunContext, **fields: Any) -> None:
    """Log ``event`` with the run fields; the JSON file handler merges them as keys."""
    payload = context.fields(**fields)
    LOGGER.log(
        level,
        "%s %s",
        event,
        json.dumps(payload, default=str, separators=(",", ":")),
        extra={"event": event, "extra_fields": payload},
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    context = _context_for(args)
    clock = time.perf_counter_ns()
    try:
        exit_code = cli_main(args)
    except KeyboardInterrupt:
        _emit(logging.WARNING, "edufeed.interrupted", context)
        return 130
    except Exception as exc:
        _emit(
            logging.CRITICAL,
            "edufeed.run_failed",
            context,
            error_type=type(exc).__name__,
            error_message=str(exc),
        )
        raise
    elapsed_ms = (time.perf_counter_ns() - clock) / 1_000_000
    _emit(logging.INFO, "edufeed.run_completed", context, exit_code=exit_code, duration_ms=round(elapsed_ms, 2))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
