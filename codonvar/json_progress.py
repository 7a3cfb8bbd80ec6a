import sys
import time
import json
import click  # type: ignore

from typing import Dict, Any


def echo_json(payload: Dict[str, Any], err: bool = False) -> None:
    click.echo(json.dumps(payload), err=err)
    (sys.stderr if err else sys.stdout).flush()


def now_ms() -> int:
    return int(time.time() * 1000)


class JsonProgress:
    """Emit progress of a long-running operation as JSON lines

    A `working` record is emitted at most once every `ts_interval`
    milliseconds; `close()` emits the final `done` record.
    """
    description: str
    total: int
    count: int
    prev_ts: int
    ts_interval: int
    op: str
    extras: Dict[str, Any]

    def __init__(
        self,
        description: str,
        total: int,
        ts_interval: int = 1000,
        op: str = 'progress',
        **extras: Any
    ):
        self.description = description
        self.total = total
        self.count = 0
        self.ts_interval = ts_interval
        self.prev_ts = now_ms()
        self.op = op
        self.extras = extras

    def _emit(self, status: str, ts: int) -> None:
        echo_json({
            'op': self.op,
            'status': status,
            'description': self.description,
            'count': self.count,
            'total': self.total,
            'ts': ts,
            **self.extras
        })

    def update(self, count: int) -> None:
        self.count += count
        ts: int = now_ms()
        if ts - self.prev_ts >= self.ts_interval:
            self.prev_ts = ts
            self._emit('working', ts)

    def close(self) -> None:
        self._emit('done', now_ms())


def echo_warning(message: str, log_format: str = 'text', **extras: Any) -> None:
    if log_format == 'json':
        echo_json({
            'op': 'warning',
            'message': message,
            'ts': now_ms(),
            **extras
        }, err=True)
    else:
        click.echo('Warning: {}'.format(message), err=True)
