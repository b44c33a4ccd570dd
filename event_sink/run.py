# -----------------------------------------------------------------------------
# 파일명 : event_sink/run.py
# 목적   : 파일/stdin의 NDJSON 이벤트를 배치로 묶어 sink로 재전송하는 CLI
# -----------------------------------------------------------------------------

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import IO, Any, Dict, Iterator, List, Optional, Sequence

import orjson

from .errors import (
    ConfigurationError,
    InvalidEventError,
    ProvisioningError,
    RetryableExportError,
)
from .logger import get_logger, set_level
from .sink import EventExportSink

_logger = get_logger("event_sink.run")

EXIT_OK = 0
EXIT_DATAERR = 65
EXIT_TEMPFAIL = 75
EXIT_CONFIG = 78


def read_events(stream: IO[bytes]) -> Iterator[Dict[str, Any]]:
    """NDJSON 스트림에서 이벤트를 하나씩 읽는다. 빈 줄은 건너뛴다."""
    for lineno, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            record = orjson.loads(line)
        except orjson.JSONDecodeError as exc:
            raise InvalidEventError(f"line {lineno} is not valid JSON: {exc}") from exc
        if not isinstance(record, dict):
            raise InvalidEventError(f"line {lineno} is not a JSON object")
        yield record


def iter_batches(
    events: Iterator[Dict[str, Any]],
    batch_size: int,
) -> Iterator[List[Dict[str, Any]]]:
    """이벤트를 batch_size 단위로 묶는다."""
    batch_size = max(int(batch_size), 1)
    batch: List[Dict[str, Any]] = []
    for event in events:
        batch.append(event)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


async def replay(sink: EventExportSink, stream: IO[bytes], batch_size: int) -> int:
    """스트림의 배치를 순서대로 export하고 보낸 이벤트 수를 반환한다."""
    total = 0
    for batch in iter_batches(read_events(stream), batch_size):
        await sink.export_events(batch)
        total += len(batch)
    return total


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="event-sink",
        description="Export newline-delimited JSON events to the configured Kafka topic.",
    )
    parser.add_argument(
        "--input",
        "-i",
        default="-",
        help="NDJSON file to read (default: stdin)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="events per export call (default: EXPORT_BATCH_SIZE)",
    )
    parser.add_argument("--log-level", default=None, help="override EXPORT_LOG_LEVEL")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI 진입점. 종료 코드는 sysexits 규약을 따른다."""
    args = build_parser().parse_args(argv)

    try:
        sink = EventExportSink.from_env()
        if args.log_level:
            set_level(args.log_level)
        sink.setup()
    except (ConfigurationError, ProvisioningError) as exc:
        _logger.error("startup failed: %s", exc)
        return EXIT_CONFIG

    batch_size = args.batch_size or sink.settings.batch_size
    try:
        if args.input == "-":
            total = asyncio.run(replay(sink, sys.stdin.buffer, batch_size))
        else:
            with open(args.input, "rb") as stream:
                total = asyncio.run(replay(sink, stream, batch_size))
    except RetryableExportError as exc:
        _logger.error("export failed, retry later: %s", exc)
        return EXIT_TEMPFAIL
    except InvalidEventError as exc:
        _logger.error("invalid input: %s", exc)
        return EXIT_DATAERR
    except OSError as exc:
        _logger.error("cannot read input %s: %s", args.input, exc)
        return EXIT_DATAERR
    finally:
        sink.close()

    _logger.info("replay finished events=%d", total)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
