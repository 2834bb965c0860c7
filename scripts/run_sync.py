#!/usr/bin/env python3
"""Binance → Notion 동기화 CLI (크론용).

Usage:
    uv run python scripts/run_sync.py                    # 잔고 + 거래 전체
    uv run python scripts/run_sync.py --mode balance     # 잔고 스냅샷만
    uv run python scripts/run_sync.py --mode trades --limit 100
    uv run python scripts/run_sync.py --dry-run          # Notion 쓰기 없이 매핑 결과만 출력
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from trade_mirror.domain.config import get_config
from trade_mirror.infra.binance import BinanceApiError, BinanceClient
from trade_mirror.infra.observability import setup_logging
from trade_mirror.infra.redis import SyncInProgressError, get_redis
from trade_mirror.services.sync import build_runner, classify_outcome, position_side, to_kst
from trade_mirror.services.sync.runner import MAX_INCOME_LIMIT


def _limit_arg(value: str) -> int:
    limit = int(value)
    if not 1 <= limit <= MAX_INCOME_LIMIT:
        raise argparse.ArgumentTypeError(f"1~{MAX_INCOME_LIMIT} 사이여야 함: {value}")
    return limit


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Binance 실현손익/잔고 → Notion 동기화")
    parser.add_argument(
        "--mode",
        choices=["all", "balance", "trades"],
        default="all",
        help="실행 범위 (기본: all)",
    )
    parser.add_argument(
        "--limit",
        type=_limit_arg,
        default=None,
        help="조회할 income 건수 (기본: BINANCE_INCOME_LIMIT)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Binance만 조회하고 매핑 결과 출력",
    )
    parser.add_argument(
        "--no-lock",
        action="store_true",
        help="Redis 실행 락 없이 실행",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="상세 로깅",
    )
    return parser.parse_args()


def print_dry_run(client: BinanceClient, limit: int) -> None:
    """income 조회 후 업서트 키/매핑 요약 출력."""
    balance = client.fetch_balance()
    events = client.fetch_income(limit)

    print(f"\n{'=' * 60}")
    print(f"잔고: {balance:,.4f} {get_config().binance.asset}")
    print(f"income {len(events)}건")
    print(f"{'=' * 60}")
    for e in events:
        print(
            f"  {e.unique_key:<28s} {to_kst(e.time):%Y-%m-%d %H:%M:%S} "
            f"{position_side(e.income):<5s} {classify_outcome(e.income):<4s} {e.income:>+14.4f}"
        )
    print(f"{'=' * 60}")


def main() -> None:
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")
    args = parse_args()

    config = get_config()
    setup_logging(
        "sync-cli",
        log_level="DEBUG" if args.verbose else config.log_level,
        json_output=False,
    )

    missing = [k for k, v in config.missing_required().items() if v]
    if missing:
        print(f"ERROR: 필수 환경변수 누락 — {', '.join(missing)}")
        sys.exit(2)

    if args.dry_run:
        with BinanceClient(config.binance) as client:
            try:
                print_dry_run(client, args.limit if args.limit is not None else config.binance.income_limit)
            except BinanceApiError as e:
                print(f"ERROR: Binance API 실패 — {e}")
                sys.exit(1)
        return

    if args.no_lock:
        config = config.model_copy(update={"sync": config.sync.model_copy(update={"lock_enabled": False})})
    redis_client = get_redis() if config.sync.lock_enabled else None

    runner = build_runner(config, redis_client)
    try:
        if args.mode == "balance":
            report = runner.run_balance()
        elif args.mode == "trades":
            report = runner.run_trades(limit=args.limit)
        else:
            report = runner.run(limit=args.limit)
    except SyncInProgressError as e:
        print(f"SKIP: {e}")
        sys.exit(0)
    except BinanceApiError as e:
        print(f"ERROR: Binance API 실패 — {e}")
        sys.exit(1)
    finally:
        runner.close()

    print(
        f"완료: 생성 {report.created} / 갱신 {report.updated} / 실패 {report.failed} "
        f"(잔고 스냅샷 {'O' if report.balance_written else 'X'})"
    )
    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
