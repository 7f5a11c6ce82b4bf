"""
SRD Importer - コマンドラインエントリポイント

サブコマンド:
  airac                      現在・次のAIRACサイクルを表示
  loaded                     取り込み済みサイクルを表示
  parse <filename>           SRDファイルをパースして件数・エラー件数を表示
  import <cycle> <filename>  SRDファイルをDBへ取り込む
  download                   最新サイクルのSRDをダウンロードして取り込む

処理の流れ（download）:
  プロセスロック → 対象サイクル決定 → ダウンロード（最新なら終了）→ 取り込み
  → 取り込み済みサイクルの記録
"""
import argparse
import asyncio
import logging
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import aiohttp
import asyncpg
from dotenv import load_dotenv

from airac import Airac, AiracCycle
from database import init_db
from db_config import create_pool, load_database_params
from downloader import SrdDownloader, download_url
from errors import SrdError, UpToDateError
from excel_source import open_workbook
from importer import SrdImport
from loaded_cycle import LoadedCycle
from models import SrdStats
from process_lock import ProcessLock
from repository import SrdRepository
from srd_file import SrdFile, parse_srd

logger = logging.getLogger("srd_importer")

DEFAULT_ENV_PATH = ".env"


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def log_stats(stats: SrdStats):
    logger.info(f"経路 {stats.route_count} 件を処理 (エラー {stats.route_error_count} 件)")
    logger.info(f"ノート {stats.note_count} 件を処理 (エラー {stats.note_error_count} 件)")


# ═══════════════════════════════════════
# 各サブコマンド
# ═══════════════════════════════════════

def do_airac(args) -> int:
    airac = Airac()
    current = airac.current_cycle()
    logger.info(f"現在のAIRACサイクル: {current}")
    logger.info(f"次のAIRACサイクル: {airac.next_cycle_from(current)}")
    return 0


def describe_loaded_cycle(loaded: LoadedCycle, airac: Airac, now=None) -> str:
    """取り込み済みサイクルと、それが now 時点で有効かどうか"""
    if not loaded.ident:
        return f"取り込み済みのAIRACサイクルはありません ({loaded.path})"

    cycle = airac.cycle_from_ident(loaded.ident)
    moment = now or datetime.now(timezone.utc)
    state = "有効" if cycle.contains(moment) else "現在のサイクルではありません"
    return f"取り込み済みのAIRACサイクル: {cycle} [{state}]"


def do_loaded(args) -> int:
    logger.info(describe_loaded_cycle(LoadedCycle(args.dir), Airac()))
    return 0


def do_parse(args) -> int:
    path = Path(args.filename).resolve()
    with open_workbook(path) as workbook:
        logger.info(f"SRDファイルをパース中: {path}")
        log_stats(parse_srd(SrdFile(workbook)))
    return 0


def do_import(args) -> int:
    with ProcessLock():
        cycle = Airac().cycle_from_ident(args.cycle)
        asyncio.run(import_process(Path(args.filename), cycle, args.env_path, args.dir))
    return 0


def do_download(args) -> int:
    with ProcessLock():
        airac = Airac()
        cycle = airac.cycle_from_ident(args.cycle) if args.cycle else airac.current_cycle()
        loaded = LoadedCycle(args.dir)
        downloader = SrdDownloader(
            cycle, loaded, args.dir, args.url or download_url(cycle),
        )

        async def _run():
            await downloader.download(force=args.force)
            await import_process(downloader.latest_file_location, cycle, args.env_path, args.dir)

        try:
            asyncio.run(_run())
        except UpToDateError:
            logger.info("SRDファイルは最新です（強制する場合は --force）")
    return 0


async def import_process(filename: Path, cycle: AiracCycle, env_path: str, file_dir):
    """import / download 共通の取り込み処理"""
    path = filename.resolve()
    with open_workbook(path) as workbook:
        srd_file = SrdFile(workbook)
        logger.info(f"SRDファイル {path} をサイクル {cycle.ident} として取り込み中")

        if not load_dotenv(env_path, override=True):
            logger.warning(f"環境ファイルを読み込めません: {env_path}（既存の環境変数を使用）")
        params = load_database_params()

        pool = await create_pool(params)
        try:
            await init_db(pool)
            await SrdImport(srd_file, SrdRepository(pool)).run()
        finally:
            await pool.close()

        logger.info(f"サイクル {cycle.ident} のSRDを取り込みました")
        LoadedCycle(file_dir).set(cycle)
        log_stats(srd_file.stats())


# ─────────────────────────────────
# CLI
# ─────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="UK SRD 取り込みツール")
    parser.add_argument("-v", "--verbose", action="store_true", help="デバッグログを出力")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_dir(p):
        p.add_argument(
            "--dir",
            default=tempfile.gettempdir(),
            help="取り込み済みサイクル・ダウンロードファイルの保存先",
        )

    def add_env(p):
        p.add_argument(
            "-e", "--env-path",
            default=DEFAULT_ENV_PATH,
            help=f".env ファイルのパス (デフォルト: {DEFAULT_ENV_PATH})",
        )

    p = sub.add_parser("airac", help="現在のAIRACサイクルを表示")
    p.set_defaults(handler=do_airac)

    p = sub.add_parser("loaded", help="取り込み済みのAIRACサイクルを表示")
    add_dir(p)
    p.set_defaults(handler=do_loaded)

    p = sub.add_parser("parse", help="SRDファイルをパースする")
    p.add_argument("filename", help="SRDファイル (.xlsx)")
    p.set_defaults(handler=do_parse)

    p = sub.add_parser("import", help="SRDファイルを取り込む")
    p.add_argument("cycle", help="取り込むAIRACサイクルの識別子 (例: 2413)")
    p.add_argument("filename", help="SRDファイル (.xlsx)")
    add_env(p)
    add_dir(p)
    p.set_defaults(handler=do_import)

    p = sub.add_parser("download", help="SRDファイルをダウンロードして取り込む")
    p.add_argument("-f", "--force", action="store_true", help="最新でもダウンロードする")
    p.add_argument("-c", "--cycle", default=None, help="ダウンロードするAIRACサイクルの識別子")
    p.add_argument("-u", "--url", default=None, help="ダウンロードURLを上書き")
    add_env(p)
    add_dir(p)
    p.set_defaults(handler=do_download)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        return args.handler(args)
    except SrdError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    except asyncpg.PostgresError as e:
        logger.error(f"DBエラー: {e}")
        return 1
    except (OSError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"通信・ファイル操作エラー ({e.__class__.__name__}): {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
