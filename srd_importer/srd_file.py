"""
SRD Importer - SRDドキュメント

責務:
  - 表形式ソース（Excelワークブック等）の経路シート・ノートシートを
    (レコード, エラー) ペアの遅延シーケンスとして公開する
  - 走査中の件数・エラー件数を SrdStats に記録する

利用上の約束:
  - 1インスタンスにつき同時に走査するのは1本だけ（集計はロックしていない）
  - routes() / notes() を呼び直すと、そのシートを先頭から読み直し、対応する集計を0に戻す
"""
import logging
from dataclasses import replace
from typing import Iterable, Iterator, List, Optional, Protocol, Tuple

from errors import SheetNotFoundError, SrdError
from excel_source import SHEET_NOTES, SHEET_ROUTES
from models import Route, SrdStats
from note_assembler import NoteResult, assemble_notes
from row_parser import parse_route

logger = logging.getLogger(__name__)

RouteResult = Tuple[Optional[Route], Optional[SrdError]]


class TabularSource(Protocol):
    def has_sheet(self, sheet: int) -> bool: ...

    def sheet_rows(self, sheet: int) -> Iterable[List[str]]: ...


class SrdFile:
    def __init__(self, source: TabularSource):
        if not source.has_sheet(SHEET_ROUTES):
            raise SheetNotFoundError("Routes", SHEET_ROUTES)
        if not source.has_sheet(SHEET_NOTES):
            raise SheetNotFoundError("Notes", SHEET_NOTES)
        self._source = source
        self._stats = SrdStats()

    def routes(self) -> Iterator[RouteResult]:
        """経路シートの各データ行（先頭のヘッダ行は無条件に読み飛ばす）"""
        self._stats.reset_routes()
        return self._iter_routes()

    def notes(self) -> Iterator[NoteResult]:
        """ノートシートの各ブロック"""
        self._stats.reset_notes()
        return self._iter_notes()

    def stats(self) -> SrdStats:
        return replace(self._stats)

    # ─────────────────────────────────
    # 内部: 遅延イテレータ
    # ─────────────────────────────────
    def _iter_routes(self) -> Iterator[RouteResult]:
        rows = iter(self._source.sheet_rows(SHEET_ROUTES))
        next(rows, None)

        for row in rows:
            try:
                route = parse_route(row)
            except SrdError as e:
                self._stats.route_error_count += 1
                logger.debug(f"経路パースエラー: {e}")
                yield None, e
                continue
            self._stats.route_count += 1
            yield route, None

    def _iter_notes(self) -> Iterator[NoteResult]:
        for note, error in assemble_notes(self._source.sheet_rows(SHEET_NOTES)):
            if error is not None:
                self._stats.note_error_count += 1
                logger.debug(f"ノートパースエラー: {error}")
            else:
                self._stats.note_count += 1
            yield note, error


def parse_srd(srd_file: SrdFile) -> SrdStats:
    """経路・ノートを最後まで走査して集計を返す（取り込みなしの検証用）"""
    for _ in srd_file.routes():
        pass
    for _ in srd_file.notes():
        pass
    return srd_file.stats()
