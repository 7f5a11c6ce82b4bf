"""
SRD Importer - 取り込み処理

責務:
  - SRDドキュメントのノート・経路をDBへ全件入れ替えで保存する
  - 経路が参照するノートIDから、ノート ↔ 経路 の関連を作る

手順（全体を1トランザクションで実行し、DBエラー時は全てロールバック）:
  1. 既存の経路・ノートを削除
  2. ノートを INSERT_BATCH_SIZE 件ずつ挿入
  3. 経路を INSERT_BATCH_SIZE 件ずつ挿入し、採番IDを控える
  4. 関連を INSERT_BATCH_SIZE 件ずつ挿入

不正な行・ノートはログに出してスキップする（取り込み自体は止めない）。
同じIDのノートが複数あれば最初のものだけを採用する。
定義されていないノートIDへの参照は黙って捨てる。
"""
import logging
from typing import Dict, List

from models import Note, Route
from repository import NoteRouteLink, SrdRepository

logger = logging.getLogger(__name__)

INSERT_BATCH_SIZE = 250


class SrdImport:
    def __init__(self, srd_file, repository: SrdRepository):
        self._file = srd_file
        self._repo = repository
        # ノートID → そのノートを参照する経路IDのリスト
        self._route_notes: Dict[int, List[int]] = {}

    async def run(self):
        self._route_notes = {}
        async with self._repo.transaction() as conn:
            await self._repo.delete_all_routes(conn)
            await self._repo.delete_all_notes(conn)
            await self._insert_notes(conn)
            await self._insert_routes(conn)
            await self._insert_route_note_links(conn)

    async def _insert_notes(self, conn):
        batch: List[Note] = []
        for note, error in self._file.notes():
            if error is not None:
                logger.warning(f"不正なノートを検出: {error}")
                continue
            if note.id in self._route_notes:
                logger.warning(f"重複したノートIDをスキップ: {note.id}")
                continue

            batch.append(note)
            self._route_notes[note.id] = []

            if len(batch) >= INSERT_BATCH_SIZE:
                await self._repo.insert_note_batch(conn, batch)
                batch = []

        if batch:
            await self._repo.insert_note_batch(conn, batch)

    async def _insert_routes(self, conn):
        batch: List[Route] = []
        for route, error in self._file.routes():
            if error is not None:
                logger.warning(f"不正な経路を検出: {error}")
                continue

            batch.append(route)
            if len(batch) >= INSERT_BATCH_SIZE:
                await self._insert_route_batch(conn, batch)
                batch = []

        if batch:
            await self._insert_route_batch(conn, batch)

    async def _insert_route_batch(self, conn, batch: List[Route]):
        route_ids = await self._repo.insert_route_batch(conn, batch)
        for route_id, route in zip(route_ids, batch):
            for note_id in route.note_ids:
                # 未定義のノートへの参照はスキップ
                if note_id not in self._route_notes:
                    continue
                self._route_notes[note_id].append(route_id)

    async def _insert_route_note_links(self, conn):
        batch: List[NoteRouteLink] = []
        for note_id, route_ids in self._route_notes.items():
            for route_id in route_ids:
                batch.append((note_id, route_id))
                if len(batch) >= INSERT_BATCH_SIZE:
                    await self._repo.insert_note_route_link_batch(conn, batch)
                    batch = []

        if batch:
            await self._repo.insert_note_route_link_batch(conn, batch)
