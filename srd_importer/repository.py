"""
SRD Importer - リポジトリ層

責務:
  - SRDテーブルに対する削除・一括挿入の一元管理
  - トランザクションの提供（取り込み全体を1トランザクションで行うため）

設計方針:
  - asyncpg コネクションプールから接続を取得して操作する
  - 各操作は呼び出し側から渡された接続（= 同一トランザクション）上で実行する
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Sequence, Tuple

import asyncpg

from models import Note, Route

NoteRouteLink = Tuple[int, int]   # (srd_note_id, srd_route_id)


class SrdRepository:
    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        接続を1本借りてトランザクションを開始する。
        ブロック内で例外が出ればロールバック、正常終了ならコミット。
        """
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    # ─────────────────────────────────
    # 全削除
    # ─────────────────────────────────
    async def delete_all_routes(self, conn: asyncpg.Connection):
        """経路を全削除する。関連はON DELETE CASCADEで連鎖削除される。"""
        await conn.execute('DELETE FROM srd_routes')

    async def delete_all_notes(self, conn: asyncpg.Connection):
        await conn.execute('DELETE FROM srd_notes')

    # ─────────────────────────────────
    # 一括挿入
    # ─────────────────────────────────
    async def insert_note_batch(self, conn: asyncpg.Connection, notes: Sequence[Note]):
        await conn.executemany(
            'INSERT INTO srd_notes (id, note_text) VALUES ($1, $2)',
            [(n.id, n.text) for n in notes],
        )

    async def insert_route_batch(
        self, conn: asyncpg.Connection, routes: Sequence[Route]
    ) -> List[int]:
        """
        経路を挿入し、採番されたIDを入力と同じ順で返す。
        ノートとの関連付けに使うため、1件ずつ RETURNING で受け取る。
        """
        route_ids: List[int] = []
        for r in routes:
            route_id = await conn.fetchval(
                '''
                INSERT INTO srd_routes (
                    origin, destination, minimum_level, maximum_level,
                    route_segment, sid, star
                ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING id
                ''',
                r.departure_airfield_or_entry_point,
                r.arrival_airfield_or_exit_point,
                r.minimum_level,
                r.maximum_level,
                r.route_segment,
                r.standard_instrument_departure,
                r.standard_terminal_arrival_route,
            )
            route_ids.append(route_id)
        return route_ids

    async def insert_note_route_link_batch(
        self, conn: asyncpg.Connection, links: Sequence[NoteRouteLink]
    ):
        await conn.executemany(
            'INSERT INTO srd_note_srd_route (srd_note_id, srd_route_id) VALUES ($1, $2)',
            list(links),
        )
