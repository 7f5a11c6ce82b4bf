"""
SRD Importer - データベース初期化・テーブル定義

責務:
  - PostgreSQLテーブルの生成（存在しない場合のみ）
"""
import asyncpg


async def init_db(pool: asyncpg.Pool):
    """データベースのテーブルを初期化する。"""
    async with pool.acquire() as conn:
        async with conn.transaction():
            # ══════════════════════════════════════
            # 1. ノート（IDはSRD上の番号をそのまま使う）
            # ══════════════════════════════════════
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS srd_notes (
                    id          BIGINT PRIMARY KEY,
                    note_text   TEXT NOT NULL,
                    created_at  TIMESTAMPTZ DEFAULT NOW()
                )
            ''')

            # ══════════════════════════════════════
            # 2. 経路（高度はフィート、不明ならNULL）
            # ══════════════════════════════════════
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS srd_routes (
                    id              BIGSERIAL PRIMARY KEY,
                    origin          TEXT NOT NULL,
                    destination     TEXT NOT NULL,
                    minimum_level   INTEGER,
                    maximum_level   INTEGER,
                    route_segment   TEXT NOT NULL DEFAULT '',
                    sid             TEXT,
                    star            TEXT,
                    created_at      TIMESTAMPTZ DEFAULT NOW()
                )
            ''')

            # ══════════════════════════════════════
            # 3. ノート ↔ 経路 の関連
            # ══════════════════════════════════════
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS srd_note_srd_route (
                    srd_note_id     BIGINT NOT NULL
                        REFERENCES srd_notes(id) ON DELETE CASCADE,
                    srd_route_id    BIGINT NOT NULL
                        REFERENCES srd_routes(id) ON DELETE CASCADE
                )
            ''')

            # ══════════════════════════════════════
            # 4. インデックス（検索高速化）
            # ══════════════════════════════════════
            await conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_routes_origin_destination
                    ON srd_routes(origin, destination)
            ''')
            await conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_note_route_route
                    ON srd_note_srd_route(srd_route_id)
            ''')
