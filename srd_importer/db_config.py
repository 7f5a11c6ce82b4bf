"""
SRD Importer - データベース接続設定

責務:
  - DB接続情報の一元管理
  - 環境変数からの設定読み込み（.env は main 側で読み込み済みの前提）
  - コネクションプールの生成
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import asyncpg

from errors import ConfigError

# 取り込みは1接続で直列に実行する
DEFAULT_POOL_MIN = "1"
DEFAULT_POOL_MAX = "2"


@dataclass(frozen=True)
class DatabaseParams:
    host: str
    port: int
    username: str
    password: str
    database: str
    pool_min_size: int = 1
    pool_max_size: int = 2


def _require(env: Mapping[str, str], key: str) -> str:
    value = env.get(key, "")
    if not value:
        raise ConfigError(f"missing {key}")
    return value


def _int(env: Mapping[str, str], key: str, default: str) -> int:
    raw = env.get(key, "") or default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"invalid {key}: {raw!r}")


def load_database_params(env: Optional[Mapping[str, str]] = None) -> DatabaseParams:
    """
    DB_HOST / DB_PORT / DB_USERNAME / DB_PASSWORD / DB_DATABASE は必須。
    DB_POOL_MIN / DB_POOL_MAX は任意。
    """
    env = os.environ if env is None else env

    port = _require(env, "DB_PORT")
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"invalid DB_PORT: {port!r}")

    return DatabaseParams(
        host=_require(env, "DB_HOST"),
        port=port_number,
        username=_require(env, "DB_USERNAME"),
        password=_require(env, "DB_PASSWORD"),
        database=_require(env, "DB_DATABASE"),
        pool_min_size=_int(env, "DB_POOL_MIN", DEFAULT_POOL_MIN),
        pool_max_size=_int(env, "DB_POOL_MAX", DEFAULT_POOL_MAX),
    )


async def create_pool(params: DatabaseParams) -> asyncpg.Pool:
    """コネクションプールを生成して返す。"""
    return await asyncpg.create_pool(
        host=params.host,
        port=params.port,
        user=params.username,
        password=params.password,
        database=params.database,
        min_size=params.pool_min_size,
        max_size=params.pool_max_size,
    )
