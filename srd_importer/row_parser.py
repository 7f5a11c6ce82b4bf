"""
SRD Importer - 経路シートの行パーサー

責務:
  - スプレッドシート1行（文字列セルのリスト）を Route に変換する
  - 不正な行は Route を一切生成せず、対象の行・フィールドを示す例外を送出する
  - ファイルI/OやDB操作は一切行わない（疎結合）

列構成:
  0: ADEP or Entry / 1: SID / 2: 最低FL / 3: 最高FL / 4: 経路
  5: STAR / 6: ADES or Exit / 7: 備考（"Notes: 1-2-3"、省略可）
"""
import re
from typing import List, Optional

from errors import InvalidNumberError, MalformedRowError, MissingFieldError
from models import Route

ROUTE_FIELD_COUNT = 7
NOTES_PREFIX = "Notes: "
NOTES_SEPARATOR = "-"
UNKNOWN_LEVEL = "MC"
FEET_PER_FLIGHT_LEVEL = 100

_UINT_PATTERN = re.compile(r'[0-9]+')
# 保存先の列型（高度: INTEGER、ノートID: BIGINT）に収まる上限
MAX_ALTITUDE = 2 ** 31 - 1
MAX_FLIGHT_LEVEL = MAX_ALTITUDE // FEET_PER_FLIGHT_LEVEL
MAX_NOTE_ID = 2 ** 63 - 1


def parse_uint(
    token: str,
    row: List[str],
    field: Optional[str] = None,
    maximum: int = MAX_NOTE_ID,
) -> int:
    """
    符号なし整数として解釈する。
    int() は "+5" や "1_000" も受け付けてしまうため、ASCII数字のみを許可する。
    maximum を超える値も InvalidNumberError。
    """
    if not _UINT_PATTERN.fullmatch(token):
        raise InvalidNumberError(token, row, field)
    value = int(token)
    if value > maximum:
        raise InvalidNumberError(token, row, field)
    return value


# ─────────────────────────────────
# セル変換
# ─────────────────────────────────

def _required(row: List[str], index: int, field: str) -> str:
    value = row[index].strip()
    if not value:
        raise MissingFieldError(field, row)
    return value


def _optional(row: List[str], index: int) -> Optional[str]:
    return row[index].strip() or None


def _flight_level_to_altitude(row: List[str], index: int, field: str) -> Optional[int]:
    """FLは3桁の数値か "MC"。"MC" または空欄は高度不明（None）。"""
    value = row[index].strip()
    if value == UNKNOWN_LEVEL or not value:
        return None
    return parse_uint(value, row, field, MAX_FLIGHT_LEVEL) * FEET_PER_FLIGHT_LEVEL


def parse_note_ids(row: List[str]) -> List[int]:
    """
    8列目の "Notes: 123-456" からノートIDを取り出す。
    列がない・接頭辞が一致しない場合は空リスト（エラーではない）。
    """
    if len(row) <= ROUTE_FIELD_COUNT:
        return []

    remarks = row[ROUTE_FIELD_COUNT].strip()
    if not remarks.startswith(NOTES_PREFIX):
        return []

    note_ids: List[int] = []
    for piece in remarks[len(NOTES_PREFIX):].split(NOTES_SEPARATOR):
        piece = piece.strip()
        # 先頭・末尾・連続した区切り文字による空要素は読み飛ばす
        if not piece:
            continue
        note_ids.append(parse_uint(piece, row, "Notes"))
    return note_ids


# ═══════════════════════════════════════
# 行 → Route
# ═══════════════════════════════════════

def parse_route(row: List[str]) -> Route:
    """
    1行を Route に変換する。

    送出する例外:
      - MalformedRowError: 列数が7未満
      - MissingFieldError: 出発地/到着地が空
      - InvalidNumberError: FLまたはノートIDが数値でない
    """
    if len(row) < ROUTE_FIELD_COUNT:
        raise MalformedRowError(row, ROUTE_FIELD_COUNT)

    departure = _required(row, 0, "ADEP or Entry")
    sid = _optional(row, 1)
    minimum_level = _flight_level_to_altitude(row, 2, "minimum flight level")
    maximum_level = _flight_level_to_altitude(row, 3, "maximum flight level")
    route_segment = row[4].strip()
    star = _optional(row, 5)
    arrival = _required(row, 6, "ADES or Exit")
    note_ids = parse_note_ids(row)

    return Route(
        departure_airfield_or_entry_point=departure,
        standard_instrument_departure=sid,
        minimum_level=minimum_level,
        maximum_level=maximum_level,
        route_segment=route_segment,
        standard_terminal_arrival_route=star,
        arrival_airfield_or_exit_point=arrival,
        note_ids=tuple(note_ids),
    )
