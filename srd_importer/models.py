"""
SRD Importer - データモデル定義

各Entityの責務:
  - Route: 経路シートの1行（出発地/入域点 → 到着地/出域点）
  - Note: ノートシートの1ブロック（ID + 複数行の本文）
  - SrdStats: パース件数・エラー件数の集計
"""
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Route:
    """経路（パーサー経由でのみ生成される不変値）"""
    departure_airfield_or_entry_point: str
    standard_instrument_departure: Optional[str]
    minimum_level: Optional[int]     # フィート（フライトレベル × 100）
    maximum_level: Optional[int]
    route_segment: str
    standard_terminal_arrival_route: Optional[str]
    arrival_airfield_or_exit_point: str
    note_ids: Tuple[int, ...] = ()   # 参照順を保持、重複あり

    def __post_init__(self):
        if not self.departure_airfield_or_entry_point:
            raise ValueError("departure_airfield_or_entry_point must not be empty")
        if not self.arrival_airfield_or_exit_point:
            raise ValueError("arrival_airfield_or_exit_point must not be empty")
        for level in (self.minimum_level, self.maximum_level):
            if level is not None and level < 0:
                raise ValueError(f"flight level must not be negative: {level}")
        # list で渡されても不変に揃える
        object.__setattr__(self, "note_ids", tuple(self.note_ids))

    def to_dict(self) -> dict:
        return {
            "departure_airfield_or_entry_point": self.departure_airfield_or_entry_point,
            "standard_instrument_departure": self.standard_instrument_departure,
            "minimum_flight_level": self.minimum_level,
            "maximum_flight_level": self.maximum_level,
            "route_segment": self.route_segment,
            "standard_terminal_arrival_route": self.standard_terminal_arrival_route,
            "arrival_airfield_or_exit_point": self.arrival_airfield_or_exit_point,
            "note_ids": list(self.note_ids),
        }


@dataclass(frozen=True)
class Note:
    """ノート（ヘッダ "Note <n>" に続く本文行を改行で連結したもの）"""
    id: int
    text: str

    def __post_init__(self):
        if self.id < 0:
            raise ValueError(f"note id must not be negative: {self.id}")

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text}


@dataclass
class SrdStats:
    """直近（または進行中）の走査の集計"""
    route_count: int = 0
    route_error_count: int = 0
    note_count: int = 0
    note_error_count: int = 0

    def reset_routes(self):
        self.route_count = 0
        self.route_error_count = 0

    def reset_notes(self):
        self.note_count = 0
        self.note_error_count = 0
