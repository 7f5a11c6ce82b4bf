"""
SRD Importer - AIRACサイクル計算

責務:
  - 28日周期のAIRACサイクル境界の算出（基準日 2021-01-28 からの日数の剰余）
  - サイクル識別子（YYNN: 年下2桁 + 年内通番）との相互変換

設計方針:
  - 日付計算はすべてUTCの日単位。時刻成分は計算前に切り捨てる
  - 現在時刻は注入可能な clock から取得する（テストで固定できるように）
  - 年内最初のサイクルは「前年12/31より後の最初の境界」（1/1〜1/28 のいずれか）
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

from errors import InvalidAiracIdentError

AIRAC_INTERVAL_DAYS = 28
AIRAC_INTERVAL = timedelta(days=AIRAC_INTERVAL_DAYS)
BASE_AIRAC_DATE = date(2021, 1, 28)
AIRAC_IDENT_PATTERN = re.compile(r'([0-9]{2})([0-9]{2})')
MAX_CYCLES_PER_YEAR = 13

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_day(value) -> date:
    """datetime / date をUTCの日付に切り捨てる。naiveなdatetimeはUTCとみなす。"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def format_airac_ident(cycle_number: int, year: int) -> str:
    """年下2桁 + ゼロ埋め2桁の通番。例: 2024年の第1サイクル → "2401" """
    return f"{year % 100:02d}{cycle_number:02d}"


@dataclass(frozen=True)
class AiracCycle:
    """1サイクル分の有効期間。end は排他的（start + 28日）。"""
    ident: str
    start: datetime
    end: datetime

    def contains(self, moment) -> bool:
        day = _midnight(_to_day(moment))
        return self.start <= day < self.end

    def __str__(self) -> str:
        return (
            f"{self.ident} ({self.start:%Y-%m-%d} - {self.end:%Y-%m-%d})"
        )


class Airac:
    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or _utc_now

    # ─────────────────────────────────
    # 公開API
    # ─────────────────────────────────
    def current_cycle(self, now=None) -> AiracCycle:
        """now（省略時は clock の現在時刻）を含むサイクル"""
        return self._cycle_starting(self._previous_boundary(self._today(now)))

    def next_cycle(self, now=None) -> AiracCycle:
        """現在のサイクルの次のサイクル"""
        return self._cycle_starting(self._next_boundary(self._today(now)))

    def next_cycle_from(self, cycle: AiracCycle) -> AiracCycle:
        """指定サイクルの次のサイクル（時計に依存しない）"""
        return self._cycle_starting(self._next_boundary(_to_day(cycle.start)))

    def cycle_from_ident(self, ident: str) -> AiracCycle:
        """
        識別子 "YYNN" からサイクルを復元する。
        形式不正・通番が 1〜13 の範囲外なら InvalidAiracIdentError。
        """
        match = AIRAC_IDENT_PATTERN.fullmatch(ident or "")
        if not match:
            raise InvalidAiracIdentError(ident)

        cycle_number = int(match.group(2))
        if cycle_number < 1 or cycle_number > MAX_CYCLES_PER_YEAR:
            raise InvalidAiracIdentError(ident)

        year = 2000 + int(match.group(1))
        start = self._first_boundary_of_year(year) + AIRAC_INTERVAL * (cycle_number - 1)
        return AiracCycle(
            ident=format_airac_ident(cycle_number, year),
            start=_midnight(start),
            end=_midnight(start + AIRAC_INTERVAL),
        )

    def ident_from_start_date(self, start) -> str:
        """
        開始日から識別子を求める。
        開始日がその年の最初の境界より前なら、前年の第13サイクルに属する。
        """
        day = _to_day(start)
        first = self._first_boundary_of_year(day.year)
        if day < first:
            return format_airac_ident(MAX_CYCLES_PER_YEAR, day.year - 1)

        cycle_number = (day - first).days // AIRAC_INTERVAL_DAYS + 1
        return format_airac_ident(cycle_number, day.year)

    # ─────────────────────────────────
    # 境界計算
    # ─────────────────────────────────
    def _today(self, now=None) -> date:
        return _to_day(now if now is not None else self._clock())

    @staticmethod
    def _days_into_cycle(day: date) -> int:
        # Pythonの剰余は常に非負なので、基準日より前の日付でも正しく動く
        return (day - BASE_AIRAC_DATE).days % AIRAC_INTERVAL_DAYS

    def _previous_boundary(self, day: date) -> date:
        """day 以前で最も近い境界（day 自身が境界ならそのまま）"""
        return day - timedelta(days=self._days_into_cycle(day))

    def _next_boundary(self, day: date) -> date:
        """day より後で最も近い境界"""
        return day + timedelta(days=AIRAC_INTERVAL_DAYS - self._days_into_cycle(day))

    def _first_boundary_of_year(self, year: int) -> date:
        return self._next_boundary(date(year - 1, 12, 31))

    def _cycle_starting(self, start: date) -> AiracCycle:
        return AiracCycle(
            ident=self.ident_from_start_date(start),
            start=_midnight(start),
            end=_midnight(start + AIRAC_INTERVAL),
        )
