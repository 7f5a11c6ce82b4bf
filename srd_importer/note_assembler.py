"""
SRD Importer - ノートシートの組み立て

責務:
  - ノートシートの行を1回だけ走査し、複数行のブロックを Note にまとめる
  - ブロックの区切り: 次の "Note <n>" ヘッダ行 / "Scenario S<n>" 行 / シート末尾

行の分類（この優先順で判定）:
  1. 空行・先頭セルが空 → 無視
  2. "Note <数字>"       → ヘッダ行
  3. "Scenario S<数字>"  → シナリオ行（ノートの外に出る）
  4. それ以外            → 本文行（ノート内のときだけ採用）
"""
import re
from typing import Iterable, Iterator, List, Optional, Tuple

from errors import InvalidNoteIdError, InvalidNumberError, MissingNoteTextError, SrdError
from models import Note
from row_parser import parse_uint

NOTE_HEADER_PATTERN = re.compile(r'Note ([0-9]+)')
SCENARIO_PATTERN = re.compile(r'Scenario S[0-9]+')

NoteResult = Tuple[Optional[Note], Optional[SrdError]]


def _first_cell(row: List[str]) -> str:
    return row[0].strip() if row else ""


def is_note_header(row: List[str]) -> bool:
    return bool(NOTE_HEADER_PATTERN.fullmatch(_first_cell(row)))


def is_scenario(row: List[str]) -> bool:
    return bool(SCENARIO_PATTERN.match(_first_cell(row)))


def map_note(rows: List[List[str]]) -> Note:
    """
    1ブロック分の行から Note を生成する。
    先頭行はヘッダ "Note <n>"、2行目以降の先頭セルが本文。
    """
    header = _first_cell(rows[0])
    match = NOTE_HEADER_PATTERN.fullmatch(header)
    if not match:
        raise InvalidNoteIdError(header)

    try:
        note_id = parse_uint(match.group(1), rows[0], "Note")
    except InvalidNumberError:
        raise InvalidNoteIdError(header)

    if len(rows) < 2:
        raise MissingNoteTextError(rows)

    text = "".join(row[0] + "\n" for row in rows[1:])
    return Note(id=note_id, text=text.strip())


def _finalize(rows: List[List[str]]) -> NoteResult:
    try:
        return map_note(rows), None
    except SrdError as e:
        return None, e


def assemble_notes(rows: Iterable[List[str]]) -> Iterator[NoteResult]:
    """
    行のシーケンスから (Note, None) または (None, エラー) を1ブロックずつ生成する。
    消費側が途中で止めれば、それ以降の行は読まない。
    """
    accumulated: List[List[str]] = []
    in_note = False

    for row in rows:
        if not _first_cell(row):
            continue

        if is_note_header(row):
            # 前のノートが溜まっていれば確定させてから新しいブロックを開始
            if accumulated:
                yield _finalize(accumulated)
            accumulated = [row]
            in_note = True
            continue

        if is_scenario(row):
            if accumulated:
                yield _finalize(accumulated)
                accumulated = []
            in_note = False
            continue

        if in_note:
            accumulated.append(row)

    if accumulated:
        yield _finalize(accumulated)
