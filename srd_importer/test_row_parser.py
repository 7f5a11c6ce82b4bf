"""
経路行パーサーテスト

検証項目:
  1. 正常な行の値検証
  2. 飛行高度（MC・空欄・数値・不正値）
  3. ノートID（区切り・空要素・不正値）
  4. 異常系（列不足・必須セル空欄）
"""
import sys
sys.path.insert(0, '.')

from dataclasses import FrozenInstanceError

from errors import InvalidNumberError, MalformedRowError, MissingFieldError
from models import Route
from row_parser import MAX_FLIGHT_LEVEL, MAX_NOTE_ID, parse_note_ids, parse_route, parse_uint

passed = 0
failed = 0


def run_test(name, func):
    global passed, failed
    try:
        func()
        passed += 1
        print(f"  ✅ {name}")
    except AssertionError as e:
        failed += 1
        print(f"  ❌ {name}: {e}")
    except Exception as e:
        failed += 1
        print(f"  ❌ {name}: 例外発生 {e.__class__.__name__}: {e}")


def expect_error(error_class, row):
    try:
        parse_route(row)
    except error_class as e:
        return e
    assert False, f"{error_class.__name__} が発生しない: {row}"


def notes_row(remarks):
    return ["", "", "", "", "", "", "", remarks]


# ═══════════════════════════════════════
# 1. 正常系
# ═══════════════════════════════════════
def test_full_row_values():
    """全列が埋まった行の具体値"""
    route = parse_route(["EGLL", "SID1", "350", "370", "SEGMENT", "STAR1", "EGKK", "Notes: 123-456"])
    assert route == Route(
        departure_airfield_or_entry_point="EGLL",
        standard_instrument_departure="SID1",
        minimum_level=35000,
        maximum_level=37000,
        route_segment="SEGMENT",
        standard_terminal_arrival_route="STAR1",
        arrival_airfield_or_exit_point="EGKK",
        note_ids=(123, 456),
    )


def test_seven_columns():
    """8列目がなければノートIDは空"""
    route = parse_route(["EGLL", "SID1", "350", "370", "SEGMENT", "STAR1", "EGKK"])
    assert route.note_ids == ()
    assert route.arrival_airfield_or_exit_point == "EGKK"


def test_optional_fields_blank():
    """SID/STAR は空欄なら None、経路は空文字"""
    route = parse_route(["EGLL", "", "350", "370", "  ", " ", "EGKK", ""])
    assert route.standard_instrument_departure is None
    assert route.standard_terminal_arrival_route is None
    assert route.route_segment == ""
    assert route.note_ids == ()


def test_cells_are_trimmed():
    route = parse_route([" EGLL ", " SID1 ", " 350 ", "370", "  DVR L9 KONAN ", "STAR1 ", " EGKK", ""])
    assert route.departure_airfield_or_entry_point == "EGLL"
    assert route.standard_instrument_departure == "SID1"
    assert route.minimum_level == 35000
    assert route.route_segment == "DVR L9 KONAN"
    assert route.standard_terminal_arrival_route == "STAR1"
    assert route.arrival_airfield_or_exit_point == "EGKK"


def test_route_is_immutable():
    route = parse_route(["EGLL", "", "", "", "", "", "EGKK"])
    try:
        route.route_segment = "X"
    except FrozenInstanceError:
        return
    assert False, "Route が変更できてしまう"


def test_to_dict():
    route = parse_route(["EGLL", "", "MC", "370", "SEG", "", "EGKK", "Notes: 1-1"])
    assert route.to_dict() == {
        "departure_airfield_or_entry_point": "EGLL",
        "standard_instrument_departure": None,
        "minimum_flight_level": None,
        "maximum_flight_level": 37000,
        "route_segment": "SEG",
        "standard_terminal_arrival_route": None,
        "arrival_airfield_or_exit_point": "EGKK",
        "note_ids": [1, 1],
    }


# ═══════════════════════════════════════
# 2. 飛行高度
# ═══════════════════════════════════════
def test_flight_levels():
    cases = [
        ("350", 35000),
        (" 350 ", 35000),
        ("", None),
        ("MC", None),
        ("0", 0),
        ("045", 4500),
    ]
    for value, expected in cases:
        route = parse_route(["EGLL", "", value, value, "", "", "EGKK"])
        assert route.minimum_level == expected, f"{value!r}: {route.minimum_level}"
        assert route.maximum_level == expected, f"{value!r}: {route.maximum_level}"


def test_invalid_flight_levels():
    for value in ["ABC", "-10", "+10", "35.5", "mc", "1_000"]:
        e = expect_error(InvalidNumberError, ["EGLL", "", value, "370", "", "", "EGKK"])
        assert e.token == value.strip()
        e = expect_error(InvalidNumberError, ["EGLL", "", "350", value, "", "", "EGKK"])
        assert e.token == value.strip()


# ═══════════════════════════════════════
# 3. ノートID
# ═══════════════════════════════════════
def test_note_ids():
    cases = [
        ("Notes: 123-456-789", [123, 456, 789]),
        ("Notes: ", []),
        ("", []),
        ("Notes: 123-456-", [123, 456]),
        ("Notes: -123-456", [123, 456]),
        ("Notes:  123 - 456 - 789 ", [123, 456, 789]),
        ("Notes: 1--2", [1, 2]),
        ("Notes: 5-5", [5, 5]),
        ("Remarks: 1-2", []),
        ("notes: 1-2", []),
    ]
    for remarks, expected in cases:
        assert parse_note_ids(notes_row(remarks)) == expected, remarks


def test_note_ids_missing_column():
    assert parse_note_ids(["", "", "", "", "", "", ""]) == []


def test_invalid_note_id():
    """不正なノートIDは行全体のエラーで、トークンと行を含む"""
    row = ["EGLL", "SID1", "350", "370", "SEGMENT", "STAR1", "EGKK", "Notes: 123-abc"]
    e = expect_error(InvalidNumberError, row)
    assert e.token == "abc"
    assert e.row == row
    assert "abc" in str(e)


def test_parse_uint():
    assert parse_uint("0", []) == 0
    assert parse_uint("9223372036854775807", []) == MAX_NOTE_ID
    for token in ["", " 1", "1.0", "9223372036854775808", "18446744073709551615", "１２"]:
        try:
            parse_uint(token, [])
        except InvalidNumberError:
            continue
        assert False, f"例外が発生しない: {token!r}"
    assert parse_uint("500", [], maximum=500) == 500


def test_values_fit_storage():
    """高度は INTEGER、ノートIDは BIGINT に収まらなければ行エラー"""
    route = parse_route(["EGLL", "", str(MAX_FLIGHT_LEVEL), "", "", "", "EGKK"])
    assert route.minimum_level == MAX_FLIGHT_LEVEL * 100
    assert route.minimum_level <= 2 ** 31 - 1

    e = expect_error(InvalidNumberError, ["EGLL", "", "99999999", "", "", "", "EGKK"])
    assert e.token == "99999999"
    e = expect_error(InvalidNumberError, ["EGLL", "", "", str(MAX_FLIGHT_LEVEL + 1), "", "", "EGKK"])
    assert e.field is not None

    row = ["EGLL", "", "", "", "", "", "EGKK", "Notes: 1-18446744073709551615"]
    e = expect_error(InvalidNumberError, row)
    assert e.token == "18446744073709551615"


# ═══════════════════════════════════════
# 4. 異常系
# ═══════════════════════════════════════
def test_too_few_columns():
    for row in [[], ["EGLL"], ["EGLL", "", "350", "370", "", "STAR1"]]:
        e = expect_error(MalformedRowError, row)
        assert e.row == row


def test_missing_departure():
    e = expect_error(MissingFieldError, ["", "SID1", "350", "370", "SEGMENT", "STAR1", "EGKK", "Notes: 123-456"])
    assert e.field == "ADEP or Entry"


def test_missing_arrival():
    e = expect_error(MissingFieldError, ["EGLL", "SID1", "350", "370", "SEGMENT", "STAR1", "  ", "Notes: 123-456"])
    assert e.field == "ADES or Exit"


if __name__ == '__main__':
    sections = [
        ("正常系", [
            ("全列の値", test_full_row_values),
            ("7列", test_seven_columns),
            ("任意セルの空欄", test_optional_fields_blank),
            ("前後の空白除去", test_cells_are_trimmed),
            ("不変", test_route_is_immutable),
            ("辞書化", test_to_dict),
        ]),
        ("飛行高度", [
            ("MC・空欄・数値", test_flight_levels),
            ("不正値", test_invalid_flight_levels),
        ]),
        ("ノートID", [
            ("区切り・空要素", test_note_ids),
            ("8列目なし", test_note_ids_missing_column),
            ("不正なID", test_invalid_note_id),
            ("符号なし整数", test_parse_uint),
            ("保存可能な範囲", test_values_fit_storage),
        ]),
        ("異常系", [
            ("列不足", test_too_few_columns),
            ("出発地なし", test_missing_departure),
            ("到着地なし", test_missing_arrival),
        ]),
    ]

    for section_name, tests in sections:
        print(f"\n[{section_name}]")
        for test_name, test_func in tests:
            run_test(test_name, test_func)

    print(f"\n{'='*50}")
    print(f"結果: {passed} 件通過, {failed} 件失敗 / 全 {passed+failed} 件")
    sys.exit(1 if failed else 0)
