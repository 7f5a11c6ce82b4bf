"""
コマンドラインテスト（DB・ネットワークを使わないサブコマンドのみ）
"""
import sys
sys.path.insert(0, '.')

import os
import tempfile
from datetime import datetime, timezone

from test_excel_source import NOTES, ROUTES, write_workbook

from airac import Airac
from loaded_cycle import LoadedCycle
from main import build_parser, describe_loaded_cycle, main


def test_airac():
    assert main(["airac"]) == 0


def test_loaded():
    with tempfile.TemporaryDirectory() as d:
        assert main(["loaded", "--dir", d]) == 0
        LoadedCycle(d).set(Airac().cycle_from_ident("2413"))
        assert main(["loaded", "--dir", d]) == 0


def test_describe_loaded_cycle():
    airac = Airac()
    with tempfile.TemporaryDirectory() as d:
        loaded = LoadedCycle(d)
        message = describe_loaded_cycle(loaded, airac)
        assert "ありません" in message
        assert str(loaded.path) in message

        loaded.set(airac.cycle_from_ident("2413"))
        inside = describe_loaded_cycle(loaded, airac, datetime(2025, 1, 1, tzinfo=timezone.utc))
        assert inside.endswith("[有効]"), inside
        assert "2413 (2024-12-26 - 2025-01-23)" in inside

        outside = describe_loaded_cycle(loaded, airac, datetime(2025, 1, 23, tzinfo=timezone.utc))
        assert "[有効]" not in outside


def test_loaded_invalid_ident():
    with tempfile.TemporaryDirectory() as d:
        LoadedCycle(d).set(Airac().cycle_from_ident("2413"))
        with open(LoadedCycle(d).path, "w") as f:
            f.write("garbage")
        assert main(["loaded", "--dir", d]) == 1


def test_parse():
    with tempfile.TemporaryDirectory() as d:
        path = os.path.join(d, "srd.xlsx")
        write_workbook(path, ROUTES, NOTES)
        assert main(["parse", path]) == 0


def test_parse_unknown_extension():
    assert main(["parse", "srd.csv"]) == 1


def test_parse_missing_file():
    assert main(["parse", "does-not-exist.xlsx"]) == 1


def test_import_invalid_cycle():
    assert main(["import", "99", "srd.xlsx"]) == 1


def test_download_defaults():
    args = build_parser().parse_args(["download", "-f", "-c", "2501"])
    assert args.force
    assert args.cycle == "2501"
    assert args.url is None
    assert args.env_path == ".env"
    assert args.dir == tempfile.gettempdir()
