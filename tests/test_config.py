import json
import os

from config import dict_to_split, load_settings, split_to_dict, splits_key
from models import ItemSplit, SplitDetail, SplitPolicy
from utils import app_dir, round_money, safe_float


def test_load_settings_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(tmp_path))
    settings = load_settings()

    assert settings.data_dir == os.path.join(str(tmp_path), "data")
    assert settings.tolerance == 0.01
    assert settings.store_indent == 2


def test_load_settings_from_file(tmp_path, monkeypatch):
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(tmp_path))
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"tolerance": 0.05, "data_dir": "/srv/ledger"}), encoding="utf-8")

    settings = load_settings(str(path))

    assert settings.tolerance == 0.05
    assert settings.data_dir == "/srv/ledger"


def test_app_dir_honours_env(tmp_path, monkeypatch):
    target = tmp_path / "home"
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(target))
    assert app_dir() == str(target)
    assert target.is_dir()


def test_split_serialization_uses_stored_names():
    split = ItemSplit("i1", SplitPolicy.FIXED_AMOUNT, [SplitDetail("u1", "Alice", 4.5)])
    d = split_to_dict(split)

    assert d == {"itemId": "i1", "splitType": "person", "details": [{"userId": "u1", "userName": "Alice", "share": 4.5}]}
    assert dict_to_split(d) == split


def test_split_without_type_reads_as_equal():
    split = dict_to_split({"itemId": "i1", "details": [{"userId": "u1", "share": 100}]})
    assert split.policy == SplitPolicy.EQUAL
    assert split.details == [SplitDetail("u1", "", 100.0)]


def test_splits_key():
    assert splits_key("abc") == "splits_abc"


def test_money_helpers():
    assert round_money(8.004) == 8.0
    assert safe_float("x", None) is None
    assert safe_float("1.5") == 1.5


def test_load_settings_with_explicit_path_leaves_app_dir_alone(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(home))
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"data_dir": "/srv/ledger"}), encoding="utf-8")

    settings = load_settings(str(path))

    assert settings.data_dir == "/srv/ledger"
    assert not home.exists()


def test_load_settings_without_data_dir_uses_app_dir(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(home))
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"tolerance": "bad"}), encoding="utf-8")

    settings = load_settings(str(path))

    assert settings.data_dir == os.path.join(str(home), "data")
    assert settings.tolerance == 0.01
    assert home.is_dir()
