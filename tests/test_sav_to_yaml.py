"""
Tests for the YAML report export.
"""

import struct
import zlib

import pytest
import yaml

import sav_to_yaml
from sav_codec import SizeMismatchWarning

from conftest import PLAYER_ID


def test_report_structure(sav_path):
    data = sav_to_yaml.sav_to_yaml_data(sav_path)
    assert list(data) == ["metadata", "file", "locked_recipes", "player"]
    assert data["metadata"]["schema_version"] == "1.0.0"
    assert data["metadata"]["tool_version"] == sav_to_yaml.TOOL_VERSION
    assert data["file"]["name"] == "slot1.sav"
    assert data["file"]["declared_size"] == data["file"]["decompressed_size"]
    assert "size_mismatch" not in data["file"]

    recipes = data["locked_recipes"]
    assert [r["name"] for r in recipes] == ["Ammo Box", "Iron Plate"]
    assert recipes[1]["items"] == [["Iron Ore", 5], ["Coal", 2]]

    player = data["player"]
    assert player["id"] == PLAYER_ID
    assert player["skills"]["Movement"] == {"level": 2, "experience": 150.5}
    assert player["survival"]["health"] == [80.0, 0.0, 100.0]


def test_report_flags_size_mismatch(tmp_path):
    payload = b'{"itemData":{}}'
    path = tmp_path / "odd.sav"
    path.write_bytes(struct.pack("<I", len(payload) + 3) + zlib.compress(payload))
    with pytest.warns(SizeMismatchWarning):
        data = sav_to_yaml.sav_to_yaml_data(str(path))
    assert data["file"]["size_mismatch"] is True
    assert data["locked_recipes"] == []
    assert "player" not in data


def test_write_yaml_file(sav_path, tmp_path, capsys):
    out = tmp_path / "report.yaml"
    sav_to_yaml.sav_to_yaml(sav_path, str(out))

    text = out.read_text(encoding="utf-8")
    assert "- [Iron Ore, 5]" in text
    loaded = yaml.safe_load(text)
    assert loaded["player"]["survival"]["energy"] == [55.5, 0.0, 60.0]
    assert "Converted" in capsys.readouterr().out


def test_main_default_output_name(sav_path):
    assert sav_to_yaml.main([sav_path]) == 0
    with open(sav_path.rsplit(".", 1)[0] + ".yaml", encoding="utf-8") as f:
        assert yaml.safe_load(f)["file"]["name"] == "slot1.sav"


def test_main_usage(capsys):
    assert sav_to_yaml.main([]) == 1
    assert "Usage" in capsys.readouterr().out
