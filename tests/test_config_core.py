from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from sequence_gate.config import (
    CONFIG_PATH_ENV,
    DEFAULT_SECRET_CODE,
    GateConfig,
    RevealLetter,
    default_config_path,
    load_gate_config,
)


def test_defaults_match_the_fixed_constants() -> None:
    cfg = GateConfig()
    assert cfg.secret_code == DEFAULT_SECRET_CODE == "456838"
    assert cfg.max_digits == 6
    assert cfg.tile_count == 9
    assert cfg.grid_side == 3
    assert cfg.reveal_ceiling == 2


def test_config_is_frozen() -> None:
    cfg = GateConfig()
    with pytest.raises(AttributeError):
        cfg.secret_code = "000000"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"secret_code": "12345"},
        {"secret_code": "12a456"},
        {"secret_code": "", "max_digits": 0},
        {"tile_count": 8},
        {"tile_count": 0},
        {"reveal_ceiling": -1},
    ],
)
def test_invalid_values_raise(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        GateConfig(**kwargs)  # type: ignore[arg-type]


def test_reveal_prompt_falls_back_to_empty() -> None:
    cfg = GateConfig()
    assert cfg.reveal_prompt(0) == "Tap the envelope"
    assert cfg.reveal_prompt(1) == "Tap again"
    assert cfg.reveal_prompt(2) == ""
    assert cfg.reveal_prompt(7) == ""


def test_from_dict_keeps_defaults_for_missing_keys() -> None:
    cfg = GateConfig.from_dict({"secret_code": "1234", "puzzle_title": "Swap them"})
    assert cfg.secret_code == "1234"
    assert cfg.max_digits == 4
    assert cfg.puzzle_title == "Swap them"
    assert cfg.tile_count == 9
    assert cfg.password_error_message == GateConfig().password_error_message


def test_to_dict_from_dict_preserves_config() -> None:
    cfg = GateConfig(
        secret_code="2468",
        max_digits=4,
        tile_count=16,
        letter=RevealLetter(salutation="Hi,", paragraphs=("one", "two"), signature="me"),
    )
    assert GateConfig.from_dict(json.loads(json.dumps(cfg.to_dict()))) == cfg


def test_from_dict_rejects_non_mapping() -> None:
    with pytest.raises(ValueError):
        GateConfig.from_dict(["456838"])


def test_default_config_path_reads_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    assert default_config_path() is None
    monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "gate.json"))
    assert default_config_path() == tmp_path / "gate.json"


def test_load_gate_config_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "gate.json"
    path.write_text(json.dumps({"secret_code": "975310", "title": "Hello"}), encoding="utf-8")
    cfg = load_gate_config(path)
    assert cfg.secret_code == "975310"
    assert cfg.title == "Hello"


def test_load_gate_config_missing_file_uses_defaults(tmp_path: Path) -> None:
    assert load_gate_config(tmp_path / "nope.json") == GateConfig()
    assert load_gate_config(None) == GateConfig()


@pytest.mark.parametrize("content", ["{not json", json.dumps({"secret_code": "12x"}), json.dumps([1, 2])])
def test_load_gate_config_invalid_file_logs_and_uses_defaults(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, content: str
) -> None:
    path = tmp_path / "gate.json"
    path.write_text(content, encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="sequence_gate.config"):
        cfg = load_gate_config(path)
    assert cfg == GateConfig()
    assert any("Ignoring gate config" in r.getMessage() for r in caplog.records)
