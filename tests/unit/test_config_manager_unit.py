from __future__ import annotations


def test_defaults_without_config(tmp_path, monkeypatch):
    # Point to a non-existing config file
    cfg_path = tmp_path / "missing_config.yaml"
    monkeypatch.chdir(tmp_path)

    from autocrop.config_manager import ConfigManager

    cm = ConfigManager(str(cfg_path))
    ac = cm.get_autocrop_config()
    out = cm.get_output_config()
    inp = cm.get_input_config()
    log = cm.get_logging_config()

    assert ac["crop_fraction"] == 0.1
    assert ac["aggregation_window_s"] == 10.0
    assert out["crop_subdir"] == "crop"
    assert "*.fits" in inp["patterns"]
    assert log["level"] == "INFO"


def test_get_dot_path_and_reload(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        """
autocrop:
  crop_fraction: 0.24
output:
  crop_subdir: stacked
        """,
        encoding="utf-8",
    )

    from autocrop.config_manager import ConfigManager

    cm = ConfigManager(str(cfg))
    assert cm.get("autocrop.crop_fraction") == 0.24
    assert cm.get_output_config()["crop_subdir"] == "stacked"
    # untouched keys keep their defaults
    assert cm.get("autocrop.aggregation_window_s") == 10.0

    cfg.write_text(
        """
autocrop:
  crop_fraction: 0.5
        """,
        encoding="utf-8",
    )
    cm.reload()
    assert cm.get("autocrop.crop_fraction") == 0.5
    assert cm.get_output_config()["crop_subdir"] == "crop"


def test_invalid_yaml_falls_back_to_defaults(tmp_path):
    cfg = tmp_path / "broken.yaml"
    cfg.write_text("autocrop: [unclosed", encoding="utf-8")

    from autocrop.config_manager import ConfigManager

    cm = ConfigManager(str(cfg))
    assert cm.get("autocrop.crop_fraction") == 0.1


def test_set_and_safe_get(tmp_path):
    from autocrop.config_manager import ConfigManager

    cm = ConfigManager(str(tmp_path / "none.yaml"))
    cm.set("input.poll_interval_s", 0.5)
    cm.set("extra.nested.value", 3)
    assert cm.get("input.poll_interval_s") == 0.5
    assert cm.get("extra.nested.value") == 3
    assert cm.get("does.not.exist", default=42) == 42
    # defaults are not shared between instances
    assert ConfigManager(str(tmp_path / "none.yaml")).get("input.poll_interval_s") == 2.0


def test_save_default_config(tmp_path):
    import yaml

    from autocrop.config_manager import ConfigManager

    cm = ConfigManager(str(tmp_path / "config.yaml"))
    cm.save_default_config()
    saved = yaml.safe_load((tmp_path / "config.yaml.default").read_text(encoding="utf-8"))
    assert saved["autocrop"]["aggregation_window_s"] == 10.0
