from pathlib import Path

from lift_kiosk.config import load_config


def test_defaults_loaded():
    config = load_config(env={})

    assert config.polling.dwell_seconds == 12.0
    assert config.polling.backoff_unit_seconds == 5.0
    assert config.polling.max_backoff_seconds == 30.0
    assert config.display.animation_frame_seconds == 0.4
    assert config.sources["lifts"].url == "https://liftie.info/api/resort/breck"


def test_override_file_and_env(tmp_path: Path):
    override = tmp_path / "kiosk.yaml"
    override.write_text("polling:\n  dwell_seconds: 8\nsources:\n  lifts:\n    url: https://example.test/lifts\n")

    config = load_config(
        config_path=str(override),
        env={"LIFTKIOSK_LOG_LEVEL": "debug", "LIFTKIOSK_LOG_JSON": "yes"},
    )

    assert config.polling.dwell_seconds == 8
    assert config.polling.max_backoff_seconds == 30.0
    assert config.sources["lifts"].url == "https://example.test/lifts"
    assert config.sources["base_station"].url.endswith("/E8345/observations")
    assert config.logging.level == "debug"
    assert config.logging.json is True
