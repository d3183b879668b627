from imgtransform import config


def test_env_override(monkeypatch):
    monkeypatch.setenv("IMGTRANSFORM_MAX_SPAN", "7")
    assert config._env_int("MAX_SPAN", 20) == 7


def test_env_unset_uses_default(monkeypatch):
    monkeypatch.delenv("IMGTRANSFORM_MAX_SPAN", raising=False)
    assert config._env_int("MAX_SPAN", 20) == 20


def test_env_invalid_falls_back(monkeypatch, caplog):
    monkeypatch.setenv("IMGTRANSFORM_MAX_SPAN", "wide")
    with caplog.at_level("WARNING"):
        assert config._env_int("MAX_SPAN", 20) == 20
    assert "not an integer" in caplog.text


def test_env_below_minimum_falls_back(monkeypatch):
    monkeypatch.setenv("IMGTRANSFORM_MAX_SPAN", "0")
    assert config._env_int("MAX_SPAN", 20) == 20


def test_defaults():
    assert config.MASK_ON == 255
    assert config.UNDEFINED_HUE == -1.0
    assert config.MIN_DERICHE_ALPHA < config.DEFAULT_DERICHE_ALPHA <= config.MAX_DERICHE_ALPHA
