import json

from core.config import Config, load_config


class TestLoadConfig:
    """Test cases for load_config."""

    def test_creates_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        config_file = tmp_path / "nested" / "config.json"

        config = load_config(config_file)

        assert config == Config()
        assert config.proxy.port == 5001
        assert config.forward.user_agent == "API-Tester-Proxy/1.0"
        assert json.loads(config_file.read_text())["forward"]["default_timeout_ms"] == 30000

    def test_reads_existing(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"proxy": {"port": 6000}, "rate_limit": {"max_requests": 5}}))

        config = load_config(config_file)

        assert config.proxy.port == 6000
        assert config.rate_limit.max_requests == 5
        assert config.rate_limit.window_seconds == 900

    def test_corrupt_config_is_backed_up(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        config_file = tmp_path / "config.json"
        config_file.write_text("{broken")

        config = load_config(config_file)

        assert config == Config()
        assert (tmp_path / "config.json.bak").read_text() == "{broken"

    def test_port_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PORT", "5004")
        assert load_config(tmp_path / "config.json").proxy.port == 5004
