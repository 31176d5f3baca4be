"""
Tests for slug configuration loading and validation.
"""

import json

import pytest
from pydantic import ValidationError

from tg_redirect.core.exceptions import ConfigurationError
from tg_redirect.services.slugs import SlugConfig, SlugRegistry, find_slugs_config_path

from conftest import TEST_SLUGS


def write_slugs(path, slugs):
    path.write_text(json.dumps({"slugs": slugs}), encoding="utf-8")
    return path


class TestSlugConfig:

    def test_valid_bot(self):
        config = SlugConfig.model_validate(
            {"slug": "sales", "type": "bot", "mode": "302", "destination": "SalesBot",
             "defaultStartParam": "promo_1"}
        )
        assert config.active is True
        assert config.default_start_param == "promo_1"

    def test_invalid_slug(self):
        with pytest.raises(ValidationError):
            SlugConfig(slug="bad slug", type="bot", mode="302", destination="SalesBot")

    def test_invalid_type_and_mode(self):
        with pytest.raises(ValidationError):
            SlugConfig(slug="s", type="group", mode="302", destination="SalesBot")
        with pytest.raises(ValidationError):
            SlugConfig(slug="s", type="bot", mode="301", destination="SalesBot")

    def test_invalid_destination(self):
        with pytest.raises(ValidationError):
            SlugConfig(slug="s", type="public", mode="302", destination="bad-name")
        # Invite hashes may contain dashes
        SlugConfig(slug="s", type="invite", mode="302", destination="AbC-123_x")

    def test_trailing_newline_rejected(self):
        with pytest.raises(ValidationError):
            SlugConfig(slug="sales\n", type="bot", mode="302", destination="SalesBot")
        with pytest.raises(ValidationError):
            SlugConfig(slug="sales", type="bot", mode="302", destination="SalesBot\n")
        with pytest.raises(ValidationError):
            SlugConfig(slug="sales", type="invite", mode="302", destination="AbC-123\n")
        with pytest.raises(ValidationError):
            SlugConfig(slug="sales", type="bot", mode="302", destination="SalesBot",
                       default_start_param="welcome\n")

    def test_start_param_too_long(self):
        with pytest.raises(ValidationError):
            SlugConfig(slug="s", type="bot", mode="302", destination="SalesBot",
                       default_start_param="x" * 65)


class TestSlugRegistry:

    def test_get_active_only(self, slug_registry):
        assert slug_registry.get("promo").destination == "SalesBot"
        assert slug_registry.get("retired") is None
        assert slug_registry.get("missing") is None
        assert "retired" not in {config.slug for config in slug_registry.all_active()}

    def test_load_from_file(self, tmp_path):
        registry = SlugRegistry.from_file(write_slugs(tmp_path / "slugs.json", TEST_SLUGS))
        assert registry.get("welcome").default_start_param == "welcome"
        assert len(registry.all_active()) == 5

    def test_reload(self, tmp_path):
        path = write_slugs(tmp_path / "slugs.json", TEST_SLUGS)
        registry = SlugRegistry.from_file(path)

        write_slugs(path, [{"slug": "new", "type": "public", "mode": "302", "destination": "NewChannel"}])
        registry.reload()

        assert registry.get("promo") is None
        assert registry.get("new") is not None

    def test_reload_without_file(self, slug_registry):
        with pytest.raises(ConfigurationError):
            slug_registry.reload()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            SlugRegistry.from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "slugs.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            SlugRegistry.from_file(path)

    def test_invalid_entry(self, tmp_path):
        path = write_slugs(tmp_path / "slugs.json", [{"slug": "x", "type": "bot"}])
        with pytest.raises(ConfigurationError):
            SlugRegistry.from_file(path)

    def test_duplicate_slugs(self, tmp_path):
        path = write_slugs(tmp_path / "slugs.json", [TEST_SLUGS[0], TEST_SLUGS[0]])
        with pytest.raises(ConfigurationError):
            SlugRegistry.from_file(path)

    def test_bundled_config_is_valid(self):
        registry = SlugRegistry.from_file(find_slugs_config_path())
        assert registry.get("sales-bot") is not None
        assert registry.get("demo-bot") is None

    def test_explicit_path_wins(self, tmp_path):
        assert find_slugs_config_path(str(tmp_path / "x.json")) == tmp_path / "x.json"
