"""Tests for configuration loading and logging setup."""
import json
import logging

import pytest

from treecarbon.config_loader import (
    DEFAULT_TABLE_LAYOUTS,
    ConfigLoader,
    get_config_loader,
    get_image_settings,
    get_table_layout,
    set_config_dir,
)
from treecarbon.exceptions import ConfigurationError, InvalidDataError
from treecarbon.logging_config import get_logger, setup_logging
from treecarbon.species_catalog import species_image_url


class TestPackagedConfig:
    """The packaged cfg/ files match the built-in defaults."""

    @pytest.mark.parametrize("table", ['growth_coefficients', 'biomass_density'])
    def test_table_layouts(self, table):
        assert get_table_layout(table) == DEFAULT_TABLE_LAYOUTS[table]['columns']

    def test_growth_coefficient_positions(self):
        layout = get_table_layout('growth_coefficients')
        assert layout['equation_form'] == 7
        assert layout['a'] == 8
        assert layout['mse'] == 15

    def test_image_settings(self):
        settings = get_image_settings()
        assert '{seed}' in settings['seed_url_template']
        assert 'acer palmatum' in settings['overrides']

    def test_unknown_table(self):
        with pytest.raises(ConfigurationError):
            get_table_layout('mortality_rates')

    def test_shared_loader_caches(self):
        loader = get_config_loader()
        first = loader.load_config_file('table_layouts.yaml')
        assert loader.load_config_file('table_layouts.yaml') is first


class TestCustomConfigDir:
    """Configuration from a user-supplied directory."""

    def test_yaml_layout(self, tmp_path):
        (tmp_path / 'table_layouts.yaml').write_text(
            "biomass_density:\n"
            "  columns:\n"
            "    scientific_name: 0\n"
            "    common_name: 1\n"
            "    density: 2\n",
            encoding='utf-8',
        )
        set_config_dir(tmp_path)
        assert get_table_layout('biomass_density') == {
            'scientific_name': 0, 'common_name': 1, 'density': 2,
        }

    def test_missing_files_use_defaults(self, tmp_path):
        set_config_dir(tmp_path)
        assert get_table_layout('biomass_density') == DEFAULT_TABLE_LAYOUTS['biomass_density']['columns']
        assert get_image_settings()['fallback_image'].startswith('https://')

    def test_image_overrides_lower_cased(self, tmp_path):
        (tmp_path / 'species_images.yaml').write_text(
            "overrides:\n"
            "  'Ulmus Americana ': https://example.org/elm.jpg\n",
            encoding='utf-8',
        )
        set_config_dir(tmp_path)
        settings = get_image_settings()
        assert settings['overrides'] == {'ulmus americana': 'https://example.org/elm.jpg'}
        assert settings['seed_url_template'].startswith('https://picsum.photos/')
        assert species_image_url("Ulmus americana", "American elm") == 'https://example.org/elm.jpg'

    def test_json_file(self, tmp_path):
        (tmp_path / 'layouts.json').write_text(
            json.dumps({'biomass_density': {'columns': {'density': 5}}}), encoding='utf-8')
        loader = ConfigLoader(tmp_path)
        assert loader.load_config_file('layouts.json')['biomass_density']['columns']['density'] == 5

    def test_toml_file(self, tmp_path):
        (tmp_path / 'layouts.toml').write_text(
            "[biomass_density.columns]\ndensity = 4\n", encoding='utf-8')
        loader = ConfigLoader(tmp_path)
        assert loader.load_config_file('layouts.toml')['biomass_density']['columns']['density'] == 4

    def test_invalid_column_position(self, tmp_path):
        (tmp_path / 'table_layouts.yaml').write_text(
            "biomass_density:\n  columns:\n    density: third\n", encoding='utf-8')
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path).get_table_layout('biomass_density')


class TestConfigErrors:
    """Error handling for unreadable configuration files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path).load_config_file('absent.yaml')

    def test_unsupported_format(self, tmp_path):
        (tmp_path / 'settings.ini').write_text("[section]\nkey = value\n", encoding='utf-8')
        with pytest.raises(ConfigurationError, match="Unsupported"):
            ConfigLoader(tmp_path).load_config_file('settings.ini')

    def test_empty_yaml(self, tmp_path):
        (tmp_path / 'empty.yaml').write_text("# nothing here\n", encoding='utf-8')
        with pytest.raises(InvalidDataError):
            ConfigLoader(tmp_path).load_config_file('empty.yaml')

    def test_malformed_yaml(self, tmp_path):
        (tmp_path / 'broken.yaml').write_text("columns: [1, 2\n", encoding='utf-8')
        with pytest.raises(InvalidDataError):
            ConfigLoader(tmp_path).load_config_file('broken.yaml')

    def test_non_mapping(self, tmp_path):
        (tmp_path / 'list.json').write_text("[1, 2, 3]", encoding='utf-8')
        with pytest.raises(InvalidDataError):
            ConfigLoader(tmp_path).load_config_file('list.json')

    def test_clear_cache(self, tmp_path):
        path = tmp_path / 'values.yaml'
        path.write_text("a: 1\n", encoding='utf-8')
        loader = ConfigLoader(tmp_path)
        assert loader.load_config_file('values.yaml') == {'a': 1}
        path.write_text("a: 2\n", encoding='utf-8')
        assert loader.load_config_file('values.yaml') == {'a': 1}
        loader.clear_cache()
        assert loader.load_config_file('values.yaml') == {'a': 2}


class TestLogging:
    """Tests for the logging helpers."""

    def test_logger_namespace(self):
        assert get_logger('growth').name == 'treecarbon.growth'
        assert get_logger('treecarbon.species').name == 'treecarbon.species'

    def test_setup_logging_does_not_stack_handlers(self):
        logger = setup_logging('debug')
        setup_logging(logging.WARNING)
        streams = [h for h in logger.handlers if getattr(h, '_treecarbon_stream', False)]
        assert len(streams) == 1
        assert logger.level == logging.WARNING
        logger.removeHandler(streams[0])
        logger.setLevel(logging.NOTSET)
