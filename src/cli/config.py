"""YAML configuration loading and validation.

This module loads the sync configuration from .notion-sync/config.yaml.
"""

from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError, ConfigNotFoundError, FilesystemError
from .models import SyncConfig


class ConfigLoader:
    """Handles configuration file loading and validation.

    Configuration file structure:
        database_id: "d16195b7..."
        collection_name: "blog"
        asset_path: "assets/notion"
        store_path: ".notion-sync/store"
        body_format: "html"
        filter: {property: "Published", checkbox: {equals: true}}
        sorts: [{property: "Date", direction: "descending"}]
        archived: false
        filter_properties: ["title"]
        transform_stages:
          - external-links
          - [lazy-images, {loading: lazy}]
        timeout_ms: 60000
        notion_version: "2022-06-28"
        base_url: "https://api.notion.com/v1"
        ignore_asset_cache: false
    """

    DEFAULT_CONFIG_PATH = '.notion-sync/config.yaml'

    # Required top-level config fields
    REQUIRED_TOP_LEVEL_FIELDS = {'database_id'}

    BODY_FORMATS = ('html', 'markdown')

    @classmethod
    def load(cls, config_path: str) -> SyncConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            SyncConfig object with parsed configuration

        Raises:
            ConfigNotFoundError: If the file does not exist
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        # Read file
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigNotFoundError(config_path)
        except PermissionError:
            raise FilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except Exception as e:
            raise FilesystemError(
                config_path,
                'read',
                str(e)
            )

        # Parse YAML
        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> SyncConfig:
        """Parse and validate configuration dictionary.

        Args:
            config_dict: Raw configuration dictionary from YAML

        Returns:
            Validated SyncConfig object

        Raises:
            ConfigError: If configuration is invalid
        """
        missing_fields = cls.REQUIRED_TOP_LEVEL_FIELDS - set(config_dict.keys())
        if missing_fields:
            raise ConfigError(
                f"Missing required fields: {', '.join(sorted(missing_fields))}"
            )

        database_id = cls._string(config_dict, 'database_id')
        if database_id is None or not database_id.strip():
            raise ConfigError("Field 'database_id' cannot be empty", 'database_id')

        defaults = SyncConfig(database_id=database_id)

        body_format = cls._string(config_dict, 'body_format') or defaults.body_format
        if body_format not in cls.BODY_FORMATS:
            raise ConfigError(
                f"Field 'body_format' must be one of {', '.join(cls.BODY_FORMATS)}",
                'body_format'
            )

        filter_ = config_dict.get('filter')
        if filter_ is not None and not isinstance(filter_, dict):
            raise ConfigError("Field 'filter' must be a dictionary", 'filter')

        sorts = cls._optional_list(config_dict, 'sorts')
        filter_properties = cls._optional_list(config_dict, 'filter_properties')
        if filter_properties is not None:
            filter_properties = [str(prop) for prop in filter_properties]

        transform_stages = cls._optional_list(config_dict, 'transform_stages') or []
        for i, stage in enumerate(transform_stages):
            if isinstance(stage, str):
                continue
            if (
                isinstance(stage, list)
                and len(stage) == 2
                and isinstance(stage[0], str)
                and (stage[1] is None or isinstance(stage[1], dict))
            ):
                continue
            raise ConfigError(
                "Stage must be a name or a [name, options] pair",
                f'transform_stages[{i}]'
            )

        archived = config_dict.get('archived')
        if archived is not None and not isinstance(archived, bool):
            raise ConfigError("Field 'archived' must be a boolean", 'archived')

        timeout_ms = config_dict.get('timeout_ms', defaults.timeout_ms)
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
            raise ConfigError("Field 'timeout_ms' must be a positive integer", 'timeout_ms')

        return SyncConfig(
            database_id=database_id.strip(),
            collection_name=cls._string(config_dict, 'collection_name') or defaults.collection_name,
            asset_path=cls._string(config_dict, 'asset_path') or defaults.asset_path,
            store_path=cls._string(config_dict, 'store_path') or defaults.store_path,
            body_format=body_format,
            filter=filter_,
            sorts=sorts,
            archived=archived,
            filter_properties=filter_properties,
            transform_stages=[
                stage if isinstance(stage, str) else (stage[0], stage[1])
                for stage in transform_stages
            ],
            timeout_ms=timeout_ms,
            notion_version=cls._string(config_dict, 'notion_version') or defaults.notion_version,
            base_url=cls._string(config_dict, 'base_url'),
            ignore_asset_cache=bool(config_dict.get('ignore_asset_cache', False)),
        )

    @staticmethod
    def _string(config_dict: Dict[str, Any], key: str) -> Optional[str]:
        value = config_dict.get(key)
        if value is None:
            return None
        if isinstance(value, (dict, list)):
            raise ConfigError(f"Field '{key}' must be a string", key)
        return str(value)

    @staticmethod
    def _optional_list(config_dict: Dict[str, Any], key: str) -> Optional[List[Any]]:
        value = config_dict.get(key)
        if value is None:
            return None
        if not isinstance(value, list):
            raise ConfigError(f"Field '{key}' must be a list", key)
        return value
