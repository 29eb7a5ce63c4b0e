"""Sync command orchestration for CLI.

This module provides the SyncCommand class that runs one sync pass for the
CLI: it loads the configuration, builds the Notion client, content store and
transform chain, runs the SyncController, and reports the outcome.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from src.asset_cache.asset_cache import AssetCache
from src.cli.config import ConfigLoader
from src.cli.errors import CLIError, ConfigError, ConfigNotFoundError, FilesystemError
from src.cli.models import ExitCode, SyncConfig
from src.cli.output import OutputHandler
from src.content_store.errors import ContentStoreError
from src.content_store.store import ContentStore, FileContentStore
from src.notion_api.api_wrapper import NotionAPI
from src.notion_api.auth import Authenticator
from src.notion_api.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    ObjectNotFoundError,
)
from src.rendering.errors import RenderError
from src.rendering.pipeline import TransformChain
from src.sync.models import QueryOptions, SyncReport
from src.sync.sync_controller import SyncController

logger = logging.getLogger(__name__)

# Asset directories in the config are relative to the project's src/ tree
SOURCE_ROOT = 'src'


class SyncCommand:
    """Runs one sync pass for the CLI.

    The sync workflow:
        1. Load configuration
        2. Build the Notion client, content store, asset cache and chain
        3. Run the SyncController pass
        4. Print the summary and return an exit code

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> sync_cmd = SyncCommand(output_handler=output)
        >>> exit_code = sync_cmd.run(force_rerender=False)
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config_path: str = ConfigLoader.DEFAULT_CONFIG_PATH,
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        api: Optional[NotionAPI] = None,
        store: Optional[ContentStore] = None,
        project_root: Optional[str] = None,
    ):
        """Initialize sync command with dependencies.

        Args:
            config_path: Path to configuration YAML file
            output_handler: OutputHandler for terminal output (optional)
            authenticator: Authenticator for the Notion API (optional)
            api: Notion API wrapper (optional, built from config if omitted)
            store: Content store (optional, file store from config if omitted)
            project_root: Project root directory (default: current directory)

        Note:
            All dependencies are optional to support testing. In production,
            they are created from the configuration.
        """
        self.config_path = config_path
        self.output_handler = output_handler or OutputHandler()
        self.authenticator = authenticator
        self.api = api
        self.store = store
        self.project_root = Path(project_root) if project_root else Path.cwd()

    def run(self, force_rerender: bool = False) -> ExitCode:
        """Execute one sync pass.

        Args:
            force_rerender: Re-render every page regardless of its digest
                            (the FORCE_RERENDER environment variable also
                            enables this)

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            logger.info(f"Loading configuration from {self.config_path}")
            self.output_handler.info(f"Loading configuration from {self.config_path}")

            if not Path(self.config_path).exists():
                self.output_handler.print("No sync configuration found.\n")
                self.output_handler.print(f"Create {self.config_path} with at least:\n")
                self.output_handler.print("  database_id: <your Notion database id>\n")
                self.output_handler.print("Required environment variables:")
                self.output_handler.print("  NOTION_TOKEN            - Internal integration secret\n")
                self.output_handler.print("Run 'notion-sync --help' for more options.")
                return ExitCode.GENERAL_ERROR

            config = ConfigLoader.load(self.config_path)
            logger.info(f"Loaded config for database {config.database_id}")

            controller = self._build_controller(config, force_rerender)
            report = asyncio.run(self._run_pass(controller))

            self.output_handler.print_summary(report)
            if report.has_failures:
                return ExitCode.DOCUMENT_FAILURES
            return ExitCode.SUCCESS

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info("Check the NOTION_TOKEN environment variable")
            return ExitCode.AUTH_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except ObjectNotFoundError as e:
            logger.error(f"Database not found: {e}")
            self.output_handler.error(f"Database not found: {e}")
            self.output_handler.info("Check that the database is shared with the integration")
            return ExitCode.GENERAL_ERROR

        except (ConfigError, ConfigNotFoundError, FilesystemError, RenderError) as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except (CLIError, ContentStoreError) as e:
            logger.error(f"Sync error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during sync")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _build_controller(self, config: SyncConfig, force_rerender: bool) -> SyncController:
        """Create the controller and its collaborators from the configuration.

        Raises:
            StageNotFoundError: If a configured transform stage is not registered
        """
        chain = TransformChain(config.transform_stages)
        logger.info(f"Transform chain has {chain.caller_stage_count} extra stage(s)")

        if self.api is None:
            if not self.authenticator:
                self.authenticator = Authenticator(base_url=config.base_url or "")
            self.api = NotionAPI(
                self.authenticator,
                notion_version=config.notion_version,
                timeout_ms=config.timeout_ms,
            )

        if self.store is None:
            self.store = FileContentStore(
                self.project_root / config.store_path,
                body_format=config.body_format,
            )

        if os.path.isabs(config.asset_path):
            asset_path = config.asset_path
        else:
            asset_path = os.path.join(SOURCE_ROOT, config.asset_path)

        return SyncController(
            self.api,
            self.store,
            database_id=config.database_id,
            query=QueryOptions(
                filter=config.filter,
                sorts=config.sorts,
                archived=config.archived,
                filter_properties=config.filter_properties,
            ),
            asset_path=asset_path,
            asset_cache=AssetCache(project_root=self.project_root),
            chain=chain,
            collection_name=config.collection_name,
            # None defers to the FORCE_RERENDER environment variable
            force_rerender=True if force_rerender else None,
            ignore_asset_cache=config.ignore_asset_cache,
        )

    async def _run_pass(self, controller: SyncController) -> SyncReport:
        try:
            return await controller.sync()
        finally:
            await controller.close()
