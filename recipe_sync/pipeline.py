"""High level orchestration of a recipe sync run."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from recipe_sync import logger, utils
from recipe_sync.branch import derive_branch
from recipe_sync.configuration import SyncConfig, ToolSettings, resolve_config
from recipe_sync.generator import invoke_generator
from recipe_sync.publisher import PublishedArtifact, publish_artifacts


@dataclass
class SyncResult:
    """Outcome of a successful sync run."""

    config: SyncConfig
    branch: str
    published: List[PublishedArtifact] = field(default_factory=list)
    exec_time: float = 0.0


class SyncPipeline:
    """Config -> branch -> generator -> publish, each step gated on the previous one."""

    def __init__(self, settings: Optional[ToolSettings] = None) -> None:
        self.settings = settings or ToolSettings()

    def run(
        self,
        environ: Optional[Mapping[str, str]] = None,
        config: Optional[SyncConfig] = None,
    ) -> SyncResult:
        """Run all stages; *config* skips environment resolution when already resolved."""
        start_time = time.time()
        settings = self.settings

        if config is None:
            config = resolve_config(environ)
        logger.info("=== recipe-sync ===")
        logger.info(f"Базовый каталог: {config.rel_dir}")
        logger.info(f"Проект: {config.tulip_path}")
        logger.info(f"Слой: {config.meta_path}")
        logger.info(f"Генератор: {config.generator_path}")

        # Reported only; the destination is not branch-scoped.
        branch = derive_branch(config.base_branch, settings.branch_suffix)
        logger.info(f"🌿 CI-ветка: {branch}")

        invoke_generator(config, settings)

        published = publish_artifacts(
            config.tulip_path,
            config.meta_path,
            pattern=settings.pattern,
            allow_empty=settings.allow_empty,
        )

        result = SyncResult(
            config=config,
            branch=branch,
            published=published,
            exec_time=time.time() - start_time,
        )
        logger.info("======================================")
        logger.info(f"📦 Опубликовано: {len(published)}")
        logger.info(f"🕓 Время выполнения: {utils.get_elapsed_time(start_time)}")
        logger.info("======================================")
        logger.ok("🎯 recipe-sync — завершено успешно.")
        return result
