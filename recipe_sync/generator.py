"""Invocation of the external ``cargo-bitbake`` recipe generator."""
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

from recipe_sync import logger
from recipe_sync.configuration import SyncConfig, ToolSettings
from recipe_sync.errors import GeneratorFailed

__all__ = ["build_command", "invoke_generator"]


def build_command(config: SyncConfig, settings: ToolSettings) -> List[str]:
    """Return the argv used to run the generator for *config*.

    With default settings this is::

        <gen>/precompiled/cargo-bitbake bitbake -t <gen>/templates/bitbake.inc.template
    """

    command = [str(config.generator_path / settings.executable), "bitbake"]
    if settings.quiet:
        command.append("-q")
    for template in settings.templates:
        command.extend(["-t", str(config.generator_path / template)])
    return command


def invoke_generator(config: SyncConfig, settings: ToolSettings) -> int:
    """Run the generator inside ``config.tulip_path`` and wait for it to exit.

    The working directory is handed to the child process; the current
    directory of this process is left alone. Standard streams are not
    captured. Returns the exit status (always ``0``) on success.
    """

    command = build_command(config, settings)
    workdir = Path(config.tulip_path)
    if not workdir.is_dir():
        raise GeneratorFailed(f"Каталог проекта не найден: {workdir}")

    logger.info(f"⚙️ Запуск генератора: {' '.join(command)}")
    logger.info(f"→ Рабочая папка: {workdir}")

    try:
        completed = subprocess.run(command, cwd=workdir, check=False, timeout=settings.timeout)
    except FileNotFoundError as exc:
        raise GeneratorFailed(f"Генератор не найден: {command[0]}") from exc
    except PermissionError as exc:
        raise GeneratorFailed(f"Генератор не является исполняемым файлом: {command[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise GeneratorFailed(f"Генератор не завершился за {settings.timeout:g} сек") from exc
    except OSError as exc:
        raise GeneratorFailed(f"Не удалось запустить генератор {command[0]}: {exc}") from exc

    if completed.returncode != 0:
        raise GeneratorFailed("Генератор завершился с ошибкой", completed.returncode)

    logger.ok("Генератор завершился успешно")
    return completed.returncode
