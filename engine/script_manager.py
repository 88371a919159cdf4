"""
Script Manager
Discovers deploy scripts and selects the ones to run by tag
"""

import importlib.util
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence
from loguru import logger

from utils.exceptions import ConfigError


@dataclass
class DeployScript:
    """A deploy/*.py file: TAGS, async main(env) and an optional skip(env)"""
    name: str
    path: Path
    main: Callable
    tags: List[str] = field(default_factory=list)
    skip: Optional[Callable] = None


class ScriptManager:
    """
    Loads deploy scripts in filename order
    """

    def __init__(self, scripts_dir: Path):
        """
        Initialize Script Manager

        Args:
            scripts_dir: Directory holding the deploy scripts
        """
        self.scripts_dir = Path(scripts_dir)
        self._scripts: Optional[List[DeployScript]] = None

    def load(self) -> List[DeployScript]:
        """
        Import every deploy script

        Raises:
            ConfigError: If the directory is missing or a script has no main()
        """
        if self._scripts is not None:
            return self._scripts

        if not self.scripts_dir.is_dir():
            raise ConfigError(f"Deploy scripts directory not found: {self.scripts_dir}")

        scripts = []
        for path in sorted(self.scripts_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue
            scripts.append(self._load_script(path))

        logger.info(f"Loaded {len(scripts)} deploy script(s) from {self.scripts_dir}")

        self._scripts = scripts
        return scripts

    def select(self, tags: Sequence[str] = ()) -> List[DeployScript]:
        """
        Scripts matching any of the tags (all scripts when no tags are given)
        """
        scripts = self.load()

        if not tags:
            return scripts

        wanted = set(tags)
        return [script for script in scripts if wanted.intersection(script.tags)]

    def _load_script(self, path: Path) -> DeployScript:
        spec = importlib.util.spec_from_file_location(f"deploy_scripts.{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        main = getattr(module, 'main', None)
        if not callable(main):
            raise ConfigError(f"Deploy script {path.name} does not define main(env)")

        return DeployScript(
            name=path.stem,
            path=path,
            main=main,
            tags=list(getattr(module, 'TAGS', [])),
            skip=getattr(module, 'skip', None)
        )
