"""
Template environment: directory roles, template identifiers and the
filesystem reader shared by every view compiler and component.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, List, Mapping, Optional, Tuple, Union

from .cache import ArtifactCache, FileStore
from .config import (
    DEFAULT_EXTENSION,
    DEFAULT_NAMESPACE,
    EngineConfig,
    cache_enabled_by_env,
    load_config,
)
from .directives import DirectiveCompiler
from .errors import TemplateNotFound
from .runtime import HostEvaluator
from .types import DirectoryType, TemplateId

if TYPE_CHECKING:
    from .component import Component
    from .view import View

logger = logging.getLogger(__name__)


RootsArg = Mapping[Union[DirectoryType, str], Union[Path, str]]


class Environment:
    """
    Registry of directory roots per role plus the shared artifact cache.

    Roots are fixed at construction; the environment is safe to share
    between concurrent renders.
    """

    def __init__(
        self,
        roots: RootsArg,
        *,
        extension: str = DEFAULT_EXTENSION,
        namespace: str = DEFAULT_NAMESPACE,
        cache_dir: Optional[Path] = None,
        strict: bool = True,
    ):
        self._roots: Mapping[DirectoryType, Path] = MappingProxyType({
            DirectoryType.parse(role): Path(path).resolve() for role, path in roots.items()
        })
        self.extension = extension
        self.namespace = namespace

        store = None
        if cache_dir is not None and cache_enabled_by_env():
            store = FileStore(Path(cache_dir))
        self.cache = ArtifactCache(self, DirectiveCompiler(namespace), store)
        self.evaluator = HostEvaluator(strict=strict)

    @classmethod
    def from_config(cls, cfg: EngineConfig) -> "Environment":
        return cls(
            cfg.roots,
            extension=cfg.extension,
            namespace=cfg.namespace,
            cache_dir=cfg.cache_dir,
            strict=cfg.strict,
        )

    @classmethod
    def load(cls, root: Path) -> "Environment":
        """Environment for a project root configured by <root>/mky.yaml."""
        return cls.from_config(load_config(root))

    @property
    def roots(self) -> Mapping[DirectoryType, Path]:
        return self._roots

    # --------------------------- Filesystem reader --------------------------- #

    def source_path(self, template: TemplateId) -> Path:
        """
        Absolute source path for a template.

        Raises:
            TemplateNotFound: No root for the role, or the name escapes the root
        """
        root = self._roots.get(template.role)
        name = template.name.strip().strip("/")
        if root is None or not name:
            raise TemplateNotFound(template)
        path = (root / f"{name}{self.extension}").resolve()
        try:
            path.relative_to(root)
        except ValueError:
            raise TemplateNotFound(template, path) from None
        return path

    def source_mtime(self, template: TemplateId) -> float:
        path = self.source_path(template)
        if not path.is_file():
            raise TemplateNotFound(template, path)
        return path.stat().st_mtime

    def read_source(self, template: TemplateId) -> Tuple[str, float]:
        """Returns (source text, modification time)."""
        path = self.source_path(template)
        try:
            mtime = path.stat().st_mtime
            text = path.read_text(encoding="utf-8")
        except OSError:
            raise TemplateNotFound(template, path) from None
        logger.debug(f"Read source of '{template}' from {path}")
        return text, mtime

    def list_templates(self, role: Union[DirectoryType, str]) -> List[str]:
        """Logical names of all templates under the role's root, sorted."""
        root = self._roots.get(DirectoryType.parse(role))
        if root is None or not root.is_dir():
            return []
        out: List[str] = []
        for p in root.rglob(f"*{self.extension}"):
            if p.is_file():
                rel = p.relative_to(root).as_posix()
                out.append(rel[: len(rel) - len(self.extension)])
        out.sort()
        return out

    # --------------------------- Factories --------------------------- #

    def component(self, name: str) -> "Component":
        from .component import Component
        return Component(self, name)

    def view(self, name: str) -> "View":
        from .view import View
        return View(self, name)


__all__ = ["DirectoryType", "TemplateId", "Environment"]
