"""
Host evaluation substrate.

Compiled artifacts are Jinja2 template text. The evaluator turns them into
jinja2.Template objects (one per template, rebuilt when its code changes) and renders them against
a component scope.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from jinja2 import Environment as JinjaEnvironment
from jinja2 import StrictUndefined, Template, TemplateError, Undefined

from .errors import MkyUserError, RenderError
from .types import CompiledArtifact

logger = logging.getLogger(__name__)

# Reserved scope name under which the rendering component is exposed
CALLER_NAME = "this"


def create_jinja_env(strict: bool = True) -> JinjaEnvironment:
    """
    Jinja2 environment used to execute artifacts.

    Autoescape stays off: textual values are escaped once when bound.
    """
    return JinjaEnvironment(
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined if strict else Undefined,
    )


class HostEvaluator:
    """Executes compiled artifacts."""

    def __init__(self, strict: bool = True, jinja_env: Optional[JinjaEnvironment] = None):
        self.jinja_env = jinja_env or create_jinja_env(strict)
        # template key -> (code digest, built template)
        self._templates: Dict[str, Tuple[str, Template]] = {}

    def template_for(self, artifact: CompiledArtifact) -> Template:
        """Jinja template for an artifact; faults surface as RenderError."""
        key = artifact.template.key()
        digest = hashlib.sha1(artifact.code.encode("utf-8")).hexdigest()
        held = self._templates.get(key)
        if held is not None and held[0] == digest:
            return held[1]
        try:
            template = self.jinja_env.from_string(artifact.code)
        except TemplateError as e:
            raise RenderError(artifact.template, e) from e
        self._templates[key] = (digest, template)
        logger.debug(f"Built Jinja template for '{artifact.template}'")
        return template

    def __len__(self) -> int:
        return len(self._templates)

    def execute(self, artifact: CompiledArtifact, scope: Mapping[str, Any], caller: Any = None) -> str:
        """
        Renders an artifact against a scope.

        Args:
            artifact: Compiled artifact
            scope: Variables visible to the template
            caller: Optional handle exposed as ``this`` for nested composition

        Returns:
            Rendered text

        Raises:
            RenderError: Template execution failed
        """
        template = self.template_for(artifact)
        context = dict(scope)
        if caller is not None:
            context[CALLER_NAME] = caller
        try:
            return template.render(context)
        except MkyUserError:
            # typed failures of nested components keep their own context
            raise
        except Exception as e:
            raise RenderError(artifact.template, e) from e


__all__ = ["CALLER_NAME", "HostEvaluator", "create_jinja_env"]
