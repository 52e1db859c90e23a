from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional, Union

from .types import DirectoryType, Scope, TemplateId

if TYPE_CHECKING:
    from .environment import Environment

logger = logging.getLogger(__name__)


class ViewCompiler:
    """
    Binds an environment to one logical template name and drives
    resolve → get-or-compile → execute for it.
    """

    def __init__(self, environment: "Environment", view: str):
        self.environment = environment
        self.view = view
        self.variables: Scope = {}

    def set_variables(self, variables: Scope) -> None:
        self.variables = variables

    def render(self, role: Union[DirectoryType, str], caller: Optional[Any] = None) -> str:
        """
        Renders the template under the given role.

        Args:
            role: Directory role to resolve the name in
            caller: Enclosing component, exposed to the template as ``this``

        Raises:
            TemplateNotFound, CompileError, RenderError
        """
        template = TemplateId(DirectoryType.parse(role), self.view)
        artifact = self.environment.cache.resolve(template)
        logger.debug(f"Rendering '{template}' with {len(self.variables)} variable(s)")
        return self.environment.evaluator.execute(artifact, self.variables, caller)

    def get_view(self) -> str:
        return self.view

    def get_environment(self) -> "Environment":
        return self.environment


__all__ = ["ViewCompiler"]
