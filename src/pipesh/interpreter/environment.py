"""Environment store: variable bindings, overlays and executable lookup.

The ambient store is a plain dict owned by the interpreter for the whole
session. Prefix assignments such as ``A=1 cmd`` never touch it: the
command runs against an overlay, a child mapping consulted before the
ambient one and dropped once the command is done.
"""

from __future__ import annotations

import logging
import os
from collections import ChainMap
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

PATH_VARIABLE = "PATH"


class Environment(ChainMap):
    """Layered variable bindings.

    ``maps[-1]`` is the ambient store; any earlier maps are overlays.
    Reads fall through the layers, writes go to the innermost one.
    """

    @property
    def ambient(self) -> dict[str, str]:
        """The persistent store underneath every overlay."""
        return self.maps[-1]

    @property
    def is_overlay(self) -> bool:
        return len(self.maps) > 1

    def set(self, name: str, value: str) -> None:
        """Bind ``name`` in the innermost layer (last write wins)."""
        logger.debug("set %s=%r%s", name, value, " (overlay)" if self.is_overlay else "")
        self[name] = value

    def overlay(self, bindings: Optional[Mapping[str, str]] = None) -> "Environment":
        """A transient view that shadows this one without mutating it."""
        return self.new_child(dict(bindings or {}))

    def search_path(self) -> list[str]:
        """Directories listed in PATH, in order, empty entries skipped."""
        value = self.get(PATH_VARIABLE, "")
        return [entry for entry in value.split(os.pathsep) if entry]

    def resolve_executable(self, name: str, cwd: str = ".") -> Optional[str]:
        """Find the program ``name`` would run, or None.

        A name containing a slash is taken as a path relative to ``cwd``
        and returned if it exists (whether it can actually be executed is
        left to the spawn). Otherwise each PATH directory is searched in
        order for an executable regular file.
        """
        if not name:
            return None
        if "/" in name:
            path = os.path.join(cwd, name)
            return path if os.path.exists(path) else None
        for directory in self.search_path():
            candidate = os.path.join(cwd, directory, name)
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
        return None

    def to_dict(self) -> dict[str, str]:
        """Flatten all layers into the mapping handed to child processes."""
        return dict(self)
