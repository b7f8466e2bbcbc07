"""Redirection handling for one pipeline stage.

Targets are expanded and opened before the command runs. ``<`` reads the
whole file up front (stages exchange complete buffers); ``>`` and ``>>``
open the file for the stage to write into. Every output target is
created even when a later one of the same direction overrides it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO, Optional, Sequence

from ..ast.types import RedirectKind, RedirectionNode
from ..errors import RedirectionError
from .expansion import expand_word

if TYPE_CHECKING:
    from .environment import Environment
    from .types import InterpreterContext

logger = logging.getLogger(__name__)


@dataclass
class StageRedirections:
    """Opened redirections of one stage."""

    stdin: Optional[bytes] = None
    """Contents of the last ``<`` target, if any."""

    stdout: Optional[BinaryIO] = None
    """The last ``>``/``>>`` target, open for writing."""

    opened: list[BinaryIO] = field(default_factory=list)

    def write(self, data: bytes) -> None:
        """Write builtin output to the redirected stdout."""
        if self.stdout is not None and data:
            self.stdout.write(data)
            self.stdout.flush()

    def close(self) -> None:
        for handle in self.opened:
            handle.close()
        self.opened.clear()


def _describe(error: OSError) -> str:
    return error.strerror or str(error)


async def open_redirections(
    ctx: "InterpreterContext",
    redirections: Sequence[RedirectionNode],
    env: "Environment",
) -> StageRedirections:
    """Expand and open every redirection of a command, in order.

    Raises:
        RedirectionError: a target is empty or cannot be opened.
        ExpansionError: a target's command substitution failed to start.
    """
    result = StageRedirections()
    try:
        for redirection in redirections:
            target = await expand_word(ctx, redirection.target, env)
            if not target:
                raise RedirectionError("ambiguous redirect")
            path = os.path.join(ctx.state.cwd, target)

            if redirection.kind is RedirectKind.INPUT:
                try:
                    with open(path, "rb") as f:
                        result.stdin = f.read()
                except OSError as e:
                    raise RedirectionError(f"{target}: {_describe(e)}") from e
                continue

            mode = "ab" if redirection.kind is RedirectKind.APPEND else "wb"
            try:
                handle = open(path, mode)
            except OSError as e:
                raise RedirectionError(f"{target}: {_describe(e)}") from e
            logger.debug("redirect stdout to %s (%s)", path, mode)
            result.opened.append(handle)
            result.stdout = handle
    except BaseException:
        result.close()
        raise
    return result
