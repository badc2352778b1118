"""
Helmsman command registry: the descriptors an engine can dispatch to.

Contract
- register(candidate) -> bool
  • accepts a CommandDescriptor or a @command class (described on the spot).
  • refuses (returns False, never raises) candidates that break the command
    capability contract (no callable execute), malformed classes and names
    that are already registered.
- lookup(name) -> CommandDescriptor | None
  • exact string match on the registered name (which embeds its prefix).

Registration is expected to happen before parsing; the registry is read-only
while the engine dispatches.
"""
import logging

from .descriptors import CommandDescriptor, describe

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Ordered collection of command descriptors keyed by name.
    """

    def __init__(self):
        self._commands = {}

    def register(self, candidate, /):
        """
        Register a command descriptor or a @command class.

        Returns
        - True when the command was added.
        - False when the candidate is malformed, lacks a callable execute(), or
          its name is already taken (first registration wins).
        """
        if not isinstance(candidate, CommandDescriptor):
            try:
                candidate = describe(candidate)
            except (TypeError, ValueError) as exception:
                logger.info("refused command %r: %s", candidate, exception)
                return False

        if not callable(getattr(candidate.type, "execute", None)):
            logger.info("refused command %r: %s has no callable execute()", candidate.name, candidate.type.__name__)
            return False
        if candidate.name in self._commands:
            logger.info("refused command %r: name already registered", candidate.name)
            return False

        self._commands[candidate.name] = candidate
        logger.debug("registered command %r", candidate.name)
        return True

    def lookup(self, name, /):
        """
        Return the descriptor registered under name, or None.
        """
        return self._commands.get(name)

    def __contains__(self, name):
        return name in self._commands

    def __iter__(self):
        return iter(tuple(self._commands.values()))

    def __len__(self):
        return len(self._commands)


__all__ = (
    "CommandRegistry",
)
