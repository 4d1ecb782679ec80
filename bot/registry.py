"""Command registry — single source of truth for slash-command → handler mapping.

Handlers are bound with the :meth:`CommandRegistry.register` decorator in
:mod:`bot.handlers`; the router only calls :meth:`CommandRegistry.dispatch`.

Design:
- ``CommandHandler`` is a :class:`Protocol` describing the handler
  signature: the router that received the event, plus the event itself.
- The registry is filled once at import time and only read afterwards,
  so concurrent dispatches never race on it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

from bot.events import Command

if TYPE_CHECKING:
    from bot.dispatcher import EventRouter


# ── Handler protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class CommandHandler(Protocol):
    """Async handler for one slash-command."""
    async def __call__(self, router: "EventRouter", event: Command) -> None: ...  # noqa: E704


# ── Registry ─────────────────────────────────────────────────────────────────

class CommandRegistry:
    """Map command names to handlers.

    Usage::

        commands = CommandRegistry()

        @commands.register("ping")
        async def handle_ping(router, event): ...

        # In the router:
        await commands.dispatch(event.name, router, event)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def register(self, *names: str) -> Callable[[CommandHandler], CommandHandler]:
        """Decorator that registers the handler under every name in *names*.

        Example::

            @commands.register("help", "list", "ranking")
            async def handle_passthrough(router, event): ...
        """
        def decorator(func: CommandHandler) -> CommandHandler:
            for name in names:
                self._handlers[name] = func
            return func
        return decorator

    async def dispatch(self, name: str, router: "EventRouter", event: Command) -> bool:
        """Look up *name* and invoke its handler.

        Returns ``True`` if a handler was found and called, ``False`` otherwise.
        """
        handler = self._handlers.get(name)
        if handler is None:
            return False
        await handler(router, event)
        return True


# Filled by the decorators in bot.handlers.
commands = CommandRegistry()
