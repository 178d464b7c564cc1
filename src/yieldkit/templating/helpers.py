"""Template helpers for layouts: ``could_yield`` and ``yield``.

A layout pulls the page it wraps in with ``{{ yield_content() }}`` and
named regions with ``{{ yield_content("sidebar") }}``::

    <body>
      {% if could_yield("sidebar") %}
        <aside>{{ yield_content("sidebar") }}</aside>
      {% end %}
      <main>{{ yield_content() }}</main>
    </body>

Both read the ``ContentForItems`` map that ``LayoutTemplateResult`` puts
into the render arguments: the empty name is the page itself, every other
key was registered with ``LayoutController.content_for``.

kida renders from a per-call copy of the context and has no expression for
"the whole context", so the render arguments are also published through a
ContextVar for the duration of a render. Passing them explicitly as the
last argument still works and wins over the active ones.

``yield`` is registered as an alias of ``yield_content`` for callers that
look helpers up by name (``env.globals["yield"]``). Templates use
``yield_content`` since ``yield`` is a Python keyword.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from kida import Markup

from yieldkit.errors import YieldArgumentError, YieldContextError

logger = logging.getLogger("yieldkit.templating")

CONTENT_FOR_ITEMS = "ContentForItems"
"""Reserved render-argument key holding the yield name -> template map."""

_render_args_var: ContextVar[Mapping[str, Any] | None] = ContextVar(
    "yieldkit_render_args", default=None
)


@contextmanager
def active_render_args(render_args: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    """Publish *render_args* to the yield helpers for the enclosed render."""
    token = _render_args_var.set(render_args)
    try:
        yield render_args
    finally:
        _render_args_var.reset(token)


def get_render_args() -> Mapping[str, Any] | None:
    """Render arguments of the render in progress, or ``None``."""
    return _render_args_var.get()


def could_yield(name: str, render_args: Mapping[str, Any] | None = None) -> bool:
    """Whether a content block named *name* was registered for this render.

    Never raises: missing render arguments, a missing ``ContentForItems``
    or one of the wrong shape all answer ``False``.
    """
    if render_args is None:
        render_args = _render_args_var.get()
    if not isinstance(render_args, Mapping):
        return False
    items = render_args.get(CONTENT_FOR_ITEMS)
    if not isinstance(items, Mapping):
        return False
    return name in items


def yield_content(*args: Any) -> Markup:
    """Render a registered content block and return it as trusted markup.

    Accepted call shapes::

        yield_content()                      # the page, active render arguments
        yield_content(render_args)           # the page
        yield_content("sidebar")             # named block, active render arguments
        yield_content("sidebar", render_args)

    An unregistered name renders nothing. Render failures propagate so the
    template engine reports them against the calling template.
    """
    target = ""
    render_args: Any
    match len(args):
        case 0:
            render_args = _render_args_var.get()
        case 1:
            (arg,) = args
            if isinstance(arg, str):
                target = arg
                render_args = _render_args_var.get()
            elif isinstance(arg, Mapping):
                render_args = arg
            else:
                raise YieldArgumentError(
                    "yield takes a block name or the render arguments, "
                    f"got {type(arg).__name__}"
                )
        case 2:
            name, render_args = args
            if not isinstance(name, str):
                raise YieldArgumentError(
                    "Named yields require the name as the first argument"
                )
            if not isinstance(render_args, Mapping):
                raise YieldArgumentError(
                    "Named yields require the render arguments as the second argument"
                )
            target = name
        case _:
            raise YieldArgumentError(f"yield: argument length error ({len(args)} given)")

    if render_args is None:
        raise YieldContextError("yield requires the base render arguments")

    items = render_args.get(CONTENT_FOR_ITEMS)
    if items is None:
        raise YieldContextError(f"yield requires {CONTENT_FOR_ITEMS} in the render arguments")
    if not isinstance(items, Mapping):
        raise YieldContextError(f"yield: {CONTENT_FOR_ITEMS} was overwritten")

    template = items.get(target)
    if template is None:
        logger.debug("yield(%r): no content registered", target)
        return Markup("")

    with active_render_args(render_args):
        return Markup(template.render(dict(render_args)))


YIELD_HELPERS: dict[str, Any] = {
    "could_yield": could_yield,
    "yield": yield_content,
    "yield_content": yield_content,
}
