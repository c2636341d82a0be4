"""Access to the in-page instrumentation asset and the evaluation wrapper."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .bridge import BRIDGE_NAME

SCRIPT_PATH = Path(__file__).with_name('instrumentation.js')
BRIDGE_NAME_TOKEN = '__BRIDGE_NAME__'
INSTALL_GUARD = '__webviewInspectorInstalled'


@lru_cache(maxsize=1)
def _read_script_template() -> str:
    return SCRIPT_PATH.read_text(encoding='utf-8')


def build_instrumentation_script(bridge_name: str = BRIDGE_NAME, prelude: str = '') -> str:
    """Return the instrumentation source bound to ``bridge_name``.

    ``prelude`` is prepended verbatim; the Qt shell uses it to ship the
    ``qwebchannel.js`` client library with the hooks.
    """
    if not bridge_name or not bridge_name.isidentifier():
        raise ValueError(f'Invalid bridge name: {bridge_name!r}')
    source = _read_script_template().replace(BRIDGE_NAME_TOKEN, bridge_name)
    if prelude:
        return f'{prelude.rstrip()}\n;\n{source}'
    return source


_EVALUATION_TEMPLATE = """(function() {
  try {
    var value = (0, eval)(%s);
    if (value === undefined || value === null) { return { ok: true, value: null }; }
    if (typeof value === "string" || typeof value === "number" || typeof value === "boolean") {
      return { ok: true, value: value };
    }
    try { return { ok: true, value: JSON.stringify(value) }; } catch (e) { return { ok: true, value: String(value) }; }
  } catch (error) {
    return { ok: false, error: (error && error.message) ? String(error.name || "Error") + ": " + error.message : String(error) };
  }
})();"""


def build_evaluation_script(source: str) -> str:
    """Wrap user ``source`` so that its result or exception comes back as data.

    The wrapper evaluates ``source`` in global scope and returns
    ``{"ok": True, "value": ...}`` or ``{"ok": False, "error": "..."}``.
    """
    return _EVALUATION_TEMPLATE % json.dumps(source)


def parse_evaluation_result(result: Any) -> Tuple[bool, Optional[Any]]:
    """Interpret the value returned by a wrapped evaluation.

    Returns ``(True, value)`` on success and ``(False, error_text)`` when the
    script raised. Anything not produced by the wrapper is treated as a plain
    successful value.
    """
    if isinstance(result, Mapping) and 'ok' in result:
        if result.get('ok'):
            return True, result.get('value')
        return False, str(result.get('error') or 'Unknown error')
    return True, result


__all__ = [
    'BRIDGE_NAME_TOKEN',
    'INSTALL_GUARD',
    'SCRIPT_PATH',
    'build_evaluation_script',
    'build_instrumentation_script',
    'parse_evaluation_result',
]
