# plpgen/bot/menus.py
"""
Texts and inline keyboards shown by the wizard.
"""
from typing import Any, Dict, List

from plpgen.generation.options import GenerationOptions

HELP_TEXT = "Hi! Use /auth <admin_code> to unlock.\nThen /gen"
COMMANDS_TEXT = "Commands:\n/auth <code>\n/gen\n/logout"
LOCKED_TEXT = "🔒 Locked. Use /auth <admin_code> first."

COUNT_PRESETS = (10, 25, 50, 100)


def _button(text: str, data: str) -> Dict[str, str]:
    return {"text": text, "callback_data": data}


def _keyboard(rows: List[List[Dict[str, str]]]) -> Dict[str, Any]:
    return {"inline_keyboard": rows}


def count_menu(max_count: int) -> Dict[str, Any]:
    presets = [p for p in COUNT_PRESETS if p <= max_count]
    return _keyboard([
        [_button(str(n), f"count:{n}") for n in presets[:3]],
        [_button(str(n), f"count:{n}") for n in presets[3:]]
        + [_button(f"Custom (1-{max_count})", "count:custom")],
    ])


def mode_menu(prefix: str) -> Dict[str, Any]:
    return _keyboard([
        [_button("Random", f"{prefix}:random")],
        [_button("Fixed (type)", f"{prefix}:fixed")],
    ])


def confirm_menu() -> Dict[str, Any]:
    return _keyboard([
        [_button("🚀 Generate", "do_generate")],
        [_button("Cancel", "cancel")],
    ])


def confirm_summary(options: GenerationOptions) -> str:
    first = options.first_mode + (f" ({options.fixed_first})" if options.first_mode == "fixed" else "")
    last = options.last_mode + (f" ({options.fixed_last})" if options.last_mode == "fixed" else "")
    return (
        "✅ Ready\n"
        f"• count: {options.count}\n"
        f"• first: {first}\n"
        f"• last: {last}\n"
        f"• text2: {options.text2}\n"
        "\n"
        "Press Generate:"
    )
