"""UI theme definitions and selection helpers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the browser renderer."""

    name: str
    reset: str
    reverse: str
    header: str
    header_flag: str
    entry_dir: str
    entry_file: str
    checkbox_marked: str
    status: str
    status_error: str
    help_key: str
    help_dim: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    header="\033[1;38;5;81m",
    header_flag="\033[2;38;5;250m",
    entry_dir="\033[1;34m",
    entry_file="\033[38;5;252m",
    checkbox_marked="\033[38;5;42m",
    status="\033[38;5;205m",
    status_error="\033[1;38;5;203m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    reverse="\033[7m",
    header="\033[1;38;5;45m",
    header_flag="\033[2;38;5;110m",
    entry_dir="\033[1;38;5;45m",
    entry_file="\033[38;5;252m",
    checkbox_marked="\033[38;5;84m",
    status="\033[38;5;117m",
    status_error="\033[1;38;5;209m",
    help_key="\033[38;5;153m",
    help_dim="\033[2;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    reverse="",
    header="",
    header_flag="",
    entry_dir="",
    entry_file="",
    checkbox_marked="",
    status="",
    status_error="",
    help_key="",
    help_dim="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    candidate = str(name or "").strip().lower()
    return _THEMES.get(candidate, DEFAULT_THEME)


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "resolve_theme",
]
