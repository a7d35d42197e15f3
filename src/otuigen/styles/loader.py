"""Parse OTUI style sheets and resolve style inheritance."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .style import StyleEntry
from ..core.node import strip_ui_prefix
from ..core.registry import WidgetRegistry


logger = logging.getLogger(__name__)

STYLE_RE = re.compile(r"^([A-Za-z][A-Za-z0-9_]*)(?:\s*<\s*([A-Za-z][A-Za-z0-9_]*))?$")
STATE_RE = re.compile(r"^\$(.+?):?$")
PROP_COLON_RE = re.compile(r"^([!a-zA-Z.-]+):\s*(.+)$")
PROP_SPACE_RE = re.compile(r"^([a-zA-Z.-]+)\s+(.+)$")
PROP_BOOL_RE = re.compile(r"^([a-z-]+)$")

STYLE_EXTENSION = ".otui"


def parse_style_sheet(text: str) -> dict[str, StyleEntry]:
    """Parse style sheet text into style entries keyed by name.

    Style sheet format:
        Button < UIButton
          color: #dfdfdf
          size 106 23
          $hover
            color: #ffffff
          $!checked
            image-clip: 0 0 12 12

    A later block with the same name replaces an earlier one. Child widgets
    declared inside a style (an indented ``Label`` line and everything below
    it) belong to the child, not the style, and are skipped.

    Args:
        text: Style sheet source

    Returns:
        Dict of style name -> StyleEntry (unresolved)
    """
    if not isinstance(text, str):
        raise TypeError(f"Style sheet must be text, not {type(text).__name__}")

    styles: dict[str, StyleEntry] = {}
    current: StyleEntry | None = None
    state: dict[str, str] | None = None
    state_indent = 0
    # Indent of a nested child widget block whose lines are skipped
    child_indent: int | None = None

    for line in text.split("\n"):
        line = line.rstrip("\r")
        stripped = line.strip()
        if not stripped or stripped.startswith("//") or stripped.startswith("#"):
            continue
        indent = len(line) - len(line.lstrip())

        if child_indent is not None:
            if indent > child_indent:
                continue
            child_indent = None

        if indent == 0:
            match = STYLE_RE.match(stripped)
            if match:
                current = StyleEntry(name=match.group(1), parent=match.group(2))
                styles[current.name] = current
                state = None
                continue

        if current is None:
            continue

        match = STATE_RE.match(stripped)
        if match:
            state_name = " ".join(match.group(1).split())
            state = current.states.setdefault(state_name, {})
            state_indent = indent
            continue

        if state is not None and indent <= state_indent:
            state = None

        if indent > 0 and stripped[0].isupper() and STYLE_RE.match(stripped):
            child_indent = indent
            continue

        target = state if state is not None else current.properties

        match = PROP_COLON_RE.match(stripped)
        if match:
            target[match.group(1)] = _strip_quotes(match.group(2).strip())
            continue

        match = PROP_SPACE_RE.match(stripped)
        if match:
            target[match.group(1)] = match.group(2).strip()
            continue

        match = PROP_BOOL_RE.match(stripped)
        if match and indent > 0:
            target.setdefault(match.group(1), "true")

    return styles


def resolve_inheritance(styles: dict[str, StyleEntry]) -> dict[str, StyleEntry]:
    """Flatten every style's inheritance chain.

    ``resolved`` of a style is its parent's resolved properties overlaid with
    its own; each state overlay is the style's resolved properties overlaid
    with the state's own. Missing parents and cycles contribute nothing.

    Args:
        styles: Style entries keyed by name

    Returns:
        New dict of resolved copies (the input is not modified)
    """
    memo: dict[str, dict[str, str]] = {}
    resolving: set[str] = set()

    def resolve(name: str) -> dict[str, str]:
        if name in memo:
            return memo[name]
        if name in resolving:
            logger.debug(f"Inheritance cycle through style {name}")
            return {}
        entry = styles.get(name)
        if entry is None:
            return {}

        resolving.add(name)
        props = dict(resolve(entry.parent)) if entry.parent else {}
        resolving.discard(name)

        props.update(entry.properties)
        memo[name] = props
        return props

    result = {}
    for name, entry in styles.items():
        resolved_entry = entry.copy()
        resolved_entry.resolved = dict(resolve(name))
        resolved_entry.resolved_states = {
            state: {**resolved_entry.resolved, **props} for state, props in entry.states.items()
        }
        result[name] = resolved_entry
    return result


def style_for_widget(
    styles: dict[str, StyleEntry], widget_type: str, registry: WidgetRegistry | None = None
) -> StyleEntry | None:
    """Find the style that applies to a widget type.

    Tries the registry's style names for the type in order, then the type
    name without its 'UI' prefix, then the type name itself.

    Args:
        styles: Resolved style entries
        widget_type: Canonical widget type (e.g. UIButton)
        registry: Registry holding the style-name table

    Returns:
        The matching StyleEntry, or None
    """
    if not widget_type or not styles:
        return None

    candidates = list(registry.style_names.get(widget_type, [])) if registry is not None else []
    candidates += [strip_ui_prefix(widget_type), widget_type]

    for name in candidates:
        entry = styles.get(name)
        if entry is None:
            continue
        if not entry.is_resolved:
            entry = resolve_inheritance(styles)[name]
        return entry
    return None


class StyleLoader:
    """Loads style sheets (.otui files) from search directories.

    Sheets are cached per loader instance. ``load_all`` merges every sheet
    found, in sorted file order, and resolves inheritance across them.
    """

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        """Initialize loader with search paths.

        Args:
            search_paths: Directories to search for .otui files.
                         Defaults to the current directory.
        """
        self.search_paths = [Path(p) for p in search_paths] if search_paths else [Path(".")]
        self._cache: dict[Path, dict[str, StyleEntry]] = {}

    def load(self, name: str) -> dict[str, StyleEntry]:
        """Load one style sheet by name.

        Searches for {name}.otui in the search paths.

        Args:
            name: Sheet name, with or without the .otui extension

        Returns:
            Dict of style name -> StyleEntry (unresolved)

        Raises:
            FileNotFoundError: If the sheet is not found
        """
        filename = name if name.endswith(STYLE_EXTENSION) else f"{name}{STYLE_EXTENSION}"
        for search_path in self.search_paths:
            path = search_path / filename
            if path.is_file():
                return self.load_file(path)
        raise FileNotFoundError(
            f"Style sheet '{name}' not found in search paths: {self.search_paths}"
        )

    def load_file(self, path: str | Path) -> dict[str, StyleEntry]:
        """Load a style sheet from an explicit path.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid UTF-8 text
        """
        path = Path(path)
        if path in self._cache:
            return self._cache[path]
        if not path.is_file():
            raise FileNotFoundError(f"Style sheet not found: {path}")

        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"Style sheet {path} is not valid UTF-8: {e}") from e

        styles = parse_style_sheet(text)
        logger.debug(f"Loaded {len(styles)} styles from {path}")
        self._cache[path] = styles
        return styles

    def load_all(self) -> dict[str, StyleEntry]:
        """Load every .otui file in the search paths and resolve inheritance.

        Returns:
            Dict of style name -> resolved StyleEntry
        """
        merged: dict[str, StyleEntry] = {}
        for search_path in self.search_paths:
            if search_path.is_file():
                merged.update(self.load_file(search_path))
                continue
            if not search_path.is_dir():
                logger.warning(f"Style path does not exist: {search_path}")
                continue
            for path in sorted(search_path.rglob(f"*{STYLE_EXTENSION}")):
                merged.update(self.load_file(path))
        return resolve_inheritance(merged)

    def clear_cache(self) -> None:
        """Clear the sheet cache."""
        self._cache.clear()


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value
