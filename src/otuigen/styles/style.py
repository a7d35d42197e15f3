"""Style sheet entries."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StyleEntry:
    """A named style block from an OTUI style sheet.

    Attributes:
        name: Style name (e.g. Button)
        parent: Name of the style this one inherits from, if any
        properties: Properties declared directly in this block
        states: State name (e.g. 'hover', '!checked') -> declared properties
        resolved: Properties after inheritance (None until resolved)
        resolved_states: State overlays merged over ``resolved``
    """

    name: str
    parent: str | None = None
    properties: dict[str, str] = field(default_factory=dict)
    states: dict[str, dict[str, str]] = field(default_factory=dict)
    resolved: dict[str, str] | None = None
    resolved_states: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None

    def get(self, key: str, state: str | None = None, default: str | None = None) -> str | None:
        """Look up a resolved property, optionally in a state overlay.

        Falls back to the declared properties for unresolved entries.
        """
        if state is not None and state in self.resolved_states:
            return self.resolved_states[state].get(key, default)
        source = self.resolved if self.resolved is not None else self.properties
        return source.get(key, default)

    def copy(self) -> StyleEntry:
        return StyleEntry(
            name=self.name,
            parent=self.parent,
            properties=dict(self.properties),
            states={state: dict(props) for state, props in self.states.items()},
            resolved=dict(self.resolved) if self.resolved is not None else None,
            resolved_states={state: dict(props) for state, props in self.resolved_states.items()},
        )

    def to_dict(self) -> dict[str, object]:
        """Convert to plain data (for YAML dumps)."""
        data: dict[str, object] = {"name": self.name}
        if self.parent:
            data["parent"] = self.parent
        data["properties"] = dict(self.resolved if self.resolved is not None else self.properties)
        states = self.resolved_states if self.resolved is not None else self.states
        if states:
            data["states"] = {state: dict(props) for state, props in states.items()}
        return data
