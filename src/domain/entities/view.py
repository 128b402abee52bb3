"""View-node descriptors for form layouts.

A layout is a tree of plain frozen dataclasses. Renderers walk the tree
through ``to_dict()``; nothing here knows about HTML.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


@dataclass(frozen=True, slots=True)
class FieldNode:
    """A single input bound to a form field key."""

    type: ClassVar[str] = "field"

    name: str
    label: str
    input_type: str = "text"
    binding: str = "live"
    attributes: dict[str, str] = field(default_factory=dict)
    hint: str | None = None
    help: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "label": self.label,
            "input_type": self.input_type,
            "binding": self.binding,
            "attributes": dict(self.attributes),
            "hint": self.hint,
            "help": self.help,
            "extra": dict(self.extra),
        }


@dataclass(frozen=True, slots=True)
class LayoutNode:
    """Groups children under a CSS layout class (grid, columns...)."""

    type: ClassVar[str] = "layout"

    css_class: str
    children: tuple["ViewNode", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "css_class": self.css_class,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True, slots=True)
class FieldsetNode:
    """A labelled group of fields."""

    type: ClassVar[str] = "fieldset"

    label: str
    children: tuple["ViewNode", ...] = ()
    css_class: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "label": self.label,
            "css_class": self.css_class,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True, slots=True)
class TabNode:
    """One tab inside a TabsNode."""

    type: ClassVar[str] = "tab"

    label: str
    children: tuple["ViewNode", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "label": self.label,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True, slots=True)
class TabsNode:
    """Top-level tab container."""

    type: ClassVar[str] = "tabs"

    label: str
    tabs: tuple[TabNode, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "label": self.label,
            "tabs": [tab.to_dict() for tab in self.tabs],
        }


ViewNode = Union[FieldNode, LayoutNode, FieldsetNode, TabNode, TabsNode]


@dataclass(frozen=True, slots=True)
class ViewHandle:
    """What a component hands to the UI shell for rendering."""

    template: str
    layout: str
    title: str
    fields: tuple[ViewNode, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "layout": self.layout,
            "title": self.title,
            "fields": [node.to_dict() for node in self.fields],
            "data": dict(self.data),
        }


def iter_fields(nodes: tuple[ViewNode, ...]) -> list[FieldNode]:
    """Flatten a layout tree into its field nodes, in document order."""
    found: list[FieldNode] = []
    for node in nodes:
        if isinstance(node, FieldNode):
            found.append(node)
        elif isinstance(node, TabsNode):
            found.extend(iter_fields(node.tabs))
        else:
            found.extend(iter_fields(node.children))
    return found
