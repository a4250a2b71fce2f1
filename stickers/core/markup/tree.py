"""
Visual Tree
===========

Plain value types describing a sticker layout: containers with children,
text leaves and image leaves. Nodes are frozen and compare structurally, so
building the same card twice yields equal trees.
"""

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Edges(_Frozen):
    """Box edge sizes (padding or margin) in pixels."""
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    @classmethod
    def of(
        cls,
        top: float,
        right: Optional[float] = None,
        bottom: Optional[float] = None,
        left: Optional[float] = None,
    ) -> "Edges":
        """Build edges with CSS shorthand semantics (1 to 4 values)."""
        right = top if right is None else right
        bottom = top if bottom is None else bottom
        left = right if left is None else left
        return cls(top=top, right=right, bottom=bottom, left=left)

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


class Style(_Frozen):
    """Box, flex and text properties understood by the layout engine."""

    # Flex container
    flex_direction: Literal["row", "column"] = "row"
    justify_content: Literal["flex-start", "center", "flex-end", "space-between"] = "flex-start"
    align_items: Literal["stretch", "flex-start", "center", "flex-end", "baseline"] = "stretch"
    gap: float = 0

    # Box model
    width: Optional[float] = None
    height: Optional[float] = None
    padding: Edges = Edges()
    margin: Edges = Edges()
    border_radius: Optional[float] = None
    overflow: Literal["visible", "hidden"] = "visible"
    background_color: Optional[str] = None
    object_fit: Literal["fill", "cover", "contain"] = "fill"

    # Positioning
    position: Literal["relative", "absolute"] = "relative"
    left_percent: Optional[float] = None
    bottom: Optional[float] = None
    translate_x_percent: float = 0
    translate_y: float = 0

    # Text (inherited by descendants when unset)
    color: Optional[str] = None
    font_size: Optional[float] = None
    font_weight: Optional[int] = None
    line_height: Optional[float] = None


class ContainerNode(_Frozen):
    """Flex container holding child nodes."""
    kind: Literal["container"] = "container"
    style: Style = Style()
    children: Tuple["Node", ...] = ()


class TextNode(_Frozen):
    """Single line of text."""
    kind: Literal["text"] = "text"
    style: Style = Style()
    text: str


class ImageNode(_Frozen):
    """Embedded image referenced by URL or data URI."""
    kind: Literal["image"] = "image"
    style: Style = Style()
    src: str


Node = Annotated[Union[ContainerNode, TextNode, ImageNode], Field(discriminator="kind")]

ContainerNode.model_rebuild()


def box(*children: "Node", **style) -> ContainerNode:
    """Shorthand for a container node."""
    return ContainerNode(style=Style(**style), children=tuple(children))


def text(value: str, **style) -> TextNode:
    """Shorthand for a text node."""
    return TextNode(style=Style(**style), text=value)


def image(src: str, **style) -> ImageNode:
    """Shorthand for an image node."""
    return ImageNode(style=Style(**style), src=src)


def walk(node: "Node"):
    """Yield every node of a tree in document order."""
    yield node
    if isinstance(node, ContainerNode):
        for child in node.children:
            yield from walk(child)
