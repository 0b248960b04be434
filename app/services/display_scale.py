"""
Display Scale
Maps between template-native coordinates and scaled display coordinates
"""

from dataclasses import dataclass

from app.schemas.template import DisplayTextBox, TextBox


@dataclass(frozen=True)
class DisplayScale:
    """Presentation-only scale factor S; never stored, never used by the renderer"""
    factor: float

    def __post_init__(self):
        if self.factor <= 0:
            raise ValueError("Display scale must be positive")

    @classmethod
    def fit(cls, display_width: float, native_width: float, max_scale: float = 1.0) -> "DisplayScale":
        """S = min(display_width / native_width, max_scale)"""
        if native_width <= 0:
            raise ValueError("Native image width must be positive")
        if display_width <= 0:
            raise ValueError("Display width must be positive")
        return cls(min(display_width / native_width, max_scale))

    def to_display(self, value: float) -> float:
        return value * self.factor

    def to_native(self, value: float) -> float:
        return value / self.factor

    def display_box(self, box: TextBox) -> DisplayTextBox:
        return DisplayTextBox(
            id=box.id,
            x=self.to_display(box.x),
            y=self.to_display(box.y),
            font_size=self.to_display(box.font_size),
            width=self.to_display(box.width) if box.width is not None else None,
            height=self.to_display(box.height) if box.height is not None else None,
        )

    def drag(self, box: TextBox, dx: float, dy: float) -> TextBox:
        """New box moved by a display-space pointer delta"""
        return box.model_copy(update={
            "x": box.x + self.to_native(dx),
            "y": box.y + self.to_native(dy),
        })
