"""Preset registry.

Static reference data: the category sets a task's department can be
drawn from. Exactly one preset is active at a time.
"""

from collections.abc import Iterable

from .models import Category, Preset

DEFAULT_CATEGORY_COLOR = "#6b7280"

PRESETS: tuple[Preset, ...] = (
    Preset(
        id="gamedev",
        label="Game Dev",
        categories=[
            Category(name="Programming", color="#3b82f6"),
            Category(name="Art", color="#ec4899"),
            Category(name="Design", color="#a855f7"),
            Category(name="Audio", color="#eab308"),
            Category(name="QA", color="#22c55e"),
        ],
    ),
    Preset(
        id="startup",
        label="Startup / Product",
        categories=[
            Category(name="Engineering", color="#3b82f6"),
            Category(name="Product", color="#a855f7"),
            Category(name="Design", color="#ec4899"),
            Category(name="Marketing", color="#f97316"),
            Category(name="Ops", color="#22c55e"),
        ],
    ),
    Preset(
        id="personal",
        label="Personal",
        categories=[
            Category(name="Work", color="#3b82f6"),
            Category(name="Personal", color="#a855f7"),
            Category(name="Health", color="#22c55e"),
            Category(name="Learning", color="#eab308"),
        ],
    ),
)


class PresetRegistry:
    """Read-only lookup over an ordered collection of presets.

    The first preset is the fallback for unknown ids.
    """

    def __init__(self, presets: Iterable[Preset] = PRESETS) -> None:
        self._presets: tuple[Preset, ...] = tuple(presets)
        if not self._presets:
            raise ValueError("PresetRegistry needs at least one preset")

    def __iter__(self):
        return iter(self._presets)

    def __len__(self) -> int:
        return len(self._presets)

    def __contains__(self, preset_id: object) -> bool:
        return any(p.id == preset_id for p in self._presets)

    @property
    def default(self) -> Preset:
        return self._presets[0]

    def find(self, preset_id: str) -> Preset | None:
        """Return the preset with this id, or None."""
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        return None

    def get(self, preset_id: str) -> Preset:
        """Return the preset with this id, falling back to the default."""
        return self.find(preset_id) or self.default

    def all_category_names(self) -> set[str]:
        """Category names across every preset (the legal department values)."""
        names: set[str] = set()
        for preset in self._presets:
            names |= preset.category_names()
        return names


def get_category_color(categories: Iterable[Category], name: str) -> str:
    """Return the color for a category name, gray if empty or unknown."""
    if not name:
        return DEFAULT_CATEGORY_COLOR
    for category in categories:
        if category.name == name:
            return category.color
    return DEFAULT_CATEGORY_COLOR
