"""
Server-rendered admin UI components.

``StatCard`` and ``FeatureCard`` render HTML partials from the package's
``templates/components`` folder. All text is autoescaped; pass a
``markupsafe.Markup`` icon (for example an inline SVG) to embed trusted HTML.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup
from pydantic import BaseModel, ConfigDict, Field


env = Environment(
    loader=PackageLoader("lms_admin", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

# Tailwind classes per card size
STAT_CARD_SIZES: Dict[str, Dict[str, str]] = {
    "sm": {"container": "p-3", "icon_wrapper": "w-10 h-10", "value": "text-xl font-bold", "label": "text-xs"},
    "md": {"container": "p-4", "icon_wrapper": "w-12 h-12", "value": "text-2xl font-bold", "label": "text-sm"},
    "lg": {"container": "p-5", "icon_wrapper": "w-14 h-14", "value": "text-3xl font-bold", "label": "text-sm"},
}

DEFAULT_ICON_BG = "#f3f4f6"


class StatCard(BaseModel):
    """Icon plus a large value and a short label."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Union[int, float, str]
    label: str
    icon: Union[Markup, str] = ""
    size: Literal["sm", "md", "lg"] = "md"
    icon_bg_color: Optional[str] = None
    class_name: str = ""

    def render(self) -> Markup:
        template = env.get_template("components/stat_card.html")
        return Markup(template.render(
            card=self,
            styles=STAT_CARD_SIZES[self.size],
            icon_bg=self.icon_bg_color or DEFAULT_ICON_BG,
        ))

    def __html__(self) -> str:
        return str(self.render())


class StatItem(BaseModel):
    value: Union[int, float, str]
    label: str


class ActionButton(BaseModel):
    label: str
    href: str
    variant: Literal["primary", "secondary"] = "secondary"


class FeatureCard(BaseModel):
    """Admin landing card: icon, title, description, a stats row and action links."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    description: str
    icon: Union[Markup, str] = ""
    stats: List[StatItem] = Field(default_factory=list)
    actions: List[ActionButton] = Field(default_factory=list)
    icon_gradient: str = "from-blue-500 to-blue-600"
    border_gradient: str = "from-blue-500 to-blue-600"
    class_name: str = ""

    def render(self) -> Markup:
        template = env.get_template("components/feature_card.html")
        return Markup(template.render(card=self))

    def __html__(self) -> str:
        return str(self.render())


def render_page(template_name: str, **context: Any) -> str:
    """Render a full page template; cards in the context render via ``__html__``."""
    return env.get_template(template_name).render(**context)


__all__ = [
    "ActionButton",
    "FeatureCard",
    "StatCard",
    "StatItem",
    "render_page",
]
