"""
Request data models for design system generation.

A DesignSystemRequest is the brief a user submits; a ComponentIdentity
names one generated component within a design system. Both project
themselves into plain records for key canonicalization.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

STYLES = ('modern', 'classic', 'playful', 'minimal', 'bold')

DEFAULT_VARIANT = 'default'
DEFAULT_SIZE = 'md'


@dataclass
class DesignSystemRequest:
    """
    Design brief submitted for generation.

    Attributes:
        name: Display name of the design system (not part of the cache key)
        description: Free-text brief
        style: One of STYLES
        primary_color: Primary brand color as hex
        industry: Optional industry hint
        complexity: Optional complexity hint ('simple', 'moderate', ...)
        colors: Optional named color overrides
        components: Components to generate (order is not significant)
    """

    name: str
    description: str
    style: str = 'modern'
    primary_color: Optional[str] = None
    industry: Optional[str] = None
    complexity: Optional[str] = None
    colors: Optional[Dict[str, str]] = None
    components: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate field constraints."""
        if not self.description:
            raise ValueError("description cannot be empty")

        if self.style not in STYLES:
            raise ValueError(
                f"style must be one of {STYLES}, got {self.style!r}"
            )

    def key_fields(self) -> Dict[str, Any]:
        """
        Project the fields that determine generated output.

        Returns:
            Plain record used for canonicalization
        """
        return {
            'description': self.description,
            'style': self.style,
            'primaryColor': self.primary_color,
            'colors': self.colors,
            'industry': self.industry,
            'complexity': self.complexity,
            'components': list(self.components),
        }


@dataclass
class ComponentIdentity:
    """Identity of one generated component within a design system."""

    name: str
    design_system_hash: str
    variant: Optional[str] = None
    size: Optional[str] = None

    def __post_init__(self):
        """Validate field constraints."""
        if not self.name:
            raise ValueError("name cannot be empty")

        if not self.design_system_hash:
            raise ValueError("design_system_hash cannot be empty")

        self.variant = self.variant or DEFAULT_VARIANT
        self.size = self.size or DEFAULT_SIZE
