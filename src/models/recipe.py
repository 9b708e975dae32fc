"""Recipe model."""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin, UserOwnedMixin

# The narrated summary and its audio are stored together or not at all
STEP0_PAIR_CHECK = "(step0_summary IS NULL) = (step0_audio_url IS NULL)"


class Recipe(Base, TimestampMixin, UserOwnedMixin):
    """A recipe ingested from a social-media video.

    The mutable fields mirror the latest RecipeVersion once the recipe has
    been remixed at least once.
    """

    __tablename__ = "recipes"
    __table_args__ = (CheckConstraint(STEP0_PAIR_CHECK, name="ck_recipes_step0_pair"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    ingredients = Column(JSON, nullable=False, default=list)  # [{name, amount, unit}]
    instructions = Column(JSON, nullable=False, default=list)  # [str]

    # Provenance
    thumbnail_url = Column(String(2048), nullable=True)
    source_url = Column(String(2048), nullable=True)
    creator_username = Column(String(255), nullable=True)

    # Derived artifacts
    embedding = Column(JSON, nullable=False)
    step0_summary = Column(Text, nullable=True)
    step0_audio_url = Column(String(2048), nullable=True)
    step_preparations = Column(JSON, nullable=True)  # filled by background precompute

    chefs_note = Column(Text, nullable=True)
    difficulty = Column(String(10), nullable=True)  # Difficulty enum value
    cooking_time = Column(Integer, nullable=True)  # minutes
    is_favorite = Column(Boolean, nullable=False, default=False)
    parent_recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    user = relationship("User", backref="recipes")
    parent_recipe = relationship("Recipe", remote_side=[id])
    versions = relationship(
        "RecipeVersion",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeVersion.version_number.desc()",
    )

    @property
    def ingredient_names(self) -> list[str]:
        """Names of the ingredients, in recipe order."""
        return [ingredient.get("name", "") for ingredient in self.ingredients or []]
