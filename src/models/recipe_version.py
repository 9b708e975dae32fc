"""RecipeVersion model for the append-only remix history."""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.recipe import STEP0_PAIR_CHECK


class RecipeVersion(Base):
    """Immutable snapshot of a recipe at one point of its remix history."""

    __tablename__ = "recipe_versions"
    __table_args__ = (
        UniqueConstraint("recipe_id", "version_number", name="uq_recipe_version_number"),
        CheckConstraint(STEP0_PAIR_CHECK, name="ck_recipe_versions_step0_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    ingredients = Column(JSON, nullable=False, default=list)
    instructions = Column(JSON, nullable=False, default=list)
    chefs_note = Column(Text, nullable=True)
    changed_ingredients = Column(JSON, nullable=False, default=list)  # caller-supplied names
    step0_summary = Column(Text, nullable=True)
    step0_audio_url = Column(String(2048), nullable=True)
    difficulty = Column(String(10), nullable=True)
    cooking_time = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    recipe = relationship("Recipe", back_populates="versions")
