"""Built-in rubric templates seeded at start-up."""

from sqlalchemy.orm import Session

from pitch_api.rubrics.models import Rubric
from pitch_core.logging_config import get_logger
from pitch_core.models import RubricDraft

logger = get_logger("api.rubrics")

DEFAULT_TEMPLATES = [
    RubricDraft(
        title="General Pitch (3–5 min)",
        description="A general-purpose rubric for evaluating pitch presentations",
        target_duration_seconds=240,
        max_duration_seconds=360,
        criteria=[
            {"name": "Hook/Opening", "description": "How engaging and attention-grabbing is the opening?"},
            {"name": "Clarity", "description": "Is the message clear and easy to understand?"},
            {"name": "Structure", "description": "Is the pitch well-organized and logical?"},
            {"name": "Conciseness", "description": "Does the pitch convey the message efficiently?"},
            {"name": "Confidence/Delivery", "description": "How confident and engaging is the delivery?"},
            {"name": "Call to Action", "description": "Is there a clear and compelling call to action?"},
        ],
    ),
]


def seed_templates(db: Session) -> int:
    """Insert any missing default templates; returns how many were added."""
    added = 0
    for draft in DEFAULT_TEMPLATES:
        exists = (
            db.query(Rubric)
            .filter(Rubric.is_template.is_(True), Rubric.title == draft.title)
            .first()
        )
        if exists:
            continue
        template = Rubric(is_template=True, user_id=None, source="manual")
        template.apply_draft(draft)
        db.add(template)
        added += 1

    if added:
        db.commit()
        logger.info("Seeded %d rubric template(s)", added)
    return added
