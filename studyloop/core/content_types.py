"""
Content type catalogue.

Enumerates the generated study artifacts and the names each one goes by
in configuration, model output and usage analytics.

Dependencies: None (pure domain layer)
System role: Single source of truth for content type naming
"""

import enum


class ContentType(str, enum.Enum):
    """
    Generated study artifact types.

    GOLDEN_NOTES: Prioritised key-concept notes
    CUECARDS: Question/answer recall cards
    MULTIPLE_CHOICE: Four-option questions with one correct index
    OPEN_QUESTIONS: Essay questions with sample answer and rubric
    SUMMARIES: Markdown summaries of the week's material
    CONCEPT_MAPS: Node/edge maps of related concepts
    """

    GOLDEN_NOTES = "goldenNotes"
    CUECARDS = "cuecards"
    MULTIPLE_CHOICE = "multipleChoice"
    OPEN_QUESTIONS = "openQuestions"
    SUMMARIES = "summaries"
    CONCEPT_MAPS = "conceptMaps"


# Key used for each type in a generation config's feature selection
FEATURE_KEYS: dict[ContentType, str] = {
    ContentType.GOLDEN_NOTES: "goldenNotes",
    ContentType.CUECARDS: "cuecards",
    ContentType.MULTIPLE_CHOICE: "mcqs",
    ContentType.OPEN_QUESTIONS: "openQuestions",
    ContentType.SUMMARIES: "summaries",
    ContentType.CONCEPT_MAPS: "conceptMaps",
}

# Wrapper key the model is asked to emit its items under
OUTPUT_KEYS: dict[ContentType, str] = {
    ContentType.GOLDEN_NOTES: "goldenNotes",
    ContentType.CUECARDS: "cuecards",
    ContentType.MULTIPLE_CHOICE: "mcqs",
    ContentType.OPEN_QUESTIONS: "openQuestions",
    ContentType.SUMMARIES: "summaries",
    ContentType.CONCEPT_MAPS: "conceptMaps",
}

ANALYTICS_NAMES: dict[ContentType, str] = {
    ContentType.GOLDEN_NOTES: "notes",
    ContentType.CUECARDS: "cuecard",
    ContentType.MULTIPLE_CHOICE: "mcq",
    ContentType.OPEN_QUESTIONS: "open_question",
    ContentType.SUMMARIES: "summary",
    ContentType.CONCEPT_MAPS: "concept_map",
}


def content_type_for_feature(feature_key: str) -> ContentType | None:
    """Resolve a feature selection key to its content type."""
    for content_type, key in FEATURE_KEYS.items():
        if key == feature_key:
            return content_type
    return None
