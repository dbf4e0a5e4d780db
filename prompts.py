"""
Image Prompts Configuration
Contains the prompt templates used for caricature generation.
Separated from config.py for better organization and easier prompt engineering.
"""

# ============================================================================
# REFERENCE-GUIDED GENERATION (image edit with style + likeness references)
# ============================================================================

REFERENCE_PROMPT_TEMPLATE = """
Create a caricature of {name} in the exact same bold graphic art style as the first attached image.

IMAGE ROLES:
- Image 1 is the STYLE REFERENCE: copy its art style exactly, but NOT the person it shows.
{likeness_lines}

STYLE REQUIREMENTS (copy exactly from the style reference):
- Thick dark outlines defining all features
- Limited color palette: warm skin tones, dark clothing, bright white accents
- Comic book aesthetic with cell-shaded shadows
- Strong facial features with subtle exaggeration
- Professional quality with clean, opaque background

PERSON SPECIFIC FEATURES for {name}:
- Make it clearly recognizable as {name}, not the person in the style reference
- Use the likeness references to capture {name}'s distinctive facial features, hair, and characteristics
{feature_lines}
REFERENCE PROVENANCE:
{provenance_lines}

The result should look like {name} but drawn in the style reference's exact artistic style.
"""

LIKENESS_LINE_TEMPLATE = "- Image {position} is a LIKENESS REFERENCE photo of {name}"

PROVENANCE_LINE_TEMPLATE = "- Image {position}: {source} - {description}"

# Distinctive features for subjects the image model tends to get wrong
SUBJECT_FEATURE_NOTES = {
    "oprah": [
        "African American woman with warm, rich skin tone",
        "Curly, voluminous hair (often styled in loose curls or waves)",
        "Bright, expressive eyes and warm smile",
        "Full lips and strong, confident facial features",
        "Often wears elegant, professional clothing",
    ],
    "einstein": [
        "Wild, unkempt white hair that sticks out in all directions",
        "Prominent mustache",
        "Deep-set, intelligent eyes",
        "Wrinkled, thoughtful expression",
        "Often wears simple, dark clothing",
    ],
}

# ============================================================================
# TEXT-ONLY GENERATION (no input images)
# ============================================================================

TEXT_ONLY_PROMPT_TEMPLATE = (
    "Create a realistic caricature of {name}. Make it recognizable with subtle exaggeration "
    "of distinctive features. Professional quality, clean background, suitable for web display."
)


def subject_feature_notes(name: str) -> list[str]:
    """Return distinctive-feature notes for a known subject, or [] for anyone else."""
    lowered = name.lower()
    for key, notes in SUBJECT_FEATURE_NOTES.items():
        if key in lowered:
            return notes
    return []


def build_reference_prompt(name: str, references) -> str:
    """
    Build the image-edit instruction for a style reference plus subject references.

    Args:
        name: Subject name
        references: SearchResult-like objects with `source` and `description`,
            attached after the style reference in this order

    Returns:
        Prompt text
    """
    likeness_lines = "\n".join(
        LIKENESS_LINE_TEMPLATE.format(position=i, name=name)
        for i in range(2, len(references) + 2)
    )
    provenance_lines = "\n".join(
        PROVENANCE_LINE_TEMPLATE.format(
            position=i,
            source=ref.source,
            description=ref.description or "no description",
        )
        for i, ref in enumerate(references, start=2)
    )
    notes = subject_feature_notes(name)
    feature_lines = "".join(f"- {note}\n" for note in notes)

    return REFERENCE_PROMPT_TEMPLATE.format(
        name=name,
        likeness_lines=likeness_lines,
        feature_lines=feature_lines,
        provenance_lines=provenance_lines,
    ).strip()


def build_text_only_prompt(name: str) -> str:
    return TEXT_ONLY_PROMPT_TEMPLATE.format(name=name)
