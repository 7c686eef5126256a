"""
Prompts for the two Gemini calls: the "what is special about today" question
and the image prompt built from its answer. Pure functions, no I/O.
"""
from datetime import date

IMAGE_PROMPT_TEMPLATE = """Create a beautiful "good morning" picture for {readable_date} ({iso_date}).
The theme must closely follow this information about today:
- **Today**: {day_context}
- **Greeting text**: If today's information mentions an important holiday or observance, clearly render a short celebratory phrase for it in the picture, e.g. "Happy <Holiday>". Otherwise render a morning greeting such as "Good Morning". Write the text in English, keep it varied, natural and lively, and place it somewhere prominent that suits the composition; it does not always have to be centered.
- **Style**: Vivid, brightly colored and artistic.
- **Content**: If there is a holiday, the scene should have a strong festive atmosphere. If not, use a calm natural landscape or a lovely natural morning, ideally with lively animals and plants, or a cozy city morning as the background.
- **Quality**: Suitable for sharing on social media; high resolution is not required."""

CUSTOM_PROMPT_TEMPLATE = "\n\n**User request (high priority, may override the style above)**: {custom_prompt}"


def format_readable_date(day: date) -> str:
    """e.g. Monday, January 1, 2024"""
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def normalize_custom_prompt(custom_prompt: str | None) -> str | None:
    if not custom_prompt:
        return None
    return custom_prompt.strip() or None


def build_day_context_prompt(day: date) -> str:
    return (
        f"Today is {format_readable_date(day)}. "
        "Are there any special holidays, festivals or observances today in China or worldwide?"
    )


def build_image_prompt(day: date, day_context: str, custom_prompt: str | None = None) -> str:
    """Image prompt for day. A non-empty custom_prompt is appended last and ends the prompt."""
    prompt = IMAGE_PROMPT_TEMPLATE.format(
        readable_date=format_readable_date(day),
        iso_date=day.isoformat(),
        day_context=(day_context or "").strip(),
    )
    custom = normalize_custom_prompt(custom_prompt)
    if custom:
        prompt += CUSTOM_PROMPT_TEMPLATE.format(custom_prompt=custom)
    return prompt
