from pathlib import Path

from app.extraction.exceptions import ExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(path: Path | None = None) -> str:
    """Load the extraction prompt from a file.

    Args:
        path: Path to the prompt file.
              Defaults to the bundled extraction_prompt.txt.

    Returns:
        The prompt text without surrounding whitespace.

    Raises:
        ExtractionError: if the file cannot be read or is empty.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "extraction_prompt.txt"
    try:
        prompt = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ExtractionError(f"Failed to load prompt: {exc}") from exc
    if not prompt:
        raise ExtractionError(f"Prompt file is empty: {path}")
    return prompt
