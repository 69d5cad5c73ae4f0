"""
Seed fixture loader for Shikkha.

Loads the YAML lesson fixture shipped in shikkha/data/.
"""

from pathlib import Path
import yaml

from shikkha.schemas import LessonRecord


# Default fixture (packaged alongside the code)
SEED_LESSONS_PATH = Path(__file__).parent.parent / "data" / "seed_lessons.yaml"


def load_seed_lessons(path: Path | None = None) -> list[LessonRecord]:
    """
    Load the ordered seed lesson list.

    Args:
        path: Optional custom fixture file

    Returns:
        List of LessonRecord in file order

    Raises:
        FileNotFoundError: If the fixture file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If the file has no `lessons` list or an entry is invalid
    """
    file_path = path or SEED_LESSONS_PATH

    if not file_path.exists():
        raise FileNotFoundError(f"Seed fixture not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("lessons")
    if not isinstance(entries, list):
        raise ValueError(f"Seed fixture has no 'lessons' list: {file_path}")

    return [LessonRecord.model_validate(entry) for entry in entries]
