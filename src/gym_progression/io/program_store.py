"""
JSON-file storage for the Program aggregate.

Handles reading, writing, and initializing the program file.
"""

import json
from datetime import datetime
from pathlib import Path

from ..core.config import DEFAULT_DATA_DIR_NAME
from ..core.models import Program, ProgressionPolicy, utc_timestamp
from .serializers import ValidationError, dict_to_program, program_to_json


class ProgramStore:
    """
    Manages one Program stored as a JSON document.

    The whole document is rewritten on every save; the last write wins.
    """

    def __init__(self, program_path: str | Path):
        """
        Initialize the program store.

        Args:
            program_path: Path to the program JSON file
        """
        self.program_path = Path(program_path)

    def exists(self) -> bool:
        """Check if the program file exists."""
        return self.program_path.exists()

    def init(
        self,
        name: str = "",
        policy: ProgressionPolicy = "moderate",
        progression_enabled: bool = True,
        now: datetime | None = None,
    ) -> Program:
        """
        Create the program file if it doesn't exist and return the program.

        An existing file is loaded and returned unchanged.
        """
        if self.exists():
            return self.load_program()

        program = Program(
            program_id=self.program_path.stem,
            name=name,
            progression_enabled=progression_enabled,
            progression_policy=policy,
            updated_at=utc_timestamp(now),
        )
        self.save_program(program)
        return program

    def load_program(self) -> Program:
        """
        Load the program from disk.

        Raises:
            FileNotFoundError: If the program file doesn't exist
            ValidationError: If the file is not a valid program document
        """
        if not self.exists():
            raise FileNotFoundError(
                f"Program file not found: {self.program_path}. Run 'init' first."
            )

        try:
            with open(self.program_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return dict_to_program(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ValidationError(f"Error reading {self.program_path}: {e}") from e

    def save_program(self, program: Program) -> None:
        """Write the program to disk, creating parent directories if needed."""
        self.program_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.program_path, "w", encoding="utf-8") as f:
            f.write(program_to_json(program) + "\n")


def get_default_program_path() -> Path:
    """Return ~/.gym-progression/program.json."""
    return Path.home() / DEFAULT_DATA_DIR_NAME / "program.json"
