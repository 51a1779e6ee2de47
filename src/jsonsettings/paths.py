"""Settings file locations, parameterized by root directory.

Usage:
    paths = Paths(root=Path("data"))          # production
    paths = Paths(root=tmp_path / "data")     # tests
"""

from pathlib import Path


class Paths:
    """Settings file paths derived from a single root directory."""

    def __init__(self, root: Path | str = Path("data")) -> None:
        self.root = Path(root)

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def settings_file(self) -> Path:
        return self.config_dir / "settings.json"

    def file(self, name: str) -> Path:
        """Return the path of a named settings file in the config dir."""
        if not name.endswith(".json"):
            name = f"{name}.json"
        return self.config_dir / name

    def ensure_config_dir(self) -> Path:
        """Create the config directory (and parents) if missing."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        return self.config_dir
