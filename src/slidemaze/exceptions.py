class SlideMazeError(Exception):
    """Base exception for the slidemaze project."""


class ConfigError(SlideMazeError):
    """Raised when generation settings cannot be loaded (missing file, bad YAML, wrong shape)."""


class GenerationExhaustedError(SlideMazeError):
    """Raised when a caller unwraps a generation outcome in which every attempt was unsolvable."""

    def __init__(self, attempts: int, base_seed: int) -> None:
        super().__init__(f"No solvable dungeon after {attempts} attempt(s) from base seed {base_seed}")
        self.attempts = attempts
        self.base_seed = base_seed
