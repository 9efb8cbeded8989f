from dataclasses import dataclass
from typing import Any, Dict, List
from abc import ABC, abstractmethod

from backend.errors import ConfigurationError


@dataclass(frozen=True)
class Viewport:
    """
    Holds the viewport parameters for rendering a fractal.
    X and Y limits determine the area of the complex plane to sample.
    Width and Height determine the size of the resulting image in pixels.
    """
    min_x: float = -2.0
    max_x: float = 1.0
    min_y: float = -1.5
    max_y: float = 1.5
    width: int = 512
    height: int = 512

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Image size must be positive, got {self.width}x{self.height}")
        if not self.min_x < self.max_x:
            raise ConfigurationError(f"min_x ({self.min_x}) must be below max_x ({self.max_x})")
        if not self.min_y < self.max_y:
            raise ConfigurationError(f"min_y ({self.min_y}) must be below max_y ({self.max_y})")


@dataclass(frozen=True)
class RenderSettings:
    """
    Max_iter bounds the per-pixel work of the escape-time loop.
    """
    max_iter: int = 1000

    def validate(self) -> None:
        if self.max_iter <= 0:
            raise ConfigurationError(f"max_iter must be positive, got {self.max_iter}")


class Fractal(ABC):
    """
    An abstract base class for fractal types.
    """
    name: str

    @abstractmethod
    def kernel_meta(self, backend_name: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def build_arg_values(self, surface: Any, vp: Viewport, st: RenderSettings) -> List[Any]:
        ...
