"""Life pool operations."""

from dataclasses import dataclass


@dataclass
class LifeSystem:
    lives: int

    def lose(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self.lives = max(0, self.lives - amount)

    @property
    def is_depleted(self) -> bool:
        return self.lives <= 0
