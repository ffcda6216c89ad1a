"""Credit balance. The balance never goes below zero."""

from dataclasses import dataclass


class InsufficientCredits(ValueError):
    pass


@dataclass
class EconomySystem:
    credits: int

    def __post_init__(self) -> None:
        if self.credits < 0:
            raise ValueError("credits must be non-negative")

    def can_afford(self, amount: int) -> bool:
        return self.credits >= amount

    def spend(self, amount: int) -> int:
        """Deduct ``amount`` and return the new balance; overdraft raises."""
        if amount < 0:
            raise ValueError("amount must be non-negative")
        if not self.can_afford(amount):
            raise InsufficientCredits(f"cannot spend {amount} with {self.credits} credits")
        self.credits -= amount
        return self.credits

    def reward(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self.credits += amount
        return self.credits
