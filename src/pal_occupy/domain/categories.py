"""Category membership as a set of bit flags.

Points store their categories as an integer mask. Inside the domain that mask
is a :class:`CategorySet`; conversion happens only at the store boundary.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


def is_single_flag(value: int) -> bool:
    """Return True when ``value`` is a positive power of two."""

    return value > 0 and value & (value - 1) == 0


@dataclass(frozen=True, slots=True)
class CategorySet:
    """Immutable set of category flags."""

    flags: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for flag in self.flags:
            if not is_single_flag(flag):
                raise ValueError(f"category flag {flag} is not a power of two")

    @classmethod
    def of(cls, *flags: int) -> CategorySet:
        return cls(frozenset(flags))

    @classmethod
    def from_mask(cls, mask: int) -> CategorySet:
        """Split an integer mask into its individual flags."""

        if mask < 0:
            raise ValueError("category mask must be non-negative")
        flags = []
        bit = 1
        while bit <= mask:
            if mask & bit:
                flags.append(bit)
            bit <<= 1
        return cls(frozenset(flags))

    def to_mask(self) -> int:
        mask = 0
        for flag in self.flags:
            mask |= flag
        return mask

    def intersects(self, other: CategorySet) -> bool:
        return not self.flags.isdisjoint(other.flags)

    def union(self, others: Iterable[CategorySet]) -> CategorySet:
        merged = set(self.flags)
        for other in others:
            merged.update(other.flags)
        return CategorySet(frozenset(merged))

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.flags))

    def __len__(self) -> int:
        return len(self.flags)

    def __contains__(self, flag: object) -> bool:
        return flag in self.flags

    def __bool__(self) -> bool:
        return bool(self.flags)
