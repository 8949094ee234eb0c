from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import StrEnum


class ProfileError(ValueError):
    pass


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


def parse_birth_date(value: str | dt.date) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ProfileError(f"Invalid birth date {value!r}; expected YYYY-MM-DD") from exc


def calculate_age(birth_date: dt.date, today: dt.date | None = None) -> int:
    """Whole years since ``birth_date``; not yet a year older before the birthday."""

    today = today or dt.date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return max(0, age)


@dataclass(frozen=True, slots=True)
class UserProfile:
    name: str
    birth_date: dt.date
    gender: Gender = Gender.OTHER

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ProfileError("name must not be empty")
        if self.birth_date > dt.date.today():
            raise ProfileError("birth_date must not be in the future")

    @property
    def age(self) -> int:
        # Recomputed on every read so long-lived profiles age correctly.
        return calculate_age(self.birth_date)

    def age_on(self, day: dt.date) -> int:
        return calculate_age(self.birth_date, day)


def build_profile(name: str, birth_date: str | dt.date, gender: str | Gender = Gender.OTHER) -> UserProfile:
    try:
        g = Gender(str(gender).lower())
    except ValueError as exc:
        raise ProfileError(f"Unknown gender: {gender!r}") from exc
    return UserProfile(name=name, birth_date=parse_birth_date(birth_date), gender=g)
