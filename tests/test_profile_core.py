from __future__ import annotations

import datetime as dt

import pytest

from metronome_trainer.profile import (
    Gender,
    ProfileError,
    UserProfile,
    build_profile,
    calculate_age,
    parse_birth_date,
)


def test_age_counts_whole_years_before_and_after_birthday() -> None:
    born = dt.date(2010, 6, 15)
    assert calculate_age(born, dt.date(2024, 6, 14)) == 13
    assert calculate_age(born, dt.date(2024, 6, 15)) == 14
    assert calculate_age(born, dt.date(2024, 12, 31)) == 14


def test_leap_day_birthday() -> None:
    born = dt.date(2012, 2, 29)
    assert calculate_age(born, dt.date(2023, 2, 28)) == 10
    assert calculate_age(born, dt.date(2023, 3, 1)) == 11


def test_profile_age_and_age_on() -> None:
    p = UserProfile(name="Lee", birth_date=dt.date(2010, 1, 1), gender=Gender.MALE)
    assert p.age_on(dt.date(2024, 1, 1)) == 14
    assert p.age == calculate_age(p.birth_date)


def test_build_profile_parses_iso_dates() -> None:
    p = build_profile("Park", "2011-09-03", "Female")
    assert p.birth_date == dt.date(2011, 9, 3)
    assert p.gender is Gender.FEMALE
    assert parse_birth_date(dt.datetime(2011, 9, 3, 8, 0)) == dt.date(2011, 9, 3)


@pytest.mark.parametrize("bad", ["03/09/2011", "", "2011-13-01"])
def test_malformed_birth_dates_are_rejected(bad: str) -> None:
    with pytest.raises(ProfileError):
        parse_birth_date(bad)


def test_profile_validation() -> None:
    with pytest.raises(ProfileError):
        UserProfile(name="  ", birth_date=dt.date(2010, 1, 1))
    with pytest.raises(ProfileError):
        UserProfile(name="Future", birth_date=dt.date.today() + dt.timedelta(days=1))
    with pytest.raises(ProfileError):
        build_profile("Choi", "2010-01-01", "robot")
