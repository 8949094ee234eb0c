from __future__ import annotations

import pytest

from metronome_trainer.norms import (
    AGE_BASED_STANDARDS,
    AgeGroup,
    age_group,
    class_info,
    class_percentile,
    determine_class_by_age,
    performance_level,
)
from metronome_trainer.timing_core import Modality


@pytest.mark.parametrize(
    ("age", "group"),
    [
        (5, AgeGroup.UNDER_7),
        (7, AgeGroup.UNDER_7),
        (8, AgeGroup.AGE_8_9),
        (11, AgeGroup.AGE_10_11),
        (13, AgeGroup.AGE_12_13),
        (14, AgeGroup.AGE_14_16),
        (16, AgeGroup.AGE_14_16),
        (17, AgeGroup.OVER_17),
        (45, AgeGroup.OVER_17),
    ],
)
def test_age_groups(age: int, group: AgeGroup) -> None:
    assert age_group(age) is group


def test_age_14_auditory_22ms_is_class_6() -> None:
    assert age_group(14) is AgeGroup.AGE_14_16
    assert determine_class_by_age(22.0, 14, Modality.AUDIO) == 6


def test_bracket_lower_bound_inclusive_upper_exclusive() -> None:
    assert determine_class_by_age(19.99, 14, "auditory") == 7
    assert determine_class_by_age(20.0, 14, "auditory") == 6
    assert determine_class_by_age(25.0, 14, "auditory") == 5
    assert determine_class_by_age(119.99, 14, "auditory") == 2
    assert determine_class_by_age(120.0, 14, "auditory") == 1


def test_modality_tables_differ() -> None:
    # 14-16 visual class 7 ends at 27, auditory at 20.
    assert determine_class_by_age(25.0, 15, Modality.VISUAL) == 7
    assert determine_class_by_age(25.0, 15, Modality.AUDIO) == 5
    assert determine_class_by_age(25.0, 15, "audio") == 5


def test_no_response_sentinel_is_worst_class() -> None:
    for modality in (Modality.VISUAL, Modality.AUDIO):
        for age in (6, 9, 10, 12, 15, 30):
            assert determine_class_by_age(999.0, age, modality) == 1


def test_tables_cover_all_groups_with_seven_contiguous_brackets() -> None:
    for key in ("auditory", "visual"):
        for group in AgeGroup:
            brackets = AGE_BASED_STANDARDS[key][group]
            assert [b.class_level for b in brackets] == [7, 6, 5, 4, 3, 2, 1]
            assert brackets[0].min_ms == 0.0
            for lower, upper in zip(brackets, brackets[1:]):
                assert lower.max_ms == upper.min_ms


def test_unknown_modality_is_rejected() -> None:
    with pytest.raises(ValueError):
        determine_class_by_age(10.0, 14, "tactile")


def test_percentile_and_level_step_tables() -> None:
    assert [class_percentile(c) for c in range(7, 0, -1)] == [98, 90, 75, 50, 25, 10, 2]
    assert performance_level(7) == "아주잘함"
    assert performance_level(4) == "정상"
    assert performance_level(1) == "아주못함"
    assert class_info(5).label == "평균 이상"
