"""Age- and modality-specific Task Average norm tables.

These are clinical reference values: each bracket is ``[min_ms, max_ms)`` and
the breakpoints must stay exactly as published.  Everything here is read-only
module data, safe to share across sessions and reports.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Mapping

from .timing_core import Modality


class AgeGroup(StrEnum):
    UNDER_7 = "under7"
    AGE_8_9 = "8-9"
    AGE_10_11 = "10-11"
    AGE_12_13 = "12-13"
    AGE_14_16 = "14-16"
    OVER_17 = "over17"


@dataclass(frozen=True, slots=True)
class ClassBracket:
    class_level: int
    min_ms: float
    max_ms: float  # exclusive

    def contains(self, task_average: float) -> bool:
        return self.min_ms <= task_average < self.max_ms


@dataclass(frozen=True, slots=True)
class ClassDefinition:
    class_level: int
    label: str
    description: str
    ta_range: tuple[float, float]
    color: str


def _brackets(*bounds: float) -> tuple[ClassBracket, ...]:
    # bounds are the six upper edges for classes 7..2; class 1 is open-ended.
    edges = (0.0, *bounds, math.inf)
    return tuple(
        ClassBracket(class_level=7 - i, min_ms=float(edges[i]), max_ms=float(edges[i + 1]))
        for i in range(7)
    )


_AUDITORY = {
    AgeGroup.UNDER_7: _brackets(40, 60, 80, 100, 150, 230),
    AgeGroup.AGE_8_9: _brackets(30, 35, 45, 70, 155, 200),
    AgeGroup.AGE_10_11: _brackets(27, 34, 40, 60, 130, 160),
    AgeGroup.AGE_12_13: _brackets(25, 30, 35, 45, 105, 150),
    AgeGroup.AGE_14_16: _brackets(20, 25, 30, 45, 90, 120),
    AgeGroup.OVER_17: _brackets(17, 25, 30, 40, 75, 90),
}

_VISUAL = {
    AgeGroup.UNDER_7: _brackets(50, 80, 100, 120, 170, 250),
    AgeGroup.AGE_8_9: _brackets(40, 55, 65, 90, 130, 220),
    AgeGroup.AGE_10_11: _brackets(35, 45, 60, 75, 110, 200),
    AgeGroup.AGE_12_13: _brackets(30, 40, 50, 65, 95, 160),
    AgeGroup.AGE_14_16: _brackets(27, 30, 40, 55, 75, 130),
    AgeGroup.OVER_17: _brackets(25, 30, 40, 50, 70, 100),
}

AGE_BASED_STANDARDS: Mapping[str, Mapping[AgeGroup, tuple[ClassBracket, ...]]] = MappingProxyType(
    {
        "auditory": MappingProxyType(_AUDITORY),
        "visual": MappingProxyType(_VISUAL),
    }
)

# Generic (age-independent) class descriptions used for labels and colours.
CLASS_DEFINITIONS: tuple[ClassDefinition, ...] = (
    ClassDefinition(7, "최상급", "최상급 타이밍 능력", (0.0, 20.0), "#8b5cf6"),
    ClassDefinition(6, "뛰어남", "뛰어난 타이밍 능력", (20.0, 40.0), "#6366f1"),
    ClassDefinition(5, "평균 이상", "평균보다 높은 타이밍 능력", (40.0, 80.0), "#10b981"),
    ClassDefinition(4, "평균", "평균적인 타이밍 능력", (80.0, 120.0), "#3b82f6"),
    ClassDefinition(3, "평균 이하", "평균보다 낮은 타이밍 능력", (120.0, 180.0), "#f59e0b"),
    ClassDefinition(2, "심각한 결핍", "심각한 타이밍 결핍", (180.0, 250.0), "#f97316"),
    ClassDefinition(1, "극심한 결핍", "가장 심각한 타이밍 결핍", (250.0, math.inf), "#ef4444"),
)

# Coarse step mapping, not a continuous CDF.
CLASS_PERCENTILES: Mapping[int, int] = MappingProxyType(
    {7: 98, 6: 90, 5: 75, 4: 50, 3: 25, 2: 10, 1: 2}
)

PERFORMANCE_LEVELS: Mapping[int, str] = MappingProxyType(
    {
        7: "아주잘함",
        6: "잘함",
        5: "정상이상",
        4: "정상",
        3: "정상이하",
        2: "못함",
        1: "아주못함",
    }
)

WORST_CLASS = 1


def age_group(age: int) -> AgeGroup:
    if age <= 7:
        return AgeGroup.UNDER_7
    if age <= 9:
        return AgeGroup.AGE_8_9
    if age <= 11:
        return AgeGroup.AGE_10_11
    if age <= 13:
        return AgeGroup.AGE_12_13
    if age <= 16:
        return AgeGroup.AGE_14_16
    return AgeGroup.OVER_17


def _norm_key(modality: Modality | str) -> str:
    if isinstance(modality, Modality):
        return modality.norm_key
    key = str(modality)
    if key == "audio":
        return "auditory"
    if key not in AGE_BASED_STANDARDS:
        raise ValueError(f"unknown modality: {modality!r}")
    return key


def brackets_for(age: int, modality: Modality | str) -> tuple[ClassBracket, ...]:
    return AGE_BASED_STANDARDS[_norm_key(modality)][age_group(age)]


def determine_class_by_age(task_average: float, age: int, modality: Modality | str) -> int:
    """Class 1-7 for ``task_average``; falls back to class 1 when no bracket matches."""

    for bracket in brackets_for(age, modality):
        if bracket.contains(task_average):
            return bracket.class_level
    return WORST_CLASS


def class_percentile(class_level: int) -> int:
    return CLASS_PERCENTILES.get(int(class_level), CLASS_PERCENTILES[WORST_CLASS])


def performance_level(class_level: int) -> str:
    return PERFORMANCE_LEVELS.get(int(class_level), PERFORMANCE_LEVELS[WORST_CLASS])


def class_info(class_level: int) -> ClassDefinition:
    for definition in CLASS_DEFINITIONS:
        if definition.class_level == int(class_level):
            return definition
    return CLASS_DEFINITIONS[-1]
