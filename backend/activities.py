"""
activities.py - the fixed catalog of habits a user can check in.
Storage accepts any code; validation against this catalog happens in the services.
"""

from typing import NamedTuple


class Activity(NamedTuple):
    code: str
    icon: str
    name: str


ACTIVITIES: dict[str, Activity] = {
    "paper": Activity("paper", "📚", "Read Paper"),
    "fitness": Activity("fitness", "💪", "Fitness"),
    "algorithm": Activity("algorithm", "💻", "Algorithm"),
    "quant": Activity("quant", "📊", "Quant Interview"),
}


def get_activity(code: str) -> Activity | None:
    return ACTIVITIES.get(code)


def is_valid_activity(code) -> bool:
    return isinstance(code, str) and code in ACTIVITIES


def describe_activities(codes: list[str]) -> list[dict]:
    """Display entries for a day's codes, in the given order. Unknown codes are skipped."""
    described = []
    for code in codes:
        activity = ACTIVITIES.get(code)
        if activity is None:
            continue
        described.append({"code": activity.code, "icon": activity.icon, "name": activity.name})
    return described


def catalog() -> list[dict]:
    return [{"code": a.code, "icon": a.icon, "name": a.name} for a in ACTIVITIES.values()]
