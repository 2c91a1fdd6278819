from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from .models import BuildState, SkillCode, StatDetails, SustainedCombatResult, TickResult


PERCENT_STATS = frozenset(
    {
        SkillCode.PRECISION.value,
        SkillCode.CRITICAL_CHANCE.value,
        SkillCode.CRITICAL_DAMAGES.value,
        SkillCode.ARMOR.value,
        SkillCode.DODGE.value,
        SkillCode.LOOT_CHANCE.value,
    }
)

NAME_OVERRIDES = {
    "bread": "Bread",
    "steak": "Steak",
    "cookedFish": "Cooked Fish",
}

_MARKUP = re.compile(r"</?strong>")


def _code(value: Any) -> str:
    return str(getattr(value, "value", value))


def format_code_to_name(code: str) -> str:
    if not code:
        return ""
    if code in NAME_OVERRIDES:
        return NAME_OVERRIDES[code]
    spaced = re.sub(r"([A-Z])", r" \1", code)
    spaced = re.sub(r"(\d+)", r" \1", spaced)
    return spaced[:1].upper() + spaced[1:]


def format_skill_value(code: Any, value: float) -> str:
    text = f"{value:g}"
    return f"{text}%" if _code(code) in PERCENT_STATS else text


def strip_markup(line: str) -> str:
    return _MARKUP.sub("", line)


def format_stat_details(code: Any, details: StatDetails) -> str:
    lines: List[str] = [f"{format_code_to_name(_code(code))}: {format_skill_value(code, details.total)}"]
    lines.append(f"  skill    : {format_skill_value(code, details.skill_value)}")
    if details.equipment_items:
        names = ", ".join(item.name for item in details.equipment_items)
        lines.append(f"  gear     : +{format_skill_value(code, details.equipment_value)} ({names})")
    if details.ammo_percent:
        lines.append(f"  ammo     : {details.ammo_percent:+g}%")
    if details.buff_percent:
        lines.append(f"  buff     : {details.buff_percent:+g}%")
    return "\n".join(lines)


def format_log(log: List[str] | tuple) -> str:
    return "\n".join(strip_markup(line) for line in log)


def format_tick_result(result: TickResult) -> str:
    lines = [
        f"Damage dealt: {result.final_damage_dealt:g}",
        f"Health lost : {result.health_lost:g}",
        "",
        format_log(result.log),
    ]
    return "\n".join(lines)


def format_sustained_result(result: SustainedCombatResult, show_log: bool = False) -> str:
    lines = [
        f"Ticks survived : {result.ticks_survived}",
        f"Total damage   : {result.total_damage_dealt:g}",
        f"Final health   : {result.final_health:.1f}",
        f"Final hunger   : {result.final_hunger}",
    ]
    if result.stopped_by_cap:
        lines.append("Stopped by tick cap: build outlasts the simulation limit.")
    if show_log:
        lines.append("")
        lines.append(format_log(result.log))
    return "\n".join(lines)


def build_summary(
    state: BuildState,
    stats: Mapping[SkillCode, StatDetails],
    summary: Optional[str] = None,
) -> Dict[str, Any]:
    """Payload of the shareable build card: skills, stat breakdowns, gear."""
    return {
        "playerLevel": state.player_level,
        "summary": summary if summary is not None else state.last_simulation_summary,
        "skills": {
            code.value: level
            for code, level in state.assigned_skill_levels.items()
            if level > 0
        },
        "stats": {
            code.value: {
                "display": format_skill_value(code, details.total),
                **details.to_dict(),
            }
            for code, details in stats.items()
        },
        "equipment": {
            slot.value: item.name
            for slot, item in state.equipped_items.items()
            if item is not None
        },
    }
