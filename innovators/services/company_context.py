from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from innovators.logging_config import get_logger

logger = get_logger("company_context")


@dataclass(frozen=True)
class Tool:
    name: str
    category: str = ""
    plan: str = ""
    has_ai: bool = False
    ai_features: list[str] = field(default_factory=list)
    use_cases: list[str] = field(default_factory=list)
    teams: list[str] = field(default_factory=list)
    notes: str = ""


@dataclass(frozen=True)
class ActiveWorkflow:
    team: str
    workflow: str
    tool: str
    description: str = ""


@dataclass(frozen=True)
class CompanyContext:
    name: str = ""
    industry: str = ""
    description: str = ""
    industry_terms: list[str] = field(default_factory=list)
    teams: list[str] = field(default_factory=list)
    department_aliases: dict[str, str] = field(default_factory=dict)
    approved_tools: list[Tool] = field(default_factory=list)
    workflows: dict[str, list[str]] = field(default_factory=dict)
    active_workflows: list[ActiveWorkflow] = field(default_factory=list)
    guidelines: list[str] = field(default_factory=list)
    tips: list[str] = field(default_factory=list)


def _as_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _parse_tool(raw: dict) -> Tool:
    return Tool(
        name=str(raw.get("name") or ""),
        category=str(raw.get("category") or ""),
        plan=str(raw.get("plan") or ""),
        has_ai=bool(raw.get("has_ai")),
        ai_features=_as_list(raw.get("ai_features")),
        use_cases=_as_list(raw.get("use_cases")),
        teams=_as_list(raw.get("teams")),
        notes=str(raw.get("notes") or ""),
    )


def parse_company_context(data: dict) -> CompanyContext:
    aliases = data.get("department_aliases") if isinstance(data.get("department_aliases"), dict) else {}
    workflows = data.get("workflows") if isinstance(data.get("workflows"), dict) else {}
    tools = data.get("approved_tools") if isinstance(data.get("approved_tools"), list) else []
    active = data.get("active_workflows") if isinstance(data.get("active_workflows"), list) else []

    return CompanyContext(
        name=str(data.get("name") or ""),
        industry=str(data.get("industry") or ""),
        description=str(data.get("description") or "").strip(),
        industry_terms=_as_list(data.get("industry_terms")),
        teams=_as_list(data.get("teams")),
        department_aliases={str(k).strip().lower(): str(v) for k, v in aliases.items()},
        approved_tools=[_parse_tool(item) for item in tools if isinstance(item, dict) and item.get("name")],
        workflows={str(team): _as_list(items) for team, items in workflows.items()},
        active_workflows=[
            ActiveWorkflow(
                team=str(item.get("team") or ""),
                workflow=str(item.get("workflow") or ""),
                tool=str(item.get("tool") or ""),
                description=str(item.get("description") or ""),
            )
            for item in active
            if isinstance(item, dict)
        ],
        guidelines=_as_list(data.get("guidelines")),
        tips=_as_list(data.get("tips")),
    )


@lru_cache(maxsize=4)
def load_company_context(path: str) -> CompanyContext:
    context_path = Path(path)
    if not context_path.exists():
        logger.warning(f"Company context not found at {context_path}, using empty context")
        return CompanyContext()
    with context_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        logger.warning(f"Company context at {context_path} is not a mapping, using empty context")
        return CompanyContext()
    return parse_company_context(data)
