"""Prompt builders for the generation service."""

from typing import Optional

from innovators.schemas.sheets import SubmissionRecord
from innovators.services.company_context import CompanyContext

MAX_CONTEXT_SUBMISSIONS = 20


def _bullets(items: list[str], indent: str = "") -> str:
    return "\n".join(f"{indent}• {item}" for item in items)


def format_tools_context(company: CompanyContext) -> str:
    if not company.approved_tools:
        return "No company-approved tools configured yet."

    blocks = []
    for tool in company.approved_tools:
        header = f"• *{tool.name}* ({tool.category}{f' - {tool.plan}' if tool.plan else ''})"
        if tool.has_ai:
            header += " ✨ Has AI"
        lines = [header, f"   Use cases: {', '.join(tool.use_cases) or 'General'}"]
        if tool.ai_features:
            lines.append(f"   AI Features: {', '.join(tool.ai_features)}")
        if tool.teams:
            lines.append(f"   Teams: {', '.join(tool.teams)}")
        if tool.notes:
            lines.append(f"   Note: {tool.notes}")
        blocks.append("\n".join(lines))
    return "These are company-approved tools with subscriptions:\n\n" + "\n\n".join(blocks)


def format_workflows_context(workflows: dict[str, list[str]]) -> str:
    if not workflows:
        return "No workflows configured."
    return "\n\n".join(f"*{team}:*\n{_bullets(items, '  ')}" for team, items in workflows.items())


def format_active_workflows_context(company: CompanyContext) -> str:
    if not company.active_workflows:
        return "No active AI workflows documented yet."
    return "\n".join(
        f"• *{w.team}*: {w.workflow} using {w.tool}\n  _{w.description}_" for w in company.active_workflows
    )


def format_submissions_context(submissions: list[SubmissionRecord]) -> str:
    if not submissions:
        return "No employee solutions have been submitted yet."
    recent = submissions[-MAX_CONTEXT_SUBMISSIONS:]
    summaries = [
        f"{i}. *{s.problem}*\n   Solution: {s.solution}\n   Time Saved: {s.time_saved}\n   Useful for: {s.reusable_by}"
        for i, s in enumerate(recent, start=1)
    ]
    return "Here are recent AI solutions submitted by employees:\n\n" + "\n\n".join(summaries)


def build_polish_prompt(answers: dict[str, str], edit_request: Optional[str] = None) -> str:
    prompt = f"""You are helping format an employee's AI solution submission. Take their raw inputs and create a clean, professional summary. Keep it concise.

Raw inputs:
- Problem they solved: {answers.get("problem", "")}
- Tool/solution used: {answers.get("solution", "")}
- Time saved: {answers.get("time_saved", "")}
- Who else could use it: {answers.get("reusable_by", "")}
- How others can reuse it: {answers.get("how_to_reuse", "")}

Format as:
📋 *SUBMISSION SUMMARY*

*Problem:* [1 sentence, cleaned up]
*Solution:* [tool/approach, cleaned up]
*Time Saved:* [standardized format]
*Reusable By:* [who can benefit]
*How to Reuse:* [short steps]

Keep it brief and professional. Use Slack mrkdwn formatting (single asterisks for bold)."""

    if edit_request:
        prompt += (
            "\n\nThe submitter reviewed a previous version and asked for this change. "
            f"Apply it without inventing new facts:\n{edit_request}"
        )
    return prompt


def build_chat_system_prompt(company: CompanyContext) -> str:
    return f"""You are the Innovators Circle Bot for {company.name}, a helpful AI assistant for employees exploring how to use AI tools to solve problems at work.

ABOUT {company.name.upper()}:
{company.description}

INDUSTRY: {company.industry}
KEY TERMS: {", ".join(company.industry_terms)}
TEAMS: {", ".join(company.teams)}

APPROVED AI TOOLS:
{format_tools_context(company)}

COMMON WORKFLOWS WHERE AI CAN HELP:
{format_workflows_context(company.workflows)}

GUIDELINES TO KEEP IN MIND:
{_bullets(company.guidelines)}

YOUR ROLE:
- Help users brainstorm AI solutions for their work challenges
- Suggest specific tools from the approved list when relevant
- Keep responses concise (this is Slack, not an essay)

If the user seems ready to formally submit their solution, remind them they can type "submit" to start the submission process."""


def build_help_system_prompt(
    company: CompanyContext,
    challenge: str,
    department: Optional[str],
    workflows: dict[str, list[str]],
    submissions: list[SubmissionRecord],
) -> str:
    department_line = f"The employee is on the *{department}* team." if department else "The employee's team is unknown."
    return f"""You are a helpful AI assistant for the Innovators Circle program at {company.name}. Your job is to help employees find AI tools and solutions for their work challenges.

## Company Context
Industry: {company.industry}
Teams: {", ".join(company.teams)}

## The Employee
{department_line}
Their original challenge: {challenge}

## AI Workflows Already in Use
{format_active_workflows_context(company)}

## Opportunities: Tasks Where AI Could Help (by Team)
{format_workflows_context(workflows)}

## Company-Approved Tools
{format_tools_context(company)}

## Employee-Submitted Solutions
{format_submissions_context(submissions)}

## How to Respond
- Give 1-2 specific, actionable recommendations right away, naming the tool and feature
- Include a sample prompt or workflow they can try now
- Prefer tools their team already has access to
- End with at most one focused follow-up question

Be conversational and concise (this is Slack). Use Slack mrkdwn formatting."""


def build_weekly_tip_prompt(company: CompanyContext) -> str:
    tool_names = ", ".join(tool.name for tool in company.approved_tools)
    return f"""You are Opie, the Innovators Circle assistant at {company.name}. Generate a short, practical AI tip for the team.

Context:
- Company: {company.name} ({company.industry})
- Teams: {", ".join(company.teams)}
- Approved AI tools: {tool_names}

Requirements:
- Pick ONE specific, actionable tip with a concrete example prompt
- 3-5 sentences max, plus the example
- Use single asterisks for bold and Slack mrkdwn formatting

Format:
💡 *Opie's AI Tip of the Week*

[The tip]

_Try this prompt:_
> [A ready-to-use prompt]"""
