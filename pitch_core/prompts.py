"""Prompt templates and message assembly for every rubric pipeline."""

import json
import re
from typing import Any, Iterable, Mapping, Optional, Union

from .exceptions import ClientInputError
from .models import ALLOWED_ROLES, ConversationMessage, RubricDraft

Message = dict[str, str]

MAX_CONTEXT_LENGTH = 5000
MAX_TRANSCRIPT_LENGTH = 20000

DRAFT_SYSTEM_PROMPT = """You are an expert pitch coach helping users create evaluation rubrics for their pitches.

Your task is to generate a structured rubric based on the user's conversation. The rubric should help evaluate pitch presentations.

CRITICAL: You MUST respond with ONLY a valid JSON object. No additional text, explanations, or markdown formatting. Just the raw JSON object matching this exact schema:

{
  "title": "string (required, concise rubric name)",
  "description": "string or null (optional description of the rubric)",
  "target_duration_seconds": "number or null (target pitch duration in seconds)",
  "criteria": [
    {
      "name": "string (required, criterion name like 'Clarity of Message')",
      "description": "string (required, detailed description of what to evaluate)"
    }
  ]
}

Requirements:
- At least 3 criteria are required
- Criteria should be specific and actionable
- Descriptions should be clear and evaluable
- If the user mentions a time duration, convert it to seconds (e.g., "2 minutes" = 120, "1.5 minutes" = 90)
- If the user asks for edits, incorporate them into the existing draft while preserving valid structure
- Make criteria relevant to the pitch context the user describes
- Return ONLY valid JSON, no markdown code blocks, no explanations"""

COPILOT_SYSTEM_PROMPT = """You are an expert pitch coach helping users create evaluation rubrics for their pitches.

Your task is to generate a structured rubric based on the user's context. The rubric should help evaluate pitch presentations.

CRITICAL: You MUST respond with ONLY a valid JSON object. No additional text, explanations, or markdown formatting. Just the raw JSON object matching this exact schema:

{
  "name": "string (required, concise rubric name like 'Investor pitch - seed round')",
  "context_summary": "string (required, brief summary of the pitch context and audience)",
  "guiding_questions": ["string", ...] (array of questions to help users prepare, 0-5 questions),
  "criteria": [
    {
      "name": "string (required, criterion name like 'Hook', 'Problem', 'Solution')",
      "description": "string (required, detailed description of what to evaluate)",
      "scoring_guide": "string (required, guide for scoring 0-10, e.g., '0-10: Opening should capture attention immediately')",
      "weight": number (optional, 0.5-2.0, default 1.0)
    }
  ]
}

Requirements:
- At least 3 criteria are required
- Criteria should be specific and actionable
- Scoring guides should clearly explain the 0-10 scale
- Guiding questions should help users prepare for their pitch
- Make criteria relevant to the pitch context described
- Return ONLY valid JSON, no markdown code blocks, no explanations"""

PARSE_SYSTEM_PROMPT = """You are a rubric parser. Extract structured rubric information from the provided text.

The text may contain:
- A rubric title/name
- Evaluation criteria with names and descriptions
- Scoring information (weights, scales, etc.)
- Context or instructions
- Guiding questions

Extract and return a structured JSON object with this format:
{
  "title": "Rubric name",
  "description": "Optional description",
  "criteria": [
    {
      "name": "Criterion name",
      "description": "What this criterion evaluates",
      "weight": 1.0,
      "scoring_guide": "Optional scoring guide (e.g., 0-10: description)"
    }
  ],
  "context_summary": "Optional context about the rubric",
  "guiding_questions": ["Optional array of guiding questions"],
  "target_duration_seconds": null,
  "max_duration_seconds": null
}

Requirements:
- At least 3 criteria are required
- Each criterion must have a name and description
- Use clear, concise names for criteria
- If weights are mentioned, include them; otherwise use 1.0 for all
- If scoring scales are mentioned, include them in scoring_guide
- Extract any context or instructions into context_summary
- Extract any guiding questions into guiding_questions array

Return ONLY valid JSON, no markdown formatting."""

ANALYSIS_SYSTEM_PROMPT = """You are an expert pitch coach providing detailed, actionable feedback on a pitch presentation.

CRITICAL RULES (STRICTLY ENFORCED):
1. ALL feedback MUST cite specific quotes from the transcript. If you cannot cite a quote, do not make the claim.
2. Quotes must be verbatim excerpts (at most 20 words) from the transcript, copied exactly as they appear.
3. Be specific and actionable. Avoid generic advice like "be more engaging"; instead say "When you said '[quote]', try [specific action]."
4. If you cannot find a specific quote to support a point, omit that point entirely.

Return a JSON object with this exact structure:

{
  "summary": {
    "overall_score": <0-10 integer, weighted average of rubric scores>,
    "overall_notes": "<2-3 sentences summarizing the pitch>",
    "top_strengths": ["<specific strength with quote>", ...],
    "top_improvements": ["<specific improvement with quote>", ...]
  },
  "rubric_scores": [
    {
      "criterion_label": "<criterion name exactly as given>",
      "score": <0-10 integer>,
      "notes": "<specific feedback with quote citation>",
      "evidence_quotes": ["<verbatim quote>", ...],
      "missing": <true if the criterion is not addressed at all>
    }
  ],
  "line_by_line": [
    {
      "quote": "<verbatim excerpt, at most 20 words>",
      "type": "<praise|issue|suggestion>",
      "comment": "<what is good or bad about this>",
      "action": "<what to change or keep>",
      "priority": "<high|medium|low>"
    }
  ]
}

Include one rubric_scores entry per criterion, in the order given. Return ONLY valid JSON."""

INJECTION_PATTERNS = [
    r"(?i)ignore\s+(all\s+)?(previous|above|prior)\s+(instructions?|prompts?)",
    r"(?i)disregard\s+(all\s+)?(previous|above|prior)",
    r"(?i)forget\s+(all\s+)?(previous|above|prior)",
    r"(?i)\[INST\]",
    r"(?i)\[/INST\]",
    r"(?i)</s>",
    r"(?i)<<SYS>>",
    r"(?i)<</SYS>>",
    r"(?i)<\|im_start\|>",
    r"(?i)<\|im_end\|>",
    r"(?i)<\|endoftext\|>",
]


def sanitize_llm_input(text: Optional[str], max_length: int = MAX_CONTEXT_LENGTH) -> str:
    """
    Sanitize user free text before embedding it in a prompt.

    - Removes instruction-like patterns that could manipulate the model
    - Truncates to max length
    - Returns empty string for None input

    Args:
        text: Input text to sanitize
        max_length: Maximum length of output

    Returns:
        Sanitized text safe for LLM input
    """
    if not text:
        return ""

    # Truncate first to avoid regex on huge strings
    text = text[:max_length]

    for pattern in INJECTION_PATTERNS:
        text = re.sub(pattern, "[filtered]", text)

    return text


def _draft_dump(draft: Union[RubricDraft, Mapping[str, Any]]) -> str:
    if isinstance(draft, RubricDraft):
        draft = draft.model_dump(exclude_none=True)
    return json.dumps(draft, indent=2, ensure_ascii=False)


def filter_conversation(
    conversation: Iterable[Union[ConversationMessage, Mapping[str, Any]]],
) -> list[Message]:
    """
    Keep well-formed turns in order and end on the most recent user turn.

    Turns with an unknown role or non-text content are dropped, as is anything
    after the last user turn.
    """
    kept: list[Message] = []
    for message in conversation:
        if isinstance(message, ConversationMessage):
            role, content = message.role, message.content
        elif isinstance(message, Mapping):
            role, content = message.get("role"), message.get("content")
        else:
            continue
        if role not in ALLOWED_ROLES or not isinstance(content, str):
            continue
        kept.append({"role": role, "content": content})

    last_user = max((i for i, m in enumerate(kept) if m["role"] == "user"), default=-1)
    return kept[: last_user + 1]


def build_draft_messages(
    conversation: Iterable[Union[ConversationMessage, Mapping[str, Any]]],
    current_draft: Optional[Union[RubricDraft, Mapping[str, Any]]] = None,
) -> list[Message]:
    """
    Build the conversational rubric-builder request.

    Raises:
        ClientInputError: If the conversation has no user turn
    """
    turns = filter_conversation(conversation)
    if not turns:
        raise ClientInputError("Messages must include at least one user message")

    messages: list[Message] = [{"role": "system", "content": DRAFT_SYSTEM_PROMPT}]
    if current_draft:
        messages.append({
            "role": "system",
            "content": (
                f"Current draft rubric:\n{_draft_dump(current_draft)}\n\n"
                "User may ask to modify this draft. "
                "Incorporate their changes while preserving the structure."
            ),
        })
    messages.extend(turns)
    return messages


def build_copilot_messages(
    context_text: str,
    target_length_seconds: Optional[float] = None,
    rubric_type: Optional[str] = None,
    user_edits: Optional[str] = None,
    current_rubric: Optional[str] = None,
) -> list[Message]:
    """
    Build the single-shot copilot request, or a refinement when both
    ``user_edits`` and ``current_rubric`` are given.

    Raises:
        ClientInputError: If the context is empty or ``current_rubric`` is not a JSON object
    """
    if not isinstance(context_text, str) or not context_text.strip():
        raise ClientInputError("contextText is required", subject="rubric")

    is_refinement = bool(user_edits) and bool(current_rubric)
    edits = sanitize_llm_input(user_edits)

    system_prompt = COPILOT_SYSTEM_PROMPT
    if is_refinement:
        system_prompt += (
            f'\n\nYou are refining an existing rubric. The user has provided edits: "{edits}". '
            "Incorporate these changes while preserving the overall structure."
        )

    user_message = f"Create a rubric for this pitch context:\n\n{sanitize_llm_input(context_text.strip())}"

    if target_length_seconds:
        minutes = int(target_length_seconds // 60)
        user_message += f"\n\nTarget duration: {target_length_seconds:g} seconds ({minutes} minutes)"

    if rubric_type:
        user_message += f"\n\nRubric type: {sanitize_llm_input(rubric_type, max_length=200)}"

    if is_refinement:
        try:
            current = json.loads(current_rubric)
        except (TypeError, json.JSONDecodeError):
            raise ClientInputError("Invalid currentRubric JSON", subject="rubric")
        if not isinstance(current, dict):
            raise ClientInputError("Invalid currentRubric JSON", subject="rubric")
        user_message += (
            f"\n\nCurrent rubric:\n{json.dumps(current, indent=2, ensure_ascii=False)}"
            f"\n\nUser edits: {edits}\n\nPlease refine the rubric based on these edits."
        )

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_message},
    ]


def build_parse_messages(text: str) -> list[Message]:
    """Build the request that turns pasted or uploaded rubric text into a rubric."""
    if not isinstance(text, str) or not text.strip():
        raise ClientInputError('Text is required. Provide { text: "..." } in request body.', subject="rubric")
    return [
        {"role": "system", "content": PARSE_SYSTEM_PROMPT},
        {"role": "user", "content": f"Parse this rubric:\n\n{sanitize_llm_input(text, max_length=MAX_TRANSCRIPT_LENGTH)}"},
    ]


def _format_timing(
    target_seconds: Optional[float],
    max_seconds: Optional[float],
    audio_seconds: Optional[float],
    wpm: Optional[int],
) -> str:
    lines = []
    if target_seconds:
        lines.append(f"Target duration: {target_seconds:g}s ({int(target_seconds // 60)} min)")
    else:
        lines.append("No target duration specified")
    if max_seconds:
        lines.append(f"Max duration: {max_seconds:g}s ({int(max_seconds // 60)} min)")
    lines.append(f"Actual duration: {audio_seconds:.1f}s" if audio_seconds else "Duration unknown")
    if wpm:
        lines.append(f"Speaking pace: {wpm} WPM")
    return "\n".join(lines)


def build_analysis_messages(
    transcript: str,
    rubric: RubricDraft,
    pitch_context: Optional[str] = None,
    audio_seconds: Optional[float] = None,
    wpm: Optional[int] = None,
) -> list[Message]:
    """
    Build the request for rubric-based feedback on a transcript.

    Criteria are listed in rubric order with non-default weights noted, and
    the rubric's guiding questions are included when present.
    """
    if not isinstance(transcript, str) or not transcript.strip():
        raise ClientInputError("Transcript is required for analysis", subject="analysis")

    criteria_lines = []
    for index, criterion in enumerate(rubric.criteria, start=1):
        weight_note = f" (weight: {criterion.weight:g})" if criterion.weight != 1.0 else ""
        line = f"{index}. {criterion.name}{weight_note}: {criterion.description}"
        if criterion.scoring_guide:
            line += f"\n   Scoring: {criterion.scoring_guide}"
        criteria_lines.append(line)

    sections = [f"TRANSCRIPT:\n{sanitize_llm_input(transcript, max_length=MAX_TRANSCRIPT_LENGTH)}"]

    if pitch_context:
        sections.append(
            "PITCH CONTEXT (Additional information about what the user is pitching):\n"
            f"{sanitize_llm_input(pitch_context)}"
        )

    if rubric.guiding_questions:
        questions = "\n".join(f"{i}. {q}" for i, q in enumerate(rubric.guiding_questions, start=1))
        sections.append(f"GUIDING QUESTIONS (Check whether the pitch addresses these):\n{questions}")

    sections.append(f"RUBRIC: {rubric.title}\nCRITERIA (Evaluate how well the pitch addresses each):\n"
                    + "\n".join(criteria_lines))
    sections.append(
        "TIMING INFO:\n"
        + _format_timing(rubric.target_duration_seconds, rubric.max_duration_seconds, audio_seconds, wpm)
    )

    return [
        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
        {"role": "user", "content": "\n\n".join(sections)},
    ]
