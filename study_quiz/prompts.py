"""Prompt templates for LLM quiz generation."""
from __future__ import annotations

SYSTEM_PROMPT = """\
You are an expert educational content creator writing quiz questions from \
study material.

Generate EXACTLY the requested number of UNIQUE quiz questions. When the \
material is brief, you may add closely related educational context (standard \
definitions, background facts, examples), but every question must stay on \
the material's subject.

Never write questions about file formats, software, document processing or \
file metadata.

Every question must test a different concept or aspect. Vary difficulty and \
phrasing; no duplicate or near-duplicate questions.

Formatting rules by type:
- IDENTIFICATION: plain question, short answer (1-3 words)
- FILL IN THE BLANK: use _____ (exactly 5 underscores) for each blank
- TRUE/FALSE: plain statement with no underscores, brackets or tags
- MATCHING: pairs with numbered labels (left) and plain text (right)
- ENUMERATION: list items as an array
- MULTIPLE CHOICE: 4 options

Always return valid JSON matching the requested format exactly.
"""

QUIZ_BATCH_PROMPT = """\
Generate EXACTLY {count} unique quiz questions based on this study material.

STUDY MATERIAL:

{material}

Requirements:
1. Generate EXACTLY {count} questions, no more, no less.
2. All questions must be unique and must not repeat any existing question.
3. Questions must be based on the study material. If it lacks detail, you may \
add closely related background, definitions or examples.
4. Each question must test a different concept; cover different parts of the \
material.
{existing_section}
QUESTION TYPES TO GENERATE (in this order):

{type_instructions}

Return ONLY valid JSON in this exact format, with no other text:
{{
  "quizzes": [
    ... EXACTLY {count} quiz objects following the formats above ...
  ]
}}
"""

IDENTIFICATION_INSTRUCTIONS = """\
{number}. IDENTIFICATION ({variant})
{{
  "type": "identification",
  "question": "{question_hint}",
  "correct_answer": "Term",
  "explanation": "Why this term is correct"
}}
Rules: the answer is ONLY the key term (1-3 words); no underscores, brackets or tags."""

FILL_BLANK_INSTRUCTIONS = """\
{number}. FILL IN THE BLANK
{{
  "type": "fill_blank",
  "question": "Sentence with _____ for each blank",
  "fill_blank_answers": ["answer1", "answer2"],
  "correct_answer": ["answer1", "answer2"],
  "explanation": "Why these are correct"
}}
Rules: use _____ (EXACTLY 5 underscores) for EACH blank, separated by at least \
one word; the answer arrays must match the number of blanks; no [BLANK] tags."""

TRUE_FALSE_INSTRUCTIONS = """\
{number}. MODIFIED TRUE/FALSE
{{
  "type": "true_false",
  "question": "Complete statement in plain text",
  "correct_answer": "True",
  "underlinedText": "word",
  "correctReplacement": "word",
  "explanation": "Why the statement is true or false"
}}
Rules: correct_answer is "True" or "False"; underlinedText is ONE word from \
the statement; if True, correctReplacement equals underlinedText; if False, \
correctReplacement is the word that makes the statement true."""

MATCHING_INSTRUCTIONS = """\
{number}. MATCHING
{{
  "type": "matching",
  "question": "Match the items based on...",
  "pairs": [
    {{"left": "1. Term 1", "right": "Definition for Term 1"}},
    {{"left": "2. Term 2", "right": "Definition for Term 2"}},
    {{"left": "3. Term 3", "right": "Definition for Term 3"}},
    {{"left": "4. Term 4", "right": "Definition for Term 4"}}
  ],
  "correct_answer": ["1:1", "2:2", "3:3", "4:4"],
  "explanation": "How these pairs match"
}}
Rules: at least 4 pairs; left items use "1. ", "2. " numbering; right items \
are plain text with no prefix; list each pair in its matched position."""

ENUMERATION_INSTRUCTIONS = """\
{number}. ENUMERATION
{{
  "type": "enumeration",
  "question": "List the [NUMBER] types/items of [concept]:",
  "correct_answer": ["Item 1", "Item 2", "Item 3"],
  "explanation": "Why these are correct"
}}
Rules: the question states the exact number of items; the array length \
matches it; items are 1-3 words each."""

MULTIPLE_CHOICE_INSTRUCTIONS = """\
{number}. MULTIPLE CHOICE
{{
  "type": "multiple_choice",
  "question": "Clear question about a concept?",
  "options": ["Correct answer", "Wrong 1", "Wrong 2", "Wrong 3"],
  "correct_answer": "Correct answer",
  "explanation": "Why this is correct"
}}
Rules: exactly 4 distinct options; correct_answer is copied verbatim from \
options; wrong options must be plausible."""

TYPE_INSTRUCTIONS = {
    "identification": IDENTIFICATION_INSTRUCTIONS,
    "fill_blank": FILL_BLANK_INSTRUCTIONS,
    "true_false": TRUE_FALSE_INSTRUCTIONS,
    "matching": MATCHING_INSTRUCTIONS,
    "enumeration": ENUMERATION_INSTRUCTIONS,
    "multiple_choice": MULTIPLE_CHOICE_INSTRUCTIONS,
}

INVALID_JSON_FEEDBACK = (
    'Your previous response did not contain valid JSON. Respond with ONLY a '
    'JSON object of the form {"quizzes": [...]}, no other text.'
)


def format_type_instructions(types: list[str], start_index: int = 0) -> str:
    """Per-question format blocks, numbered from 1 within the batch.

    Identification questions alternate between a statement and a question
    format based on their absolute position in the whole quiz.
    """
    blocks = []
    for idx, qtype in enumerate(types):
        template = TYPE_INSTRUCTIONS.get(qtype, MULTIPLE_CHOICE_INSTRUCTIONS)
        if qtype == "identification":
            statement = (start_index + idx) % 2 == 0
            blocks.append(template.format(
                number=idx + 1,
                variant="Statement Format" if statement else "Question Format",
                question_hint=(
                    "A clear definition that identifies a term" if statement
                    else "What is the term for [description]?"
                ),
            ))
        else:
            blocks.append(template.format(number=idx + 1))
    return "\n\n".join(blocks)


def format_existing_questions(questions: list[str]) -> str:
    if not questions:
        return ""
    lines = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, 1))
    return f"\nEXISTING QUESTIONS (DO NOT DUPLICATE):\n{lines}\n"


def truncate_material(material: str, limit: int = 4000) -> str:
    if len(material) <= limit:
        return material
    return material[:limit] + "...\n[Material truncated for processing]"
