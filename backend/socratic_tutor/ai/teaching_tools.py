"""Prompt templates for the lesson planner and rubric builder."""

TEACHING_TOOLS_SYSTEM_PROMPT = (
    "You are an expert educator. Reply with one valid JSON object and nothing else."
)

RUBRIC_LEVEL_LABELS = {
    3: ["Beginning", "Proficient", "Advanced"],
    4: ["Below Expectations", "Meets Expectations", "Exceeds Expectations", "Exemplary"],
    5: ["Needs Improvement", "Developing", "Proficient", "Accomplished", "Exemplary"],
}


def rubric_level_labels(number_of_levels: int | None) -> list[str]:
    return RUBRIC_LEVEL_LABELS.get(number_of_levels or 5, RUBRIC_LEVEL_LABELS[5])


def _optional_line(label: str, value) -> str:
    return f"{label}: {value}" if value else ""


def build_lesson_plan_prompt(
    subject: str,
    topic: str,
    duration: int,
    grade_level: str | None = None,
    learning_objectives: str | None = None,
    student_needs: str | None = None,
) -> str:
    context = "\n".join(
        line
        for line in [
            f"Subject: {subject}",
            _optional_line("Grade Level", grade_level),
            f"Topic: {topic}",
            f"Lesson Duration: {duration} minutes",
            _optional_line("Teacher's Learning Objectives", learning_objectives),
            _optional_line("Student Needs/Differentiation", student_needs),
        ]
        if line
    )
    return f"""You are an expert educator creating a detailed lesson plan using research-based teaching strategies.

{context}

Create a comprehensive lesson plan using these evidence-based frameworks:
1. Backward Design: Start with clear, measurable SMART objectives
2. Gradual Release of Responsibility: "I do, We do, You do" model
3. Active Learning: Include engagement strategies
4. Differentiation: Provide multiple entry points and supports

The lesson should include these phases with appropriate time allocations:
- Hook/Engagement (5-10% of time)
- Direct Instruction/Modeling (20-30% of time)
- Guided Practice (30-40% of time)
- Independent Practice (20-30% of time)
- Closure/Assessment (5-10% of time)

Return ONLY a valid JSON object in this exact format:
{{
  "id": "unique-id",
  "title": "Lesson title",
  "duration": "{duration} minutes",
  "objectives": ["SMART objective 1", "SMART objective 2"],
  "materials": ["Material 1", "Material 2"],
  "activities": [
    {{"phase": "Hook/Engagement", "duration": "X minutes", "description": "What teacher and students do"}},
    {{"phase": "Direct Instruction", "duration": "X minutes", "description": "Detailed description"}},
    {{"phase": "Guided Practice", "duration": "X minutes", "description": "Detailed description"}},
    {{"phase": "Independent Practice", "duration": "X minutes", "description": "Detailed description"}},
    {{"phase": "Closure/Assessment", "duration": "X minutes", "description": "Detailed description"}}
  ],
  "assessment": "Specific formative and/or summative assessment strategies",
  "differentiation": ["Strategy 1", "Strategy 2"],
  "homework": "Optional homework or extension activity"
}}

Make it practical, specific, and immediately usable for a teacher."""


def build_rubric_prompt(
    assignment_title: str,
    assignment_description: str,
    rubric_type: str = "analytic",
    number_of_levels: int | None = None,
    grade_level: str | None = None,
    subject: str | None = None,
) -> str:
    labels = rubric_level_labels(number_of_levels)
    analytic = rubric_type == "analytic"
    context = "\n".join(
        line
        for line in [
            f"Assignment Title: {assignment_title}",
            f"Description: {assignment_description}",
            _optional_line("Grade Level", grade_level),
            _optional_line("Subject", subject),
            "Rubric Type: "
            + ("Analytic (multiple criteria)" if analytic else "Holistic (overall performance)"),
            f"Performance Levels: {', '.join(labels)}",
        ]
        if line
    )
    criteria_rule = (
        "Identify 4-6 key criteria that align with the assignment objectives"
        if analytic
        else "Create a single overall performance criterion"
    )
    level_rows = ",\n        ".join(
        f'{{ "label": "{label}", "description": "Specific description", "points": 0 }}'
        for label in labels
    )
    return f"""You are an expert educator creating an assessment rubric.

{context}

Create a comprehensive {rubric_type} rubric with the following requirements:

1. {criteria_rule}
2. For each criterion, provide specific, descriptive language for each performance level
3. Assign appropriate point values (use a scale that totals 100 points)
4. Ensure descriptions are:
   - Specific and measurable
   - Observable behaviors/qualities
   - Clear differences between levels
   - Free of subjective terms like "good" or "excellent"

Return ONLY a valid JSON object in this exact format:
{{
  "title": "{assignment_title} Rubric",
  "totalPoints": 100,
  "criteria": [
    {{
      "name": "Criterion Name",
      "levels": [
        {level_rows}
      ]
    }}
  ]
}}"""
