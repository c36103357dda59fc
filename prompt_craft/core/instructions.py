"""Instructions sent to the AI backend for suggestions and prompt extraction."""

SUGGEST_INSTRUCTION = """You are a world-class prompt engineering expert. Your task is to \
provide a concise, actionable suggestion to improve a specific part of a system prompt.

Field to improve: "{field}"
Current content: "{current}"

Based on best practices, provide one clear suggestion for improvement. Be specific \
and helpful. Frame your response as a direct suggestion."""

PARSE_INSTRUCTION = """Analyze the following system prompt and extract its core components \
into a JSON object. Follow the provided schema precisely. If a section is missing, provide \
a reasonable default or an empty value (e.g., empty string or empty array).

System Prompt to analyze:
---
{text}
---"""

PROMPT_CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "persona": {
            "type": "string",
            "description": "The agent's identity or role. e.g., 'You are a senior data scientist.'",
        },
        "mission": {"type": "string", "description": "The agent's primary goal or objective."},
        "skills": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of the agent's capabilities or tools.",
        },
        "boundaries": {
            "type": "array",
            "items": {"type": "string"},
            "description": "A list of critical 'do nots' or constraints.",
        },
        "personality": {
            "type": "string",
            "description": "The interaction style: Professional, Casual, Enthusiastic, or Formal.",
        },
        "format": {
            "type": "string",
            "description": "Strict instructions on the desired output format.",
        },
        "reference": {
            "type": "string",
            "description": "Context, few-shot examples, or data the agent must use, else empty.",
        },
    },
    "required": [
        "persona",
        "mission",
        "skills",
        "boundaries",
        "personality",
        "format",
        "reference",
    ],
}
