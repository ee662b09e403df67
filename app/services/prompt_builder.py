"""Prompts for generating WhatsApp automation replies"""
from app.domain.automation import GenerationRequest

NO_CONTEXT_MARKER = "None provided"

SYSTEM_PROMPT = """You are an expert WhatsApp automation copywriter.
Generate a single WhatsApp message that feels human, handles objections, and aligns with the business goal.
Constraints:
- Use natural language with sentence case.
- Keep to 120-180 words.
- End with a clear call-to-action.
- If context includes links, incorporate them once.
- Ask at most two questions in one message."""


def build_user_prompt(request: GenerationRequest) -> str:
    context = request.context.strip() if request.context else ""
    return (
        f"Automation Name: {request.name}\n"
        f"Trigger Phrase: {request.trigger_phrase}\n"
        f"Desired Tone: {request.tone.value}\n"
        f"Goal: {request.goal}\n"
        f"Knowledge Base / Context: {context or NO_CONTEXT_MARKER}\n"
        "\n"
        "Craft the WhatsApp reply in Markdown bullet-friendly format where appropriate."
    )


def build_messages(request: GenerationRequest) -> list[dict]:
    """Chat messages for the completion request"""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(request)},
    ]
