"""
Prompts for the objection-handling assistant.
"""

OBJECTION_SYSTEM_PROMPT = (
    "You are an expert sales assistant. "
    "Provide concise, persuasive responses to sales objections."
)


def get_objection_prompt(message: str) -> str:
    """Wrap a raw objection in the user prompt sent to the model."""
    return f"How should I handle this objection? {message}"
