"""AI configuration and prompts for Z3r0Day-Talks."""

from talks.config import settings


class AIConfig:
    """Configuration for AI models and settings."""

    MODELS = {
        "session_draft": settings.ai_model,
        "live_advice": settings.ai_model,
    }

    # Chat lines starting with this prefix are forwarded to the advisor
    COMMAND_PREFIX = "/ai "

    ASSISTANT_NAME = "Nexus AI"


class AIPrompts:
    """Collection of AI prompts for different tasks."""

    SESSION_DRAFT = """Suggest a compelling cybersecurity meetup title and short description for the topic: {topic}.

Respond with a JSON object only, using exactly these keys:
{{"title": string, "description": string, "tags": [string, ...]}}

Keep the title under 80 characters, the description to 2-3 sentences, and give 2-5 short tags."""

    LIVE_ADVICE = """You are a cybersecurity expert assistant in a live meetup. Provide a concise technical answer to: {query}"""

    EMPTY_ADVICE = "I am sorry, I could not process that request."
