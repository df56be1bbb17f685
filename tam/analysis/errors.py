"""Failures a market analysis can surface to its caller, with HTTP status codes."""

from typing import Any, Dict, List, Optional


class AnalysisError(Exception):
    """Base exception for analysis failures shown to the caller."""

    status_code: int = 500
    message: str = "Analysis failed. Check your API key and try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidInput(AnalysisError):
    status_code = 400
    message = "Query required"


class NoProviderConfigured(AnalysisError):
    status_code = 500
    message = (
        "No AI provider configured. Set at least one API key: "
        "ANTHROPIC_API_KEY, GROQ_API_KEY, OPENAI_API_KEY, or XAI_API_KEY"
    )


class ProviderUnavailable(AnalysisError):
    status_code = 400

    def __init__(self, provider_id: str):
        super().__init__(f'Provider "{provider_id}" is not configured')
        self.provider_id = provider_id


class ContentFlagged(AnalysisError):
    status_code = 422
    message = (
        "The AI response was flagged by content moderation for potentially "
        "inappropriate content. Please rephrase your query."
    )

    def __init__(self, categories: List[str]):
        super().__init__()
        self.categories = list(categories)

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message, "categories": self.categories}


class UnparsableResponse(AnalysisError):
    status_code = 500
    message = "Failed to parse AI response"


class MalformedSegmentData(AnalysisError):
    status_code = 500
    message = "AI response did not contain valid segment data"

    def __init__(self, details: Optional[str] = None):
        super().__init__()
        self.details = details


class AnalysisFailed(AnalysisError):
    status_code = 500
