from promptreel.schemas.video import ErrorResponse, GenerationResult

__all__ = ["ErrorResponse", "GenerationResult"]
