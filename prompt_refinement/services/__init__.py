from prompt_refinement.services.refinement import (
    PromptRefinementService,
    RefinementResult,
    SessionHistory,
)

__all__ = [
    "PromptRefinementService",
    "RefinementResult",
    "SessionHistory",
]
