"""Food analysis and nutrition resolution pipeline."""

from food_analysis.application.analysis.pipeline import FoodAnalysisPipeline, analyze_food_input
from food_analysis.domain.analysis.models import FoodAnalysisInput, FoodAnalysisResult

__version__ = "1.0.0"

__all__ = [
    "FoodAnalysisInput",
    "FoodAnalysisPipeline",
    "FoodAnalysisResult",
    "analyze_food_input",
]
