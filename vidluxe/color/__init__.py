from .models import MetricStatus, ColorMetric, ColorAnalysis, classify
from .color_analyzer import ColorAnalyzer, explain, default_analysis
from .color_grade import ColorGradeBuilder, FilterChain, FilterStage

__all__ = [
    "MetricStatus",
    "ColorMetric",
    "ColorAnalysis",
    "classify",
    "ColorAnalyzer",
    "explain",
    "default_analysis",
    "ColorGradeBuilder",
    "FilterChain",
    "FilterStage",
]
