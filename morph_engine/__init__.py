"""
Morph Engine - breeding outcome predictor

Predicts offspring phenotype distributions, scores pairings against
breeding goals and plans two-generation holdback strategies
"""

from .models import (
    GeneCategory,
    Sex,
    RecessiveState,
    AlleleDistribution,
    ParentGeneRecord,
    Morph,
    PossibleHet,
    Animal,
    GeneBundle,
    Outcome,
    Goal,
    PlanStep,
    MultiGenPlan,
    Source,
    Demand,
    RiskResult,
    ScoreWeights,
    Suggestion
)

from .genetics import (
    GeneModel,
    GeneticsEngine,
    canonical_gene_label,
    cross
)

from .normalize import (
    InputError,
    animal_from_dict,
    goal_from_dict,
    weights_from_dict
)

from .goals import (
    GOAL_PRESETS,
    matches_goal,
    prob_goal_for_pair,
    goal_score_for_pair,
    prefilter_by_goal
)

from .scoring import (
    RiskRule,
    apply_risk_flags,
    final_score
)

from .planner import (
    Population,
    MultiGenerationPlanner,
    build_multi_generation_plan
)

from .suggestions import (
    SuggestionConfig,
    SuggestionEngine,
    NullDemandSource,
    TemplateRationaleGenerator
)

from .validator import (
    OutcomeValidator,
    validate_outcomes
)

from .data_table import (
    OutcomeTable,
    OutcomeTableGenerator
)

from .visualizer import (
    ChartConfig,
    OutcomeVisualizer,
    goal_highlights
)


__version__ = "1.0.0"
__all__ = [
    # Models
    "GeneCategory",
    "Sex",
    "RecessiveState",
    "AlleleDistribution",
    "ParentGeneRecord",
    "Morph",
    "PossibleHet",
    "Animal",
    "GeneBundle",
    "Outcome",
    "Goal",
    "PlanStep",
    "MultiGenPlan",
    "Source",
    "Demand",
    "RiskResult",
    "ScoreWeights",
    "Suggestion",

    # Genetics
    "GeneModel",
    "GeneticsEngine",
    "canonical_gene_label",
    "cross",

    # Input
    "InputError",
    "animal_from_dict",
    "goal_from_dict",
    "weights_from_dict",

    # Goals
    "GOAL_PRESETS",
    "matches_goal",
    "prob_goal_for_pair",
    "goal_score_for_pair",
    "prefilter_by_goal",

    # Scoring
    "RiskRule",
    "apply_risk_flags",
    "final_score",

    # Planner
    "Population",
    "MultiGenerationPlanner",
    "build_multi_generation_plan",

    # Suggestions
    "SuggestionConfig",
    "SuggestionEngine",
    "NullDemandSource",
    "TemplateRationaleGenerator",

    # Validator
    "OutcomeValidator",
    "validate_outcomes",

    # Data Table
    "OutcomeTable",
    "OutcomeTableGenerator",

    # Visualizer
    "ChartConfig",
    "OutcomeVisualizer",
    "goal_highlights",
]
