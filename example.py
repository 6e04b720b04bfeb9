"""
Morph Engine - usage examples
Typical breeding scenarios
"""

from morph_engine import (
    Animal, Morph, PossibleHet, Goal,
    GeneCategory, RecessiveState, Sex, ScoreWeights,
    GeneticsEngine, OutcomeTableGenerator,
    SuggestionEngine, Population, MultiGenerationPlanner,
    prob_goal_for_pair, prefilter_by_goal, validate_outcomes,
    animal_from_dict
)


def example_1_het_x_het():
    """
    Example 1: het Clown x het Clown
    - the classic 25% / 50% / 25% split
    """
    print("\n" + "=" * 60)
    print("Example 1: het x het (recessive)")
    print("=" * 60)

    male = Animal(id="M1", sex=Sex.MALE, hets=("Clown",))
    female = Animal(id="F1", sex=Sex.FEMALE, hets=("Clown",))

    outcomes = GeneticsEngine.cross(male, female)
    print(OutcomeTableGenerator().generate_table(outcomes).to_markdown())

    report = validate_outcomes(outcomes)
    print(f"\nValidation: {'ok' if report.is_valid else 'FAILED'}")


def example_2_multi_gene():
    """
    Example 2: several segregating genes
    - Pastel Clown x Super Pastel 66% het Clown, Spider
    """
    print("\n" + "=" * 60)
    print("Example 2: multi-gene cross")
    print("=" * 60)

    male = Animal(
        id="M2", sex=Sex.MALE,
        morphs=(Morph("Pastel", GeneCategory.CO_DOMINANT),
                Morph("Clown", GeneCategory.RECESSIVE))
    )
    female = animal_from_dict({
        'id': 'F2',
        'sex': 'F',
        'morphs': [{'name': 'Super Pastel', 'type': 'co-dom'},
                   {'name': 'Spider', 'type': 'dominant'}],
        'possibleHets': ['66% het Clown']
    })

    outcomes = GeneticsEngine.cross(male, female)
    print(OutcomeTableGenerator().generate_table(outcomes, limit=8).to_markdown())


def example_3_goals():
    """
    Example 3: goal probability and prefilter
    """
    print("\n" + "=" * 60)
    print("Example 3: goals")
    print("=" * 60)

    goal = Goal(id="visual-clown", name="Visual Clown",
                require_all=("Clown",), recessive_state=RecessiveState.VISUAL)

    male = Animal(id="M3", sex=Sex.MALE, morphs=(Morph("Clown", GeneCategory.RECESSIVE),))
    carrier = Animal(id="F3", sex=Sex.FEMALE, possible_hets=(PossibleHet("Clown", 0.66),))
    normal = Animal(id="F4", sex=Sex.FEMALE)

    for female in (carrier, normal):
        if not prefilter_by_goal(male, female, goal):
            print(f"  {male.id} x {female.id}: rejected by prefilter")
            continue
        prob = prob_goal_for_pair(GeneticsEngine.cross(male, female), goal)
        print(f"  {male.id} x {female.id}: {prob * 100:.1f}% {goal.name}")


def example_4_holdback_plan():
    """
    Example 4: two generation plan
    - Clown x Normal gives no visuals, so keep a het holdback
    """
    print("\n" + "=" * 60)
    print("Example 4: holdback plan")
    print("=" * 60)

    goal = Goal(id="visual-clown", name="Visual Clown", require_all=("Clown",))
    male = Animal(id="M5", sex=Sex.MALE, morphs=(Morph("Clown", GeneCategory.RECESSIVE),))
    female = Animal(id="F5", sex=Sex.FEMALE)
    partner = Animal(id="F6", sex=Sex.FEMALE, morphs=(Morph("Clown", GeneCategory.RECESSIVE),))

    outcomes = GeneticsEngine.cross(male, female)
    plan = MultiGenerationPlanner().build_plan(
        male, female, outcomes, [goal],
        population=Population(males=[male], females=[female, partner])
    )

    print(f"Strategy: {plan.strategy}")
    for step in plan.steps:
        print(f"  {step.title}: {step.summary}")
    print(f"Cumulative probability: {plan.cumulative_prob * 100:.1f}%")


def example_5_suggestions():
    """
    Example 5: rank every pairing of a small collection
    """
    print("\n" + "=" * 60)
    print("Example 5: suggestions")
    print("=" * 60)

    males = [
        Animal(id="M7", sex=Sex.MALE, morphs=(Morph("Clown", GeneCategory.RECESSIVE),)),
        Animal(id="M8", sex=Sex.MALE, morphs=(Morph("Pastel", GeneCategory.CO_DOMINANT),),
               hets=("Clown",)),
    ]
    females = [
        Animal(id="F7", sex=Sex.FEMALE, hets=("Clown",)),
        Animal(id="F8", sex=Sex.FEMALE, morphs=(Morph("Spider", GeneCategory.DOMINANT),)),
    ]
    goals = [Goal(id="visual-clown", name="Visual Clown", require_all=("Clown",),
                  recessive_state=RecessiveState.VISUAL, weight=2.0)]

    suggestions = SuggestionEngine().run(males, females, goals, ScoreWeights())
    for s in suggestions:
        print(f"  {s.male_id} x {s.female_id}: score {s.score:.3f} - {s.rationale}")


def main():
    """Run every example"""
    print("\n" + "#" * 60)
    print("# Morph Engine - examples")
    print("#" * 60)

    example_1_het_x_het()
    example_2_multi_gene()
    example_3_goals()
    example_4_holdback_plan()
    example_5_suggestions()

    print("\n" + "=" * 60)
    print("All examples finished")
    print("=" * 60)


if __name__ == "__main__":
    main()
