"""
Morph Engine - breeding outcome predictor
Main entry point

Usage:
    python main.py cross collection.json --male M1 --female F1
    python main.py cross collection.json --male M1 --female F1 --chart out.png
    python main.py suggest collection.json --top 5
    python main.py suggest collection.json --presets --json

collection.json:
    {"males": [...], "females": [...], "goals": [...], "weights": {...}}
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

from morph_engine import (
    Animal, Goal, GOAL_PRESETS,
    GeneticsEngine, SuggestionEngine, SuggestionConfig,
    OutcomeTableGenerator, OutcomeVisualizer, goal_highlights,
    InputError, weights_from_dict,
    prob_goal_for_pair, validate_outcomes
)
from morph_engine.normalize import animals_from_list, goals_from_list
from morph_engine.scoring import load_risk_rules


class MorphEngine:
    """
    Morph Engine main class
    Loads a collection and runs crosses / suggestions over it
    """

    def __init__(self, collection: dict, use_presets: bool = False,
                 risk_rules_path: Optional[str] = None, concurrency: Optional[int] = None):
        """
        Args:
            collection: parsed collection file
            use_presets: add the built-in goal presets
            risk_rules_path: JSON risk rules replacing the defaults
            concurrency: pairs evaluated per batch
        """
        self.males: List[Animal] = animals_from_list(collection.get('males'))
        self.females: List[Animal] = animals_from_list(collection.get('females'))
        self.goals: List[Goal] = goals_from_list(collection.get('goals'))
        if use_presets:
            self.goals.extend(GOAL_PRESETS)
        self.weights = weights_from_dict(collection.get('weights'))

        config = SuggestionConfig()
        if concurrency:
            config.concurrency = concurrency
        rules = load_risk_rules(risk_rules_path) if risk_rules_path else None

        self.engine = SuggestionEngine(config=config, risk_rules=rules)
        self.table_generator = OutcomeTableGenerator()

    def find(self, animal_id: str) -> Animal:
        for animal in self.males + self.females:
            if animal.id == animal_id:
                return animal
        raise InputError(f"no animal with id {animal_id!r} in the collection")

    def run_cross(self, male_id: str, female_id: str,
                  chart_path: Optional[str] = None, as_json: bool = False) -> dict:
        male = self.find(male_id)
        female = self.find(female_id)

        outcomes = GeneticsEngine.cross(male, female)
        report = validate_outcomes(outcomes)
        goals = [
            {'id': g.id, 'name': g.name, 'probability': prob_goal_for_pair(outcomes, g)}
            for g in self.goals
        ]

        if chart_path:
            OutcomeVisualizer().create_chart(
                outcomes, title=f"{male.id} x {female.id}",
                highlight=goal_highlights(outcomes, self.goals), save_path=chart_path
            )

        result = {
            'success': report.is_valid,
            'timestamp': datetime.now().isoformat(),
            'male': male.to_dict(),
            'female': female.to_dict(),
            'outcomes': [o.to_dict() for o in outcomes],
            'goals': goals,
            'validation': report.to_dict()
        }

        if not as_json:
            print(f"\n{'=' * 50}")
            print(f"Cross: {male.display_label} ({male.id}) x {female.display_label} ({female.id})")
            print(f"{'=' * 50}")
            print(self.table_generator.generate_table(outcomes).to_markdown())
            for goal in goals:
                print(f"  - {goal['name']}: {goal['probability'] * 100:.1f}%")
            if not report.is_valid:
                print(report)
            if chart_path:
                print(f"Chart saved to {chart_path}")

        return result

    def run_suggest(self, top: int = 10, as_json: bool = False) -> dict:
        suggestions = self.engine.run(self.males, self.females, self.goals, self.weights)
        suggestions = suggestions[:top]

        if not as_json:
            print(f"\n{'=' * 50}")
            print(f"Top {len(suggestions)} pairings "
                  f"({len(self.males)} males x {len(self.females)} females, {len(self.goals)} goals)")
            print(f"{'=' * 50}")
            for rank, s in enumerate(suggestions, 1):
                print(f"\n#{rank} {s.male_id} x {s.female_id}  "
                      f"score {s.score:.3f}  goal fit {s.goal_fit:.3f}")
                print(self.table_generator.generate_table(s.outcomes, limit=5).to_markdown())
                if s.risks:
                    print(f"  Risks: {', '.join(s.risks)}")
                print(f"  {s.rationale}")
                if s.plan and s.plan.strategy == "multi":
                    for step in s.plan.steps:
                        print(f"  [{step.title}] {step.summary}")
                    print(f"  Cumulative: {s.plan.cumulative_prob * 100:.1f}%")

        return {
            'success': True,
            'timestamp': datetime.now().isoformat(),
            'suggestions': [s.to_dict() for s in suggestions]
        }


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Morph Engine - breeding outcome predictor")
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging")
    parser.add_argument('--json', action='store_true', help="print JSON instead of tables")
    parser.add_argument('--presets', action='store_true', help="add the built-in goal presets")
    parser.add_argument('--risk-rules', help="JSON file with risk rules")

    sub = parser.add_subparsers(dest='command', required=True)

    cross_parser = sub.add_parser('cross', help="outcome distribution for one pairing")
    cross_parser.add_argument('collection', help="collection JSON file")
    cross_parser.add_argument('--male', required=True)
    cross_parser.add_argument('--female', required=True)
    cross_parser.add_argument('--chart', help="save a PNG chart to this path")

    suggest_parser = sub.add_parser('suggest', help="rank every pairing in the collection")
    suggest_parser.add_argument('collection', help="collection JSON file")
    suggest_parser.add_argument('--top', type=int, default=10)
    suggest_parser.add_argument('--concurrency', type=int)

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        with open(args.collection, 'r', encoding='utf-8') as f:
            collection = json.load(f)

        engine = MorphEngine(
            collection,
            use_presets=args.presets,
            risk_rules_path=args.risk_rules,
            concurrency=getattr(args, 'concurrency', None)
        )

        if args.command == 'cross':
            result = engine.run_cross(args.male, args.female, args.chart, args.json)
        else:
            result = engine.run_suggest(args.top, args.json)

    except (OSError, json.JSONDecodeError, InputError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
