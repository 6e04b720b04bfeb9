"""
Morph Engine - Flask REST API
Endpoints for crosses, goal evaluation and pairing suggestions

Run: flask --app api run --debug
or:  python api.py
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from morph_engine import (
    GeneCategory, GOAL_PRESETS,
    GeneticsEngine, SuggestionEngine,
    OutcomeTableGenerator, OutcomeVisualizer, goal_highlights,
    InputError, animal_from_dict, weights_from_dict,
    matches_goal, prob_goal_for_pair, goal_score_for_pair, prefilter_by_goal,
    validate_outcomes
)
from morph_engine.normalize import animals_from_list, goals_from_list


logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)  # allow the web UI to call the API

# shared objects
table_generator = OutcomeTableGenerator()
visualizer = OutcomeVisualizer()
suggestion_engine = SuggestionEngine()


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


@app.route('/')
def index():
    """API info"""
    return jsonify({
        'name': 'Morph Engine API',
        'version': '1.0.0',
        'description': 'Breeding outcome prediction and pairing suggestions',
        'endpoints': {
            '/categories': 'GET - supported gene categories',
            '/goals/presets': 'GET - built-in goal presets',
            '/cross': 'POST - offspring outcome distribution for two animals',
            '/goals/evaluate': 'POST - goal probabilities for a pairing',
            '/suggest': 'POST - ranked pairings across collections'
        }
    })


@app.route('/categories', methods=['GET'])
def get_categories():
    """Supported gene categories"""
    return jsonify({'categories': [c.value for c in GeneCategory]})


@app.route('/goals/presets', methods=['GET'])
def get_goal_presets():
    return jsonify({'goals': [g.to_dict() for g in GOAL_PRESETS]})


@app.route('/cross', methods=['POST'])
def cross_pair():
    """
    Offspring outcomes for one pairing

    Request Body:
    {
        "male": {"id": "m1", "sex": "M", "morphs": [{"name": "Clown", "type": "recessive"}]},
        "female": {"id": "f1", "sex": "F", "hets": ["Clown"]},
        "limit": 10,       // optional: rows in the table
        "chart": false,    // optional: include a base64 PNG chart
        "goals": [...]     // optional: outcomes meeting any goal are highlighted in the chart
    }
    """
    try:
        data = request.get_json() or {}

        male = animal_from_dict(data.get('male'))
        female = animal_from_dict(data.get('female'))

        outcomes = GeneticsEngine.cross(male, female)
        table = table_generator.generate_table(outcomes, limit=data.get('limit'))
        validation = validate_outcomes(outcomes)

        response = {
            'success': True,
            'outcomes': [o.to_dict() for o in outcomes],
            'table': table.to_dict(),
            'validation': validation.to_dict()
        }

        if data.get('chart'):
            goals = goals_from_list(data.get('goals'))
            image = visualizer.create_chart(
                outcomes,
                title=f"{male.id} x {female.id}",
                highlight=goal_highlights(outcomes, goals)
            )
            response['chart'] = f"data:image/png;base64,{image}"

        return jsonify(response)

    except InputError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception("cross failed")
        return _error(str(e), 500)


@app.route('/goals/evaluate', methods=['POST'])
def evaluate_goals():
    """
    Goal probabilities for one pairing

    Request Body:
    {
        "male": {...},
        "female": {...},
        "goals": [{"id": "visual-clown", "requireAll": ["Clown"], "recessiveState": "visual"}]
    }
    """
    try:
        data = request.get_json() or {}

        male = animal_from_dict(data.get('male'))
        female = animal_from_dict(data.get('female'))
        goals = goals_from_list(data.get('goals'))

        outcomes = GeneticsEngine.cross(male, female)

        return jsonify({
            'success': True,
            'goals': [
                {
                    'id': goal.id,
                    'name': goal.name,
                    'possible': prefilter_by_goal(male, female, goal),
                    'probability': prob_goal_for_pair(outcomes, goal),
                    'matchingOutcomes': [
                        o.to_dict() for o in outcomes if matches_goal(o.labels, goal)
                    ]
                }
                for goal in goals
            ],
            'goalFit': goal_score_for_pair(outcomes, goals)
        })

    except InputError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception("goal evaluation failed")
        return _error(str(e), 500)


@app.route('/suggest', methods=['POST'])
def suggest():
    """
    Ranked pairings

    Request Body:
    {
        "males": [...],
        "females": [...],
        "goals": [...],
        "weights": {"wDemand": 1, "wPrice": 1, "wNovelty": 1, "wRisk": 1, "wGoalFit": 1},
        "top": 10
    }
    """
    try:
        data = request.get_json() or {}

        males = animals_from_list(data.get('males'))
        females = animals_from_list(data.get('females'))
        goals = goals_from_list(data.get('goals'))
        weights = weights_from_dict(data.get('weights'))

        suggestions = suggestion_engine.run(males, females, goals, weights)

        top = data.get('top')
        if top:
            suggestions = suggestions[:int(top)]

        return jsonify({
            'success': True,
            'suggestions': [s.to_dict() for s in suggestions]
        })

    except InputError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception("suggestion failed")
        return _error(str(e), 500)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    print("=" * 50)
    print("Morph Engine API Server")
    print("=" * 50)
    print("Server starting at http://localhost:5000")
    print()
    app.run(debug=True, host='0.0.0.0', port=5000)
