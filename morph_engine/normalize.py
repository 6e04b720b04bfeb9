"""
normalize.py - input construction
Turns loosely shaped records (JSON, API payloads) into Animal / Goal / ScoreWeights
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .genetics import canonical_gene_label, parse_percentage
from .models import (
    Animal, Goal, GeneCategory, Morph, PossibleHet,
    RecessiveState, ScoreWeights, Sex
)


class InputError(ValueError):
    """A caller supplied record that cannot be turned into a model"""


CATEGORY_ALIASES = {
    'recessive': GeneCategory.RECESSIVE,
    'rec': GeneCategory.RECESSIVE,
    'co-dominant': GeneCategory.CO_DOMINANT,
    'co-dom': GeneCategory.CO_DOMINANT,
    'codom': GeneCategory.CO_DOMINANT,
    'codominant': GeneCategory.CO_DOMINANT,
    'incomplete dominant': GeneCategory.CO_DOMINANT,
    'dominant': GeneCategory.DOMINANT,
    'dom': GeneCategory.DOMINANT,
    'polygenic': GeneCategory.POLYGENIC,
}

SEX_ALIASES = {
    'm': Sex.MALE, 'male': Sex.MALE, '1.0': Sex.MALE,
    'f': Sex.FEMALE, 'female': Sex.FEMALE, '0.1': Sex.FEMALE,
}

RECESSIVE_STATE_ALIASES = {
    'visual': RecessiveState.VISUAL,
    'het': RecessiveState.HET,
    'possiblehet': RecessiveState.POSSIBLE_HET,
    'possible het': RecessiveState.POSSIBLE_HET,
    'possible_het': RecessiveState.POSSIBLE_HET,
}

DEFAULT_POSSIBLE_HET_PROB = 0.5


def _pick(data: Dict[str, Any], *keys: str, default=None):
    """First present key among camelCase / snake_case spellings"""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _string_list(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = re.split(r"[,;]", value)
    if not isinstance(value, (list, tuple)):
        raise InputError(f"'{field_name}' must be a list of strings")
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())


def parse_category(raw: Any) -> GeneCategory:
    key = re.sub(r"\s+", " ", str(raw or "")).strip().lower()
    if key not in CATEGORY_ALIASES:
        raise InputError(f"unknown gene category: {raw!r}")
    return CATEGORY_ALIASES[key]


def parse_sex(raw: Any) -> Sex:
    key = str(raw or "").strip().lower()
    if key not in SEX_ALIASES:
        raise InputError(f"unknown sex: {raw!r}")
    return SEX_ALIASES[key]


def parse_morph(raw: Any) -> Morph:
    if not isinstance(raw, dict):
        raise InputError(f"morph must be an object with name and type: {raw!r}")
    name = str(raw.get('name') or "").strip()
    if not name:
        raise InputError("morph is missing a name")
    return Morph(name=name, category=parse_category(_pick(raw, 'type', 'category')))


def parse_possible_het(raw: Any) -> PossibleHet:
    """'66% het Clown' or {'name': 'Clown', 'probability': 0.66}"""
    if isinstance(raw, dict):
        name = str(raw.get('name') or "").strip()
        probability = raw.get('probability')
        if probability is None:
            probability = parse_percentage(name)
        if probability is None:
            probability = DEFAULT_POSSIBLE_HET_PROB
    else:
        name = str(raw or "").strip()
        probability = parse_percentage(name)
        if probability is None:
            probability = DEFAULT_POSSIBLE_HET_PROB

    label = canonical_gene_label(name)
    if not label:
        raise InputError(f"possible het is missing a gene name: {raw!r}")
    try:
        probability = float(probability)
    except (TypeError, ValueError):
        raise InputError(f"invalid possible het probability: {raw!r}")
    return PossibleHet(name=label, probability=max(0.0, min(1.0, probability)))


def animal_from_dict(data: Dict[str, Any]) -> Animal:
    """Validated Animal from a loose record"""
    if not isinstance(data, dict):
        raise InputError("animal record must be an object")

    animal_id = str(data.get('id') or "").strip()
    if not animal_id:
        raise InputError("animal record is missing an id")

    morphs = data.get('morphs') or []
    if not isinstance(morphs, (list, tuple)):
        raise InputError(f"{animal_id}: 'morphs' must be a list")

    # "het Clown" and "Clown" declare the same gene
    hets = tuple(canonical_gene_label(h) for h in _string_list(data.get('hets'), 'hets'))

    possible = _pick(data, 'possibleHets', 'possible_hets', default=[])
    if isinstance(possible, str):
        possible = _string_list(possible, 'possibleHets')

    return Animal(
        id=animal_id,
        sex=parse_sex(data.get('sex')),
        morphs=tuple(parse_morph(m) for m in morphs),
        hets=hets,
        possible_hets=tuple(parse_possible_het(p) for p in possible)
    )


def goal_from_dict(data: Dict[str, Any]) -> Goal:
    """Validated Goal from a loose record"""
    if not isinstance(data, dict):
        raise InputError("goal record must be an object")

    goal_id = str(data.get('id') or "").strip()
    if not goal_id:
        raise InputError("goal record is missing an id")

    state = _pick(data, 'recessiveState', 'recessive_state')
    recessive_state: Optional[RecessiveState] = None
    if state:
        key = str(state).strip().lower()
        if key not in RECESSIVE_STATE_ALIASES:
            raise InputError(f"{goal_id}: unknown recessive state {state!r}")
        recessive_state = RECESSIVE_STATE_ALIASES[key]

    min_prob = _pick(data, 'minProb', 'min_prob')
    min_offspring = _pick(data, 'minOffspringCount', 'min_offspring_count')
    try:
        return Goal(
            id=goal_id,
            name=str(data.get('name') or goal_id),
            require_all=_string_list(_pick(data, 'requireAll', 'require_all'), 'requireAll'),
            require_any=_string_list(_pick(data, 'requireAny', 'require_any'), 'requireAny'),
            avoid=_string_list(data.get('avoid'), 'avoid'),
            recessive_state=recessive_state,
            min_prob=float(min_prob) if min_prob is not None else None,
            weight=float(_pick(data, 'weight', default=1.0)),
            min_offspring_count=int(min_offspring) if min_offspring is not None else None
        )
    except (TypeError, ValueError) as e:
        raise InputError(f"{goal_id}: {e}")


def weights_from_dict(data: Optional[Dict[str, Any]]) -> ScoreWeights:
    """ScoreWeights from {'wDemand': ..} or {'demand': ..}; missing keys default to 1"""
    data = data or {}
    try:
        return ScoreWeights(
            demand=float(_pick(data, 'wDemand', 'demand', default=1.0)),
            price=float(_pick(data, 'wPrice', 'price', default=1.0)),
            novelty=float(_pick(data, 'wNovelty', 'novelty', default=1.0)),
            risk=float(_pick(data, 'wRisk', 'risk', default=1.0)),
            goal_fit=float(_pick(data, 'wGoalFit', 'goalFit', 'goal_fit', default=1.0))
        )
    except (TypeError, ValueError) as e:
        raise InputError(f"invalid weights: {e}")


def animals_from_list(records: Iterable[Dict[str, Any]]) -> List[Animal]:
    return [animal_from_dict(r) for r in records or []]


def goals_from_list(records: Iterable[Dict[str, Any]]) -> List[Goal]:
    return [goal_from_dict(r) for r in records or []]
