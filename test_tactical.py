"""
Tactical style classifier and clash resolver tests.
"""
import itertools

import pytest
from pydantic import ValidationError

from models.tactics import DefensiveHeight, PassingStyle, Tactic, TacticalStyle, Tempo
from simulation.config import EngineConfig
from simulation.strength import TeamStrength
from simulation.tactical import (
    CLASH_TABLE,
    STYLE_RULES,
    apply_modifier,
    classify_style,
    clash_modifier,
    tactic_clash,
)


def make_tactic(**kwargs) -> Tactic:
    return Tactic(**kwargs)


ALL_PAIRS = list(itertools.product(list(TacticalStyle), repeat=2))


def test_table_covers_every_pair():
    assert len(ALL_PAIRS) == 25
    assert set(CLASH_TABLE) == set(ALL_PAIRS)


@pytest.mark.parametrize("a,b", ALL_PAIRS)
def test_clash_is_anti_symmetric_and_bounded(a, b):
    assert clash_modifier(a, b) == -clash_modifier(b, a)
    assert -0.25 <= clash_modifier(a, b) <= 0.25


def test_known_clashes():
    assert clash_modifier(TacticalStyle.HIGH_PRESS, TacticalStyle.POSSESSION) == pytest.approx(0.20)
    assert clash_modifier(TacticalStyle.POSSESSION, TacticalStyle.COUNTER_ATTACK) == pytest.approx(0.15)
    assert clash_modifier(TacticalStyle.COUNTER_ATTACK, TacticalStyle.HIGH_PRESS) == pytest.approx(0.25)
    assert clash_modifier(TacticalStyle.DIRECT_PLAY, TacticalStyle.HIGH_PRESS) == pytest.approx(0.15)
    assert clash_modifier(TacticalStyle.DIRECT_PLAY, TacticalStyle.POSSESSION) == pytest.approx(-0.10)
    assert clash_modifier(TacticalStyle.POSSESSION, TacticalStyle.DIRECT_PLAY) == pytest.approx(0.10)
    for style in TacticalStyle:
        assert clash_modifier(TacticalStyle.BALANCED, style) == 0.0
        assert clash_modifier(style, style) == 0.0


def test_each_rule_in_isolation():
    assert classify_style(make_tactic(defensive_height="High", attacking_mentality=80)) == TacticalStyle.HIGH_PRESS
    assert classify_style(make_tactic(defensive_height="Low", tempo="Fast")) == TacticalStyle.COUNTER_ATTACK
    assert classify_style(make_tactic(passing_style="Short", tempo="Slow")) == TacticalStyle.POSSESSION
    assert classify_style(make_tactic(passing_style="Long")) == TacticalStyle.DIRECT_PLAY
    assert classify_style(make_tactic()) == TacticalStyle.BALANCED


def test_high_press_beats_possession_when_both_match():
    tactic = make_tactic(
        defensive_height=DefensiveHeight.HIGH,
        attacking_mentality=90,
        passing_style=PassingStyle.SHORT,
        tempo=Tempo.SLOW,
    )
    assert classify_style(tactic) == TacticalStyle.HIGH_PRESS


def test_counter_attack_beats_direct_play_when_both_match():
    tactic = make_tactic(defensive_height="Low", tempo="Fast", passing_style="Long")
    assert classify_style(tactic) == TacticalStyle.COUNTER_ATTACK


def test_mentality_threshold_is_strict():
    tactic = make_tactic(defensive_height="High", attacking_mentality=70, passing_style="Long")
    assert classify_style(tactic) == TacticalStyle.DIRECT_PLAY


def test_short_passing_at_fast_tempo_is_not_possession():
    assert classify_style(make_tactic(passing_style="Short", tempo="Fast")) == TacticalStyle.BALANCED


def test_rules_are_an_ordered_list():
    assert [style for style, _ in STYLE_RULES] == [
        TacticalStyle.HIGH_PRESS,
        TacticalStyle.COUNTER_ATTACK,
        TacticalStyle.POSSESSION,
        TacticalStyle.DIRECT_PLAY,
    ]
    pressing = make_tactic(defensive_height="High", attacking_mentality=90, passing_style="Short")
    assert classify_style(pressing, rules=list(reversed(STYLE_RULES))) == TacticalStyle.POSSESSION
    assert classify_style(pressing, rules=[]) == TacticalStyle.BALANCED


def test_tactic_clash_uses_both_styles():
    press = make_tactic(defensive_height="High", attacking_mentality=85)
    keep_ball = make_tactic(passing_style="Short")
    assert tactic_clash(press, keep_ball) == pytest.approx(0.20)
    assert tactic_clash(keep_ball, press) == pytest.approx(-0.20)


def test_custom_dominance_table_is_mirrored():
    cfg = EngineConfig(clash_dominance={"Balanced>DirectPlay": 0.05})
    assert clash_modifier(TacticalStyle.BALANCED, TacticalStyle.DIRECT_PLAY, cfg) == pytest.approx(0.05)
    assert clash_modifier(TacticalStyle.DIRECT_PLAY, TacticalStyle.BALANCED, cfg) == pytest.approx(-0.05)
    assert clash_modifier(TacticalStyle.HIGH_PRESS, TacticalStyle.POSSESSION, cfg) == 0.0


def test_dominance_outside_cap_is_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(clash_dominance={"HighPress>Possession": 0.3})


def test_dominance_pair_defined_twice_is_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(clash_dominance={"HighPress>Possession": 0.2, "Possession>HighPress": 0.1})


def test_unknown_style_in_dominance_is_rejected():
    with pytest.raises(ValidationError):
        EngineConfig(clash_dominance={"Tiki>Taka": 0.1})


def test_apply_modifier():
    even = TeamStrength(attack=100, defense=100, midfield=100)
    home, away = apply_modifier(even, even, 0.2)
    assert home.attack == pytest.approx(120)
    assert home.defense == pytest.approx(110)
    assert away.attack == pytest.approx(80)
    assert away.defense == pytest.approx(90)
    assert home.midfield == away.midfield == 100


def test_apply_modifier_clamps():
    even = TeamStrength(attack=100, defense=100, midfield=100)
    home, away = apply_modifier(even, even, 0.9)
    assert home.attack == pytest.approx(125)
    assert away.attack == pytest.approx(75)
