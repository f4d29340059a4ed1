"""
Tests for merchant skill generation and personalities.
"""

import common
import logic
import oldworld
import pytest

from conftest import scriptedRoller


class TestPercentileSkill:
    def test_base_skill(self, altdorf):
        skill = logic.calculateSkill(settlement=altdorf, percentile=50, diceRoller=scriptedRoller(0.5))
        assert skill.value() == 57

    def test_variance_is_applied(self, altdorf):
        assert logic.generateSkill(settlement=altdorf, percentile=50, diceRoller=scriptedRoller(0.0)) == 47
        assert logic.generateSkill(settlement=altdorf, percentile=50, diceRoller=scriptedRoller(0.75)) == 62

    def test_half_rounds_up(self, altdorf):
        assert logic.generateSkill(settlement=altdorf, percentile=50, diceRoller=scriptedRoller(0.625)) == 60

    def test_clamped_to_range(self, altdorf):
        assert logic.generateSkill(settlement=altdorf, percentile=99, diceRoller=scriptedRoller(0.75)) == 95
        poor = oldworld.Settlement(name='Poor', size=1, wealth=1)
        skill = logic.generateSkill(settlement=poor, percentile=1, diceRoller=scriptedRoller(0.0))
        assert skill == 8 # 25 + 8 - 15 - 10

    @pytest.mark.parametrize('percentile,modifier', [
        (1, -15), (10, -15), (11, -8), (50, 0), (76, 15), (95, 25), (99, 35), (100, 35)])
    def test_percentile_modifiers(self, percentile, modifier):
        assert logic.percentileModifier(percentile) == modifier

    @pytest.mark.parametrize('percentile', [0, -5, 101])
    def test_invalid_percentile(self, altdorf, percentile):
        with pytest.raises(oldworld.InvalidArgumentException):
            logic.calculateSkill(settlement=altdorf, percentile=percentile, diceRoller=scriptedRoller(0.5))


class TestLegacySkill:
    def test_dice_skill(self):
        assert logic.generateLegacySkill(diceRoller=scriptedRoller(3, 4)) == 54
        assert logic.generateLegacySkill(diceRoller=scriptedRoller(1, 1)) == 44
        assert logic.generateLegacySkill(diceRoller=scriptedRoller(6, 6)) == 64

    def test_range(self):
        assert logic.skillRange(logic.SkillModel.LegacyDice) == (21, 120)
        assert logic.skillRange(logic.SkillModel.Percentile) == (5, 95)

    @pytest.mark.parametrize('skill,tier', [
        (21, 'Novice'), (35, 'Novice'), (54, 'Competent'), (95, 'Expert'), (111, 'Legendary')])
    def test_tiers(self, skill, tier):
        assert logic.legacySkillTier(skill) == tier


class TestPersonality:
    @pytest.mark.parametrize('roll,name', [
        (1, 'Standard Merchant'),
        (70, 'Standard Merchant'),
        (71, 'Shrewd Dealer'),
        (86, 'Generous Trader'),
        (96, 'Suspicious Dealer'),
        (100, 'Suspicious Dealer')])
    def test_weighted_selection(self, roll, name):
        assert logic.selectPersonality(diceRoller=scriptedRoller(roll)).name() == name

    def test_weights_total_one_hundred(self):
        assert sum(personality.weight() for personality in logic.personalities()) == 100

    def test_apply_personality_is_clamped(self):
        skill = logic.applyPersonality(
            skill=common.ScalarCalculation(value=90),
            personality=logic.personalityFromName('Shrewd Dealer'),
            model=logic.SkillModel.Percentile)
        assert skill.value() == 95

    def test_unknown_personality(self):
        with pytest.raises(oldworld.NotFoundException):
            logic.personalityFromName('Grumpy')
