import common
import enum
import logging
import oldworld
import typing

# There are two ways of generating merchant haggle skill. The percentile model
# is the standard one. The dice model is kept for groups that started their
# campaign with it, it gives a narrower spread of skills and uses its own
# named tiers. Which one is used is a config option.
class SkillModel(enum.Enum):
    Percentile = 'Percentile'
    LegacyDice = 'Legacy Dice'

"""
Percentile model
1. Base skill is 25 + (8 x settlement wealth)
2. Add the modifier for the merchant's percentile from _PercentileModifierMap,
   using the first breakpoint at or above the percentile. Percentiles above
   the highest breakpoint use the highest breakpoint.
3. Add a random variance, uniformly distributed in the range -10 to +10
4. Round to the nearest integer (halves round up) and clamp to 5-95
"""
_BaseSkill = common.ScalarCalculation(
    value=25,
    name='Base Merchant Skill')
_WealthSkillMultiplier = common.ScalarCalculation(
    value=8,
    name='Merchant Skill Per Wealth')
_SkillVarianceRange = common.ScalarCalculation(
    value=20,
    name='Merchant Skill Variance Range')
_UniformDrawMidpoint = common.ScalarCalculation(
    value=0.5,
    name='Uniform Draw Midpoint')

MinPercentileSkill = 5
MaxPercentileSkill = 95

_PercentileModifierMap = {
    10: -15,
    25: -8,
    50: 0,
    75: 8,
    90: 15,
    95: 25,
    99: 35
}
_PercentileBreakpoints = sorted(_PercentileModifierMap.keys())

"""
Legacy dice model
1. Roll 2D6 and multiply by 2
2. Add 40
3. Clamp to 21-120

The tiers below cover the full clamp range even though the dice can't reach
the ends of it.
"""
_LegacyDieCount = 2
_LegacyMultiplier = common.ScalarCalculation(
    value=2,
    name='Legacy Skill Roll Multiplier')
_LegacyConstant = common.ScalarCalculation(
    value=40,
    name='Legacy Skill Constant')

MinLegacySkill = 21
MaxLegacySkill = 120

# Upper bound (inclusive) for each tier, anything above the last is Legendary
_LegacySkillTiers = [
    (35, 'Novice'),
    (50, 'Apprentice'),
    (65, 'Competent'),
    (80, 'Skilled'),
    (95, 'Expert'),
    (110, 'Master')
]
_LegacyTopTier = 'Legendary'

def skillRange(model: SkillModel) -> typing.Tuple[int, int]:
    if model == SkillModel.Percentile:
        return (MinPercentileSkill, MaxPercentileSkill)
    elif model == SkillModel.LegacyDice:
        return (MinLegacySkill, MaxLegacySkill)
    raise oldworld.InvalidArgumentException(f'Unknown skill model {model}')

def percentileModifier(percentile: typing.Union[int, float]) -> int:
    for threshold in _PercentileBreakpoints:
        if percentile <= threshold:
            return _PercentileModifierMap[threshold]
    return _PercentileModifierMap[_PercentileBreakpoints[-1]]

def clampSkill(
        skill: common.ScalarCalculation,
        model: SkillModel,
        name: typing.Optional[str] = None
        ) -> common.ScalarCalculation:
    minSkill, maxSkill = skillRange(model=model)
    return common.Calculator.clamp(
        value=skill,
        minValue=common.ScalarCalculation(value=minSkill, name='Min Merchant Skill'),
        maxValue=common.ScalarCalculation(value=maxSkill, name='Max Merchant Skill'),
        name=name)

def calculateSkill(
        settlement: oldworld.Settlement,
        percentile: typing.Union[int, float],
        diceRoller: common.DiceRoller
        ) -> common.ScalarCalculation:
    # NOTE: Percentile is (0, 100] so 0 isn't valid but 100 is
    common.validateMandatoryFloat(
        name='Percentile',
        value=percentile,
        errorType=oldworld.InvalidArgumentException)
    if percentile <= 0 or percentile > 100:
        raise oldworld.InvalidArgumentException('Percentile must be greater than 0 and at most 100')

    wealth = common.ScalarCalculation(
        value=settlement.wealth(),
        name=f'{settlement.name()} Wealth')
    percentileSkill = common.ScalarCalculation(
        value=percentileModifier(percentile=percentile),
        name=f'Percentile {common.formatNumber(percentile)} Skill Modifier')

    draw = diceRoller.makeUniformDraw(name='Merchant Skill Variance Draw')
    variance = common.Calculator.multiply(
        lhs=common.Calculator.subtract(lhs=draw, rhs=_UniformDrawMidpoint),
        rhs=_SkillVarianceRange,
        name='Merchant Skill Variance')

    skill = common.Calculator.sum(
        values=[
            _BaseSkill,
            common.Calculator.multiply(lhs=wealth, rhs=_WealthSkillMultiplier),
            percentileSkill,
            variance],
        name='Unrounded Merchant Skill')
    skill = clampSkill(
        skill=common.Calculator.round(value=skill),
        model=SkillModel.Percentile,
        name='Merchant Skill')

    logging.debug(f'Generated merchant skill {skill.value()} at {settlement.name()} for percentile {percentile}')
    return skill

def generateSkill(
        settlement: oldworld.Settlement,
        percentile: typing.Union[int, float],
        diceRoller: common.DiceRoller
        ) -> int:
    return calculateSkill(
        settlement=settlement,
        percentile=percentile,
        diceRoller=diceRoller).value()

def calculateLegacySkill(diceRoller: common.DiceRoller) -> common.ScalarCalculation:
    roll = diceRoller.makeRoll(
        dieCount=_LegacyDieCount,
        name='Legacy Merchant Skill Roll')
    skill = common.Calculator.add(
        lhs=common.Calculator.multiply(lhs=roll, rhs=_LegacyMultiplier),
        rhs=_LegacyConstant)
    return clampSkill(
        skill=skill,
        model=SkillModel.LegacyDice,
        name='Merchant Skill')

def generateLegacySkill(diceRoller: common.DiceRoller) -> int:
    return calculateLegacySkill(diceRoller=diceRoller).value()

def legacySkillTier(skill: int) -> str:
    for upperBound, tier in _LegacySkillTiers:
        if skill <= upperBound:
            return tier
    return _LegacyTopTier

class Personality(object):
    def __init__(
            self,
            name: str,
            weight: int,
            haggleModifier: int
            ) -> None:
        self._name = name
        self._weight = weight
        self._haggleModifier = common.ScalarCalculation(
            value=haggleModifier,
            name=f'{name} Haggle Modifier')

    def name(self) -> str:
        return self._name

    def weight(self) -> int:
        return self._weight

    def haggleModifier(self) -> common.ScalarCalculation:
        return self._haggleModifier

_Personalities = [
    Personality(name='Standard Merchant', weight=70, haggleModifier=0),
    Personality(name='Shrewd Dealer', weight=15, haggleModifier=10),
    Personality(name='Generous Trader', weight=10, haggleModifier=-10),
    Personality(name='Suspicious Dealer', weight=5, haggleModifier=5)
]
_PersonalityTotalWeight = sum(personality.weight() for personality in _Personalities)

def personalities() -> typing.List[Personality]:
    return list(_Personalities)

def personalityFromName(name: str) -> Personality:
    for personality in _Personalities:
        if personality.name() == name:
            return personality
    raise oldworld.NotFoundException(f'Unknown merchant personality "{name}"')

def selectPersonality(diceRoller: common.DiceRoller) -> Personality:
    roll = diceRoller.makeWeightedRoll(
        total=_PersonalityTotalWeight,
        name='Merchant Personality Roll').value()
    for personality in _Personalities:
        if roll <= personality.weight():
            return personality
        roll -= personality.weight()
    assert(False)

def applyPersonality(
        skill: common.ScalarCalculation,
        personality: Personality,
        model: SkillModel
        ) -> common.ScalarCalculation:
    if personality.haggleModifier().value() == 0:
        return skill
    return clampSkill(
        skill=common.Calculator.add(lhs=skill, rhs=personality.haggleModifier()),
        model=model,
        name='Merchant Skill')
