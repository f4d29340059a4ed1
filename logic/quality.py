import common
import enum
import logging
import oldworld
import typing

"""
Graded cargo (wine, luxuries etc) has its quality rolled when the buyer
hasn't asked for a particular quality
1. Roll a D10
2. Add the settlement wealth modifier from _WealthQualityModifierMap,
   wealthier settlements deal in better goods
3. Add the bonus for any settlement flag in _FlagQualityBonusMap that applies
   to the cargo
4. Clamp to 1-12, bonuses can take the score past the top of the die
5. Map the score to a grade (see mapQualityTier)
6. Map the grade to one of the cargo's quality tiers (see _GradeTierMap)

Ungraded cargo is always average quality so nothing is rolled for it.
"""

class QualityGrade(enum.Enum):
    Poor = 'Poor'
    Common = 'Common'
    Average = 'Average'
    High = 'High'
    Exceptional = 'Exceptional'

# Lowest score (inclusive) for each grade, anything below the last is Poor
_GradeThresholds = [
    (9, QualityGrade.Exceptional),
    (7, QualityGrade.High),
    (5, QualityGrade.Average),
    (3, QualityGrade.Common)
]

MinQualityScore = 1
MaxQualityScore = 12

_WealthQualityModifierMap = {
    1: -1,
    2: -1,
    3: 0,
    4: 1,
    5: 2
}

_WineCargoNames = frozenset(['wine/brandy', 'wine', 'brandy'])

# Every flag has an entry so adding a flag without deciding on its effect
# fails at import. Entries are the (lower case) cargo names the bonus applies
# to and the bonus
_FlagQualityBonusMap: typing.Dict[
        oldworld.SettlementFlag,
        typing.Optional[typing.Tuple[typing.FrozenSet[str], int]]] = {
    oldworld.SettlementFlag.Agriculture: None,
    oldworld.SettlementFlag.Fishing: None,
    oldworld.SettlementFlag.Government: None,
    oldworld.SettlementFlag.Military: None,
    oldworld.SettlementFlag.Mine: None,
    oldworld.SettlementFlag.Religion: None,
    oldworld.SettlementFlag.Smuggling: None,
    oldworld.SettlementFlag.Subsistence: None,
    oldworld.SettlementFlag.Trade: None,
    oldworld.SettlementFlag.WineQuality: (_WineCargoNames, 2)
}
assert(set(_FlagQualityBonusMap.keys()) == set(oldworld.SettlementFlag))

_GradeTierMap = {
    QualityGrade.Poor: 'poor',
    QualityGrade.Common: oldworld.AverageQualityTier,
    QualityGrade.Average: oldworld.AverageQualityTier,
    QualityGrade.High: 'good',
    QualityGrade.Exceptional: 'excellent'
}
assert(set(_GradeTierMap.keys()) == set(QualityGrade))

_MinQualityScore = common.ScalarCalculation(
    value=MinQualityScore,
    name='Min Quality Score')
_MaxQualityScore = common.ScalarCalculation(
    value=MaxQualityScore,
    name='Max Quality Score')

class QualityRoll(object):
    def __init__(
            self,
            cargoName: str,
            tier: str,
            grade: QualityGrade,
            roll: typing.Optional[common.ScalarCalculation] = None,
            score: typing.Optional[common.ScalarCalculation] = None
            ) -> None:
        self._cargoName = cargoName
        self._tier = tier
        self._grade = grade
        self._roll = roll
        self._score = score

    def cargoName(self) -> str:
        return self._cargoName

    # The cargo quality tier used for pricing
    def tier(self) -> str:
        return self._tier

    def grade(self) -> QualityGrade:
        return self._grade

    # None if the cargo is ungraded
    def roll(self) -> typing.Optional[common.ScalarCalculation]:
        return self._roll

    def score(self) -> typing.Optional[common.ScalarCalculation]:
        return self._score

    def isRolled(self) -> bool:
        return self._roll is not None

def mapQualityTier(score: typing.Union[int, float]) -> QualityGrade:
    for threshold, grade in _GradeThresholds:
        if score >= threshold:
            return grade
    return QualityGrade.Poor

def qualityModifiers(
        settlement: oldworld.Settlement,
        cargoName: str
        ) -> typing.List[common.ScalarCalculation]:
    modifiers = []
    wealthModifier = _WealthQualityModifierMap.get(settlement.wealth(), 0)
    if wealthModifier:
        modifiers.append(common.ScalarCalculation(
            value=wealthModifier,
            name=f'{settlement.name()} Wealth Quality Modifier'))

    for flag in oldworld.sortedFlags(settlement.flags()):
        bonus = _FlagQualityBonusMap[flag]
        if not bonus:
            continue
        cargoNames, amount = bonus
        if cargoName.lower() in cargoNames:
            modifiers.append(common.ScalarCalculation(
                value=amount,
                name=f'{flag.name} Flag Quality Bonus'))
    return modifiers

def rollQuality(
        cargoType: oldworld.CargoType,
        settlement: oldworld.Settlement,
        diceRoller: common.DiceRoller
        ) -> QualityRoll:
    if not cargoType.hasQualityTiers():
        return QualityRoll(
            cargoName=cargoType.name(),
            tier=oldworld.AverageQualityTier,
            grade=QualityGrade.Average)

    roll = diceRoller.makeRoll(
        dieCount=1,
        dieType=common.DieType.D10,
        name=f'{cargoType.name()} Quality Roll')
    score = common.Calculator.clamp(
        value=common.Calculator.sum(
            values=[roll] + qualityModifiers(settlement=settlement, cargoName=cargoType.name())),
        minValue=_MinQualityScore,
        maxValue=_MaxQualityScore,
        name=f'{cargoType.name()} Quality Score')
    grade = mapQualityTier(score=score.value())

    tier = _GradeTierMap[grade]
    if tier not in cargoType.qualityTiers():
        # Cargo with its own set of tiers may not have the standard ones
        logging.debug(f'{cargoType.name()} has no {tier} quality tier, using {oldworld.AverageQualityTier}')
        tier = oldworld.AverageQualityTier

    logging.debug(
        f'Rolled {grade.value} quality {cargoType.name()} at {settlement.name()} with a score of {score.value()}')
    return QualityRoll(
        cargoName=cargoType.name(),
        tier=tier,
        grade=grade,
        roll=roll,
        score=score)
