import common
import logging
import logic
import oldworld
import typing

"""
Haggling is an opposed test between the player and the merchant. Each side
rolls d100 against their skill (0-100), the player rolls first.
- A roll at or under the skill passes with floor((skill - roll) / 10) + 1
  degrees of success
- A roll over the skill fails with floor((roll - skill - 1) / 10) + 1 degrees
  of failure
The player wins if
- only the player passes
- both pass and the player has more degrees of success
- both fail and the player has fewer degrees of failure
Anything else, including equal degrees, goes to the merchant.

The outcome modifies the running price
- Success: -10%
- Success with the Dealmaker talent: -20%
- Failure where the GM applies a penalty: +10%
- Failure without a penalty: 0% (recorded so the audit shows the attempt)
"""

_MinTestSkill = common.ScalarCalculation(value=0, name='Min Test Skill')
_MaxTestSkill = common.ScalarCalculation(value=100, name='Max Test Skill')

_SuccessPercentage = common.ScalarCalculation(
    value=-10,
    name='Successful Haggle Percentage')
_DealmakerSuccessPercentage = common.ScalarCalculation(
    value=-20,
    name='Successful Haggle With Dealmaker Percentage')
_FailurePenaltyPercentage = common.ScalarCalculation(
    value=10,
    name='Failed Haggle Penalty Percentage')
_FailurePercentage = common.ScalarCalculation(
    value=0,
    name='Failed Haggle Percentage')

class HaggleResult(object):
    def __init__(
            self,
            success: bool,
            hasDealmaker: bool = False,
            gmPenalty: bool = False
            ) -> None:
        self._success = common.validateMandatoryBool(name='Haggle success', value=success)
        self._hasDealmaker = common.validateMandatoryBool(name='Dealmaker talent', value=hasDealmaker)
        self._gmPenalty = common.validateMandatoryBool(name='GM penalty', value=gmPenalty)

    def success(self) -> bool:
        return self._success

    def hasDealmaker(self) -> bool:
        return self._hasDealmaker

    def gmPenalty(self) -> bool:
        return self._gmPenalty

    def percentage(self) -> common.ScalarCalculation:
        if self._success:
            return _DealmakerSuccessPercentage if self._hasDealmaker else _SuccessPercentage
        return _FailurePenaltyPercentage if self._gmPenalty else _FailurePercentage

    def description(self) -> str:
        if self._success:
            if self._hasDealmaker:
                return 'Successful haggle with Dealmaker (-20%)'
            return 'Successful haggle (-10%)'
        if self._gmPenalty:
            return 'Failed haggle with GM penalty (+10%)'
        return 'Failed haggle (no change)'

    @staticmethod
    def fromData(data: typing.Mapping[str, typing.Any]) -> 'HaggleResult':
        success = data.get('success')
        if not isinstance(success, bool):
            raise oldworld.InvalidArgumentException('Haggle result must have a bool success value')
        hasDealmaker = data.get('hasDealmaker', False)
        gmPenalty = data.get('gmPenalty', False)
        if not isinstance(hasDealmaker, bool) or not isinstance(gmPenalty, bool):
            raise oldworld.InvalidArgumentException('Haggle result talent and penalty values must be bools')
        return HaggleResult(
            success=success,
            hasDealmaker=hasDealmaker,
            gmPenalty=gmPenalty)

class SkillTest(object):
    def __init__(
            self,
            name: str,
            skill: common.ScalarCalculation,
            roll: common.ScalarCalculation
            ) -> None:
        self._name = name
        self._skill = skill
        self._roll = roll
        self._success = roll.value() <= skill.value()
        if self._success:
            self._degrees = (skill.value() - roll.value()) // 10 + 1
        else:
            self._degrees = (roll.value() - skill.value() - 1) // 10 + 1

    def name(self) -> str:
        return self._name

    def skill(self) -> common.ScalarCalculation:
        return self._skill

    def roll(self) -> common.ScalarCalculation:
        return self._roll

    def success(self) -> bool:
        return self._success

    # Degrees of success when the test passed, degrees of failure otherwise
    def degrees(self) -> int:
        return self._degrees

    def description(self) -> str:
        return '{name} {result} ({degrees} degrees)'.format(
            name=self._name,
            result='Success' if self._success else 'Failure',
            degrees=self._degrees)

def performSkillTest(
        name: str,
        skill: typing.Union[int, common.ScalarCalculation],
        diceRoller: common.DiceRoller,
        modifier: int = 0
        ) -> SkillTest:
    if not isinstance(skill, common.ScalarCalculation):
        common.validateMandatoryInt(
            name=f'{name} skill',
            value=skill,
            errorType=oldworld.InvalidArgumentException)
        skill = common.ScalarCalculation(
            value=skill,
            name=f'{name} Base Skill')
    if modifier:
        skill = common.Calculator.add(
            lhs=skill,
            rhs=common.ScalarCalculation(
                value=modifier,
                name=f'{name} Modifier'))
    skill = common.Calculator.clamp(
        value=skill,
        minValue=_MinTestSkill,
        maxValue=_MaxTestSkill,
        name=f'{name} Skill')

    roll = diceRoller.makePercentileRoll(name=f'{name} Roll')
    test = SkillTest(name=name, skill=skill, roll=roll)
    logging.debug(f'{test.description()}, rolled {roll.value()} against {skill.value()}')
    return test

class HaggleTest(object):
    def __init__(
            self,
            result: HaggleResult,
            playerTest: SkillTest,
            merchantTest: SkillTest,
            description: str
            ) -> None:
        self._result = result
        self._playerTest = playerTest
        self._merchantTest = merchantTest
        self._description = description

    def result(self) -> HaggleResult:
        return self._result

    def playerTest(self) -> SkillTest:
        return self._playerTest

    def merchantTest(self) -> SkillTest:
        return self._merchantTest

    def description(self) -> str:
        return self._description

def _decideOpposedTest(
        player: SkillTest,
        merchant: SkillTest
        ) -> typing.Tuple[bool, str]:
    if player.success() and not merchant.success():
        return (True, 'Player wins, the merchant failed their test')
    if not player.success() and merchant.success():
        return (False, 'Merchant wins, the player failed their test')
    if player.success():
        if player.degrees() > merchant.degrees():
            return (True, f'Player wins with {player.degrees()} vs {merchant.degrees()} degrees of success')
        return (False, f'Merchant wins with {merchant.degrees()} vs {player.degrees()} degrees of success')
    if player.degrees() < merchant.degrees():
        return (True, f'Player wins with {player.degrees()} vs {merchant.degrees()} degrees of failure')
    return (False, f'Merchant wins with {merchant.degrees()} vs {player.degrees()} degrees of failure')

def resolveHaggle(
        playerSkill: typing.Union[int, common.ScalarCalculation],
        merchantSkill: typing.Union[int, common.ScalarCalculation],
        diceRoller: common.DiceRoller,
        hasDealmaker: bool = False,
        gmPenalty: bool = False
        ) -> HaggleTest:
    playerTest = performSkillTest(
        name='Player Haggle',
        skill=playerSkill,
        diceRoller=diceRoller)
    merchantTest = performSkillTest(
        name='Merchant Haggle',
        skill=merchantSkill,
        diceRoller=diceRoller)

    success, description = _decideOpposedTest(
        player=playerTest,
        merchant=merchantTest)
    logging.debug(description)

    return HaggleTest(
        result=HaggleResult(
            success=success,
            hasDealmaker=hasDealmaker,
            gmPenalty=gmPenalty),
        playerTest=playerTest,
        merchantTest=merchantTest,
        description=description)

def applyHaggle(
        breakdown: logic.PriceBreakdown,
        haggleResult: typing.Union[HaggleResult, typing.Mapping[str, typing.Any]]
        ) -> logic.PriceBreakdown:
    if not isinstance(breakdown, logic.PriceBreakdown):
        raise oldworld.InvalidArgumentException('Haggling can only be applied to a price breakdown')
    if isinstance(haggleResult, typing.Mapping):
        haggleResult = HaggleResult.fromData(data=haggleResult)
    elif not isinstance(haggleResult, HaggleResult):
        raise oldworld.InvalidArgumentException(
            f'Haggle result must be a HaggleResult not {type(haggleResult).__name__}')

    return logic.applyPriceModifier(
        breakdown=breakdown,
        type=logic.PriceModifierType.Haggle,
        percentage=haggleResult.percentage(),
        description=haggleResult.description())

# The price per unit block for every haggle outcome, so the players can see
# what's at stake before they roll
def haggleOutcomes(
        breakdown: logic.PriceBreakdown,
        includeGmPenalty: bool = True
        ) -> typing.List[typing.Tuple[HaggleResult, logic.PriceBreakdown]]:
    results = [
        HaggleResult(success=True),
        HaggleResult(success=True, hasDealmaker=True),
        HaggleResult(success=False)]
    if includeGmPenalty:
        results.append(HaggleResult(success=False, gmPenalty=True))
    return [(result, applyHaggle(breakdown=breakdown, haggleResult=result)) for result in results]
