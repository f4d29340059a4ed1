import common
import enum
import logging
import oldworld
import typing

"""
Availability
1. Chance is (settlement size + settlement wealth) x 10, capped at 100
2. Roll d100, a roll at or under the chance means a merchant is available

Desperation
If no merchant is available the players can try again out of desperation.
The chance is multiplied by 0.8 (rounded down) and the d100 rolled again. If
the desperate roll succeeds the merchant knows the players need the deal and
it costs them
- Price +15%
- Quantity x0.75
- Merchant skill x0.8
The penalties only ever apply once to a merchant.
"""

_ChanceMultiplier = common.ScalarCalculation(
    value=10,
    name='Availability Chance Multiplier')
_MaxChance = common.ScalarCalculation(
    value=100,
    name='Max Availability Chance')
_DesperationChanceMultiplier = common.ScalarCalculation(
    value=0.8,
    name='Desperation Chance Multiplier')

class AvailabilityState(enum.Enum):
    Pending = 'pending'
    Available = 'available'
    Unavailable = 'unavailable'
    DesperateAvailable = 'desperate_available'
    DesperateUnavailable = 'desperate_unavailable'

def isAvailableState(state: AvailabilityState) -> bool:
    return state == AvailabilityState.Available or \
        state == AvailabilityState.DesperateAvailable

class DesperationPenalties(object):
    PricePercentage = common.ScalarCalculation(
        value=15,
        name='Desperation Price Penalty Percentage')
    QuantityMultiplier = common.ScalarCalculation(
        value=0.75,
        name='Desperation Quantity Multiplier')
    SkillMultiplier = common.ScalarCalculation(
        value=0.8,
        name='Desperation Skill Multiplier')

class AvailabilityCheck(object):
    def __init__(
            self,
            state: AvailabilityState,
            chance: common.ScalarCalculation,
            roll: typing.Optional[common.ScalarCalculation] = None,
            desperationChance: typing.Optional[common.ScalarCalculation] = None,
            desperationRoll: typing.Optional[common.ScalarCalculation] = None,
            ) -> None:
        self._state = state
        self._chance = chance
        self._roll = roll
        self._desperationChance = desperationChance
        self._desperationRoll = desperationRoll

    def state(self) -> AvailabilityState:
        return self._state

    def chance(self) -> common.ScalarCalculation:
        return self._chance

    def roll(self) -> typing.Optional[common.ScalarCalculation]:
        return self._roll

    def available(self) -> bool:
        return isAvailableState(self._state)

    def isDesperate(self) -> bool:
        return self._state == AvailabilityState.DesperateAvailable or \
            self._state == AvailabilityState.DesperateUnavailable

    def desperationChance(self) -> typing.Optional[common.ScalarCalculation]:
        return self._desperationChance

    def desperationRoll(self) -> typing.Optional[common.ScalarCalculation]:
        return self._desperationRoll

def calculateAvailabilityChance(settlement: oldworld.Settlement) -> common.ScalarCalculation:
    size = common.ScalarCalculation(
        value=settlement.size(),
        name=f'{settlement.name()} Size')
    wealth = common.ScalarCalculation(
        value=settlement.wealth(),
        name=f'{settlement.name()} Wealth')
    return common.Calculator.min(
        lhs=common.Calculator.multiply(
            lhs=common.Calculator.add(lhs=size, rhs=wealth),
            rhs=_ChanceMultiplier),
        rhs=_MaxChance,
        name='Availability Chance')

def checkAvailability(
        settlement: oldworld.Settlement,
        diceRoller: common.DiceRoller
        ) -> AvailabilityCheck:
    chance = calculateAvailabilityChance(settlement=settlement)
    roll = diceRoller.makePercentileRoll(name='Availability Roll')
    state = AvailabilityState.Available \
        if roll.value() <= chance.value() else \
        AvailabilityState.Unavailable
    logging.debug(
        f'Availability roll of {roll.value()} against {chance.value()} at {settlement.name()} is {state.value}')
    return AvailabilityCheck(
        state=state,
        chance=chance,
        roll=roll)

# A check that didn't involve a roll, used when the market is blocked
def blockedAvailability(settlement: oldworld.Settlement) -> AvailabilityCheck:
    return AvailabilityCheck(
        state=AvailabilityState.Unavailable,
        chance=common.ScalarCalculation(
            value=0,
            name='Availability Chance'))

def attemptDesperation(
        check: AvailabilityCheck,
        diceRoller: common.DiceRoller
        ) -> AvailabilityCheck:
    if check.state() != AvailabilityState.Unavailable:
        raise oldworld.InvalidArgumentException(
            f'Desperation can only be attempted after an unavailable result, not {check.state().value}')

    desperationChance = common.Calculator.floor(
        value=common.Calculator.multiply(
            lhs=check.chance(),
            rhs=_DesperationChanceMultiplier),
        name='Desperation Availability Chance')
    desperationRoll = diceRoller.makePercentileRoll(name='Desperation Availability Roll')
    state = AvailabilityState.DesperateAvailable \
        if desperationRoll.value() <= desperationChance.value() else \
        AvailabilityState.DesperateUnavailable
    logging.debug(
        f'Desperation roll of {desperationRoll.value()} against {desperationChance.value()} is {state.value}')

    return AvailabilityCheck(
        state=state,
        chance=check.chance(),
        roll=check.roll(),
        desperationChance=desperationChance,
        desperationRoll=desperationRoll)

def applyDesperationQuantity(quantity: common.ScalarCalculation) -> common.ScalarCalculation:
    return common.Calculator.floor(
        value=common.Calculator.multiply(
            lhs=quantity,
            rhs=DesperationPenalties.QuantityMultiplier),
        name='Desperate Quantity')

def applyDesperationSkill(skill: common.ScalarCalculation) -> common.ScalarCalculation:
    return common.Calculator.floor(
        value=common.Calculator.multiply(
            lhs=skill,
            rhs=DesperationPenalties.SkillMultiplier),
        name='Desperate Merchant Skill')
