import common
import logging
import math
import oldworld
import typing

"""
Cargo size (in EP)
1. The base multiplier is settlement size + settlement wealth
2. Roll d100 and round it up to the next multiple of 10 (1 -> 10, 10 -> 10,
   11 -> 20)
3. Trade centres roll a second d100, rounded the same way, and use the higher
   of the two
4. Total size is the base multiplier x the rounded roll
"""

_RoundingStep = 10

def roundUpToTen(roll: int) -> int:
    return math.ceil(roll / _RoundingStep) * _RoundingStep

def _roundRollUpToTen(
        roll: common.ScalarCalculation,
        name: str
        ) -> common.ScalarCalculation:
    step = common.ScalarCalculation(value=_RoundingStep, name='Cargo Size Rounding Step')
    return common.Calculator.multiply(
        lhs=common.Calculator.ceil(
            value=common.Calculator.divideFloat(lhs=roll, rhs=step)),
        rhs=step,
        name=name)

class CargoSize(object):
    def __init__(
            self,
            baseMultiplier: common.ScalarCalculation,
            roll1: common.ScalarCalculation,
            roll2: typing.Optional[common.ScalarCalculation],
            sizeMultiplier: common.ScalarCalculation,
            totalSize: common.ScalarCalculation
            ) -> None:
        self._baseMultiplier = baseMultiplier
        self._roll1 = roll1
        self._roll2 = roll2
        self._sizeMultiplier = sizeMultiplier
        self._totalSize = totalSize

    def baseMultiplier(self) -> common.ScalarCalculation:
        return self._baseMultiplier

    def roll1(self) -> common.ScalarCalculation:
        return self._roll1

    # Only trade centres make the second roll
    def roll2(self) -> typing.Optional[common.ScalarCalculation]:
        return self._roll2

    def sizeMultiplier(self) -> common.ScalarCalculation:
        return self._sizeMultiplier

    def totalSize(self) -> common.ScalarCalculation:
        return self._totalSize

    def tradeBonus(self) -> bool:
        return self._roll2 is not None

def calculateCargoSize(
        settlement: oldworld.Settlement,
        diceRoller: common.DiceRoller
        ) -> CargoSize:
    baseMultiplier = common.Calculator.add(
        lhs=common.ScalarCalculation(
            value=settlement.size(),
            name=f'{settlement.name()} Size'),
        rhs=common.ScalarCalculation(
            value=settlement.wealth(),
            name=f'{settlement.name()} Wealth'),
        name='Cargo Size Base Multiplier')

    roll1 = diceRoller.makePercentileRoll(name='Cargo Size Roll')
    sizeMultiplier = _roundRollUpToTen(
        roll=roll1,
        name='Cargo Size Multiplier')

    roll2 = None
    if settlement.isTradeCenter():
        roll2 = diceRoller.makePercentileRoll(name='Trade Centre Cargo Size Roll')
        sizeMultiplier = common.Calculator.max(
            lhs=sizeMultiplier,
            rhs=_roundRollUpToTen(
                roll=roll2,
                name='Trade Centre Cargo Size Multiplier'),
            name='Cargo Size Multiplier')

    totalSize = common.Calculator.multiply(
        lhs=baseMultiplier,
        rhs=sizeMultiplier,
        name='Cargo Size')

    logging.debug(
        f'Cargo size at {settlement.name()} is {totalSize.value()} EP ({baseMultiplier.value()} x {sizeMultiplier.value()})')
    return CargoSize(
        baseMultiplier=baseMultiplier,
        roll1=roll1,
        roll2=roll2,
        sizeMultiplier=sizeMultiplier,
        totalSize=totalSize)
