import common
import enum
import random
import typing

# IMPORTANT: If I ever change the names of the enum definitions (not their value
# string) then I need to add some kind of value mapping to the result
# serialisation as the names are written to the audit log
class DieType(enum.Enum):
    D6 = 'D'
    D10 = 'D10'
    D20 = 'D20'
    D100 = 'D100'

_DieSidesMap = {
    DieType.D6: 6,
    DieType.D10: 10,
    DieType.D20: 20,
    DieType.D100: 100
}

def dieSides(dieType: DieType) -> int:
    return _DieSidesMap[dieType]

def dieString(
        dieCount: int,
        dieType: DieType
        ) -> str:
    if dieType == DieType.D6:
        return f'{dieCount}D'
    return f'{dieCount}{dieType.value}'

def randomRollDice(
        dieCount: typing.Union[int, common.ScalarCalculation],
        dieType: DieType = DieType.D6,
        randomGenerator: typing.Optional[typing.Union[
            random.Random,
            common.RandomGenerator,
            common.ScriptedRandomGenerator
            ]] = None
        ) -> common.ScalarCalculation:
    if randomGenerator == None:
        randomGenerator = random

    if not isinstance(dieCount, common.ScalarCalculation):
        assert(isinstance(dieCount, int))
        dieCount = common.ScalarCalculation(
            value=dieCount,
            name='Die Count')

    sides = dieSides(dieType=dieType)
    rolls = []
    for _ in range(0, dieCount.value()):
        roll = randomGenerator.randint(1, sides)
        rolls.append(common.ScalarCalculation(roll))
    total = common.Calculator.sum(
        values=rolls,
        name=f'Random Roll With {dieString(dieCount.value(), dieType)}')
    assert(isinstance(total, common.ScalarCalculation))
    return total

class DiceRollResult(object):
    def __init__(
            self,
            result: common.ScalarCalculation,
            dieCount: typing.Optional[common.ScalarCalculation] = None,
            dieType: typing.Optional[DieType] = None # None for uniform draws
            ) -> None:
        self._result = result
        self._dieCount = dieCount
        self._dieType = dieType

    def dieCount(self) -> typing.Optional[common.ScalarCalculation]:
        return self._dieCount

    def dieType(self) -> typing.Optional[DieType]:
        return self._dieType

    def result(self) -> common.ScalarCalculation:
        return self._result

    def name(self) -> str:
        return self._result.name()

    def isUniformDraw(self) -> bool:
        return self._dieType == None

# The dice roller is the single source of randomness for all trading logic.
# Every roll is recorded so the GM can see exactly which dice were used, and
# passing a seeded or scripted generator makes the results reproducible
class DiceRoller(object):
    def __init__(
            self,
            randomGenerator: typing.Optional[typing.Union[
                random.Random,
                common.RandomGenerator,
                common.ScriptedRandomGenerator
                ]] = None
            ) -> None:
        self._randomGenerator = randomGenerator if randomGenerator != None else common.RandomGenerator()
        self._rolls: typing.List[DiceRollResult] = []

    def makeRoll(
            self,
            dieCount: typing.Union[int, common.ScalarCalculation],
            name: str,
            dieType: DieType = DieType.D6
            ) -> common.ScalarCalculation:
        if not isinstance(dieCount, common.ScalarCalculation):
            assert(isinstance(dieCount, int))
            dieCount = common.ScalarCalculation(
                value=dieCount,
                name='Die Count')

        result = common.ScalarCalculation(
            value=randomRollDice(
                dieCount=dieCount,
                dieType=dieType,
                randomGenerator=self._randomGenerator),
            name=name)

        self._rolls.append(DiceRollResult(
            result=result,
            dieCount=dieCount,
            dieType=dieType))

        return result

    def makePercentileRoll(
            self,
            name: str
            ) -> common.ScalarCalculation:
        return self.makeRoll(
            dieCount=1,
            name=name,
            dieType=DieType.D100)

    # Returns a uniformly distributed value in the range [0, 1)
    def makeUniformDraw(
            self,
            name: str
            ) -> common.ScalarCalculation:
        result = common.ScalarCalculation(
            value=float(self._randomGenerator.random()),
            name=name)
        self._rolls.append(DiceRollResult(result=result))
        return result

    # Returns an index in the range [0, count)
    def makeIndexRoll(
            self,
            count: int,
            name: str
            ) -> common.ScalarCalculation:
        if count <= 0:
            raise ValueError('Index roll count must be greater than 0')
        result = common.ScalarCalculation(
            value=self._randomGenerator.randint(0, count - 1),
            name=name)
        self._rolls.append(DiceRollResult(result=result))
        return result

    # Returns a value in the range [1, total]
    def makeWeightedRoll(
            self,
            total: int,
            name: str
            ) -> common.ScalarCalculation:
        if total <= 0:
            raise ValueError('Weighted roll total must be greater than 0')
        result = common.ScalarCalculation(
            value=self._randomGenerator.randint(1, total),
            name=name)
        self._rolls.append(DiceRollResult(result=result))
        return result

    def rolls(self) -> typing.Iterable[DiceRollResult]:
        return self._rolls

    def clearRolls(self) -> None:
        self._rolls.clear()
