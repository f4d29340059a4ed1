import common
import oldworld

"""
The number of merchants (slots) a settlement has is
1. A base number of slots for the settlement size
2. Plus 1 slot per 10,000 population (rounded down)
3. Plus 1.5 slots per size step (rounded down)
4. Multiplied by the multiplier for each flag the settlement has, rounded down
5. Capped at 15 slots, with a minimum of 1

Slots are split between producers (merchants selling) and seekers (merchants
buying). Producers get the odd slot.
"""

_BaseSlotsMap = {
    1: 1,
    2: 2,
    3: 3,
    4: 4,
    5: 6
}

_PopulationMultiplier = common.ScalarCalculation(
    value=0.0001,
    name='Merchant Slots Per Population')
_SizeMultiplier = common.ScalarCalculation(
    value=1.5,
    name='Merchant Slots Per Size')
_MaxSlots = common.ScalarCalculation(
    value=15,
    name='Max Merchant Slots')
_MinSlots = common.ScalarCalculation(
    value=1,
    name='Min Merchant Slots')

# Every flag has an entry so the table is exhaustive, 1.0 means no effect
_FlagSlotMultiplierMap = {
    oldworld.SettlementFlag.Agriculture: 1.0,
    oldworld.SettlementFlag.Fishing: 1.0,
    oldworld.SettlementFlag.Government: 1.2,
    oldworld.SettlementFlag.Military: 1.0,
    oldworld.SettlementFlag.Mine: 1.0,
    oldworld.SettlementFlag.Religion: 1.0,
    oldworld.SettlementFlag.Smuggling: 1.3,
    oldworld.SettlementFlag.Subsistence: 0.5,
    oldworld.SettlementFlag.Trade: 1.5,
    oldworld.SettlementFlag.WineQuality: 1.0
}
assert(set(_FlagSlotMultiplierMap.keys()) == set(oldworld.SettlementFlag))

class MerchantSlots(object):
    def __init__(
            self,
            totalSlots: common.ScalarCalculation
            ) -> None:
        self._totalSlots = totalSlots
        self._producerSlots = common.Calculator.ceil(
            value=common.Calculator.divideFloat(
                lhs=totalSlots,
                rhs=common.ScalarCalculation(value=2)),
            name='Producer Slots')
        self._seekerSlots = common.Calculator.subtract(
            lhs=totalSlots,
            rhs=self._producerSlots,
            name='Seeker Slots')

    def totalSlots(self) -> common.ScalarCalculation:
        return self._totalSlots

    def producerSlots(self) -> common.ScalarCalculation:
        return self._producerSlots

    def seekerSlots(self) -> common.ScalarCalculation:
        return self._seekerSlots

def calculateMerchantSlots(settlement: oldworld.Settlement) -> MerchantSlots:
    size = common.ScalarCalculation(
        value=settlement.size(),
        name=f'{settlement.name()} Size')
    population = common.ScalarCalculation(
        value=settlement.population(),
        name=f'{settlement.name()} Population')

    slots = common.Calculator.sum(
        values=[
            common.ScalarCalculation(
                value=_BaseSlotsMap[settlement.size()],
                name=f'Base Merchant Slots For Size {settlement.size()}'),
            common.Calculator.floor(
                value=common.Calculator.multiply(lhs=population, rhs=_PopulationMultiplier),
                name='Population Merchant Slots'),
            common.Calculator.floor(
                value=common.Calculator.multiply(lhs=size, rhs=_SizeMultiplier),
                name='Size Merchant Slots')],
        name='Unmodified Merchant Slots')

    for flag in oldworld.sortedFlags(settlement.flags()):
        multiplier = _FlagSlotMultiplierMap[flag]
        if multiplier == 1.0:
            continue
        slots = common.Calculator.multiply(
            lhs=slots,
            rhs=common.ScalarCalculation(
                value=multiplier,
                name=f'{flag.name} Flag Slot Multiplier'))

    slots = common.Calculator.clamp(
        value=common.Calculator.floor(value=slots),
        minValue=_MinSlots,
        maxValue=_MaxSlots,
        name=f'{settlement.name()} Merchant Slots')
    return MerchantSlots(totalSlots=slots)

def generateMerchantSlots(settlement: oldworld.Settlement) -> int:
    return calculateMerchantSlots(settlement=settlement).totalSlots().value()
