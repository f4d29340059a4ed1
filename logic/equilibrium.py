import enum
import logging
import math
import oldworld
import typing

"""
Supply and demand for a cargo at a settlement is modelled as 200 points split
between the two sides, starting balanced at 100/100. Each effect moves a
fraction of one side across to the other (the amount is always rounded down).
After every transfer both sides are clamped to 5-195. If no clamp is hit the
total stays at 200, otherwise both sides are at least within the clamp range.

Transfers are applied in a fixed order
1. The settlement produces the cargo: 50% of demand moves to supply
2. The settlement demands the cargo: 35% of supply moves to demand
3. Settlement flags, in order of flag name (see _FlagTransferMap). Each flag
   is followed by any transfer the caller's category table gives that flag
   for the cargo's category
4. The caller's wealth table: a positive shift moves that fraction of supply
   to demand, a negative one moves it from demand to supply

The category and wealth tables are campaign data so there are none by
default.
"""

EquilibriumTotal = 200
EquilibriumBaseline = 100
MinEquilibriumValue = 5
MaxEquilibriumValue = 195

_ProducesTransferFraction = 0.5
_DemandsTransferFraction = 0.35

_BlockedThreshold = 10
_DesperateThreshold = 20
_OversuppliedRatio = 2.0
_UndersuppliedRatio = 0.5

class EquilibriumState(enum.Enum):
    Balanced = 'balanced'
    Oversupplied = 'oversupplied'
    Undersupplied = 'undersupplied'
    Desperate = 'desperate'
    Blocked = 'blocked'

class TransferDirection(enum.Enum):
    ToSupply = 'supply'
    ToDemand = 'demand'

class MerchantRole(enum.Enum):
    Producer = 'producer'
    Seeker = 'seeker'

# Every flag has an entry so adding a flag without deciding on its effect
# fails at import rather than silently doing nothing
_FlagTransferMap: typing.Dict[
        oldworld.SettlementFlag,
        typing.Optional[typing.Tuple[TransferDirection, float]]] = {
    oldworld.SettlementFlag.Agriculture: (TransferDirection.ToSupply, 0.3),
    oldworld.SettlementFlag.Fishing: None,
    oldworld.SettlementFlag.Government: (TransferDirection.ToDemand, 0.2),
    oldworld.SettlementFlag.Military: None,
    oldworld.SettlementFlag.Mine: (TransferDirection.ToSupply, 0.4),
    oldworld.SettlementFlag.Religion: None,
    oldworld.SettlementFlag.Smuggling: (TransferDirection.ToSupply, 0.2),
    oldworld.SettlementFlag.Subsistence: None,
    oldworld.SettlementFlag.Trade: (TransferDirection.ToSupply, 0.3),
    oldworld.SettlementFlag.WineQuality: None
}
assert(set(_FlagTransferMap.keys()) == set(oldworld.SettlementFlag))

class EquilibriumTransfer(object):
    def __init__(
            self,
            direction: TransferDirection,
            amount: int,
            description: str,
            clamped: bool
            ) -> None:
        self._direction = direction
        self._amount = amount
        self._description = description
        self._clamped = clamped

    def direction(self) -> TransferDirection:
        return self._direction

    def amount(self) -> int:
        return self._amount

    def description(self) -> str:
        return self._description

    # True if the clamp range changed either side after this transfer
    def clamped(self) -> bool:
        return self._clamped

class AvailabilityModifiers(object):
    def __init__(
            self,
            skillModifier: int = 0,
            quantityMultiplier: float = 1.0,
            priceMultiplier: float = 1.0
            ) -> None:
        self._skillModifier = skillModifier
        self._quantityMultiplier = quantityMultiplier
        self._priceMultiplier = priceMultiplier

    def skillModifier(self) -> int:
        return self._skillModifier

    def quantityMultiplier(self) -> float:
        return self._quantityMultiplier

    def priceMultiplier(self) -> float:
        return self._priceMultiplier

class Equilibrium(object):
    def __init__(
            self,
            cargoName: str,
            supply: int,
            demand: int,
            transfers: typing.Iterable[EquilibriumTransfer]
            ) -> None:
        self._cargoName = cargoName
        self._supply = supply
        self._demand = demand
        self._transfers = list(transfers)
        self._state = Equilibrium._calculateState(supply=supply, demand=demand)

    def cargoName(self) -> str:
        return self._cargoName

    def supply(self) -> int:
        return self._supply

    def demand(self) -> int:
        return self._demand

    def ratio(self) -> float:
        return self._supply / self._demand

    def state(self) -> EquilibriumState:
        return self._state

    def transfers(self) -> typing.List[EquilibriumTransfer]:
        return list(self._transfers)

    def shouldBlockTrade(self) -> bool:
        return self._state == EquilibriumState.Blocked

    def shouldTriggerDesperation(self) -> bool:
        return self._state == EquilibriumState.Desperate

    # How the balance affects a merchant in the given role. A producer is
    # stronger when there's a glut of supply, a seeker when supply is scarce
    def availabilityModifiers(self, role: MerchantRole) -> AvailabilityModifiers:
        ratio = self.ratio()
        if role == MerchantRole.Producer:
            if ratio > 1.5:
                return AvailabilityModifiers(skillModifier=10, quantityMultiplier=1.2)
            elif ratio < 0.8:
                return AvailabilityModifiers(skillModifier=-10, quantityMultiplier=0.8, priceMultiplier=1.1)
        elif role == MerchantRole.Seeker:
            if ratio < 0.67:
                return AvailabilityModifiers(skillModifier=10, quantityMultiplier=1.3, priceMultiplier=1.1)
            elif ratio > 1.2:
                return AvailabilityModifiers(skillModifier=-5, quantityMultiplier=0.9)
        else:
            raise oldworld.InvalidArgumentException(f'Unknown merchant role {role}')
        return AvailabilityModifiers()

    @staticmethod
    def _calculateState(
            supply: int,
            demand: int
            ) -> EquilibriumState:
        if supply <= _BlockedThreshold or demand <= _BlockedThreshold:
            return EquilibriumState.Blocked
        if supply <= _DesperateThreshold or demand <= _DesperateThreshold:
            return EquilibriumState.Desperate
        ratio = supply / demand
        if ratio > _OversuppliedRatio:
            return EquilibriumState.Oversupplied
        if ratio < _UndersuppliedRatio:
            return EquilibriumState.Undersupplied
        return EquilibriumState.Balanced

class _EquilibriumBuilder(object):
    def __init__(self) -> None:
        self._supply = EquilibriumBaseline
        self._demand = EquilibriumBaseline
        self._transfers: typing.List[EquilibriumTransfer] = []

    def transfer(
            self,
            direction: TransferDirection,
            fraction: float,
            description: str
            ) -> None:
        if direction == TransferDirection.ToSupply:
            amount = math.floor(self._demand * fraction)
            self._supply += amount
            self._demand -= amount
        else:
            amount = math.floor(self._supply * fraction)
            self._demand += amount
            self._supply -= amount

        clampedSupply = max(MinEquilibriumValue, min(self._supply, MaxEquilibriumValue))
        clampedDemand = max(MinEquilibriumValue, min(self._demand, MaxEquilibriumValue))
        clamped = clampedSupply != self._supply or clampedDemand != self._demand
        self._supply = clampedSupply
        self._demand = clampedDemand

        self._transfers.append(EquilibriumTransfer(
            direction=direction,
            amount=amount,
            description=description,
            clamped=clamped))

    def build(self, cargoName: str) -> Equilibrium:
        return Equilibrium(
            cargoName=cargoName,
            supply=self._supply,
            demand=self._demand,
            transfers=self._transfers)

def computeEquilibrium(
        settlement: oldworld.Settlement,
        cargoName: str,
        category: typing.Optional[str] = None, # Tags can name either the cargo or its category
        categoryTransfers: typing.Optional[typing.Mapping[
            oldworld.SettlementFlag,
            typing.Mapping[str, typing.Tuple[TransferDirection, float]]]] = None,
        wealthShifts: typing.Optional[typing.Mapping[int, float]] = None
        ) -> Equilibrium:
    builder = _EquilibriumBuilder()

    if settlement.produces(cargoName) or (category and settlement.produces(category)):
        builder.transfer(
            direction=TransferDirection.ToSupply,
            fraction=_ProducesTransferFraction,
            description=f'{settlement.name()} produces {cargoName}')

    if settlement.demands(cargoName) or (category and settlement.demands(category)):
        builder.transfer(
            direction=TransferDirection.ToDemand,
            fraction=_DemandsTransferFraction,
            description=f'{settlement.name()} demands {cargoName}')

    for flag in oldworld.sortedFlags(settlement.flags()):
        effect = _FlagTransferMap[flag]
        if effect:
            direction, fraction = effect
            builder.transfer(
                direction=direction,
                fraction=fraction,
                description=f'{flag.name} flag {direction.value} bonus')

        if category and categoryTransfers:
            for transferCategory, (direction, fraction) in categoryTransfers.get(flag, {}).items():
                if transferCategory.lower() != category.lower():
                    continue
                builder.transfer(
                    direction=direction,
                    fraction=fraction,
                    description=f'{flag.name} flag {category} {direction.value} bonus')

    if wealthShifts:
        shift = wealthShifts.get(settlement.wealth(), 0)
        if shift:
            # Wealthy settlements want more, poor ones less
            builder.transfer(
                direction=TransferDirection.ToDemand if shift > 0 else TransferDirection.ToSupply,
                fraction=abs(shift),
                description=f'Wealth {settlement.wealth()} {"demand" if shift > 0 else "supply"} shift')

    equilibrium = builder.build(cargoName=cargoName)
    logging.debug(
        f'Equilibrium for {cargoName} at {settlement.name()} is {equilibrium.supply()}/{equilibrium.demand()} ({equilibrium.state().value})')
    return equilibrium
