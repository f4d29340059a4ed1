import common
import logging
import oldworld
import typing

"""
The candidate table is the list of cargo a settlement could plausibly have
merchants dealing in for a season, with a weight for how likely each one is.
Weights are built up from
- Produced by the settlement (cargo name or category in the production tags): +8
- Demanded by the settlement (cargo name or category in the demand tags): +5
- The settlement has a flag that favours the cargo's category (_FlagCategoryBonusMap)
- The seasonal price compared to the cargo's average price across the year.
  Cheaper than average means the cargo is in season (+4), dearer means it's
  out of season (-2)
Every cargo has a weight of at least 1 so anything can turn up. Cargo with no
reasons at all is included with the fallback weight.
"""

_ProducedWeight = 8
_DemandedWeight = 5
_InSeasonWeight = 4
_OutOfSeasonWeight = -2
_MinWeight = 1
_FallbackReason = 'Fallback inclusion'

# Every flag has an entry so the table is exhaustive
_FlagCategoryBonusMap: typing.Dict[oldworld.SettlementFlag, typing.Mapping[str, int]] = {
    oldworld.SettlementFlag.Agriculture: {'agriculture': 3},
    oldworld.SettlementFlag.Fishing: {},
    oldworld.SettlementFlag.Government: {'armaments': 2},
    oldworld.SettlementFlag.Military: {},
    oldworld.SettlementFlag.Mine: {'raw materials': 3, 'metal': 3},
    oldworld.SettlementFlag.Religion: {},
    oldworld.SettlementFlag.Smuggling: {'luxury': 2},
    oldworld.SettlementFlag.Subsistence: {},
    oldworld.SettlementFlag.Trade: {},
    oldworld.SettlementFlag.WineQuality: {}
}
assert(set(_FlagCategoryBonusMap.keys()) == set(oldworld.SettlementFlag))

class CandidateEntry(object):
    def __init__(
            self,
            cargoName: str,
            category: str,
            weight: int,
            reasons: typing.Iterable[str]
            ) -> None:
        self._cargoName = cargoName
        self._category = category
        self._weight = weight
        self._reasons = list(reasons)

    def cargoName(self) -> str:
        return self._cargoName

    def category(self) -> str:
        return self._category

    def weight(self) -> int:
        return self._weight

    def reasons(self) -> typing.List[str]:
        return list(self._reasons)

class CandidateTable(object):
    def __init__(
            self,
            season: oldworld.Season,
            entries: typing.Iterable[CandidateEntry]
            ) -> None:
        self._season = season
        self._entries = sorted(
            entries,
            key=lambda entry: (-entry.weight(), entry.cargoName()))
        self._totalWeight = sum(entry.weight() for entry in self._entries)

    def season(self) -> oldworld.Season:
        return self._season

    def entries(self) -> typing.List[CandidateEntry]:
        return list(self._entries)

    def totalWeight(self) -> int:
        return self._totalWeight

    def isEmpty(self) -> bool:
        return not self._entries

    def entry(self, cargoName: str) -> CandidateEntry:
        for entry in self._entries:
            if entry.cargoName() == cargoName:
                return entry
        raise oldworld.NotFoundException(f'Cargo "{cargoName}" is not in the candidate table')

    # Normalised probability (0 -> 1.0) of a single draw picking the cargo
    def probability(self, cargoName: str) -> float:
        if not self._totalWeight:
            return 0.0
        return self.entry(cargoName=cargoName).weight() / self._totalWeight

    def draw(self, diceRoller: common.DiceRoller) -> CandidateEntry:
        if not self._entries:
            raise oldworld.NotFoundException('Unable to draw from an empty candidate table')

        roll = diceRoller.makeWeightedRoll(
            total=self._totalWeight,
            name='Cargo Candidate Roll').value()
        for entry in self._entries:
            if roll <= entry.weight():
                return entry
            roll -= entry.weight()
        assert(False)

def buildCandidateTable(
        settlement: oldworld.Settlement,
        season: oldworld.Season,
        catalog: oldworld.CargoCatalog,
        flags: typing.Optional[typing.Iterable[oldworld.SettlementFlag]] = None # None means use the settlement flags
        ) -> CandidateTable:
    season = oldworld.validateSeason(season)
    if flags is None:
        flags = settlement.flags()
    flags = oldworld.sortedFlags(flags)

    entries = []
    for cargoType in catalog.listAll():
        name = cargoType.name()
        category = cargoType.category()
        weight = 0
        reasons = []

        if settlement.produces(name) or settlement.produces(category):
            weight += _ProducedWeight
            reasons.append(f'Produced locally (+{_ProducedWeight})')

        if settlement.demands(name) or settlement.demands(category):
            weight += _DemandedWeight
            reasons.append(f'Demanded locally (+{_DemandedWeight})')

        for flag in flags:
            bonus = _FlagCategoryBonusMap[flag].get(category.lower())
            if bonus:
                weight += bonus
                reasons.append(f'{flag.name} flag favours {category} (+{bonus})')

        seasonalPrice = cargoType.seasonalPrice(season).value()
        averagePrice = cargoType.averagePrice()
        if seasonalPrice < averagePrice:
            weight += _InSeasonWeight
            reasons.append(f'In season (+{_InSeasonWeight})')
        elif seasonalPrice > averagePrice:
            weight += _OutOfSeasonWeight
            reasons.append(f'Out of season ({_OutOfSeasonWeight})')

        if not reasons:
            reasons.append(_FallbackReason)
        weight = max(weight, _MinWeight)

        entries.append(CandidateEntry(
            cargoName=name,
            category=category,
            weight=weight,
            reasons=reasons))

    table = CandidateTable(season=season, entries=entries)
    logging.debug(
        f'Built candidate table for {settlement.name()} in {season.value} with {len(entries)} entries and total weight {table.totalWeight()}')
    return table
