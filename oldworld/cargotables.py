import oldworld
import typing

"""
When a trade centre offers a random trade good the GM rolls a d100 on the
table for the current season. Each season's table splits 1-100 into
contiguous ranges (inclusive at both ends) with each range mapping to one
cargo. A table that leaves a gap or overlaps would make some rolls
meaningless so they're validated when loaded.
"""

MinTableRoll = 1
MaxTableRoll = 100

class SeasonalTableEntry(object):
    def __init__(
            self,
            low: int,
            high: int,
            cargoName: str
            ) -> None:
        self._low = low
        self._high = high
        self._cargoName = cargoName

    def low(self) -> int:
        return self._low

    def high(self) -> int:
        return self._high

    def cargoName(self) -> str:
        return self._cargoName

    def contains(self, roll: int) -> bool:
        return self._low <= roll <= self._high

    def span(self) -> int:
        return self._high - self._low + 1

class SeasonalCargoTable(object):
    def __init__(
            self,
            entries: typing.Mapping[
                oldworld.Season,
                typing.Iterable[typing.Tuple[int, int, str]]]
            ) -> None:
        self._entries: typing.Dict[oldworld.Season, typing.List[SeasonalTableEntry]] = {}
        for season in oldworld.Season:
            seasonEntries = entries.get(season)
            if not seasonEntries:
                raise oldworld.InvalidArgumentException(
                    f'Seasonal cargo table has no entries for {season.value}')
            self._entries[season] = SeasonalCargoTable._validatePartition(
                season=season,
                entries=[SeasonalTableEntry(low=low, high=high, cargoName=name) for low, high, name in seasonEntries])

    def entries(self, season: oldworld.Season) -> typing.List[SeasonalTableEntry]:
        return list(self._entries[oldworld.validateSeason(season)])

    def cargoNames(self) -> typing.Set[str]:
        names = set()
        for seasonEntries in self._entries.values():
            names.update(entry.cargoName() for entry in seasonEntries)
        return names

    def lookup(
            self,
            season: oldworld.Season,
            roll: int
            ) -> str:
        season = oldworld.validateSeason(season)
        if roll < MinTableRoll or roll > MaxTableRoll:
            raise oldworld.InvalidArgumentException(
                f'Seasonal table roll must be in the range {MinTableRoll} to {MaxTableRoll}')

        for entry in self._entries[season]:
            if entry.contains(roll):
                return entry.cargoName()

        # Can't happen with a validated partition
        assert(False)

    # Fraction of the table (0 -> 1.0) covered by the named cargo
    def probability(
            self,
            season: oldworld.Season,
            cargoName: str
            ) -> float:
        covered = 0
        for entry in self._entries[oldworld.validateSeason(season)]:
            if entry.cargoName() == cargoName:
                covered += entry.span()
        return covered / (MaxTableRoll - MinTableRoll + 1)

    @staticmethod
    def _validatePartition(
            season: oldworld.Season,
            entries: typing.List[SeasonalTableEntry]
            ) -> typing.List[SeasonalTableEntry]:
        entries = sorted(entries, key=lambda entry: entry.low())

        expectedLow = MinTableRoll
        for entry in entries:
            if entry.low() > entry.high():
                raise oldworld.InvalidArgumentException(
                    f'Seasonal cargo table range {entry.low()}-{entry.high()} for {season.value} is inverted')
            if entry.low() < expectedLow:
                raise oldworld.InvalidArgumentException(
                    f'Seasonal cargo table range {entry.low()}-{entry.high()} for {season.value} overlaps the previous range')
            if entry.low() > expectedLow:
                raise oldworld.InvalidArgumentException(
                    f'Seasonal cargo table for {season.value} has a gap at {expectedLow}-{entry.low() - 1}')
            expectedLow = entry.high() + 1

        if expectedLow != MaxTableRoll + 1:
            raise oldworld.InvalidArgumentException(
                f'Seasonal cargo table for {season.value} must end at {MaxTableRoll} not {expectedLow - 1}')

        return entries

    @staticmethod
    def default() -> 'SeasonalCargoTable':
        return _DefaultSeasonalCargoTable

_DefaultSeasonalCargoTable = SeasonalCargoTable(entries={
    oldworld.Season.Spring: [
        (1, 20, 'Grain'),
        (21, 40, 'Metal'),
        (41, 55, 'Wine/Brandy'),
        (56, 70, 'Timber'),
        (71, 85, 'Wool'),
        (86, 95, 'Armaments'),
        (96, 100, 'Luxuries')],
    oldworld.Season.Summer: [
        (1, 15, 'Grain'),
        (16, 30, 'Metal'),
        (31, 50, 'Wine/Brandy'),
        (51, 65, 'Timber'),
        (66, 80, 'Wool'),
        (81, 92, 'Armaments'),
        (93, 100, 'Luxuries')],
    oldworld.Season.Autumn: [
        (1, 30, 'Grain'),
        (31, 45, 'Metal'),
        (46, 65, 'Wine/Brandy'),
        (66, 75, 'Timber'),
        (76, 85, 'Wool'),
        (86, 95, 'Armaments'),
        (96, 100, 'Luxuries')],
    oldworld.Season.Winter: [
        (1, 10, 'Grain'),
        (11, 30, 'Metal'),
        (31, 45, 'Wine/Brandy'),
        (46, 60, 'Timber'),
        (61, 75, 'Wool'),
        (76, 90, 'Armaments'),
        (91, 100, 'Luxuries')]})
