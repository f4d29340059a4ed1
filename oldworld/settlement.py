import common
import enum
import logging
import oldworld
import re
import typing

# NOTE: If I ever change the value of these enums I'll need some mapping as
# the values are what appear in settlement data and the audit log
class SettlementFlag(enum.Enum):
    Agriculture = 'agriculture'
    Fishing = 'fishing'
    Government = 'government'
    Military = 'military'
    Mine = 'mine'
    Religion = 'religion'
    Smuggling = 'smuggling'
    Subsistence = 'subsistence'
    Trade = 'trade'
    WineQuality = 'wine_quality'

    @staticmethod
    def fromString(string: str) -> typing.Optional['SettlementFlag']:
        value = string.strip().lower()
        for flag in SettlementFlag:
            if flag.value == value:
                return flag
        return None

# Flag effects are always applied in this order so that combinations of
# flags give the same result regardless of how they were specified
def sortedFlags(flags: typing.Iterable[SettlementFlag]) -> typing.List[SettlementFlag]:
    return sorted(flags, key=lambda flag: flag.value)

MinSettlementSize = 1
MaxSettlementSize = 5
MinSettlementWealth = 1
MaxSettlementWealth = 5

TradeTag = 'Trade'

# Settlement data from the older sourcebooks uses letter codes for the size
# rather than a number. Forts and mines are small, self contained places so
# are treated as the same size as a small town
_SizeCodeMap = {
    'CS': 4, # City State
    'C': 4, # City
    'T': 3, # Town
    'ST': 2, # Small Town
    'F': 2, # Fort
    'M': 2, # Mine
    'V': 1 # Village
}

def parseSettlementSize(size: typing.Union[int, str]) -> int:
    if isinstance(size, str):
        code = size.strip().upper()
        if code in _SizeCodeMap:
            return _SizeCodeMap[code]
        if not code.isdigit():
            raise oldworld.InvalidArgumentException(f'Unknown settlement size code "{size}"')
        size = int(code)

    return common.validateMandatoryInt(
        name='Settlement size',
        value=size,
        min=MinSettlementSize,
        max=MaxSettlementSize,
        errorType=oldworld.InvalidArgumentException)

# Garrison strength is written as <count><troop type>, e.g. 30a/80b/250c
_GarrisonEntryPattern = re.compile(r'^\s*(\d+)\s*([A-Za-z]+)\s*$')

def parseGarrison(
        garrison: typing.Optional[typing.Union[
            typing.Mapping[str, int],
            typing.Iterable[str],
            str]]
        ) -> typing.Dict[str, int]:
    if not garrison:
        return {}
    if isinstance(garrison, typing.Mapping):
        return {str(troopType): int(count) for troopType, count in garrison.items()}
    if isinstance(garrison, str):
        garrison = [garrison]

    # Data files have a mix of single "a/b/c" strings and lists of them
    entries = []
    for string in garrison:
        entries.extend(string.split('/'))

    troops = {}
    for entry in entries:
        match = _GarrisonEntryPattern.match(entry)
        if not match:
            raise oldworld.InvalidArgumentException(f'Invalid garrison entry "{entry}"')
        troopType = match.group(2).lower()
        troops[troopType] = troops.get(troopType, 0) + int(match.group(1))
    return troops

class Settlement(object):
    def __init__(
            self,
            name: str,
            size: typing.Union[int, str],
            wealth: int,
            region: str = '',
            population: int = 0,
            productionTags: typing.Optional[typing.Iterable[str]] = None,
            demandTags: typing.Optional[typing.Iterable[str]] = None,
            flags: typing.Optional[typing.Iterable[SettlementFlag]] = None,
            ruler: str = '',
            garrison: typing.Optional[typing.Union[
                typing.Mapping[str, int],
                typing.Iterable[str],
                str]] = None,
            notes: str = ''
            ) -> None:
        self._name = common.validateMandatoryStr(
            name='Settlement name',
            value=name,
            allowEmpty=False,
            errorType=oldworld.InvalidArgumentException)
        self._size = parseSettlementSize(size)
        self._wealth = common.validateMandatoryInt(
            name='Settlement wealth',
            value=wealth,
            min=MinSettlementWealth,
            max=MaxSettlementWealth,
            errorType=oldworld.InvalidArgumentException)
        self._region = region
        self._population = common.validateMandatoryInt(
            name='Settlement population',
            value=population,
            min=0,
            errorType=oldworld.InvalidArgumentException)

        # Production tags are an ordered sequence as the first tag is the
        # primary source of goods for settlements that aren't trade centres
        self._productionTags: typing.Tuple[str, ...] = ()
        if productionTags:
            seen = set()
            tags = []
            for tag in productionTags:
                if tag not in seen:
                    seen.add(tag)
                    tags.append(tag)
            self._productionTags = tuple(tags)
        self._demandTags = frozenset(demandTags) if demandTags else frozenset()
        self._flags = frozenset(common.validateMandatoryCollection(
            name='Settlement flags',
            value=list(flags) if flags else [],
            type=SettlementFlag))
        self._ruler = ruler
        self._garrison = parseGarrison(garrison)
        self._notes = notes

        self._lowerProductionTags = frozenset(tag.lower() for tag in self._productionTags)
        self._lowerDemandTags = frozenset(tag.lower() for tag in self._demandTags)

    def name(self) -> str:
        return self._name

    def region(self) -> str:
        return self._region

    def size(self) -> int:
        return self._size

    def wealth(self) -> int:
        return self._wealth

    def population(self) -> int:
        return self._population

    def productionTags(self) -> typing.Tuple[str, ...]:
        return self._productionTags

    def demandTags(self) -> typing.FrozenSet[str]:
        return self._demandTags

    def flags(self) -> typing.FrozenSet[SettlementFlag]:
        return self._flags

    def hasFlag(self, flag: SettlementFlag) -> bool:
        return flag in self._flags

    def ruler(self) -> str:
        return self._ruler

    def garrison(self) -> typing.Mapping[str, int]:
        return self._garrison

    def notes(self) -> str:
        return self._notes

    def isTradeCenter(self) -> bool:
        return TradeTag in self._productionTags

    def specificGoodsTags(self) -> typing.List[str]:
        return [tag for tag in self._productionTags if tag != TradeTag]

    # Matching against cargo names and categories is case insensitive as the
    # source data isn't consistent
    def produces(self, value: str) -> bool:
        return value.lower() in self._lowerProductionTags

    def demands(self, value: str) -> bool:
        return value.lower() in self._lowerDemandTags

    def __str__(self) -> str:
        if self._region:
            return f'{self._name} ({self._region})'
        return self._name

    @staticmethod
    def fromData(data: typing.Mapping[str, typing.Any]) -> 'Settlement':
        # The dataset calls the production tags "source"
        missing = [key for key in ('name', 'size', 'wealth') if data.get(key) is None]
        if missing:
            name = data.get('name')
            raise oldworld.ConfigurationMissingException(
                'Settlement {name}is missing required field{plural} {fields}'.format(
                    name=f'"{name}" ' if name else '',
                    plural='s' if len(missing) > 1 else '',
                    fields=common.humanFriendlyListString(missing)))

        flags = []
        for string in data.get('flags') or []:
            flag = SettlementFlag.fromString(string)
            if flag is None:
                logging.warning(f'Ignoring unknown flag "{string}" for settlement "{data.get("name")}"')
                continue
            flags.append(flag)

        population = data.get('population') or 0
        if isinstance(population, str):
            population = int(population.replace(',', ''))

        wealth = data['wealth']
        if isinstance(wealth, str) and wealth.strip().isdigit():
            wealth = int(wealth)

        return Settlement(
            name=data['name'],
            size=data['size'],
            wealth=wealth,
            region=data.get('region') or '',
            population=population,
            productionTags=data.get('source') or [],
            demandTags=data.get('demand') or [],
            flags=flags,
            ruler=data.get('ruler') or '',
            garrison=data.get('garrison'),
            notes=data.get('notes') or '')
