import common
import enum
import math
import oldworld
import re
import typing

# Everything is stored internally as brass pennies (the smallest coin) so
# totals never accumulate floating point error. Prices in the cargo data are
# in gold crowns and are converted when a total is worked out.
#   1 gold crown (GC) = 20 silver shillings (s) = 240 brass pennies (d)

class Denomination(enum.Enum):
    GoldCrown = 'GC'
    SilverShilling = 's'
    BrassPenny = 'd'

_DenominationValueMap = {
    Denomination.GoldCrown: 240,
    Denomination.SilverShilling: 12,
    Denomination.BrassPenny: 1
}

# Names players actually use at the table, in addition to the abbreviations
_DenominationNameMap = {
    'gc': Denomination.GoldCrown,
    'crown': Denomination.GoldCrown,
    'crowns': Denomination.GoldCrown,
    'gold crown': Denomination.GoldCrown,
    'gold crowns': Denomination.GoldCrown,
    's': Denomination.SilverShilling,
    'ss': Denomination.SilverShilling,
    'shilling': Denomination.SilverShilling,
    'shillings': Denomination.SilverShilling,
    'd': Denomination.BrassPenny,
    'bp': Denomination.BrassPenny,
    'penny': Denomination.BrassPenny,
    'pennies': Denomination.BrassPenny
}

PenniesPerCrown = _DenominationValueMap[Denomination.GoldCrown]

class RoundingMode(enum.Enum):
    Nearest = 'nearest'
    Down = 'down'
    Up = 'up'

def _roundValue(value: float, mode: RoundingMode) -> int:
    if not math.isfinite(value):
        raise oldworld.InvalidArgumentException('Currency value must be a finite number')
    if mode == RoundingMode.Down:
        return math.floor(value)
    if mode == RoundingMode.Up:
        return math.ceil(value)
    return common.roundHalfUp(value)

def crownsToPennies(
        crowns: typing.Union[int, float],
        rounding: RoundingMode = RoundingMode.Nearest
        ) -> int:
    return _roundValue(crowns * PenniesPerCrown, rounding)

def penniesToCrowns(pennies: int) -> float:
    return pennies / PenniesPerCrown

def toPennies(
        amount: typing.Mapping[typing.Union[Denomination, str], typing.Union[int, float]],
        rounding: RoundingMode = RoundingMode.Nearest
        ) -> int:
    total = 0
    for key, quantity in amount.items():
        denomination = key if isinstance(key, Denomination) else _DenominationNameMap.get(key.strip().lower())
        if denomination is None:
            raise oldworld.InvalidArgumentException(f'Unknown currency denomination "{key}"')
        total += quantity * _DenominationValueMap[denomination]
    return _roundValue(total, rounding)

def breakdownPennies(
        pennies: int,
        includeZero: bool = False
        ) -> typing.List[typing.Tuple[Denomination, int]]:
    remaining = abs(pennies)
    breakdown = []
    for denomination in Denomination:
        value = _DenominationValueMap[denomination]
        quantity = remaining // value
        remaining -= quantity * value
        if quantity or includeZero:
            breakdown.append((denomination, quantity))
    return breakdown

def formatCurrency(
        pennies: int,
        includeZero: bool = False,
        separator: str = ' '
        ) -> str:
    if pennies == 0 and not includeZero:
        return '0' + Denomination.BrassPenny.value

    parts = [f'{quantity}{denomination.value}' for denomination, quantity in breakdownPennies(pennies, includeZero)]
    string = separator.join(parts)
    return '-' + string if pennies < 0 else string

# Matches strings like "2GC 4s 6d" or "3 crowns 2 shillings"
_CurrencyPartPattern = re.compile(r'(\d+(?:\.\d+)?)\s*([A-Za-z][A-Za-z ]*?)(?=\s*\d|\s*$)')

def parseCurrency(string: str) -> int:
    amount = {}
    matched = 0
    for match in _CurrencyPartPattern.finditer(string.strip()):
        quantity = float(match.group(1))
        key = match.group(2).strip()
        amount[key] = amount.get(key, 0) + quantity
        matched += 1
    if not matched:
        raise oldworld.InvalidArgumentException(f'Unable to parse currency "{string}"')
    return toPennies(amount)
