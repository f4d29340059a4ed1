import locale
import math
import re
import typing

def formatNumber(
        number: typing.Union[int, float],
        thousandsSeparator: bool = True,
        alwaysIncludeSign: bool = False,
        decimalPlaces: int = 2, # Only applies for float values
        removeTrailingZeros: bool = True, # Only applies for float values
        infinityString: str = 'inf', # Only applies for float values,
        prefix: str = '',
        suffix: str = ''
        ) -> str:
    if number == float('inf'):
        return prefix + ('+' if alwaysIncludeSign else '') + infinityString
    elif number == float('-inf'):
        return prefix + '-' + infinityString

    format = f'{{0:{"+" if alwaysIncludeSign else ""}{"," if thousandsSeparator else ""}.{decimalPlaces}f}}'
    string = prefix + format.format(number)
    if decimalPlaces and removeTrailingZeros and '.' in string:
        # Strip trailing zeros (and decimal point if needed)
        string = string.rstrip('0')

        # When stripping the decimal point use the local specific character if
        # one is set. An empty string means the locale isn't set
        decimalPoint = locale.localeconv().get('decimal_point')
        if not decimalPoint:
            decimalPoint = '.'
        string = string.rstrip(decimalPoint)

    if suffix:
        string += suffix

    return string

def clamp(
        value: typing.Union[float, int],
        minValue: typing.Union[float, int],
        maxValue: typing.Union[float, int]
        ) -> typing.Union[float, int]:
    return max(minValue, min(value, maxValue))

def minmax(
        lhs: typing.Union[float, int],
        rhs: typing.Union[float, int]
        ) -> typing.Tuple[typing.Union[float, int], typing.Union[float, int]]:
    return (lhs, rhs) if lhs <= rhs else (rhs, lhs)

# JavaScript style rounding where halves always round towards positive
# infinity. Python's round() uses bankers rounding so round(72.5) == 72
def roundHalfUp(value: float) -> int:
    return int(math.floor(value + 0.5))

_SlugStripRegex = re.compile(r'[^a-z0-9]+')
def slugify(string: str) -> str:
    return _SlugStripRegex.sub('-', string.lower()).strip('-')

def getSubclasses(
        classType: typing.Type[typing.Any],
        topLevelOnly: bool = True
        ):
    subclasses = []

    for subclass in classType.__subclasses__():
        if subclass.__subclasses__():
            if not topLevelOnly:
                subclasses.append(subclass)
            subclasses.extend(getSubclasses(subclass, topLevelOnly))
        else:
            subclasses.append(subclass)

    return subclasses

def humanFriendlyListString(strings: typing.Sequence[str]) -> str:
    count = len(strings)
    if not count:
        return ''
    if count == 1:
        return strings[0]

    return ', '.join(strings[:-1]) + ' & ' + strings[-1]
