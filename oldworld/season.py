import enum
import oldworld
import typing

# NOTE: If I ever change the name of these enums I'll need some mapping
# as they're written to the config file and audit log. This only applies
# to the name not the value
class Season(enum.Enum):
    Spring = 'spring'
    Summer = 'summer'
    Autumn = 'autumn'
    Winter = 'winter'

    @staticmethod
    def fromString(string: typing.Optional[str]) -> 'Season':
        if not string:
            raise oldworld.InvalidArgumentException('Season is required')
        value = string.strip().lower()
        # Autumn is fall on the other side of the Atlantic
        if value == 'fall':
            value = 'autumn'
        for season in Season:
            if season.value == value:
                return season
        raise oldworld.InvalidArgumentException(f'Unknown season "{string}"')

def validateSeason(season: typing.Optional[typing.Union[Season, str]]) -> Season:
    if season is None:
        raise oldworld.InvalidArgumentException('Season is required')
    if isinstance(season, Season):
        return season
    if isinstance(season, str):
        return Season.fromString(season)
    raise oldworld.InvalidArgumentException(f'Season must be a Season or str not {type(season).__name__}')
